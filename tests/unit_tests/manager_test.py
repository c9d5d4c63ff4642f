from unittest import mock

from partplan.errors import TransactionError
from partplan.manager import StorageManager
from partplan.proposal.autoinst_proposal import AutoinstProposal
from partplan.size import Size

from .graphtestcase import GraphTestCase


class StorageManagerTestCase(GraphTestCase):

    def setUp(self):
        super(StorageManagerTestCase, self).setUp()
        self.disk = self.add_disk("sda", size=Size("10 GiB"))
        self.manager = StorageManager(self.graph)

    def _add_partition(self, devicegraph):
        disk = devicegraph.get_device_by_name("sda")
        region = disk.free_spaces()[0].region.with_size(Size("1 GiB"))
        return devicegraph.create_partition(disk, region)

    def test_begin_commit(self):
        self.assertIsNone(self.manager.working)
        working = self.manager.begin()
        self.assertIs(self.manager.working, working)
        self.assertIsNot(working, self.manager.current)

        with self.assertRaises(TransactionError):
            self.manager.begin()

        self._add_partition(working)
        self.assertEqual(self.manager.current.partitions, [])
        self.manager.commit()
        self.assertIsNone(self.manager.working)
        self.assertEqual(len(self.manager.current.partitions), 1)
        self.assertEqual(self.manager.system.partitions, [])

        with self.assertRaises(TransactionError):
            self.manager.commit()

    def test_rollback(self):
        working = self.manager.begin()
        self._add_partition(working)
        self.manager.rollback()
        self.assertIsNone(self.manager.working)
        self.assertEqual(self.manager.current.partitions, [])

    def test_transaction(self):
        with self.manager.transaction() as devicegraph:
            self._add_partition(devicegraph)
        self.assertEqual(len(self.manager.current.partitions), 1)

        with self.assertRaises(RuntimeError):
            with self.manager.transaction() as devicegraph:
                self._add_partition(devicegraph)
                raise RuntimeError("boom")
        self.assertEqual(len(self.manager.current.partitions), 1)
        self.assertIsNone(self.manager.working)

    def test_transaction_interrupted(self):
        with self.assertRaises(KeyboardInterrupt):
            with self.manager.transaction() as devicegraph:
                self._add_partition(devicegraph)
                raise KeyboardInterrupt()
        self.assertIsNone(self.manager.working)
        self.assertEqual(self.manager.current.partitions, [])

        # a transaction abandoned before its end is discarded too
        transaction = self.manager.transaction()
        devicegraph = transaction.__enter__()
        self._add_partition(devicegraph)
        transaction.gen.close()
        self.assertIsNone(self.manager.working)
        self.assertEqual(self.manager.current.partitions, [])

        working = self.manager.begin()
        self.assertIsNot(working, self.manager.current)

    def test_reset(self):
        with self.manager.transaction() as devicegraph:
            self._add_partition(devicegraph)
        self.manager.reset()
        self.assertEqual(self.manager.current.partitions, [])

    def test_apply_proposal(self):
        proposal = AutoinstProposal(partitioning=[{"device": "/dev/sda", "use": "all",
                                                   "partitions": [{"mount": "/"}]}],
                                    devicegraph=self.manager.current)
        proposal.propose()
        self.assertTrue(self.manager.apply_proposal(proposal))
        self.assertIs(self.manager.current, proposal.devices)
        self.assertIn("/", self.manager.current.mountpoints)

        failed = AutoinstProposal(partitioning=[{"device": "/dev/sdz"}],
                                  devicegraph=self.manager.system)
        failed.propose()
        self.assertFalse(self.manager.apply_proposal(failed))
        self.assertIs(self.manager.proposal, failed)
        self.assertIs(self.manager.current, proposal.devices)

    def test_apply_proposal_without_devices(self):
        proposal = mock.Mock(failed=False, devices=None)
        self.assertFalse(self.manager.apply_proposal(proposal))

        new_graph = self.manager.system
        proposal = mock.Mock(failed=False, devices=new_graph)
        self.assertTrue(self.manager.apply_proposal(proposal))
        self.assertIs(self.manager.current, new_graph)
