from partplan.devicelibs.partition import PartitionId
from partplan.errors import UnexpectedCallError
from partplan.proposal.autoinst_proposal import AutoinstProposal
from partplan.proposal.issues import MissingValue, NoDisk, ShrinkedPlannedDevices
from partplan.size import Size

from .graphtestcase import GraphTestCase

GPT_BACKUP = Size(33 * 512)


class AutoinstProposalTestCase(GraphTestCase):

    def setUp(self):
        super(AutoinstProposalTestCase, self).setUp()
        self.disk = self.add_disk("sda", size=Size("50 GiB"))

    def propose(self, partitioning):
        proposal = AutoinstProposal(partitioning=partitioning, devicegraph=self.graph)
        proposal.propose()
        return proposal

    def test_not_proposed(self):
        proposal = AutoinstProposal(partitioning=[{"device": "/dev/sda"}], devicegraph=self.graph)
        self.assertFalse(proposal.proposed)
        with self.assertRaises(UnexpectedCallError):
            proposal.devices  # pylint: disable=pointless-statement

    def test_root_and_swap(self):
        proposal = self.propose([{"device": "/dev/sda", "use": "all",
                                  "partitions": [{"mount": "/", "size": "max"},
                                                 {"mount": "swap", "size": "auto"}]}])
        self.assertTrue(proposal.proposed)
        self.assertFalse(proposal.failed)
        self.assertFalse(proposal.issues_list.fatal)

        mountpoints = proposal.devices.mountpoints
        root = mountpoints["/"]
        swap = mountpoints["swap"]
        self.assertEqual(root.name, "sda1")
        self.assertEqual(swap.name, "sda2")
        self.assertEqual(swap.partition_id, PartitionId.SWAP)
        self.assertEqual(root.format.type, "btrfs")
        self.assertTrue(root.format.snapshots)

        # swap takes what the 1 MiB alignment leaves at the end of the disk
        self.assertGreaterEqual(swap.size, Size("512 MiB"))
        self.assertLess(swap.size, Size("513 MiB"))
        self.assertEqual(root.size, self.disk.size - swap.size - Size("1 MiB") - GPT_BACKUP)

        # the initial graph is left untouched
        self.assertEqual(self.graph.partitions, [])

    def test_use_all_over_lvm(self):
        pv = self.add_partition(self.disk, 1, 10240)
        vg = self.graph.new_vg("old", [pv])
        self.graph.new_lv(vg, "data", Size("5 GiB"))

        proposal = self.propose([{"device": "/dev/sda", "use": "all",
                                  "partitions": [{"mount": "/"}]}])
        self.assertFalse(proposal.failed)
        devices = proposal.devices
        self.assertEqual(devices.lvm_vgs, [])
        self.assertEqual(devices.lvm_lvs, [])
        self.assertEqual(devices.mountpoints["/"].name, "sda1")

        # the existing volume group is still in the initial graph
        self.assertEqual([lv.name for lv in self.graph.lvm_lvs], ["old-data"])

    def test_lvm_names(self):
        proposal = self.propose([{"device": "/dev/sda", "use": "all",
                                  "partitions": [{"lvm_group": "system", "size": "20G"}]},
                                 {"device": "/dev/system", "type": "CT_LVM",
                                  "partitions": [{"mount": "/", "size": "10G"},
                                                 {"mount": "swap", "size": "1G"},
                                                 {"mount": "/home", "size": "5G"}]}])
        self.assertFalse(proposal.failed)
        self.assertEqual([lv.name for lv in proposal.devices.lvm_lvs],
                         ["system-home", "system-root", "system-swap"])

    def test_missing_disk(self):
        proposal = self.propose([{"device": "/dev/sdz", "partitions": [{"mount": "/"}]}])
        self.assertTrue(proposal.failed)
        self.assertIsNone(proposal.devices)
        self.assertTrue(proposal.issues_list.of_type(NoDisk))

    def test_no_space(self):
        self.graph.remove_device(self.disk)
        self.add_disk("sda", size=Size("2 MiB"))
        proposal = self.propose([{"device": "/dev/sda", "use": "all",
                                  "partitions": [{"mount": "/", "size": "max"}]}])
        self.assertTrue(proposal.failed)
        self.assertIsNone(proposal.devices)

    def test_shrinked_devices(self):
        proposal = self.propose([{"device": "/dev/sda", "use": "all",
                                  "partitions": [{"mount": "/", "size": "100 GiB"}]}])
        self.assertFalse(proposal.failed)
        root = proposal.devices.mountpoints["/"]
        self.assertEqual(root.size, self.disk.size - Size("1 MiB") - GPT_BACKUP)

        issues = proposal.issues_list.of_type(ShrinkedPlannedDevices)
        self.assertEqual(len(issues), 1)
        self.assertFalse(issues[0].fatal)

    def test_only_cleaning(self):
        self.add_partition(self.disk, 1, 1024, "ext4")
        proposal = self.propose([{"device": "/dev/sda", "initialize": True}])
        self.assertFalse(proposal.failed)
        disk = proposal.devices.get_device_by_name("sda")
        self.assertEqual(disk.partitions, [])
        self.assertEqual(len(self.graph.partitions), 1)

    def test_reuse_partition(self):
        home = self.add_partition(self.disk, 1, 10240, "ext4")
        self.add_partition(self.disk, 10241, 1024, "ext4")
        proposal = self.propose([{"device": "/dev/sda", "use": "all",
                                  "partitions": [{"mount": "/home", "create": False,
                                                  "partition_nr": 1},
                                                 {"mount": "/", "size": "max"}]}])
        self.assertFalse(proposal.failed)

        devices = proposal.devices
        reused = devices.mountpoints["/home"]
        self.assertEqual(reused.id, home.id)
        self.assertTrue(reused.format.exists)
        self.assertEqual(reused.format.type, "ext4")
        self.assertIsNone(home.format.mountpoint)

        root = devices.mountpoints["/"]
        self.assertEqual(root.name, "sda2")
        self.assertFalse(root.exists)
        self.assertEqual(root.size, self.disk.size - Size("10241 MiB") - GPT_BACKUP)

    def test_missing_use(self):
        proposal = self.propose([{"device": "/dev/sda", "partitions": [{"mount": "/"}]}])
        self.assertTrue(proposal.issues_list.of_type(MissingValue))
