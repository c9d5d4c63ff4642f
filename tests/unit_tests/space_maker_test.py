import unittest

from partplan.devices import ResizeInfo
from partplan.errors import NoDiskSpaceError
from partplan.planned import PlannedPartition
from partplan.proposal.settings import Delete, ProposalSettings, Resize, SpaceSettings, Wipe
from partplan.proposal.space_maker import SpaceMaker
from partplan.size import Size

from .graphtestcase import GraphTestCase


def planned_partition(min_size):
    partition = PlannedPartition("/data", "ext4")
    partition.set_size_limits(Size(min_size), Size.unlimited())
    return partition


class SpaceSettingsTestCase(unittest.TestCase):

    def test_actions(self):
        self.assertTrue(Delete("sda1", mandatory=True).mandatory)
        self.assertFalse(Delete("sda1").mandatory)
        self.assertTrue(Resize("sda1", max_size="1 GiB").mandatory)
        self.assertEqual(Resize("sda1", min_size="1 GiB").min_size, Size("1 GiB"))
        self.assertFalse(Resize("sda1").mandatory)

        settings = SpaceSettings(actions=[Delete("sda1"), Wipe("sdb"), Delete("sda2")])
        self.assertEqual([a.device for a in settings.actions_of("delete")], ["sda1", "sda2"])
        with self.assertRaises(ValueError):
            SpaceSettings(strategy="smallest_first")


class SpaceMakerTestCase(GraphTestCase):

    def setUp(self):
        super(SpaceMakerTestCase, self).setUp()
        self.disk = self.add_disk("sda", size=Size("10 GiB"))
        self.sda1 = self.add_partition(self.disk, 1, 1024, "ext4")
        self.sda2 = self.add_partition(self.disk, 1025, 8192, "ext4")
        self.sda2.set_resize_info(ResizeInfo(True, Size("1 GiB"), Size("8 GiB")))

    def space_maker(self, *actions):
        settings = ProposalSettings(space_settings=SpaceSettings(actions=list(actions)))
        return SpaceMaker(settings)

    def test_delete_from_the_end(self):
        space_maker = self.space_maker(Delete("sda1"), Delete("sda2"))
        result = space_maker.provide_space(self.graph, [planned_partition("3 GiB")])

        self.assertEqual([p.name for p in result.deleted_partitions], ["sda2"])
        self.assertEqual([p.name for p in result.devicegraph.partitions], ["sda1"])
        self.assertEqual(result.partitions_distribution.spaces_count, 1)
        self.assertEqual(len(self.graph.partitions), 2)

    def test_resize(self):
        space_maker = self.space_maker(Resize("sda2"))
        result = space_maker.provide_space(self.graph, [planned_partition("3 GiB")])

        self.assertEqual(result.deleted_partitions, [])
        sda2 = result.devicegraph.get_device_by_id(self.sda2.id)
        # just what is needed, rounded up to the 1 MiB alignment
        self.assertEqual(sda2.size, Size("6142 MiB"))
        self.assertEqual(self.sda2.size, Size("8 GiB"))

    def test_no_actions(self):
        space_maker = self.space_maker()
        with self.assertRaises(NoDiskSpaceError):
            space_maker.provide_space(self.graph, [planned_partition("3 GiB")])

        result = space_maker.provide_space(self.graph, [planned_partition("512 MiB")])
        self.assertEqual(result.deleted_partitions, [])

    def test_reused_partitions_are_kept(self):
        reused = PlannedPartition("/srv")
        reused.reuse_name = "sda2"
        space_maker = self.space_maker(Delete("sda1"), Delete("sda2"))
        with self.assertRaises(NoDiskSpaceError):
            space_maker.provide_space(self.graph, [reused, planned_partition("3 GiB")])

        result = space_maker.provide_space(self.graph, [reused, planned_partition("512 MiB")])
        self.assertEqual(result.reused_sids, {reused.planned_id: self.sda2.id})
        self.assertIsNotNone(result.devicegraph.get_device_by_id(self.sda2.id))
        # the planned devices are only read
        self.assertIsNone(reused.reuse_sid)

    def test_wipe(self):
        space_maker = self.space_maker(Wipe("sda"))
        result = space_maker.provide_space(self.graph, [planned_partition("3 GiB")])
        self.assertEqual(result.devicegraph.partitions, [])
        self.assertEqual(len(result.deleted_partitions), 2)

    def test_prepare_devicegraph(self):
        space_maker = self.space_maker(Delete("sda1", mandatory=True),
                                       Resize("sda2", max_size="4 GiB"))
        devicegraph = space_maker.prepare_devicegraph(self.graph)
        self.assertEqual([p.name for p in devicegraph.partitions], ["sda2"])
        self.assertEqual(devicegraph.partitions[0].size, Size("4 GiB"))

        reused = PlannedPartition("/")
        reused.reuse_name = "sda1"
        devicegraph = self.space_maker(Delete("sda1", mandatory=True)).prepare_devicegraph(
            self.graph, [reused])
        self.assertEqual(len(devicegraph.partitions), 2)

    def test_candidate_devices(self):
        sdb = self.add_disk("sdb", size=Size("10 GiB"))
        settings = ProposalSettings(candidate_devices=["sda"])
        result = SpaceMaker(settings).provide_space(self.graph, [planned_partition("512 MiB")])
        self.assertEqual(result.partitions_distribution.spaces[0].disk_name, "sda")

        settings = ProposalSettings(candidate_devices=["sdb"])
        result = SpaceMaker(settings).provide_space(self.graph, [planned_partition("3 GiB")])
        self.assertEqual(result.partitions_distribution.spaces[0].disk_name, sdb.name)
