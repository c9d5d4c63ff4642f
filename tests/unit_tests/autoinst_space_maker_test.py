from partplan.devicelibs.partition import PartitionId, PartitionType
from partplan.planned import PlannedPartition
from partplan.profile import PartitioningSection
from partplan.proposal.autoinst_space_maker import AutoinstSpaceMaker
from partplan.proposal.drives_map import DrivesMap
from partplan.proposal.issues import InvalidValue, IssuesList, MissingValue
from partplan.proposal.partition_killer import PartitionKiller
from partplan.size import Size

from .graphtestcase import GraphTestCase


class AutoinstSpaceMakerTestCase(GraphTestCase):

    def setUp(self):
        super(AutoinstSpaceMakerTestCase, self).setUp()
        self.disk = self.add_disk("sda", size=Size("50 GiB"))
        self.add_partition(self.disk, 1, 1024, "ntfs", partition_id=PartitionId.NTFS)
        self.add_partition(self.disk, 1025, 1024, "ext4")
        self.add_partition(self.disk, 2049, 1024, "swap", partition_id=PartitionId.SWAP)
        self.issues = IssuesList()

    def clean(self, drive, planned_devices=None):
        drives = DrivesMap(self.graph, PartitioningSection.from_list([drive]), self.issues)
        space_maker = AutoinstSpaceMaker(self.issues)
        return space_maker.cleaned_devicegraph(self.graph, drives, planned_devices or [])

    @staticmethod
    def names(devicegraph):
        return [p.name for p in devicegraph.partitions]

    def test_use_all(self):
        devicegraph = self.clean({"device": "/dev/sda", "use": "all"})
        self.assertEqual(self.names(devicegraph), [])
        self.assertEqual(self.names(self.graph), ["sda1", "sda2", "sda3"])

    def test_use_linux(self):
        devicegraph = self.clean({"device": "/dev/sda", "use": "linux"})
        self.assertEqual(self.names(devicegraph), ["sda1"])

    def test_use_numbers(self):
        devicegraph = self.clean({"device": "/dev/sda", "use": "1,3"})
        self.assertEqual(self.names(devicegraph), ["sda2"])

    def test_use_free(self):
        devicegraph = self.clean({"device": "/dev/sda", "use": "free"})
        self.assertEqual(self.names(devicegraph), ["sda1", "sda2", "sda3"])
        self.assertFalse(self.issues)

    def test_wrong_use(self):
        devicegraph = self.clean({"device": "/dev/sda"})
        self.assertEqual(len(devicegraph.partitions), 3)
        self.assertTrue(self.issues.of_type(MissingValue))

        self.issues = IssuesList()
        self.clean({"device": "/dev/sda", "use": "some"})
        issue = self.issues.of_type(InvalidValue)[0]
        self.assertEqual(issue.attr, "use")
        self.assertEqual(issue.value, "some")

    def test_initialize(self):
        devicegraph = self.clean({"device": "/dev/sda", "initialize": True})
        disk = devicegraph.get_device_by_name("sda")
        self.assertEqual(disk.children, [])
        self.assertIsNone(disk.partition_table)

    def test_reused_partitions_are_kept(self):
        planned = PlannedPartition("/home")
        planned.reuse_name = "sda3"
        devicegraph = self.clean({"device": "/dev/sda", "use": "all"}, [planned])
        self.assertEqual(self.names(devicegraph), ["sda3"])
        self.assertIsNone(planned.reuse_sid)

        # a reused partition prevents the initialization
        planned = PlannedPartition("/home")
        planned.reuse_name = "sda1"
        devicegraph = self.clean({"device": "/dev/sda", "initialize": True, "use": "all"},
                                 [planned])
        self.assertEqual(self.names(devicegraph), ["sda1"])

    def test_pinned_devices(self):
        planned = PlannedPartition("/home")
        planned.reuse_name = "sda3"
        other = PlannedPartition("/srv")

        pinned = AutoinstSpaceMaker.pinned_devices(self.graph, [planned, other])
        self.assertEqual([p.planned_id for p in pinned], [planned.planned_id, other.planned_id])
        self.assertEqual(pinned[0].reuse_sid, self.graph.get_device_by_name("sda3").id)
        self.assertIsNone(pinned[1].reuse_sid)
        self.assertIsNone(planned.reuse_sid)

    def test_disk_without_partition_table(self):
        disk = self.add_disk("sdb", size=Size("10 GiB"), ptable_type=None)
        self.graph.format_device(disk, "ext4")
        devicegraph = self.clean({"device": "/dev/sdb", "use": "all"})
        self.assertIsNone(devicegraph.get_device_by_name("sdb").format.type)
        self.assertEqual(disk.format.type, "ext4")


class PartitionKillerTestCase(GraphTestCase):

    def setUp(self):
        super(PartitionKillerTestCase, self).setUp()
        self.sda = self.add_disk("sda", size=Size("10 GiB"))
        self.sdb = self.add_disk("sdb", size=Size("10 GiB"))
        self.pv1 = self.add_partition(self.sda, 1, 1024)
        self.pv2 = self.add_partition(self.sdb, 1, 1024)
        self.vg = self.graph.new_vg("system", [self.pv1, self.pv2])
        self.graph.new_lv(self.vg, "root", Size("1 GiB"))

    def test_delete_related(self):
        killer = PartitionKiller(self.graph)
        self.assertEqual(killer.partitions_to_delete("sda1"), ["sda1", "sdb1"])
        self.assertEqual(killer.delete("sda1"), ["sda1", "sdb1"])
        self.assertEqual(self.graph.partitions, [])
        self.assertEqual(self.graph.lvm_vgs, [])

    def test_delete_in_candidate_disks(self):
        killer = PartitionKiller(self.graph, disks=["sda"])
        self.assertEqual(killer.delete("sda1"), ["sda1"])
        self.assertEqual(self.graph.partitions, [self.pv2])
        self.assertEqual(self.graph.lvm_vgs, [])

    def test_delete_alone(self):
        killer = PartitionKiller(self.graph)
        self.assertEqual(killer.delete("sda1", related=False), ["sda1"])
        self.assertEqual(self.graph.partitions, [self.pv2])
        self.assertEqual(killer.delete("sdz1"), [])

    def test_last_logical(self):
        disk = self.add_disk("sdc", size=Size("10 GiB"), ptable_type="msdos")
        self.add_partition(disk, 1, 4096, part_type=PartitionType.EXTENDED)
        self.add_partition(disk, 2, 1024, part_type=PartitionType.LOGICAL)

        killer = PartitionKiller(self.graph)
        self.assertEqual(killer.delete("sdc5"), ["sdc1", "sdc5"])
        self.assertEqual(disk.partitions, [])
