from partplan.devicelibs.partition import PartitionId
from partplan.planned import PlannedLvmLv, PlannedPartition
from partplan.proposal.devicegraph_generator import DevicegraphGenerator
from partplan.proposal.lvm_helper import LvmHelper
from partplan.proposal.settings import Delete, ProposalSettings, SpaceSettings
from partplan.proposal.space_maker import SpaceMaker
from partplan.size import Size

from .graphtestcase import GraphTestCase


class DevicegraphGeneratorTestCase(GraphTestCase):

    def setUp(self):
        super(DevicegraphGeneratorTestCase, self).setUp()
        self.disk = self.add_disk("sda", size=Size("10 GiB"))

    def _planned_devices(self):
        boot = PlannedPartition("/boot", "ext4")
        boot.set_size_limits(Size("512 MiB"), Size("512 MiB"))
        root = PlannedLvmLv("/", "xfs")
        root.set_size_limits(Size("2 GiB"), Size.unlimited())
        root.weight = 1
        return [boot, root]

    def test_partitions_and_lvm(self):
        settings = ProposalSettings(use_lvm=True)
        generator = DevicegraphGenerator(settings)
        graph = generator.devicegraph(self._planned_devices(), self.graph, SpaceMaker(settings))

        self.assertEqual(self.graph.partitions, [])
        self.assertEqual(len(graph.partitions), 2)
        boot = graph.mountpoints["/boot"]
        self.assertEqual(boot.size, Size("512 MiB"))

        pvs = [p for p in graph.partitions if p.partition_id == PartitionId.LVM]
        self.assertEqual(len(pvs), 1)
        self.assertEqual(pvs[0].format.type, "lvmpv")

        self.assertEqual([vg.name for vg in graph.lvm_vgs], ["system"])
        root = graph.mountpoints["/"]
        self.assertEqual(root.format.type, "xfs")
        self.assertGreaterEqual(root.size, Size("2 GiB"))

    def test_without_lvm(self):
        settings = ProposalSettings()
        generator = DevicegraphGenerator(settings)
        boot = self._planned_devices()[0]
        graph = generator.devicegraph([boot], self.graph, SpaceMaker(settings))
        self.assertEqual(len(graph.partitions), 1)
        self.assertEqual(graph.lvm_vgs, [])

    def test_swap_keeps_uuid(self):
        self.add_partition(self.disk, 1, 1024, "swap", partition_id=PartitionId.SWAP,
                           uuid="1234-abcd", label="SWAP")

        swap = PlannedPartition("swap", "swap")
        swap.set_size_limits(Size("9 GiB"), Size("9 GiB"))
        settings = ProposalSettings(space_settings=SpaceSettings(actions=[Delete("sda1")]))
        graph = DevicegraphGenerator(settings).devicegraph([swap], self.graph, SpaceMaker(settings))

        new_swap = graph.partitions[0]
        self.assertEqual(new_swap.size, Size("9 GiB"))
        self.assertEqual(new_swap.format.uuid, "1234-abcd")
        self.assertEqual(new_swap.format.label, "SWAP")


class LvmHelperTestCase(GraphTestCase):

    def setUp(self):
        super(LvmHelperTestCase, self).setUp()
        disk = self.add_disk("sda", size=Size("20 GiB"))
        pv1 = self.add_partition(disk, 1, 4096)
        pv2 = self.add_partition(disk, 4097, 10240)
        self.small = self.graph.new_vg("small", [pv1])
        self.big = self.graph.new_vg("big", [pv2])

        root = PlannedLvmLv("/", "ext4")
        root.set_size_limits(Size("2 GiB"), Size("2 GiB"))
        self.settings = ProposalSettings(use_lvm=True)
        self.helper = LvmHelper([root], self.settings)

    def test_new_volume_group(self):
        vg = self.helper.volume_group
        self.assertEqual(vg.volume_group_name, "system")
        self.assertEqual(vg.target_size, Size("2 GiB"))
        self.assertEqual(self.helper.partitions_in_vg, [])

    def test_reusable_volume_groups(self):
        self.assertEqual([vg.name for vg in self.helper.reusable_volume_groups(self.graph)],
                         ["small", "big"])

        self.helper.set_reused_volume_group(self.big)
        self.assertEqual(self.helper.volume_group.reuse_name, "big")
        self.assertEqual(self.helper.partitions_in_vg, ["sda2"])
        self.assertEqual(self.helper.volume_group.missing_space, Size(0))

        self.helper.set_reused_volume_group(None)
        self.assertIsNone(self.helper.volume_group.reuse_name)

    def test_no_reuse(self):
        self.settings.lvm_vg_reuse = False
        self.assertEqual(self.helper.reusable_volume_groups(self.graph), [])

        self.settings.lvm_vg_reuse = True
        self.settings.encryption_password = "secret"
        self.assertEqual(self.helper.reusable_volume_groups(self.graph), [])

    def test_create_volumes(self):
        self.helper.set_reused_volume_group(self.big)
        graph = self.helper.create_volumes(self.graph)
        self.assertEqual([lv.name for lv in graph.lvm_lvs], ["big-root"])
        self.assertEqual(self.graph.lvm_lvs, [])
