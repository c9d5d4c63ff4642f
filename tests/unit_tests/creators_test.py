import unittest

from partplan.devicelibs.partition import PartitionTableType
from partplan.errors import DeviceNotFoundError, NoDiskSpaceError
from partplan.planned import (PartitionsDistribution, PlannedLvmLv, PlannedLvmVg, PlannedMd,
                              PlannedNfs, PlannedPartition, PlannedTmpfs)
from partplan.planned.lvm import MAKE_SPACE_KEEP
from partplan.proposal.creator_result import CreatorResult
from partplan.proposal.creators import (LvmCreator, MdCreator, NfsCreator, PartitionCreator,
                                        PartitionTableCreator, TmpfsCreator, available_name, creator_for, numbered_name)
from partplan.size import Size

from .graphtestcase import GraphTestCase


def planned_lv(name, min_size, max_size=None, weight=0, mount_point=None):
    lv = PlannedLvmLv(mount_point, "ext4" if mount_point else None)
    lv.logical_volume_name = name
    lv.set_size_limits(Size(min_size), Size(max_size) if max_size else Size.unlimited())
    lv.weight = weight
    return lv


class NamesTestCase(unittest.TestCase):

    def test_available_name(self):
        self.assertEqual(available_name("system", []), "system")
        self.assertEqual(available_name("system", ["system"]), "system0")
        self.assertEqual(available_name("system", ["system", "system0"]), "system1")

    def test_numbered_name(self):
        self.assertEqual(numbered_name("md", []), "md0")
        self.assertEqual(numbered_name("md", ["md0", "md2"]), "md1")


class PartitionTableCreatorTestCase(GraphTestCase):

    def test_create_or_update(self):
        disk = self.add_disk("sda", ptable_type=None)
        creator = PartitionTableCreator()

        ptable = creator.create_or_update(self.graph, disk)
        self.assertEqual(ptable.label_type, PartitionTableType.GPT)
        self.assertIs(creator.create_or_update(self.graph, disk, "gpt"), ptable)

        # an empty table of the wrong type is replaced
        ptable = creator.create_or_update(self.graph, disk, "msdos")
        self.assertEqual(ptable.label_type, PartitionTableType.MSDOS)

        # but a table with partitions is kept
        self.add_partition(disk, 1, 1024)
        self.assertIs(creator.create_or_update(self.graph, disk, "gpt"), ptable)


class PartitionCreatorTestCase(GraphTestCase):

    @staticmethod
    def _planned(mount_point, boot=False):
        planned = PlannedPartition(mount_point, "ext4")
        planned.set_size_limits(Size("1 GiB"), Size("1 GiB"))
        planned.boot = boot
        return planned

    def test_boot_flag(self):
        sda = self.add_disk("sda", size=Size("10 GiB"), ptable_type="msdos")
        sdb = self.add_disk("sdb", size=Size("10 GiB"))
        distribution = PartitionsDistribution({sda.free_spaces()[0]: [self._planned("/boot", True)],
                                               sdb.free_spaces()[0]: [self._planned("/srv", True)]})

        result = PartitionCreator(self.graph).create_partitions(distribution)
        graph = result.devicegraph
        # only msdos partition tables have a boot flag
        self.assertTrue(graph.get_device_by_name("sda1").boot)
        self.assertFalse(graph.get_device_by_name("sdb1").boot)
        self.assertEqual(graph.get_device_by_name("sda1").size, Size("1 GiB"))
        self.assertEqual(self.graph.partitions, [])

    def test_logical_partitions(self):
        disk = self.add_disk("sda", size=Size("22 GiB"), ptable_type="msdos")
        planned = [self._planned("/data%d" % i) for i in range(5)]
        distribution = PartitionsDistribution({disk.free_spaces()[0]: planned})

        graph = PartitionCreator(self.graph).create_partitions(distribution).devicegraph
        partitions = sorted(graph.partitions, key=lambda p: p.name)
        self.assertEqual([p.name for p in partitions],
                         ["sda1", "sda2", "sda3", "sda4", "sda5", "sda6"])
        self.assertTrue(all(p.is_primary for p in partitions[:3]))
        self.assertTrue(partitions[3].is_extended)
        self.assertTrue(all(p.is_logical for p in partitions[4:]))
        self.assertEqual(len(graph.mountpoints), 5)


class LvmCreatorTestCase(GraphTestCase):

    def setUp(self):
        super(LvmCreatorTestCase, self).setUp()
        disk = self.add_disk("sda", size=Size("50 GiB"))
        self.add_partition(disk, 1, 10240)
        self.add_partition(disk, 10241, 10240)

    def test_create_volumes(self):
        root = planned_lv("root", "5 GiB", "5 GiB", mount_point="/")
        home = planned_lv("home", "1 GiB", weight=1, mount_point="/home")
        planned_vg = PlannedLvmVg(volume_group_name="system", lvs=[root, home])

        result = LvmCreator(self.graph).create_volumes(planned_vg, ["sda1", "sda2"])
        self.assertEqual(self.graph.lvm_vgs, [])

        vg = result.devicegraph.get_device_by_name("system")
        # every PV loses 1 MiB for the metadata, the rest is aligned to 4 MiB
        self.assertEqual(vg.size, Size("20472 MiB"))
        self.assertEqual(result.name_for(planned_vg), "system")
        self.assertEqual(result.name_for(root), "system-root")
        self.assertEqual(result.real_device(root).size, Size("5 GiB"))
        self.assertEqual(result.real_device(home).size, Size("15352 MiB"))
        self.assertEqual(result.real_device(home).format.mountpoint, "/home")
        self.assertEqual(vg.free_space, Size(0))

        # the name is taken now
        other = PlannedLvmVg(volume_group_name="system", lvs=[planned_lv("data", "1 GiB")])
        devicegraph = result.devicegraph
        pv = devicegraph.create_partition(devicegraph.get_device_by_name("sda"),
                                          devicegraph.free_spaces()[0].region.with_size(
                                              Size("2 GiB")))
        result = LvmCreator(devicegraph).create_volumes(other, [pv.name])
        self.assertEqual(result.name_for(other), "system0")

    def test_make_space(self):
        sda1 = self.graph.get_device_by_name("sda1")
        vg = self.graph.new_vg("system", [sda1])
        self.graph.new_lv(vg, "small", Size("2 GiB"))
        self.graph.new_lv(vg, "big", Size("6 GiB"))

        planned_vg = PlannedLvmVg.from_real_vg(vg)
        root = planned_lv("root", "5 GiB", "5 GiB")
        planned_vg.lvs.append(root)

        result = LvmCreator(self.graph).create_volumes(planned_vg)
        names = [lv.lvname for lv in result.devicegraph.get_device_by_name("system").lvs]
        self.assertEqual(sorted(names), ["root", "small"])

        planned_vg.make_space_policy = MAKE_SPACE_KEEP
        with self.assertRaises(NoDiskSpaceError):
            LvmCreator(self.graph).create_volumes(planned_vg)

    def test_reuse_missing_vg(self):
        planned_vg = PlannedLvmVg(volume_group_name="system")
        planned_vg.reuse_name = "system"
        with self.assertRaises(DeviceNotFoundError):
            LvmCreator(self.graph).create_volumes(planned_vg)


class MdCreatorTestCase(GraphTestCase):

    def test_create_md(self):
        sda = self.add_disk("sda", size=Size("10 GiB"))
        sdb = self.add_disk("sdb", size=Size("10 GiB"))
        for disk in (sda, sdb):
            self.add_partition(disk, 1, 1024)
            self.add_partition(disk, 1025, 1024)

        planned = PlannedMd(name="/dev/md/data", mount_point="/srv", filesystem_type="xfs")
        planned.devices_order = ["sdb1"]
        result = MdCreator(self.graph).create_md(planned, ["sda1", "sdb1"])

        md = result.real_device(planned)
        self.assertEqual(md.name, "data")
        self.assertEqual([m.name for m in md.parents], ["sdb1", "sda1"])
        self.assertEqual(md.format.type, "xfs")
        self.assertEqual(result.devicegraph.mountpoints["/srv"], md)
        self.assertEqual(self.graph.md_raids, [])

        unnamed = PlannedMd()
        result = MdCreator(result.devicegraph).create_md(unnamed, ["sda2", "sdb2"])
        self.assertEqual(result.name_for(unnamed), "md0")


class NodevCreatorsTestCase(GraphTestCase):

    def test_nfs_and_tmpfs(self):
        nfs = PlannedNfs("srv", "/home", mount_point="/home")
        result = NfsCreator(self.graph).create_nfs(nfs)
        self.assertEqual(result.devicegraph.nfs_mounts[0].format.mountpoint, "/home")

        tmpfs = PlannedTmpfs("/tmp")
        result = TmpfsCreator(result.devicegraph).create_tmpfs(tmpfs)
        self.assertEqual(sorted(result.devicegraph.mountpoints.keys()), ["/home", "/tmp"])
        self.assertEqual(self.graph.devices, [])

    def test_creator_for(self):
        self.assertIsInstance(creator_for(PlannedTmpfs("/tmp"), self.graph), TmpfsCreator)
        self.assertIsInstance(creator_for(PlannedLvmVg(), self.graph), LvmCreator)
        with self.assertRaises(ValueError):
            creator_for(object(), self.graph)


class CreatorResultTestCase(GraphTestCase):

    def test_merge(self):
        nfs = PlannedNfs("srv", "/home", mount_point="/home")
        tmpfs = PlannedTmpfs("/tmp")
        first = CreatorResult(self.graph, {"srv:/home": nfs})
        other_graph = self.graph.copy()
        second = CreatorResult(other_graph, {"tmpfs": tmpfs})

        merged = first.merge(second)
        self.assertIs(merged.devicegraph, other_graph)
        self.assertEqual(merged.created_names(), ["srv:/home", "tmpfs"])
        self.assertEqual(merged.name_for(tmpfs.planned_id), "tmpfs")
        self.assertEqual(merged.planned_devices, [nfs, tmpfs])
        self.assertEqual(first.created_names(), ["srv:/home"])
        self.assertIsNone(merged.real_device(tmpfs))
