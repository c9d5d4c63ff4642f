from partplan.devicelibs.partition import PartitionId, PartitionTableType, PartitionType
from partplan.devices import DiskDevice, Region, ResizeInfo
from partplan.errors import DeviceNotFoundError, DeviceTreeError, PartitioningError
from partplan.formats import get_format
from partplan.size import Size

from .graphtestcase import GraphTestCase

GPT_BACKUP = Size(33 * 512)


class DevicegraphTestCase(GraphTestCase):

    def test_add_device(self):
        disk = self.add_disk("sda")
        self.assertEqual(self.graph.names, ["sda"])

        with self.assertRaisesRegex(DeviceTreeError, "already existing"):
            self.graph.add_device(disk)

        with self.assertRaisesRegex(DeviceTreeError, "Duplicate"):
            self.graph.add_device(DiskDevice("sda", size=Size("1 GiB")))

        orphan = DiskDevice("sdb", size=Size("1 GiB"))
        part = self.add_partition(disk, 1, 10)
        self.graph.remove_device(part)
        part.parents.append(orphan)
        with self.assertRaisesRegex(DeviceTreeError, "parent"):
            self.graph.add_device(part)

    def test_remove_device(self):
        disk = self.add_disk("sda")
        part = self.add_partition(disk, 1, 10)

        with self.assertRaises(ValueError):
            self.graph.remove_device(disk)

        self.graph.remove_device(part)
        self.assertEqual(self.graph.partitions, [])
        self.assertEqual(disk.children, [])

        with self.assertRaises(ValueError):
            self.graph.remove_device(part)

    def test_lookups(self):
        disk = self.add_disk("sda")
        part = self.add_partition(disk, 1, 10, "ext4", uuid="1234-abcd", label="data")

        self.assertIs(self.graph.get_device_by_name("sda1"), part)
        self.assertIs(self.graph.get_device_by_path("/dev/sda1"), part)
        self.assertIs(self.graph.get_device_by_id(part.id), part)
        self.assertIs(self.graph.get_device_by_uuid("1234-abcd"), part)
        self.assertIs(self.graph.get_device_by_label("data"), part)
        self.assertIsNone(self.graph.get_device_by_name(None))
        self.assertIsNone(self.graph.get_device_by_uuid("nope"))

        self.assertIs(self.graph.find_by_any_name("sda1"), part)
        self.assertIs(self.graph.find_by_any_name("/dev/sda1"), part)
        self.assertIsNone(self.graph.find_by_any_name("/dev/sdz"))
        self.assertIsNone(self.graph.find_by_any_name(""))

        self.assertIs(self.graph.resolve_device("/dev/sda"), disk)
        with self.assertRaises(DeviceNotFoundError):
            self.graph.resolve_device("/dev/sdz")

    def test_copy(self):
        disk = self.add_disk("sda")
        part = self.add_partition(disk, 1, 10, "ext4")

        copy = self.graph.copy()
        part_copy = copy.get_device_by_id(part.id)
        self.assertIsNot(part_copy, part)
        self.assertEqual(part_copy.name, "sda1")
        self.assertEqual(part_copy.format.type, "ext4")
        self.assertIs(part_copy.disk, copy.get_device_by_id(disk.id))

        copy.delete_partition(part_copy)
        self.assertEqual(self.graph.partitions, [part])

    def test_collections(self):
        sdb = self.add_disk("sdb")
        sda = self.add_disk("sda")
        self.add_partition(sda, 1, 10, "ext4", mountpoint="/")
        self.add_partition(sdb, 1, 10, "swap")

        self.assertEqual([d.name for d in self.graph.disks], ["sda", "sdb"])
        self.assertEqual([p.name for p in self.graph.partitions], ["sda1", "sdb1"])
        self.assertEqual(sorted(self.graph.mountpoints.keys()), ["/", "swap"])
        self.assertEqual(len(self.graph.filesystems), 2)
        self.assertEqual(len(self.graph.leaves), 2)

    def test_free_spaces(self):
        disk = self.add_disk("sda", size=Size("10 GiB"))
        spaces = disk.free_spaces()
        self.assertEqual(len(spaces), 1)
        self.assertEqual(spaces[0].region.start, 2048)
        self.assertEqual(spaces[0].disk_size, Size("10 GiB") - Size("1 MiB") - GPT_BACKUP)

        self.add_partition(disk, 1, 1024)
        spaces = disk.free_spaces()
        self.assertEqual(len(spaces), 1)
        self.assertEqual(spaces[0].region.start_offset, Size("1025 MiB"))

    def test_free_spaces_without_partition_table(self):
        empty = self.add_disk("sda", size=Size("10 GiB"), ptable_type=None)
        spaces = empty.free_spaces()
        self.assertEqual(len(spaces), 1)
        self.assertEqual(spaces[0].disk_size, Size("10 GiB") - Size("1 MiB") - GPT_BACKUP)

        formatted = self.add_disk("sdb", size=Size("10 GiB"), ptable_type=None)
        formatted.format = get_format("ext4", exists=True)
        self.assertEqual(formatted.free_spaces(), [])
        self.assertEqual(len(self.graph.free_spaces()), 1)

    def test_free_spaces_msdos(self):
        disk = self.add_disk("sda", size=Size("10 GiB"), ptable_type="msdos")
        self.add_partition(disk, 1, 1024)
        self.add_partition(disk, 1025, 4096, part_type=PartitionType.EXTENDED)
        self.add_partition(disk, 1026, 1024, part_type=PartitionType.LOGICAL)

        spaces = disk.free_spaces()
        self.assertEqual(len(spaces), 2)
        outside, inside = sorted(spaces, key=lambda s: s.in_extended)
        self.assertFalse(outside.in_extended)
        self.assertEqual(outside.region.start_offset, Size("5121 MiB"))
        self.assertEqual(outside.disk_size, Size("10 GiB") - Size("5121 MiB"))
        # the EBR of the next logical partition takes 1 MiB
        self.assertTrue(inside.in_extended)
        self.assertEqual(inside.region.start_offset, Size("2051 MiB"))

    def test_create_partition_table(self):
        disk = self.add_disk("sda", ptable_type=None)
        ptable = self.graph.create_partition_table(disk, "dos")
        self.assertEqual(ptable.label_type, PartitionTableType.MSDOS)
        self.assertIs(disk.partition_table, ptable)

        ptable = self.graph.create_partition_table(disk)
        self.assertEqual(ptable.label_type, PartitionTableType.GPT)

        self.add_partition(disk, 1, 10)
        with self.assertRaises(DeviceTreeError):
            self.graph.create_partition_table(disk, "msdos")

    def test_create_partition(self):
        disk = self.add_disk("sda", size=Size("10 GiB"))
        space = disk.free_spaces()[0]
        region = space.region.with_size(Size("1 GiB"))

        part = self.graph.create_partition(disk, region)
        self.assertEqual(part.name, "sda1")
        self.assertEqual(part.number, 1)
        self.assertEqual(part.size, Size("1 GiB"))
        self.assertEqual(part.partition_id, PartitionId.LINUX)
        self.assertFalse(part.exists)
        self.assertIn(part, self.graph.devices)

        with self.assertRaisesRegex(PartitioningError, "overlaps"):
            self.graph.create_partition(disk, region)

        with self.assertRaises(PartitioningError):
            self.graph.create_partition(disk, Region(0, 2048))

        with self.assertRaises(PartitioningError):
            self.graph.create_partition(disk, disk.free_spaces()[0].region,
                                        part_type=PartitionType.EXTENDED)

    def test_create_logical_partitions(self):
        disk = self.add_disk("md0", size=Size("10 GiB"), ptable_type="msdos")
        space = disk.free_spaces()[0]
        extended = self.graph.create_partition(disk, space.region, PartitionType.EXTENDED)
        self.assertEqual(extended.name, "md0p1")
        self.assertEqual(extended.partition_id, PartitionId.EXTENDED)

        logical_space = disk.free_spaces()[0]
        self.assertTrue(logical_space.in_extended)
        logical = self.graph.create_partition(disk, logical_space.region.with_size(Size("1 GiB")),
                                              PartitionType.LOGICAL, PartitionId.SWAP)
        self.assertEqual(logical.number, 5)
        self.assertEqual(logical.name, "md0p5")
        self.assertEqual(logical.partition_id, PartitionId.SWAP)

        self.graph.delete_partition(logical)
        self.assertEqual(disk.partitions, [])

    def test_no_partition_table(self):
        disk = self.add_disk("sda", ptable_type=None)
        with self.assertRaises(PartitioningError):
            self.graph.create_partition(disk, Region(2048, 2048))

    def test_wipe_device(self):
        disk = self.add_disk("sda")
        part = self.add_partition(disk, 1, 10, "lvmpv")
        self.graph.new_vg("system", [part])

        self.graph.wipe_device(disk)
        self.assertEqual(self.graph.devices, [disk])
        self.assertIsNone(disk.format.type)

    def test_wipe_device_with_lvm(self):
        disk = self.add_disk("sda")
        pv = self.add_partition(disk, 1, 1024)
        vg = self.graph.new_vg("system", [pv])
        lv = self.graph.new_lv(vg, "root", Size("512 MiB"))

        self.graph.wipe_device(disk)
        self.assertEqual(self.graph.devices, [disk])
        self.assertEqual(self.graph.lvm_lvs, [])
        self.assertEqual(vg.children, [])
        self.assertEqual(lv.parents[:], [])

    def test_resize_device(self):
        disk = self.add_disk("sda")
        part = self.add_partition(disk, 1, 1024, "ext4", min_size=Size("100 MiB"))

        new_size = self.graph.resize_device(part, Size("500.5 MiB"))
        self.assertEqual(new_size, Size("500 MiB"))
        self.assertEqual(part.region.start, 2048)

        # never below the minimum
        self.assertEqual(self.graph.resize_device(part, Size("1 MiB")), Size("100 MiB"))

        xfs = self.add_partition(disk, 2048, 1024, "xfs")
        with self.assertRaises(ValueError):
            self.graph.resize_device(xfs, Size("500 MiB"))

        xfs.set_resize_info(ResizeInfo(True, Size("200 MiB"), Size("1 GiB")))
        self.assertEqual(self.graph.resize_device(xfs, Size("500 MiB")), Size("500 MiB"))

    def test_encryption(self):
        disk = self.add_disk("sda")
        part = self.add_partition(disk, 1, 1024)

        luks = self.graph.encrypt_device(part, "secret", luks_version="luks2")
        self.assertEqual(luks.name, "cr_sda1")
        self.assertEqual(part.format.type, "luks")
        self.assertIs(part.encryption, luks)
        self.assertIs(part.formatted_device, luks)

        fmt = self.graph.format_device(part, "ext4", mountpoint="/home")
        self.assertIs(luks.format, fmt)
        self.assertIs(part.filesystem, fmt)
        self.assertEqual(self.graph.mountpoints["/home"], luks)

        with self.assertRaises(DeviceTreeError):
            self.graph.encrypt_device(part, "other")

    def test_lvm(self):
        disk = self.add_disk("sda")
        pv1 = self.add_partition(disk, 1, 1024)
        pv2 = self.add_partition(disk, 1025, 1024)

        vg = self.graph.new_vg("system", [pv1, pv2])
        self.assertEqual(pv1.format.type, "lvmpv")
        self.assertEqual(pv2.format.vg_name, "system")
        self.assertEqual(vg.pvs, [pv1, pv2])
        self.assertEqual(self.graph.lvm_vgs, [vg])
        self.assertEqual(len(self.graph.lvm_pvs), 2)

        lv = self.graph.new_lv(vg, "root", Size("1 GiB"))
        self.assertEqual(lv.name, "system-root")
        self.assertEqual(lv.lvname, "root")
        self.assertEqual(vg.lvs, [lv])
        self.assertIs(self.graph.get_device_by_name("system-root"), lv)

        with self.assertRaises(DeviceTreeError):
            self.graph.new_lv(vg, "thin", Size("1 GiB"), lv_type=lv.THIN)

    def test_nodev(self):
        nfs = self.graph.new_nfs("srv", "/home", mountpoint="/home")
        tmpfs = self.graph.new_tmpfs(mountpoint="/tmp")
        self.assertEqual(self.graph.nfs_mounts, [nfs])
        self.assertEqual(self.graph.tmpfs_mounts, [tmpfs])
        self.assertEqual(sorted(self.graph.mountpoints.keys()), ["/home", "/tmp"])
