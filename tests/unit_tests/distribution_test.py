from partplan.devicelibs.lvm import LVM_PE_START
from partplan.devicelibs.partition import PartitionId, PartitionType
from partplan.errors import NoDiskSpaceError, NoMorePartitionSlotError
from partplan.planned import PartitionsDistribution, PlannedLvmLv, PlannedLvmVg, PlannedPartition
from partplan.planned.lvm import USE_AVAILABLE, USE_NEEDED
from partplan.proposal.distribution_calculator import DistributionCalculator
from partplan.size import Size

from .graphtestcase import GraphTestCase

GPT_BACKUP = Size(33 * 512)


def planned_partition(min_size="1 GiB", max_size=None, weight=0, disk=None):
    partition = PlannedPartition("/data", "ext4")
    partition.set_size_limits(Size(min_size),
                              Size.unlimited() if max_size is None else Size(max_size))
    partition.weight = weight
    partition.disk = disk
    return partition


class PartitionsDistributionTestCase(GraphTestCase):

    def test_no_logical_needed(self):
        disk = self.add_disk("sda", size=Size("22 GiB"), ptable_type="msdos")
        space = disk.free_spaces()[0]
        partitions = [planned_partition() for _ in range(3)]

        dist = PartitionsDistribution({space: partitions})
        self.assertEqual(len(dist.spaces), 1)
        self.assertEqual(dist.spaces[0].num_logical, 0)
        self.assertIsNone(dist.spaces[0].partition_type)
        self.assertEqual(dist.partitions_count, 3)

    def test_logical_in_single_space(self):
        disk = self.add_disk("sda", size=Size("22 GiB"), ptable_type="msdos")
        space = disk.free_spaces()[0]
        partitions = [planned_partition() for _ in range(5)]

        dist = PartitionsDistribution({space: partitions})
        # one primary slot is used by the extended partition
        self.assertEqual(dist.spaces[0].num_logical, 2)
        self.assertEqual(dist.spaces[0].usable_size, space.disk_size - Size("2 MiB"))

    def test_logical_in_one_space(self):
        disk = self.add_disk("sda", size=Size("22 GiB"), ptable_type="msdos")
        self.add_partition(disk, 1, 1024)
        self.add_partition(disk, 2049, 1024)
        first, second = disk.free_spaces()
        self.assertEqual(first.disk_size, Size("1 GiB"))

        dist = PartitionsDistribution({first: [planned_partition("100 MiB")],
                                       second: [planned_partition(), planned_partition()]})
        self.assertEqual(dist.space_at(first).num_logical, 0)
        self.assertEqual(dist.space_at(second).num_logical, 2)

        dist = PartitionsDistribution({first: [planned_partition("100 MiB")],
                                       second: [planned_partition()]})
        self.assertEqual([s.num_logical for s in dist.spaces], [0, 0])

    def test_too_sparse(self):
        disk = self.add_disk("sda", size=Size("22 GiB"), ptable_type="msdos")
        self.add_partition(disk, 1, 1024)
        self.add_partition(disk, 2049, 1024)
        self.add_partition(disk, 4097, 1024)
        spaces = disk.free_spaces()
        self.assertEqual(len(spaces), 3)

        with self.assertRaises(NoMorePartitionSlotError):
            PartitionsDistribution({spaces[0]: [planned_partition("100 MiB")],
                                    spaces[2]: [planned_partition("100 MiB")]})

    def test_partitions_do_not_fit(self):
        disk = self.add_disk("sda", size=Size("10 GiB"))
        space = disk.free_spaces()[0]
        with self.assertRaises(NoDiskSpaceError):
            PartitionsDistribution({space: [planned_partition("10 GiB")]})

    def test_partitions_in_new_extended(self):
        disk = self.add_disk("sda", size=Size("22 GiB"), ptable_type="msdos")
        ptable = disk.partition_table
        self.assertEqual(PartitionsDistribution.partitions_in_new_extended(4, disk, ptable), 0)
        self.assertEqual(PartitionsDistribution.partitions_in_new_extended(5, disk, ptable), 2)
        self.add_partition(disk, 1, 1024)
        self.assertEqual(PartitionsDistribution.partitions_in_new_extended(4, disk, ptable), 2)

    def test_sort_key(self):
        disk = self.add_disk("sda", size=Size("10 GiB"))
        space = disk.free_spaces()[0]

        grows = PartitionsDistribution({space: [planned_partition(weight=1)]})
        fixed = PartitionsDistribution({space: [planned_partition(max_size="1 GiB")]})
        self.assertEqual(grows.gaps_count, 0)
        self.assertEqual(fixed.gaps_count, 1)
        self.assertEqual(fixed.gaps_total_size, space.disk_size - Size("1 GiB"))
        self.assertLess(grows.sort_key, fixed.sort_key)


class DistributionCalculatorTestCase(GraphTestCase):

    def test_best_distribution(self):
        sda = self.add_disk("sda", size=Size("10 GiB"))
        sdb = self.add_disk("sdb", size=Size("20 GiB"))
        spaces = sda.free_spaces() + sdb.free_spaces()
        calculator = DistributionCalculator()

        # the biggest disk leaves the smallest gap
        dist = calculator.best_distribution([planned_partition(weight=1)], spaces)
        self.assertEqual([s.disk_name for s in dist.spaces], ["sdb"])

        dist = calculator.best_distribution([planned_partition(weight=1, disk="sda")], spaces)
        self.assertEqual([s.disk_name for s in dist.spaces], ["sda"])

        dist = calculator.best_distribution([planned_partition(weight=1),
                                             planned_partition(weight=1)], spaces)
        self.assertEqual(dist.spaces_count, 2)
        self.assertEqual(dist.gaps_count, 0)

    def test_ties_keep_the_first_candidate(self):
        sda = self.add_disk("sda", size=Size("10 GiB"))
        sdb = self.add_disk("sdb", size=Size("10 GiB"))
        spaces = sda.free_spaces() + sdb.free_spaces()

        dist = DistributionCalculator().best_distribution([planned_partition(weight=1)], spaces)
        self.assertEqual(dist.spaces[0].disk_name, "sda")

    def test_impossible(self):
        sda = self.add_disk("sda", size=Size("10 GiB"))
        sdb = self.add_disk("sdb", size=Size("10 GiB"))
        spaces = sda.free_spaces() + sdb.free_spaces()
        calculator = DistributionCalculator()

        self.assertIsNone(calculator.best_distribution([planned_partition("30 GiB")], spaces))
        # enough space in total, but not in the requested disk
        partitions = [planned_partition("6 GiB", disk="sda"), planned_partition("6 GiB", disk="sda")]
        self.assertIsNone(calculator.best_distribution(partitions, spaces))
        self.assertIsNone(calculator.best_distribution([planned_partition(disk="sdc")], spaces))

    def test_default_disks(self):
        sda = self.add_disk("sda", size=Size("10 GiB"))
        sdb = self.add_disk("sdb", size=Size("20 GiB"))
        spaces = sda.free_spaces() + sdb.free_spaces()

        calculator = DistributionCalculator(default_disks=["sda"])
        dist = calculator.best_distribution([planned_partition(weight=1)], spaces)
        self.assertEqual(dist.spaces[0].disk_name, "sda")

    def test_resizing_size(self):
        disk = self.add_disk("sda", size=Size("10 GiB"))
        part = self.add_partition(disk, 1, 10238, "ext4")
        self.assertEqual(disk.free_spaces(), [])

        calculator = DistributionCalculator()
        size = calculator.resizing_size(part, [planned_partition("2 GiB", disk="sda")], [])
        self.assertEqual(size, Size("2 GiB"))

        # nothing to place in this disk
        size = calculator.resizing_size(part, [planned_partition("2 GiB", disk="sdb")], [])
        self.assertEqual(size, Size(0))

    def test_resizing_size_with_free_space_after(self):
        disk = self.add_disk("sda", size=Size("10 GiB"))
        part = self.add_partition(disk, 1, 8192, "ext4")
        space = disk.free_spaces()[0]
        self.assertEqual(space.disk_size, Size("2047 MiB") - GPT_BACKUP)

        # the free space after the partition is counted, the rest is rounded up
        calculator = DistributionCalculator()
        size = calculator.resizing_size(part, [planned_partition("3 GiB")], disk.free_spaces())
        self.assertEqual(size, Size("1026 MiB"))

    def test_resizing_size_of_logical(self):
        sda = self.add_disk("sda", size=Size("10 GiB"), ptable_type="msdos")
        primary = self.add_partition(sda, 1, 8192, "ext4")
        sdb = self.add_disk("sdb", size=Size("10 GiB"), ptable_type="msdos")
        self.add_partition(sdb, 1, 10239, part_type=PartitionType.EXTENDED)
        logical = self.add_partition(sdb, 2, 8190, "ext4", part_type=PartitionType.LOGICAL)
        self.assertEqual(logical.number, 5)

        calculator = DistributionCalculator()
        size = calculator.resizing_size(primary, [planned_partition("3 GiB")], sda.free_spaces())
        self.assertEqual(size, Size("1025 MiB"))

        # same free space after the partition, plus the room of the new EBR
        spaces = sdb.free_spaces()
        self.assertEqual([s.disk_size for s in spaces], [Size("2047 MiB")])
        self.assertTrue(spaces[0].in_extended)
        size = calculator.resizing_size(logical, [planned_partition("3 GiB")], spaces)
        self.assertEqual(size, Size("1026 MiB"))

    def test_resizing_size_futile(self):
        disk = self.add_disk("sda", size=Size("10 GiB"))
        part = self.add_partition(disk, 1, 8192, "ext4")
        calculator = DistributionCalculator()

        # no space after the partition can start close enough to the beginning
        planned = planned_partition("100 MiB")
        planned.max_start_offset = Size("1 MiB")
        size = calculator.resizing_size(part, [planned], disk.free_spaces())
        self.assertEqual(size, part.size)

        planned = planned_partition("100 MiB")
        planned.ptable_type = "msdos"
        size = calculator.resizing_size(part, [planned], disk.free_spaces())
        self.assertEqual(size, part.size)

    def test_best_distribution_is_deterministic(self):
        sda = self.add_disk("sda", size=Size("20 GiB"))
        sdb = self.add_disk("sdb", size=Size("20 GiB"), ptable_type="msdos")
        self.add_partition(sdb, 1, 4096)
        self.add_partition(sdb, 8193, 2048)
        spaces = sda.free_spaces() + sdb.free_spaces()
        partitions = [planned_partition("2 GiB", max_size="4 GiB"),
                      planned_partition("1 GiB", max_size="1 GiB"),
                      planned_partition("3 GiB", weight=2),
                      planned_partition("512 MiB", max_size="2 GiB", weight=1)]

        def summary():
            dist = DistributionCalculator().best_distribution(partitions, spaces)
            return ((dist.gaps_count, dist.gaps_total_size),
                    [(s.disk_name, s.region.start, [p.planned_id for p in s.partitions])
                     for s in dist.spaces])

        first = summary()
        self.assertEqual(summary(), first)
        self.assertEqual(summary(), first)

    def _vg_distribution(self, size_strategy):
        disk = self.add_disk("sda", size=Size("10 GiB"))
        lv = PlannedLvmLv("/", "ext4")
        lv.set_size_limits(Size("2 GiB"), Size("4 GiB"))
        vg = PlannedLvmVg("system", [lv])
        vg.size_strategy = size_strategy
        boot = planned_partition("512 MiB", max_size="512 MiB")

        calculator = DistributionCalculator(planned_vgs=[vg])
        dist = calculator.best_distribution([boot], disk.free_spaces())
        self.assertEqual(dist.spaces_count, 1)
        partitions = dist.spaces[0].partitions
        self.assertEqual(len(partitions), 2)
        pv = next(p for p in partitions if p.partition_id == PartitionId.LVM)
        self.assertEqual(pv.lvm_volume_group_name, "system")
        return pv

    def test_pvs_use_needed(self):
        pv = self._vg_distribution(USE_NEEDED)
        self.assertEqual(pv.min_size, Size("2 GiB") + LVM_PE_START)
        self.assertEqual(pv.max_size, Size("4 GiB") + LVM_PE_START)
        self.assertEqual(pv.weight, 1)

    def test_pvs_use_available(self):
        pv = self._vg_distribution(USE_AVAILABLE)
        # the PV takes everything the boot partition leaves
        self.assertEqual(pv.min_size, Size("9727 MiB") - GPT_BACKUP)
        self.assertTrue(pv.max_size.is_unlimited)
        self.assertEqual(pv.weight, 1)
