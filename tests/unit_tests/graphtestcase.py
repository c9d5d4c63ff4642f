import unittest

from partplan.devicegraph import Devicegraph
from partplan.devicelibs.partition import PartitionType
from partplan.devices import DiskDevice, PartitionDevice, Region
from partplan.formats import get_format
from partplan.size import Size


class GraphTestCase(unittest.TestCase):

    """ TestCase with helpers to build a device graph by hand.

        Partitions are placed with offsets and sizes in MiB, so the
        expected free spaces are easy to write down.
    """

    def setUp(self):
        self.graph = Devicegraph()

    def add_disk(self, name="sda", size=Size("50 GiB"), ptable_type="gpt"):
        disk = DiskDevice(name, size=size, exists=True)
        self.graph.add_device(disk)
        if ptable_type is not None:
            disk.format = get_format("disklabel", label_type=ptable_type,
                                     sector_size=disk.sector_size, exists=True)
        return disk

    def add_partition(self, disk, start_mib, size_mib, fmt_type=None,
                      part_type=PartitionType.PRIMARY, partition_id=None, **fmt_args):
        mib = Size("1 MiB")
        region = Region(disk.region.blocks(mib * start_mib), disk.region.blocks(mib * size_mib),
                        disk.sector_size)
        number = disk.next_partition_number(part_type)
        part = PartitionDevice(disk.partition_name(number), parents=[disk], region=region,
                               part_type=part_type, partition_id=partition_id, number=number,
                               exists=True)
        self.graph.add_device(part)
        if fmt_type is not None:
            part.format = get_format(fmt_type, exists=True, **fmt_args)
        return part
