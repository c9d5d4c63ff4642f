# disk.py
# Classes to represent disks and other partitionable devices.
#
# Copyright (C) 2024  Red Hat, Inc.
#
# This copyrighted material is made available to anyone wishing to use,
# modify, copy, or redistribute it subject to the terms and conditions of
# the GNU General Public License v.2, or (at your option) any later version.
# This program is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY expressed or implied, including the implied warranties of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General
# Public License for more details.  You should have received a copy of the
# GNU General Public License along with this program; if not, write to the
# Free Software Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA
# 02110-1301, USA.  Any Red Hat trademarks that are incorporated in the
# source code or documentation are not subject to the GNU General Public
# License and may only be used or replicated with the express permission of
# Red Hat, Inc.
#

from ..devicelibs.partition import PartitionTableType, PartitionType
from ..devicelibs.partition import FIRST_LOGICAL_NUMBER, LOGICAL_PARTITION_OVERHEAD
from ..errors import NoMorePartitionSlotError
from ..formats import get_format
from .free_space import FreeDiskSpace
from .lib import LINUX_SECTOR_SIZE, Region
from .storage import StorageDevice

import logging
log = logging.getLogger("partplan")


class Partitionable(object):

    """ Mixin for devices that can hold a partition table.

        Partitions are children of the partitionable device. Logical
        partitions are children of the device too, not of the extended
        partition holding them.
    """
    _partitionable = True

    @property
    def partition_table(self):
        """ The partition table of the device, None if there is none """
        if self.format.type == "disklabel":
            return self.format
        return None

    @property
    def region(self):
        return Region(0, int(self.size // self.sector_size), self.sector_size)

    @property
    def preferred_ptable_type(self):
        return PartitionTableType.GPT

    @property
    def partitions(self):
        """ All partitions of the device, sorted by position """
        parts = [c for c in self.children if c.type == "partition"]
        return sorted(parts, key=lambda p: p.region.start)

    @property
    def primary_partitions(self):
        return [p for p in self.partitions if p.is_primary]

    @property
    def extended_partition(self):
        return next((p for p in self.partitions if p.is_extended), None)

    @property
    def logical_partitions(self):
        return [p for p in self.partitions if p.is_logical]

    @property
    def num_primary(self):
        """ Number of primary partitions, the extended one included """
        return len(self.primary_partitions) + (1 if self.extended_partition else 0)

    @property
    def num_free_primary_slots(self):
        """ Number of primary (or extended) partitions that can still be created """
        ptable = self.partition_table
        if ptable is None:
            return 0
        return max(ptable.max_primary - self.num_primary, 0)

    def default_partition_table(self):
        """ A new (not attached) partition table of the preferred type """
        return get_format("disklabel", label_type=self.preferred_ptable_type,
                          sector_size=self.sector_size)

    def partition_name(self, number):
        """ Name of the partition with the given number """
        sep = "p" if self.name[-1].isdigit() else ""
        return "%s%s%d" % (self.name, sep, number)

    def next_partition_number(self, part_type=PartitionType.PRIMARY):
        """ Number for a new partition of the given type.

            :raises: :class:`~.errors.NoMorePartitionSlotError`
        """
        used = [p.number for p in self.partitions]
        if part_type == PartitionType.LOGICAL:
            logical = [n for n in used if n >= FIRST_LOGICAL_NUMBER]
            return max(logical) + 1 if logical else FIRST_LOGICAL_NUMBER

        if not self.num_free_primary_slots:
            raise NoMorePartitionSlotError("no primary slot left in %s" % self.name)

        number = next(n for n in range(1, self.partition_table.max_primary + 1) if n not in used)
        return number

    def usable_region(self, ptable=None):
        """ Region that can be used by partitions in the given partition table """
        ptable = ptable or self.partition_table
        region = self.region
        start = region.blocks(ptable.start_overhead)
        end_blocks = region.blocks(ptable.end_overhead, round_up=True)
        return Region(start, max(region.length - start - end_blocks, 0), region.block_size)

    def free_spaces(self):
        """ Free regions in which new partitions could be created.

            A device without a partition table and without any content is
            considered to be completely free, as if it had an empty
            partition table of the preferred type.

            :rtype: list of :class:`~.devices.free_space.FreeDiskSpace`
        """
        ptable = self.partition_table
        if ptable is None:
            if self.format.type is not None or self.children:
                return []
            ptable = self.default_partition_table()

        grain = ptable.alignment
        top_level = [p.region for p in self.partitions if not p.is_logical]
        regions = self._gaps(self.usable_region(ptable), top_level, grain)
        spaces = [FreeDiskSpace(self, r, align_grain=grain) for r in regions]

        extended = self.extended_partition
        if extended:
            logical = [p.region for p in self.logical_partitions]
            regions = self._gaps(extended.region, logical, grain, logical=True)
            spaces.extend(FreeDiskSpace(self, r, align_grain=grain, in_extended=True)
                          for r in regions)

        return sorted(spaces, key=lambda s: s.region.start)

    @staticmethod
    def _gaps(container, occupied, grain, logical=False):
        ebr = container.blocks(LOGICAL_PARTITION_OVERHEAD) if logical else 0
        min_length = max(container.blocks(grain), 1)
        gaps = []
        cursor = container.start
        for region in sorted(occupied, key=lambda r: r.start) + [None]:
            limit = container.end if region is None else region.start - 1 - ebr
            start = container.align_up(cursor + ebr, grain)
            if limit - start + 1 >= min_length:
                gaps.append(Region(start, limit - start + 1, container.block_size))
            if region is not None:
                cursor = region.end + 1
        return gaps


class DiskDevice(Partitionable, StorageDevice):

    """ A local/generic disk. """
    _type = "disk"
    _is_disk = True

    def __init__(self, name, fmt=None, size=None, parents=None, exists=True,
                 model="", transport=None, sector_size=None):
        """
            :param name: the device name (generally a device node's basename)
            :type name: str
            :keyword size: the device's size
            :type size: :class:`~.size.Size`
            :keyword fmt: this device's formatting
            :type fmt: :class:`~.formats.DeviceFormat` or a subclass of it
            :keyword str model: the disk model
            :keyword str transport: the interconnect this disk uses
            :keyword sector_size: logical sector size
            :type sector_size: :class:`~.size.Size`
        """
        self.model = model
        self.transport = transport
        self._sector_size = sector_size
        StorageDevice.__init__(self, name, fmt=fmt, size=size, parents=parents,
                               exists=exists)

    @property
    def sector_size(self):
        return self._sector_size or LINUX_SECTOR_SIZE

    @property
    def dict(self):
        d = super(DiskDevice, self).dict
        d.update({"model": self.model, "transport": self.transport})
        return d
