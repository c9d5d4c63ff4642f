# distribution.py
# Assignment of planned partitions to free disk spaces.
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

from ..devicelibs.partition import PartitionType
from ..errors import NoDiskSpaceError, NoMorePartitionSlotError
from ..size import Size, ROUND_UP

import logging
log = logging.getLogger("partplan")


def sum_sizes(sizes, rounding=None):
    """ Sum of sizes, every one of them rounded up to rounding if given """
    total = Size(0)
    for size in sizes:
        if rounding:
            size = size.round_to_nearest(rounding, rounding=ROUND_UP)
        total += size
    return total


class AssignedSpace(object):

    """ A free disk space and the planned partitions that will be created
        in it.

        The partitions are sorted in the order they will be created: the
        ones with a restricted start offset first.
    """

    def __init__(self, disk_space, partitions):
        """
            :param disk_space: the free space
            :type disk_space: :class:`~.devices.FreeDiskSpace`
            :param partitions: the partitions to create in the space
            :type partitions: list of :class:`~.planned.PlannedPartition`
        """
        self.disk_space = disk_space
        self.partitions = list(partitions)
        self.num_logical = 0
        self._sort_partitions()

    def __repr__(self):
        return "<AssignedSpace disk_space=%r, partitions=%r, num_logical=%d>" % (
            self.disk_space, self.partitions, self.num_logical)

    @property
    def disk(self):
        return self.disk_space.disk

    @property
    def disk_name(self):
        return self.disk_space.disk_name

    @property
    def region(self):
        return self.disk_space.region

    @property
    def disk_size(self):
        return self.disk_space.disk_size

    @property
    def align_grain(self):
        return self.disk_space.align_grain

    @property
    def overhead_of_logical(self):
        """ Space lost at the start of every logical partition """
        return self.disk_space.partition_table.alignment

    @property
    def partition_type(self):
        """ Type of the partitions created in this space.

            None means both primary and logical partitions are possible (an
            msdos partition table without extended partition).
        """
        ptable = self.disk_space.partition_table
        if not ptable.extended_possible:
            return PartitionType.PRIMARY
        if self.disk.partition_table is not None and self.disk.extended_partition is not None:
            return PartitionType.LOGICAL if self._inside_extended() else PartitionType.PRIMARY
        return None

    def _inside_extended(self):
        extended = self.disk.extended_partition
        start = self.region.start
        return extended.region.start <= start < extended.region.end

    @property
    def total_weight(self):
        return sum(p.weight or 0 for p in self.partitions)

    def _min_sizes(self, rounding=None):
        return sum_sizes((p.min_size for p in self.partitions), rounding=rounding)

    def valid(self):
        """ Whether the partitions can really be created in the space """
        if self.disk_space.reused_partition and len(self.partitions) > 1:
            return False
        if not self._primary_partitions_fit():
            return False
        if self.disk_space.growing:
            return True
        if self.usable_size >= self._min_sizes(self.align_grain):
            return True
        return self.enforced_last is not None

    def _primary_partitions_fit(self):
        if not self.num_logical:
            return True
        return not any(p.primary for p in self.partitions[-self.num_logical:])

    @property
    def unused(self):
        """ Space that will stay free after growing the partitions to their max """
        max_size = sum_sizes(p.max_size for p in self.partitions)
        if max_size >= self.usable_size:
            return Size(0)
        return self.usable_size - max_size

    @property
    def extra_size(self):
        """ Space beyond the (rounded up) minimum of the partitions """
        return self.disk_size - self._min_sizes(self.align_grain)

    @property
    def usable_extra_size(self):
        """ Like :attr:`extra_size` but discounting the logical overhead """
        return self.usable_size - self._min_sizes()

    @property
    def usable_size(self):
        """ Size of the space discounting the overhead of logical partitions

            When the space is already inside an extended partition, the
            first logical partition does not add any overhead.
        """
        if not self.num_logical:
            return self.disk_size
        logical = self.num_logical
        if self.partition_type == PartitionType.LOGICAL:
            logical -= 1
        return self.disk_size - self.overhead_of_logical * logical

    @property
    def total_needed_size(self):
        return self._min_sizes(self.align_grain) + self.overhead_of_logical * self.num_logical

    @property
    def total_missing_size(self):
        return self.total_needed_size - self.disk_size

    @property
    def enforced_last(self):
        """ The partition that must be the last one in the space.

            When the rounded up minimum sizes exceed the space by less than
            one grain, the space is still valid if the last partition can
            absorb the difference without going below its minimum size.
        """
        rounded_up = self._min_sizes(self.align_grain)
        usable = self.usable_size
        if usable >= rounded_up:
            return None
        missing = rounded_up - usable
        if missing >= self.align_grain:
            return None
        for partition in reversed(self.partitions):
            ceil = partition.min_size.round_to_nearest(self.align_grain, rounding=ROUND_UP)
            if ceil - missing >= partition.min_size:
                return partition
        return None

    def _sort_partitions(self):
        with_offset = [p for p in self.partitions if p.max_start_offset is not None]
        without_offset = [p for p in self.partitions if p.max_start_offset is None]
        self.partitions = sorted(with_offset, key=lambda p: p.max_start_offset) + without_offset
        last = self.enforced_last
        if last is not None:
            self.partitions.remove(last)
            self.partitions.append(last)


class PartitionsDistribution(object):

    """ A distribution of planned partitions among free disk spaces.

        Creating a distribution also decides, for msdos partition tables,
        which spaces host logical partitions. An impossible distribution
        cannot be created.

        :raises: :class:`~.errors.NoDiskSpaceError` or
                 :class:`~.errors.NoMorePartitionSlotError`
    """

    def __init__(self, partitions_by_space):
        """
            :param partitions_by_space: planned partitions for every space
            :type partitions_by_space: dict of
                :class:`~.devices.FreeDiskSpace` => list of
                :class:`~.planned.PlannedPartition`
        """
        self.spaces = []
        self.unassigned_spaces = []
        self._space_order = list(partitions_by_space)
        for disk_space, partitions in partitions_by_space.items():
            if partitions:
                self.spaces.append(self._assigned_space(disk_space, partitions))
            else:
                self.unassigned_spaces.append(disk_space)

        for spaces in self._spaces_by_disk():
            self._set_num_logical_for(spaces, spaces[0].disk_space.partition_table)

    def __repr__(self):
        return "<PartitionsDistribution spaces=%r>" % self.spaces

    def add_partitions(self, partitions_by_space):
        """ A new distribution with some extra partitions.

            :param partitions_by_space: partition to add to every space
            :type partitions_by_space: dict of
                :class:`~.devices.FreeDiskSpace` => :class:`~.planned.PlannedPartition`
        """
        partitions = {}
        for disk_space in self._space_order:
            assigned = self.space_at(disk_space)
            partitions[disk_space] = list(assigned.partitions) if assigned else []
        for disk_space, partition in partitions_by_space.items():
            partitions.setdefault(disk_space, []).append(partition)
        return PartitionsDistribution(partitions)

    def space_at(self, disk_space):
        return next((s for s in self.spaces if s.disk_space is disk_space), None)

    @property
    def gaps_total_size(self):
        return sum_sizes([s.unused for s in self.spaces] +
                         [s.disk_size for s in self.unassigned_spaces])

    @property
    def gaps_count(self):
        return len([s for s in self.spaces if s.unused]) + len(self.unassigned_spaces)

    @property
    def spaces_count(self):
        return len(self.spaces)

    @property
    def partitions_count(self):
        return sum(len(s.partitions) for s in self.spaces)

    @property
    def weight_space_deviation(self):
        """ How far the distribution of extra space is from the weights """
        total_extra = sum_sizes(s.usable_extra_size for s in self.spaces)
        total_weight = sum(s.total_weight for s in self.spaces)
        if not total_weight:
            return 0.0
        if not total_extra:
            return 1.0

        deviation = 0.0
        for space in self.spaces:
            normalized_size = float(int(space.usable_extra_size)) / int(total_extra)
            normalized_weight = float(space.total_weight) / float(total_weight)
            deviation += abs(normalized_size - normalized_weight)
        return deviation

    @property
    def sort_key(self):
        """ Lower is better """
        return (self.gaps_count, self.gaps_total_size, self.weight_space_deviation,
                self.spaces_count)

    @staticmethod
    def partitions_in_new_extended(num_partitions, disk, ptable):
        """ Number of logical partitions needed to create num_partitions

            :param int num_partitions: number of new partitions
            :param disk: the partitionable device
            :param ptable: its partition table
        """
        free_primary_slots = ptable.max_primary - disk.num_primary
        if free_primary_slots >= num_partitions:
            return 0
        return num_partitions - free_primary_slots + 1

    def _assigned_space(self, disk_space, partitions):
        result = AssignedSpace(disk_space, partitions)
        if not result.valid():
            log.error("invalid assigned space %r", result)
            raise NoDiskSpaceError("partitions cannot be allocated into the assigned space")
        return result

    def _spaces_by_disk(self):
        by_disk = {}
        for space in self.spaces:
            by_disk.setdefault(space.disk_name, []).append(space)
        return [by_disk[name] for name in sorted(by_disk)]

    def _set_num_logical_for(self, spaces, ptable):
        if spaces[0].partition_type is None:
            self._calculate_num_logical_for(spaces, ptable)
            return

        if self._too_many_primary(spaces, ptable):
            raise NoMorePartitionSlotError("too many primary partitions needed")

        for space in spaces:
            primary = space.partition_type == PartitionType.PRIMARY
            self._set_num_logical(space, 0 if primary else len(space.partitions))

    @staticmethod
    def _set_num_logical(space, num):
        space.num_logical = num
        if not space.valid():
            log.error("invalid assigned space %r after adjusting num_logical", space)
            raise NoDiskSpaceError("partitions cannot be allocated into the assigned space")

    def _calculate_num_logical_for(self, spaces, ptable):
        disk = spaces[0].disk
        if disk.num_primary + len(spaces) > ptable.max_primary:
            log.error("too sparse: %d + %d > %d", disk.num_primary, len(spaces), ptable.max_primary)
            raise NoMorePartitionSlotError("too sparse distribution")

        num_logical = self.partitions_in_new_extended(self._num_partitions(spaces), disk, ptable)
        if num_logical == 0:
            log.debug("no need of logical partitions in %s", disk.name)
            for space in spaces:
                self._set_num_logical(space, 0)
            return

        if len(spaces) == 1:
            space = spaces[0]
            if not self._room_for_logical(space, num_logical):
                raise NoDiskSpaceError("no space for the logical partitions")
            self._set_num_logical(space, num_logical)
            return

        candidates = [s for s in spaces if self._room_for_logical(s, num_logical)]
        if not candidates:
            raise NoDiskSpaceError("no suitable space to create the extended partition")
        extended_space = max(candidates, key=lambda s: (len(s.partitions), s.region.start))

        primary_spaces = [s for s in spaces if s is not extended_space]
        if self._too_many_primary_with_extended(primary_spaces, disk, ptable):
            raise NoMorePartitionSlotError("too many primary partitions needed")

        self._set_num_logical(extended_space, num_logical)
        for space in primary_spaces:
            self._set_num_logical(space, 0)

    def _too_many_primary_with_extended(self, primary_spaces, disk, ptable):
        num_primary = self._num_partitions(primary_spaces) + len(disk.primary_partitions) + 1
        return num_primary > ptable.max_primary

    def _too_many_primary(self, spaces, ptable):
        disk = spaces[0].disk
        primary_spaces = [s for s in spaces if s.partition_type == PartitionType.PRIMARY]
        if not ptable.extended_possible:
            return disk.num_primary + self._num_partitions(primary_spaces) > ptable.max_primary
        if disk.extended_partition is not None:
            return self._too_many_primary_with_extended(primary_spaces, disk, ptable)
        return False

    @staticmethod
    def _num_partitions(spaces):
        return sum(len(s.partitions) for s in spaces)

    @staticmethod
    def _room_for_logical(space, num):
        if space.disk_space.growing:
            return True
        return space.extra_size >= space.overhead_of_logical * num
