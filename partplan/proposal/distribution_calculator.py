# distribution_calculator.py
# Calculation of the best distribution of planned partitions.
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

import copy
import itertools

from ..devices import FreeDiskSpace, Region
from ..devicelibs.partition import PartitionTableType
from ..errors import NoDiskSpaceError, StorageError
from ..planned import PartitionsDistribution
from ..planned.distribution import sum_sizes
from ..size import Size, ROUND_UP
from ..storage_log import log_method_call
from .phys_vol_calculator import PhysVolCalculator

import logging
log = logging.getLogger("partplan")


class DistributionCalculator(object):

    """ Finds the best way to place planned partitions in free disk spaces.

        The calculator also takes care of the planned volume groups that
        still need new physical volumes, adding the corresponding planned
        partitions to every candidate distribution.
    """

    def __init__(self, planned_vgs=None, default_disks=None):
        """
            :keyword planned_vgs: volume groups that may need new physical volumes
            :type planned_vgs: list of :class:`~.planned.PlannedLvmVg`
            :keyword default_disks: names of the disks to use when a planned
                partition does not ask for a particular one (None for any)
            :type default_disks: list of str
        """
        self.planned_vgs = sorted(planned_vgs or [],
                                  key=lambda vg: (len(vg.pvs_candidate_devices),
                                                  vg.volume_group_name or ""))
        self.default_disks = default_disks

    def best_distribution(self, planned_partitions, free_spaces, extra_free_spaces=None):
        """ The best distribution of the partitions into the free spaces.

            :param planned_partitions: the partitions to place
            :type planned_partitions: list of :class:`~.planned.PlannedPartition`
            :param free_spaces: spaces for the partitions (and the new PVs)
            :type free_spaces: list of :class:`~.devices.FreeDiskSpace`
            :keyword extra_free_spaces: spaces only usable by new PVs
            :type extra_free_spaces: list of :class:`~.devices.FreeDiskSpace`
            :returns: the best distribution, None if there is none
            :rtype: :class:`~.planned.PartitionsDistribution` or None
        """
        log_method_call(self, planned_partitions=planned_partitions, free_spaces=free_spaces)
        extra_free_spaces = list(extra_free_spaces or [])
        all_spaces = list(free_spaces) + extra_free_spaces
        if self._impossible(planned_partitions, all_spaces):
            log.info("impossible to allocate %s", planned_partitions)
            return None

        try:
            dist_hashes = self._distribute_partitions(planned_partitions, free_spaces)
        except NoDiskSpaceError:
            return None

        candidates = self._distributions_from_hashes(dist_hashes)
        candidates = self._add_physical_volumes(candidates, all_spaces)
        return self._best_candidate(candidates)

    def resizing_size(self, partition, planned_partitions, free_spaces):
        """ How much a partition must shrink for the planned partitions to fit.

            :param partition: the existing partition to shrink
            :type partition: :class:`~.devices.PartitionDevice`
            :param planned_partitions: the partitions to place
            :param free_spaces: the current free spaces
            :returns: the size to shrink, the whole partition size if no
                size is enough
            :rtype: :class:`~.size.Size`
        """
        log_method_call(self, partition=partition.name)
        disk_name = partition.disk.name
        disk_spaces = [s for s in free_spaces if s.disk_name == disk_name]
        disk_partitions = [p for p in planned_partitions if self._compatible_disk(p, disk_name)]
        disk_spaces = self._add_or_mark_growing_space(disk_spaces, partition)

        if self._incomplete_planned_vgs():
            size = self._resizing_size_lvm(partition, disk_partitions, disk_spaces)
        else:
            size = self._calculate_resizing_size(partition, disk_partitions, disk_spaces)

        if size is None:
            return partition.size
        return size

    #
    # Sanity checks
    #
    def _incomplete_planned_vgs(self):
        return [vg for vg in self.planned_vgs if vg.missing_space > Size(0)]

    def _single_pv_partitions(self):
        return [vg.single_pv_partition() for vg in self._incomplete_planned_vgs()]

    @staticmethod
    def _available_space(free_spaces):
        return sum_sizes(s.disk_size for s in free_spaces)

    def _impossible(self, planned_partitions, free_spaces):
        planned_partitions = list(planned_partitions) + self._single_pv_partitions()
        needed = sum_sizes(p.min_size for p in planned_partitions)
        log.debug("needed %s, available %s", needed, self._available_space(free_spaces))
        if needed > self._available_space(free_spaces):
            return True

        by_disk = {}
        for partition in planned_partitions:
            if partition.disk:
                by_disk.setdefault(partition.disk, []).append(partition)
        for disk_name, partitions in sorted(by_disk.items()):
            needed = sum_sizes(p.min_size for p in partitions)
            available = self._available_space(s for s in free_spaces if s.disk_name == disk_name)
            if needed > available:
                log.debug("%s: needed %s, available %s", disk_name, needed, available)
                return True
        return False

    #
    # Candidate spaces
    #
    def _planned_vg_for(self, partition):
        return next((vg for vg in self.planned_vgs
                     if vg.volume_group_name == partition.lvm_volume_group_name), None)

    def _compatible_disk(self, partition, disk_name):
        if partition.disk:
            return partition.disk == disk_name
        planned_vg = self._planned_vg_for(partition)
        if planned_vg is not None and planned_vg.pvs_candidate_devices:
            return disk_name in planned_vg.pvs_candidate_devices
        if self.default_disks is None:
            return True
        return disk_name in self.default_disks

    @staticmethod
    def _compatible_ptable(partition, space):
        if partition.ptable_type is None:
            return True
        ptable = space.disk.partition_table
        if ptable is None:
            return True
        return ptable.label_type == PartitionTableType.find(partition.ptable_type)

    @staticmethod
    def _fits(partition, space):
        return space.growing or space.disk_size >= partition.min_size

    def _suitable_space(self, space, partition):
        if not self._compatible_disk(partition, space.disk_name):
            return False
        if not self._compatible_ptable(partition, space):
            return False
        if not self._fits(partition, space):
            return False
        max_offset = partition.max_start_offset
        if max_offset is not None and space.start_offset > max_offset:
            return False
        return True

    def _candidate_spaces(self, planned_partitions, free_spaces):
        result = []
        for partition in planned_partitions:
            spaces = [s for s in free_spaces if self._suitable_space(s, partition)]
            if not spaces:
                log.error("no suitable free space for %r", partition)
                raise NoDiskSpaceError("no suitable free space for the planned partition")
            result.append((partition, spaces))
        return result

    #
    # Enumeration of distributions
    #
    def _distribute_partitions(self, planned_partitions, free_spaces):
        """ Every possible assignment of partitions to spaces.

            :returns: list of dicts mapping every space to its partitions
        """
        candidates = self._candidate_spaces(planned_partitions, free_spaces)
        partitions = [c[0] for c in candidates]
        dist_hashes = []
        for combination in itertools.product(*[c[1] for c in candidates]):
            dist_hash = dict((space, []) for space in free_spaces)
            for partition, space in zip(partitions, combination):
                dist_hash[space].append(partition)
            dist_hashes.append(dist_hash)
        log.debug("%d possible distributions", len(dist_hashes))
        return dist_hashes

    @staticmethod
    def _distributions_from_hashes(dist_hashes):
        result = []
        for dist_hash in dist_hashes:
            try:
                result.append(PartitionsDistribution(dist_hash))
            except StorageError as e:
                log.debug("discarding distribution: %s", e)
        return result

    def _add_physical_volumes(self, candidates, spaces):
        for planned_vg in self._incomplete_planned_vgs():
            pv_spaces = self._spaces_for_vg(spaces, planned_vg)
            calculator = PhysVolCalculator(pv_spaces, planned_vg)
            candidates = [calculator.add_physical_volumes(dist) for dist in candidates]
            candidates = [dist for dist in candidates if dist is not None]
        return candidates

    def _spaces_for_vg(self, spaces, planned_vg):
        disk_name = planned_vg.forced_disk_name
        if disk_name:
            return [s for s in spaces if s.disk_name == disk_name]
        disk_names = planned_vg.pvs_candidate_devices
        if not disk_names:
            if self.default_disks is None:
                return list(spaces)
            disk_names = self.default_disks
        return [s for s in spaces if s.disk_name in disk_names]

    @staticmethod
    def _best_candidate(candidates):
        log.info("comparing %d distributions", len(candidates))
        if not candidates:
            return None
        # min() keeps the first of several equivalent candidates
        result = min(candidates, key=lambda d: d.sort_key)
        log.info("best distribution: %r", result)
        return result

    #
    # Resizing
    #
    def _resizing_size_lvm(self, partition, planned_partitions, spaces):
        return self._calculate_resizing_size(partition,
                                             planned_partitions + self._single_pv_partitions(),
                                             spaces)

    def _calculate_resizing_size(self, partition, planned_partitions, spaces):
        try:
            dist_hashes = self._distribute_partitions(planned_partitions, spaces)
        except NoDiskSpaceError:
            return None

        grain = partition.partition_table.alignment
        missing = self._missing_size_in_growing_space(dist_hashes, grain)
        if missing is None:
            return None
        return missing + partition.end_overhead

    @staticmethod
    def _after_partition(space, partition):
        if space.disk_name != partition.disk.name:
            return False
        gap = space.start_offset - partition.region.end_offset
        return Size(0) <= gap <= space.align_grain

    def _add_or_mark_growing_space(self, free_spaces, partition):
        result = []
        for space in free_spaces:
            if self._after_partition(space, partition):
                space = copy.copy(space)
                space.growing = True
            result.append(space)

        if not any(s.growing for s in result):
            region = partition.region
            empty = Region(region.end + 1, 0, region.block_size)
            result.append(FreeDiskSpace(partition.disk, empty,
                                        align_grain=partition.partition_table.alignment,
                                        in_extended=partition.is_logical,
                                        exists=False, growing=True))
        return result

    def _missing_size_in_growing_space(self, dist_hashes, grain):
        groups = {}
        for dist_hash in dist_hashes:
            growing = next(s for s in dist_hash if s.growing)
            groups.setdefault(tuple(dist_hash[growing]), []).append(dist_hash)

        def group_key(parts):
            size = sum_sizes((p.min_size for p in parts), rounding=grain)
            return (size, "".join(str(p.planned_id) for p in parts))

        for parts in sorted(groups, key=group_key):
            distributions = self._distributions_from_hashes(groups[parts])
            if not distributions:
                continue
            assigned = [next((s for s in d.spaces if s.disk_space.growing), None)
                        for d in distributions]
            if any(s is None for s in assigned):
                return Size(0)
            missing = min(s.total_missing_size for s in assigned)
            missing = max(missing, Size(0))
            return missing.round_to_nearest(grain, rounding=ROUND_UP)
        return None
