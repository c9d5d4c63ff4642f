# phys_vol_calculator.py
# Strategies to add LVM physical volumes to a partitions distribution.
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

import itertools

from ..devicelibs.partition import PartitionType
from ..errors import StorageError
from ..planned.lvm import USE_AVAILABLE
from ..size import Size

import logging
log = logging.getLogger("partplan")


class PhysVolStrategy(object):

    """ Base class for the strategies adding new physical volumes to a
        distribution of planned partitions.
    """

    def __init__(self, distribution, all_spaces, planned_vg):
        """
            :param distribution: the distribution to complete
            :type distribution: :class:`~.planned.PartitionsDistribution`
            :param all_spaces: spaces that can hold physical volumes
            :type all_spaces: list of :class:`~.devices.FreeDiskSpace`
            :param planned_vg: the volume group needing the new PVs
            :type planned_vg: :class:`~.planned.PlannedLvmVg`
        """
        self.initial_distribution = distribution
        self.all_spaces = all_spaces
        self.planned_vg = planned_vg
        self._new_pvs = set()
        self._potential_sizes = {}
        self._useful_spaces = None

    def add_physical_volumes(self):
        """ The best distribution with the new physical volumes, None if
            the volume group cannot be completed.
        """
        best = None
        for spaces in self.space_combinations():
            if not self.worth_checking(spaces):
                log.debug("skipping PV combination %s", spaces)
                continue
            candidate = self.processed_distribution(spaces)
            if candidate is None:
                continue
            if best is None or candidate.sort_key < best.sort_key:
                best = candidate
        return best

    def space_combinations(self):
        raise NotImplementedError()

    def processed_distribution(self, spaces):
        raise NotImplementedError()

    def worth_checking(self, spaces):  # pylint: disable=unused-argument
        return True

    def estimated_available_size(self, space):
        """ Space left for a new PV in a free space of the distribution """
        assigned = self.initial_distribution.space_at(space)
        if assigned is None:
            return space.disk_size
        size = assigned.extra_size
        if assigned.partition_type == PartitionType.LOGICAL:
            size -= assigned.overhead_of_logical
        return size

    def useful_spaces(self):
        if self._useful_spaces is None:
            self._useful_spaces = [s for s in self.all_spaces
                                   if self.estimated_available_size(s) >= self.planned_vg.min_pv_size]
        return self._useful_spaces

    def useful_size(self, space):
        return self.planned_vg.useful_pv_space(self.estimated_available_size(space))

    def new_planned_partition(self):
        pv = self.planned_vg.minimal_pv_partition()
        self._new_pvs.add(pv.planned_id)
        return pv

    def new_pv_at(self, assigned_space):
        return next((p for p in assigned_space.partitions if p.planned_id in self._new_pvs), None)

    def potential_partition_size(self, partition, assigned_space):
        if partition.planned_id not in self._potential_sizes:
            self._potential_sizes[partition.planned_id] = (assigned_space.usable_extra_size +
                                                           partition.min_size)
        return self._potential_sizes[partition.planned_id]

    def potential_lvm_size(self, distribution):
        """ Space all the new PVs of the distribution could give to the VG """
        total = Size(0)
        for space in distribution.spaces:
            pv = self.new_pv_at(space)
            if pv is None:
                continue
            total += self.planned_vg.useful_pv_space(self.potential_partition_size(pv, space))
        return total

    def adjust_weights(self, distribution):
        """ Every new PV grows like the rest of the partitions of its space """
        for space in distribution.spaces:
            pv = self.new_pv_at(space)
            if pv is None:
                continue
            weight = sum(p.weight for p in space.partitions if p is not pv)
            pv.weight = weight or 1

    def _add_partitions(self, pv_partitions):
        try:
            return self.initial_distribution.add_partitions(pv_partitions)
        except StorageError as e:
            log.debug("physical volumes do not fit: %s", e)
            return None


class UseNeeded(PhysVolStrategy):

    """ Adds the smallest set of physical volumes that provides the space
        missing in the volume group.
    """

    def __init__(self, distribution, all_spaces, planned_vg):
        super(UseNeeded, self).__init__(distribution, all_spaces, planned_vg)
        self._checked = []

    def space_combinations(self):
        return itertools.permutations(self.useful_spaces())

    def processed_distribution(self, spaces):
        missing = self.planned_vg.missing_space
        pv_partitions = {}
        result = None
        for space in spaces:
            pv_partitions[space] = self.new_planned_partition()
            useful = self.useful_size(space)
            if useful < missing:
                missing -= useful
                continue

            result = self._add_partitions(pv_partitions)
            if result is None:
                return None
            if self.potential_lvm_size(result) >= self.planned_vg.missing_space:
                self.remember_combination(spaces, space)
                self.adjust_sizes(result, space)
                self.adjust_weights(result)
                break
            missing -= useful
            result = None
        return result

    def adjust_sizes(self, distribution, last_disk_space):
        """ Every PV but the last one takes all its space, the last one
            provides what is still missing.
        """
        vg = self.planned_vg
        missing = vg.missing_space
        for space in distribution.spaces:
            pv = self.new_pv_at(space)
            if pv is None or space.disk_space is last_disk_space:
                continue
            usable = self.potential_partition_size(pv, space)
            pv.set_size_limits(usable, usable)
            missing -= vg.useful_pv_space(usable)

        pv = self.new_pv_at(distribution.space_at(last_disk_space))
        min_size = vg.real_pv_size(max(missing, Size(0)))
        others = vg.missing_space - missing
        max_size = vg.real_pv_size(vg.max_extra_space - others)
        pv.set_size_limits(min_size, max(min_size, max_size))

    def remember_combination(self, spaces, final_space):
        final_index = list(spaces).index(final_space)
        self._checked.append(list(spaces[:final_index + 1]))

    def worth_checking(self, spaces):
        return not any(self._redundant(spaces, checked) for checked in self._checked)

    @staticmethod
    def _redundant(spaces, checked):
        last = len(checked) - 1
        if checked[last] is not spaces[last]:
            return False
        return set(checked[:last]) == set(spaces[:last])


class UseAvailable(PhysVolStrategy):

    """ Adds a physical volume to every useful space, taking all the space
        the other partitions leave.
    """

    def space_combinations(self):
        return [tuple(self.useful_spaces())]

    def processed_distribution(self, spaces):
        if not spaces:
            return None
        pv_partitions = dict((space, self.new_planned_partition()) for space in spaces)
        result = self._add_partitions(pv_partitions)
        if result is None:
            return None
        if self.potential_lvm_size(result) < self.planned_vg.missing_space:
            return None

        for space in result.spaces:
            pv = self.new_pv_at(space)
            if pv is not None:
                pv.set_size_limits(self.potential_partition_size(pv, space), Size.unlimited())
        self.adjust_weights(result)
        return result


class PhysVolCalculator(object):

    """ Adds the physical volumes of a planned VG to distributions, using
        the size strategy of the VG.
    """

    def __init__(self, all_spaces, planned_vg):
        self.all_spaces = all_spaces
        self.planned_vg = planned_vg

    def add_physical_volumes(self, distribution):
        if self.planned_vg.size_strategy == USE_AVAILABLE:
            strategy_class = UseAvailable
        else:
            strategy_class = UseNeeded
        strategy = strategy_class(distribution, self.all_spaces, self.planned_vg)
        return strategy.add_physical_volumes()
