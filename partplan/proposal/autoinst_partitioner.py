# autoinst_partitioner.py
# Creation and reuse of the partitions planned from a profile.
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

from ..errors import DeviceNotFoundError, NoDiskSpaceError
from ..size import Size
from ..storage_log import log_method_call
from .creator_result import CreatorResult
from .creators import PartitionCreator, sized_partitions
from .distribution_calculator import DistributionCalculator

import logging
log = logging.getLogger("partplan")

FLEXIBLE_MIN_SIZE = Size("1 MiB")


def flexible_devices(planned_devices):
    """ Copies of the planned devices that accept any size.

        The minimum size of every copy is 1 MiB and its weight is the
        original minimum, so the available space is still shared in
        proportion to what was requested.

        :param planned_devices: planned partitions or logical volumes
        :returns: list of copies
    """
    result = []
    for planned in planned_devices:
        new = copy.copy(planned)
        new.weight = int(planned.min_size)
        new.set_size_limits(min(FLEXIBLE_MIN_SIZE, planned.max_size), planned.max_size)
        result.append(new)
    return result


def sized_disk_partitions(planned_partitions, devicegraph):
    """ Like :func:`~.creators.sized_partitions`, for partitions that can be
        in different disks. Partitions with no disk are kept as they are.
    """
    result = []
    for planned in planned_partitions:
        container = devicegraph.find_by_any_name(planned.disk) if planned.disk else None
        if container is None:
            result.append(planned)
        else:
            result.extend(sized_partitions([planned], container))
    return result


class AutoinstPartitioner(object):

    """ Creates new partitions and adapts the reused ones. """

    def __init__(self, devicegraph):
        self.devicegraph = devicegraph

    def reuse_partitions(self, reused_partitions):
        """ Adapt the reused partitions, modifying the graph in place.

            Shrinking partitions go first, so the space they free is there
            for the ones that grow.
        """
        self._reuse_in(reused_partitions, self.devicegraph)

    def reuse_device_partitions(self, planned_device):
        """ Reuse a partitioned RAID or bcache along with its reused partitions

            :rtype: :class:`~.creator_result.CreatorResult`
        """
        devicegraph = self.devicegraph.copy()
        device = planned_device.reuse_device(devicegraph)
        if device is None:
            raise DeviceNotFoundError("device to reuse not found for %r" % planned_device)
        reused = sized_partitions([p for p in planned_device.partitions if p.reusing], device)
        self._reuse_in(reused, devicegraph)
        return CreatorResult(devicegraph)

    def create_partitions(self, planned_partitions, partitionables):
        """ Create the partitions in the free spaces of the given devices.

            When the partitions do not fit, they are created again with
            flexible sizes (see :func:`flexible_devices`).

            :param planned_partitions: the partitions to create
            :param partitionables: devices that can hold the partitions
            :rtype: :class:`~.creator_result.CreatorResult`
            :raises: :class:`~.errors.NoDiskSpaceError`
        """
        log_method_call(self, planned_partitions=planned_partitions,
                        partitionables=[d.name for d in partitionables])
        primary = [p for p in planned_partitions if p.primary]
        others = [p for p in planned_partitions if not p.primary]
        distribution = self._best_distribution(primary + others, partitionables)
        if distribution is None:
            log.error("partitions %s cannot be allocated into %s", planned_partitions,
                      [d.name for d in partitionables])
            raise NoDiskSpaceError("partitions cannot be allocated into %s" %
                                   ", ".join(d.name for d in partitionables))
        return PartitionCreator(self.devicegraph).create_partitions(distribution)

    @staticmethod
    def _reuse_in(reused_partitions, devicegraph):
        shrinking = [p for p in reused_partitions if p.shrink(devicegraph)]
        others = [p for p in reused_partitions if p not in shrinking]
        for planned in shrinking + others:
            planned.reuse_device(devicegraph)

    @staticmethod
    def _best_distribution(planned_partitions, partitionables):
        spaces = [space for device in partitionables for space in device.free_spaces()]
        calculator = DistributionCalculator()
        distribution = calculator.best_distribution(planned_partitions, spaces)
        if distribution is not None:
            return distribution
        log.info("trying again with flexible sizes")
        return calculator.best_distribution(flexible_devices(planned_partitions), spaces)
