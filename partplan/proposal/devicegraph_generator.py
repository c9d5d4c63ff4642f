# devicegraph_generator.py
# Builds a device graph out of a list of planned devices.
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

from ..devicelibs.partition import PartitionId
from ..errors import NoDiskSpaceError
from ..planned import PlannedPartition
from ..storage_log import log_method_call
from .creators import PartitionCreator
from .lvm_helper import LvmHelper

import logging
log = logging.getLogger("partplan")


class DevicegraphGenerator(object):

    """ Makes room for a set of planned partitions and logical volumes and
        creates them.

        Partitions go to the free spaces found by a
        :class:`~.space_maker.SpaceMaker`. When the settings ask for LVM,
        the logical volumes go to a volume group built on the new physical
        volumes, or to an existing volume group if one can be reused.
    """

    def __init__(self, settings):
        """
            :param settings: the proposal settings
            :type settings: :class:`~.settings.ProposalSettings`
        """
        self.settings = settings

    def devicegraph(self, planned_devices, initial_graph, space_maker):
        """ A new graph with the planned devices

            :param planned_devices: partitions and logical volumes to create
            :param initial_graph: the graph to start from, not modified
            :param space_maker: the space maker to use
            :type space_maker: :class:`~.space_maker.SpaceMaker`
            :returns: the new graph
            :raises: :class:`~.errors.NoDiskSpaceError`
        """
        log_method_call(self, planned_devices=planned_devices)
        planned_devices = [copy.copy(d) for d in planned_devices]
        partitions = [d for d in planned_devices if isinstance(d, PlannedPartition)]
        lvs = [d for d in planned_devices if not isinstance(d, PlannedPartition)]
        lvm_helper = LvmHelper(lvs, self.settings)

        space_result = self._provide_space(partitions, initial_graph, lvm_helper, space_maker)
        self._refine_planned_partitions(partitions, space_result.deleted_partitions)
        creator = PartitionCreator(space_result.devicegraph)
        devicegraph = creator.create_partitions(space_result.partitions_distribution).devicegraph
        self._reuse_partitions(partitions, space_result.reused_sids, devicegraph)

        if self.settings.use_lvm:
            new_pvs = self._new_physical_volumes(space_result.devicegraph, devicegraph)
            devicegraph = lvm_helper.create_volumes(devicegraph, new_pvs)
        return devicegraph

    def _provide_space(self, partitions, devicegraph, lvm_helper, space_maker):
        if not self.settings.use_lvm:
            return space_maker.provide_space(devicegraph, partitions, lvm_helper)

        for vg in lvm_helper.reusable_volume_groups(devicegraph):
            lvm_helper.set_reused_volume_group(vg)
            try:
                result = space_maker.provide_space(devicegraph, partitions, lvm_helper)
            except NoDiskSpaceError:
                continue
            log.info("found enough space reusing volume group %s", vg.name)
            return result

        lvm_helper.set_reused_volume_group(None)
        result = space_maker.provide_space(devicegraph, partitions, lvm_helper)
        log.info("found enough space including LVM")
        return result

    @staticmethod
    def _new_physical_volumes(old_graph, new_graph):
        """ Names of the LVM partitions of new_graph that are not in old_graph """
        old_ids = [p.id for p in old_graph.partitions if p.partition_id == PartitionId.LVM]
        return [p.name for p in new_graph.partitions
                if p.partition_id == PartitionId.LVM and p.id not in old_ids]

    @staticmethod
    def _refine_planned_partitions(partitions, deleted_partitions):
        """ New swap partitions take the uuid and label of the deleted ones """
        deleted_swaps = [p for p in deleted_partitions if p.partition_id == PartitionId.SWAP and
                         p.filesystem is not None]
        new_swaps = [p for p in partitions if not p.reusing and p.mount_point == "swap"]
        for planned, deleted in zip(new_swaps, deleted_swaps):
            planned.uuid = deleted.filesystem.uuid
            planned.label = deleted.filesystem.label

    @staticmethod
    def _reuse_partitions(partitions, reused_sids, devicegraph):
        # the partitions are copies owned by the generator
        for planned in partitions:
            if planned.reusing:
                planned.reuse_sid = reused_sids.get(planned.planned_id, planned.reuse_sid)
                planned.reuse_device(devicegraph)
