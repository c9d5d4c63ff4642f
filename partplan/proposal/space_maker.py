# space_maker.py
# Freeing disk space for the planned partitions.
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

from ..errors import NoDiskSpaceError, StorageError
from ..size import Size
from ..storage_log import log_method_call
from .distribution_calculator import DistributionCalculator
from .partition_killer import PartitionKiller
from .settings import BIGGER_RESIZE

import logging
log = logging.getLogger("partplan")


class SpaceResult(object):

    """ What the space maker did and where the partitions will go. """

    def __init__(self, devicegraph, partitions_distribution, deleted_partitions,
                 reused_sids=None):
        """
            :param devicegraph: the graph after deleting and resizing
            :param partitions_distribution: the best distribution found
            :type partitions_distribution: :class:`~.planned.PartitionsDistribution`
            :param deleted_partitions: partitions of the original graph that
                were deleted
            :type deleted_partitions: list of :class:`~.devices.PartitionDevice`
            :keyword reused_sids: sid of the device each reusing planned
                partition will reuse, by planned id
            :type reused_sids: dict
        """
        self.devicegraph = devicegraph
        self.partitions_distribution = partitions_distribution
        self.deleted_partitions = deleted_partitions
        self.reused_sids = reused_sids or {}

    def __repr__(self):
        return "<SpaceResult deleted=%s distribution=%r>" % (
            [p.name for p in self.deleted_partitions], self.partitions_distribution)


class ShrinkAction(object):

    def __init__(self, partition, min_size=None, max_size=None):
        self.sid = partition.id
        self.name = partition.name
        self.min_size = min_size
        self.max_size = max_size
        self.shrink_size = None
        self.recoverable = Size(0)

    def __repr__(self):
        return "<ShrinkAction %s min=%s max=%s>" % (self.name, self.min_size, self.max_size)

    def target_size(self, partition):
        """ Size to resize the partition to """
        info = partition.resize_info()
        lower = info.min_size
        if self.min_size is not None:
            lower = max(lower, self.min_size)

        target = partition.size
        if self.shrink_size is not None:
            target = partition.size - self.shrink_size if self.shrink_size < partition.size else Size(0)
        if self.max_size is not None:
            target = min(target, self.max_size)
        return max(target, lower)


class DeleteAction(object):

    def __init__(self, partition):
        self.sid = partition.id
        self.name = partition.name

    def __repr__(self):
        return "<DeleteAction %s>" % self.name


class WipeAction(object):

    def __init__(self, disk):
        self.sid = disk.id
        self.name = disk.name

    def __repr__(self):
        return "<WipeAction %s>" % self.name


class BiggerResizeStrategy(object):

    """ The order in which the space maker tries its actions.

        Mandatory deletions go first, then wipes, mandatory shrinks and
        optional shrinks (the partition with the biggest recoverable size
        first). Optional deletions come last, starting with the partition at
        the end of the disk.
    """

    def __init__(self, space_settings):
        self.space_settings = space_settings
        self.to_delete_mandatory = []
        self.to_wipe = []
        self.to_shrink_mandatory = []
        self.to_shrink_optional = []
        self.to_delete_optional = []

    def _queues(self):
        return [self.to_delete_mandatory, self.to_wipe, self.to_shrink_mandatory,
                self.to_shrink_optional, self.to_delete_optional]

    @staticmethod
    def _partitions(disk):
        return [p for p in disk.partitions if not p.is_extended]

    def _resize_for(self, partition):
        return next((a for a in self.space_settings.actions_of("resize")
                     if a.device == partition.name), None)

    def _delete_for(self, partition):
        return next((a for a in self.space_settings.actions_of("delete")
                     if a.device == partition.name), None)

    def add_mandatory_actions(self, disk, keep=None):
        """ Queue the actions that happen no matter what """
        keep = keep or []
        if disk.partition_table is None:
            return
        for part in self._partitions(disk):
            if part.id in keep:
                continue
            delete = self._delete_for(part)
            if delete is not None and delete.mandatory:
                self.to_delete_mandatory.append(DeleteAction(part))
                continue
            resize = self._resize_for(part)
            if resize is not None and resize.mandatory and part.size > resize.max_size:
                self.to_shrink_mandatory.append(ShrinkAction(part, resize.min_size,
                                                             resize.max_size))

    def add_optional_actions(self, disk, keep=None):
        """ Queue the actions used only as long as they are needed """
        keep = keep or []
        if any(a.device in (disk.name, disk.path) for a in self.space_settings.actions_of("wipe")):
            if any(d.id in keep for d in disk.descendants):
                log.info("not wiping %s, some of its devices must be kept", disk.name)
            else:
                self.to_wipe.append(WipeAction(disk))

        if disk.partition_table is None:
            return

        shrinks = []
        deletes = []
        for part in self._partitions(disk):
            if part.id in keep:
                continue
            resize = self._resize_for(part)
            if resize is not None and self._shrinkable(part, resize):
                action = ShrinkAction(part, resize.min_size, resize.max_size)
                action.recoverable = self._recoverable_size(part, resize)
                shrinks.append(action)
            delete = self._delete_for(part)
            if delete is not None and not delete.mandatory:
                deletes.append((part.region.start, DeleteAction(part)))

        self.to_shrink_optional.extend(shrinks)
        self.to_shrink_optional.sort(key=lambda a: (-a.recoverable, a.name))
        deletes.sort(key=lambda d: d[0], reverse=True)
        self.to_delete_optional.extend(d[1] for d in deletes)

    @staticmethod
    def _shrinkable(partition, resize):
        if resize.min_size is not None and resize.min_size > partition.size:
            return False
        if resize.max_size is not None and resize.max_size < partition.size:
            return False
        return partition.resize_info().resize_ok

    @staticmethod
    def _recoverable_size(partition, resize):
        recoverable = partition.recoverable_size
        if resize.min_size is not None:
            recoverable = min(recoverable, partition.size - resize.min_size)
        return recoverable

    def next(self):
        """ The next action to execute, None if there are no more """
        return next((queue[0] for queue in self._queues() if queue), None)

    def done(self, action, deleted_sids):
        """ Forget an executed action and the actions on deleted devices """
        for queue in self._queues():
            if action in queue:
                queue.remove(action)
            queue[:] = [a for a in queue if a.sid not in deleted_sids]


STRATEGIES = {BIGGER_RESIZE: BiggerResizeStrategy}


class SpaceMaker(object):

    """ Deletes and resizes partitions to make room for the planned ones.

        The space maker works on a copy of the graph and stops as soon as
        the distribution calculator finds a place for every planned
        partition. Devices that are going to be reused, and their ancestors,
        are never deleted or shrunk.
    """

    def __init__(self, settings):
        """
            :param settings: the proposal settings
            :type settings: :class:`~.settings.ProposalSettings`
        """
        self.settings = settings
        self.original_graph = None
        self.new_graph = None
        self._all_deleted_sids = []
        self._distribution = None
        self._dist_calculator = None
        self._extra_disk_names = []

    def _strategy(self):
        return STRATEGIES[self.settings.space_settings.strategy](self.settings.space_settings)

    def prepare_devicegraph(self, original_graph, planned_devices=None):
        """ A copy of the graph after executing the mandatory actions

            :param original_graph: the initial graph
            :keyword planned_devices: planned devices whose reused devices
                must be kept
            :returns: the new graph
        """
        log.info("preparing the device graph")
        devicegraph = original_graph.copy()
        keep = self._protected_sids(devicegraph, planned_devices or [])
        strategy = self._strategy()
        for disk in self._disks_for(devicegraph):
            strategy.add_mandatory_actions(disk, keep)

        action = strategy.next()
        while action is not None:
            sids = self._execute_action(action, devicegraph)
            strategy.done(action, sids)
            self._all_deleted_sids.extend(sids)
            action = strategy.next()
        return devicegraph

    def provide_space(self, original_graph, planned_partitions, lvm_helper=None):
        """ Make room for the planned partitions

            :param original_graph: the initial graph
            :param planned_partitions: the partitions to make room for
            :type planned_partitions: list of :class:`~.planned.PlannedPartition`
            :keyword lvm_helper: the helper holding the planned volume group, if any
            :type lvm_helper: :class:`~.lvm_helper.LvmHelper`
            :rtype: :class:`SpaceResult`
            :raises: :class:`~.errors.NoDiskSpaceError`
        """
        log_method_call(self, planned_partitions=planned_partitions)
        self.original_graph = original_graph
        planned_vgs = []
        if lvm_helper is not None and lvm_helper.planned_lvs:
            planned_vgs = [lvm_helper.volume_group]
        self._dist_calculator = DistributionCalculator(planned_vgs=planned_vgs)

        keep_names = list(lvm_helper.partitions_in_vg) if lvm_helper is not None else []
        partitions = []
        for part in planned_partitions:
            if part.reusing:
                log.info("no need to find a place for %r, it reuses %s", part, part.reuse_name)
                keep_names.append(part.reuse_name)
            else:
                partitions.append(part)

        keep = self._protected_sids(original_graph, planned_partitions, keep_names)
        self._calculate_new_graph(partitions, keep)
        deleted = [p for p in original_graph.partitions if p.id in self._all_deleted_sids]
        return SpaceResult(self.new_graph, self._distribution, deleted,
                           reused_sids=self._reused_sids(original_graph, planned_partitions))

    @staticmethod
    def _reused_sids(devicegraph, planned_partitions):
        """ Where the reusing partitions point to, before anything is deleted """
        result = {}
        for part in planned_partitions:
            device = part.find_reused(devicegraph) if part.reusing else None
            if device is not None:
                result[part.planned_id] = device.id
        return result

    def _protected_sids(self, devicegraph, planned_devices, names=None):
        """ Ids of the reused devices and all their ancestors """
        devices = []
        for planned in planned_devices:
            if not getattr(planned, "reusing", False):
                continue
            device = planned.find_reused(devicegraph)
            if device is not None:
                devices.append(device)
        for name in names or []:
            device = devicegraph.find_by_any_name(name)
            if device is not None:
                devices.append(device)

        sids = set()
        for device in devices:
            sids.add(device.id)
            sids.update(a.id for a in device.ancestors)
        return sids

    def _calculate_new_graph(self, partitions, keep):
        self.new_graph = self.original_graph.copy()
        candidates = self._candidate_disk_names()
        self._extra_disk_names = sorted(set(p.disk for p in partitions if p.disk) -
                                        set(candidates))

        by_disk = {}
        for part in partitions:
            if part.disk:
                by_disk.setdefault(part.disk, []).append(part)

        if self._several_passes(by_disk, candidates):
            for disk_name in sorted(by_disk):
                try:
                    self._resize_and_delete(by_disk[disk_name], keep, disk_name=disk_name)
                except NoDiskSpaceError:
                    if not self._dist_calculator.planned_vgs:
                        raise
                    if self._find_distribution(by_disk[disk_name], ignore_lvm=True) is None:
                        raise

        self._resize_and_delete(partitions, keep)

    @staticmethod
    def _several_passes(by_disk, candidates):
        if not by_disk:
            return False
        if len(by_disk) > 1:
            return True
        return list(by_disk) != list(candidates)

    def _resize_and_delete(self, planned_partitions, keep, disk_name=None):
        log.info("making space for %s (disk %s)", planned_partitions, disk_name)
        self._distribution = None
        strategy = self._strategy()
        for disk in self._disks_for(self.new_graph, disk_name):
            strategy.add_optional_actions(disk, keep)

        while not self._success(planned_partitions):
            action = strategy.next()
            if action is None:
                log.info("no more actions to make space (disk %s)", disk_name)
                break
            sids = self._execute_action(action, self.new_graph, planned_partitions, disk_name,
                                        keep=keep)
            strategy.done(action, sids)
            self._all_deleted_sids.extend(sids)

        if self._distribution is None:
            raise NoDiskSpaceError("not enough space for %s" % planned_partitions)

    def _success(self, planned_partitions):
        if self._distribution is None:
            try:
                self._distribution = self._find_distribution(planned_partitions)
            except StorageError as e:
                log.info("exception while distributing partitions: %s", e)
                self._distribution = None
        return self._distribution is not None

    def _find_distribution(self, planned_partitions, ignore_lvm=False):
        calculator = DistributionCalculator() if ignore_lvm else self._dist_calculator
        return calculator.best_distribution(planned_partitions, self._free_spaces(),
                                            self._extra_free_spaces())

    def _execute_action(self, action, devicegraph, planned_partitions=None, disk_name=None,
                        keep=None):
        log.info("space maker action: %r", action)
        if isinstance(action, ShrinkAction):
            return self._execute_shrink(action, devicegraph, planned_partitions, disk_name)
        elif isinstance(action, DeleteAction):
            return self._execute_delete(action, devicegraph, keep or set())
        return self._execute_wipe(action, devicegraph)

    def _execute_shrink(self, action, devicegraph, planned_partitions, disk_name):
        partition = devicegraph.get_device_by_id(action.sid)
        if partition is None:
            return []
        if action.shrink_size is None and planned_partitions is not None:
            action.shrink_size = self._resizing_size(partition, planned_partitions, disk_name)
        target = action.target_size(partition)
        if target < partition.size:
            devicegraph.resize_device(partition, target)
        return []

    def _execute_delete(self, action, devicegraph, keep):
        partition = devicegraph.get_device_by_id(action.sid)
        if partition is None:
            return []
        killer = PartitionKiller(devicegraph, self._candidate_disk_names() or None)
        affected = killer.partitions_to_delete(partition.name)
        sids_by_name = dict((p.name, p.id) for p in devicegraph.partitions)
        if any(sids_by_name.get(name) in keep for name in affected):
            log.info("not deleting %s, it is used by a device that must be kept", partition.name)
            return []
        names = killer.delete(partition.name)
        return [sids_by_name[n] for n in names if n in sids_by_name]

    @staticmethod
    def _execute_wipe(action, devicegraph):
        disk = devicegraph.get_device_by_id(action.sid)
        if disk is None:
            return []
        sids = [d.id for d in disk.descendants if d.type == "partition"]
        devicegraph.wipe_device(disk)
        return sids

    def _resizing_size(self, partition, planned_partitions, disk_name):
        spaces = self._free_spaces(disk_name)
        if disk_name and disk_name in self._extra_disk_names:
            return DistributionCalculator().resizing_size(partition, planned_partitions, spaces)
        partitions = [p for p in planned_partitions if p.disk not in self._extra_disk_names]
        return self._dist_calculator.resizing_size(partition, partitions, spaces)

    def _free_spaces(self, disk_name=None):
        return self.new_graph.free_spaces(self._disks_for(self.new_graph, disk_name))

    def _extra_free_spaces(self):
        spaces = []
        for disk_name in self._extra_disk_names:
            spaces.extend(self._free_spaces(disk_name))
        return spaces

    def _candidate_disk_names(self):
        return list(self.settings.candidate_devices)

    def _disks_for(self, devicegraph, device_name=None):
        if device_name:
            names = [device_name]
        else:
            names = self._candidate_disk_names()
        if not names:
            return devicegraph.partitionable_devices
        return [d for d in devicegraph.partitionable_devices if d.name in names]
