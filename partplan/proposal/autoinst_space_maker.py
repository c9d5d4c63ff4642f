# autoinst_space_maker.py
# Cleaning disks according to the profile drive sections.
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

from ..planned import PlannedLvmVg, PlannedPartition
from ..planned.lvm import MAKE_SPACE_REMOVE
from ..storage_log import log_method_call
from .issues import InvalidValue, IssuesList, MissingValue
from .partition_killer import PartitionKiller

import logging
log = logging.getLogger("partplan")

USE_ALL = "all"
USE_LINUX = "linux"
USE_FREE = "free"


class AutoinstSpaceMaker(object):

    """ Deletes what the profile asks to delete before creating anything.

        Unlike :class:`~.space_maker.SpaceMaker`, this does not try to find
        the minimal set of actions: it just honors the ``initialize`` and
        ``use`` attributes of every drive. Devices to be reused are never
        deleted.
    """

    def __init__(self, issues_list=None):
        self.issues_list = issues_list if issues_list is not None else IssuesList()

    def cleaned_devicegraph(self, original_graph, drives_map, planned_devices):
        """ A copy of the graph with the unwanted devices removed

            :param original_graph: the initial graph
            :param drives_map: drives of the profile by device name
            :type drives_map: :class:`~.drives_map.DrivesMap`
            :param planned_devices: the planned devices (reused ones are kept)
            :returns: the new graph
        """
        log_method_call(self, disks=drives_map.disk_names)
        devicegraph = original_graph.copy()
        reused = self._reused_by_disk(devicegraph, planned_devices)

        for disk_name, drive in drives_map.items():
            disk = devicegraph.find_by_any_name(disk_name)
            if disk is None or not disk.partitionable:
                continue
            self._delete_stuff(devicegraph, disk, drive, reused.get(disk.name, []))

        self._remove_unwanted_lvs(devicegraph, planned_devices)
        return devicegraph

    def _delete_stuff(self, devicegraph, disk, drive, reused_names):
        if drive.initialize_attr and not reused_names:
            log.info("initializing %s", disk.name)
            devicegraph.wipe_device(disk)
            return

        if disk.partition_table is not None:
            self._delete_by_use(devicegraph, disk, drive, reused_names)
        elif drive.use == USE_ALL and disk.name not in reused_names:
            devicegraph.wipe_device(disk)

    def _delete_by_use(self, devicegraph, disk, drive, reused_names):
        use = drive.use
        if use == USE_FREE:
            return
        if use == USE_ALL:
            parts = disk.partitions
        elif use == USE_LINUX:
            parts = [p for p in disk.partitions
                     if p.partition_id is not None and p.partition_id.is_linux_system]
        elif isinstance(use, list):
            parts = [p for p in disk.partitions if p.number in use]
        else:
            if use is None:
                self.issues_list.add(MissingValue, drive, "use")
            else:
                self.issues_list.add(InvalidValue, drive, "use", use, USE_FREE)
            return
        self._delete_partitions(devicegraph, parts, reused_names)

    @staticmethod
    def _delete_partitions(devicegraph, parts, reused_names):
        killer = PartitionKiller(devicegraph)
        sids = [p.id for p in parts if p.name not in reused_names and not p.is_extended]
        for sid in sids:
            partition = devicegraph.get_device_by_id(sid)
            if partition is None:
                continue
            killer.delete(partition.name, related=False)

    @staticmethod
    def _reused_devices(devicegraph, planned):
        device = planned.find_reused(devicegraph)
        if device is None:
            return []
        if isinstance(planned, PlannedLvmVg):
            return [device] + list(device.pvs)
        return [device]

    def _reused_by_disk(self, devicegraph, planned_devices):
        """ Names of the reused disks and partitions, keyed by disk name """
        devices = []
        for planned in planned_devices:
            if planned.reusing:
                devices.extend(self._reused_devices(devicegraph, planned))

        result = {}
        for device in devices:
            for dev in [device] + list(device.ancestors):
                if dev.is_disk:
                    disk_name = dev.name
                elif dev.type == "partition":
                    disk_name = dev.disk.name
                else:
                    continue
                names = result.setdefault(disk_name, [])
                if dev.name not in names:
                    names.append(dev.name)
        return result

    @staticmethod
    def _remove_unwanted_lvs(devicegraph, planned_devices):
        """ Remove the unused volumes of reused VGs that do not keep them """
        for planned_vg in planned_devices:
            if not isinstance(planned_vg, PlannedLvmVg):
                continue
            if not planned_vg.reusing or planned_vg.make_space_policy != MAKE_SPACE_REMOVE:
                continue
            vg = planned_vg.find_reused(devicegraph)
            if vg is None:
                continue
            kept = [lv.reuse_name for lv in planned_vg.all_lvs if lv.reusing]
            for lv in list(vg.lvs):
                if lv.id not in [d.id for d in devicegraph.devices]:
                    continue
                if lv.name in kept or lv.lvname in kept:
                    continue
                if any(t.name in kept or t.lvname in kept for t in lv.descendants
                       if t.type == "lvmlv"):
                    continue
                log.info("removing logical volume %s from %s", lv.name, vg.name)
                devicegraph.recursive_remove(lv)

    @staticmethod
    def pinned_devices(original_graph, planned_devices):
        """ A copy of the planned devices with the reused partitions pinned by sid

            Deleting logical partitions renames the ones after them, so a
            reused partition is found by its sid once the graph is cleaned.
            The given planned devices are not modified.

            :param original_graph: the graph the reused names refer to
            :param planned_devices: the planned devices
            :returns: the pinned copy, of the same type as planned_devices
        """
        pinned = copy.deepcopy(planned_devices)
        for planned in pinned:
            if not isinstance(planned, PlannedPartition) or not planned.reuse_name:
                continue
            device = original_graph.find_by_any_name(planned.reuse_name)
            if device is not None:
                planned.reuse_sid = device.id
        return pinned
