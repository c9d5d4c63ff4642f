# autoinst_devices_creator.py
# Turns the devices planned from a profile into a device graph.
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

from ..errors import NoDiskSpaceError
from ..storage_log import log_method_call
from .autoinst_partitioner import AutoinstPartitioner, flexible_devices, sized_disk_partitions
from .creator_result import CreatorResult, DeviceShrinkage
from .creators import (BcacheCreator, BtrfsCreator, DiskCreator, LvmCreator, MdCreator,
                       NfsCreator, TmpfsCreator)

import logging
log = logging.getLogger("partplan")


class AutoinstDevicesCreator(object):

    """ Creates the planned devices in a device graph.

        Devices are processed by family, in an order that makes every
        component available before the device using it: partitions, whole
        disks, RAIDs, bcaches, volume groups, Btrfs, NFS and tmpfs.
    """

    def __init__(self, original_graph):
        """
            :param original_graph: the graph to start from, never modified
            :type original_graph: :class:`~.devicegraph.Devicegraph`
        """
        self.original_graph = original_graph
        self._result = None
        self._reused = []
        self._planned = None
        self._disk_names = []

    @property
    def devicegraph(self):
        return self._result.devicegraph

    def populated_devicegraph(self, planned_devices, disk_names):
        """ A result with every planned device created or reused

            :param planned_devices: the devices to create
            :type planned_devices: :class:`~.planned.DevicesCollection`
            :param disk_names: disks where new partitions can be created
            :type disk_names: list of str
            :rtype: :class:`~.creator_result.CreatorResult`
            :raises: :class:`~.errors.NoDiskSpaceError`
        """
        log.info("planned devices: %s", planned_devices.devices)
        log.info("disk names: %s", disk_names)
        self._planned = planned_devices
        self._disk_names = list(disk_names)
        self._reused = []
        self._result = CreatorResult(self.original_graph.copy())

        self._process_partitions()
        self._process_disks()
        self._process_mds()
        self._process_bcaches()
        self._process_vgs()
        self._process_btrfs_filesystems()
        self._process_nfs_filesystems()
        self._process_tmpfs_filesystems()
        return self._result.with_shrinkages(self._shrinkages())

    def _merge(self, result):
        self._result = self._result.merge(result)

    def _process_partitions(self):
        planned = sized_disk_partitions(self._planned.disk_partitions, self.original_graph)
        to_reuse = [p for p in planned if p.reusing]
        to_create = [p for p in planned if not p.reusing]

        devicegraph = self.devicegraph.copy()
        partitioner = AutoinstPartitioner(devicegraph)
        partitioner.reuse_partitions(to_reuse)
        self._reused.extend(to_reuse)
        if not to_create:
            self._merge(CreatorResult(devicegraph))
            return

        disks = [d for d in devicegraph.partitionable_devices if d.name in self._disk_names]
        self._merge(partitioner.create_partitions(to_create, disks))

    def _process_disks(self):
        for planned in self._planned.disks:
            self._merge(DiskCreator(self.devicegraph).reuse(planned))

    def _process_mds(self):
        for planned in self._planned.mds:
            if planned.reusing:
                self._reuse_partitioned(planned)
            members = self._member_names(lambda d: planned.name_matches(d.raid_name))
            self._merge(MdCreator(self.devicegraph).create_md(planned, members))

    def _process_bcaches(self):
        for planned in self._planned.bcaches:
            if planned.reusing:
                self._reuse_partitioned(planned)
                self._merge(BcacheCreator(self.devicegraph).create_bcache(planned, None))
                continue
            backing = self._bcache_member(planned, "bcache_backing_for")
            caching = self._bcache_member(planned, "bcache_caching_for")
            self._merge(BcacheCreator(self.devicegraph).create_bcache(planned, backing, caching))

    def _process_vgs(self):
        log_method_call(self, vgs=self._planned.vgs, previous=self._result)
        for planned in self._planned.vgs:
            if planned.reusing:
                self._merge(LvmCreator(self.devicegraph).reuse(planned))
            pvs = self._member_names(lambda d: d.pv_for(planned.volume_group_name))
            self._merge(self._create_volumes(planned, pvs))

    def _process_btrfs_filesystems(self):
        for planned in self._planned.btrfs_filesystems:
            if planned.reusing:
                self._merge(BtrfsCreator(self.devicegraph).reuse(planned))
                continue
            members = self._member_names(lambda d: d.btrfs_member_for(planned.name))
            self._merge(BtrfsCreator(self.devicegraph).create_filesystem(planned, members))

    def _process_nfs_filesystems(self):
        for planned in self._planned.nfs_filesystems:
            self._merge(NfsCreator(self.devicegraph).create_nfs(planned))

    def _process_tmpfs_filesystems(self):
        for planned in self._planned.tmpfs_filesystems:
            self._merge(TmpfsCreator(self.devicegraph).create_tmpfs(planned))

    def _reuse_partitioned(self, planned):
        self._merge(AutoinstPartitioner(self.devicegraph).reuse_device_partitions(planned))
        self._reused.extend(p for p in planned.partitions if p.reusing)

    def _member_names(self, predicate):
        """ Names of the new and reused devices satisfying predicate """
        def member(device):
            return hasattr(device, "component") and predicate(device)

        names = self._result.created_names(member)
        names.extend(d.reuse_name for d in self._reused if member(d) and d.reuse_name not in names)
        return names

    def _bcache_member(self, planned_bcache, attr):
        names = self._member_names(lambda d: planned_bcache.name_matches(getattr(d, attr)))
        return names[0] if names else None

    def _create_volumes(self, planned_vg, pv_names):
        try:
            return LvmCreator(self.devicegraph).create_volumes(planned_vg, pv_names)
        except NoDiskSpaceError as e:
            log.error("%s, trying again with flexible sizes", e)
        flexible_vg = copy.copy(planned_vg)
        flexible_vg.lvs = flexible_devices(planned_vg.lvs)
        return LvmCreator(self.devicegraph).create_volumes(flexible_vg, pv_names)

    def _shrinkages(self):
        """ New partitions and logical volumes smaller than requested """
        shrinkages = []
        for planned in self._planned.partitions + self._planned.lvs:
            if planned.reusing or planned.percent_size is not None:
                continue
            if getattr(planned, "is_thin", False):
                continue
            real = self._result.real_device(planned)
            if real is not None and real.size < planned.min_size:
                log.warning("%s is smaller than requested for %r", real.name, planned)
                shrinkages.append(DeviceShrinkage(planned, real))
        return shrinkages
