# lvm.py
# Planner for LVM volume group drive sections.
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

import os

from ...devices.lvm import LVMLogicalVolumeDevice
from ...planned import PlannedLvmLv, PlannedLvmVg
from ...planned.lvm import MAKE_SPACE_KEEP, MAKE_SPACE_REMOVE, default_lv_name
from ...size import KiB, Size
from ..issues import MissingReusableDevice, MissingReuseInfo, ThinPoolNotFound
from .common import DrivePlanner

import logging
log = logging.getLogger("partplan")


class VgPlanner(DrivePlanner):

    """ Plans a volume group and its logical volumes.

        Thin pools are planned before the rest of volumes, so thin volumes
        can find the pool they refer to with ``used_pool``.
    """

    def planned_devices(self, drive):
        planned_vg = PlannedLvmVg(volume_group_name=os.path.basename(drive.device or ""))
        if drive.pesize:
            planned_vg.extent_size = Size(drive.pesize)

        pools = [s for s in drive.partitions if s.pool]
        regular = [s for s in drive.partitions if not s.pool]
        for section in pools + regular:
            planned_lv = self._planned_for_lv(drive, planned_vg, section)
            if planned_lv is None or planned_lv.is_thin:
                continue
            planned_vg.lvs.append(planned_lv)

        for pool in [lv for lv in planned_vg.lvs if lv.is_thin_pool]:
            self._add_thin_pool_reuse(pool, planned_vg)
        self._add_vg_reuse(planned_vg, drive)
        return [planned_vg]

    def _planned_for_lv(self, drive, planned_vg, section):
        planned_lv = PlannedLvmLv()
        planned_lv.lv_type = self._lv_type(section)
        if section.stripe_size:
            planned_lv.stripe_size = Size(int(section.stripe_size) * KiB.factor)
        if section.stripes:
            planned_lv.stripes = int(section.stripes)
        self.configure_device(planned_lv, section, drive)
        planned_lv.logical_volume_name = section.lv_name or default_lv_name(planned_lv.mount_point)

        if section.used_pool and not self._add_to_thin_pool(planned_lv, planned_vg, section):
            return None
        if section.create is False:
            self._add_lv_reuse(planned_lv, planned_vg, section)
        if not self.assign_size(planned_lv, section, min_size=planned_vg.extent_size):
            return None
        return planned_lv

    @staticmethod
    def _lv_type(section):
        if section.pool:
            return LVMLogicalVolumeDevice.THIN_POOL
        elif section.used_pool:
            return LVMLogicalVolumeDevice.THIN
        return LVMLogicalVolumeDevice.NORMAL

    def _add_to_thin_pool(self, planned_lv, planned_vg, section):
        pool = next((lv for lv in planned_vg.lvs
                     if lv.is_thin_pool and lv.logical_volume_name == section.used_pool), None)
        if pool is None:
            self.issues_list.add(ThinPoolNotFound, section, "used_pool", section.used_pool)
            return False
        pool.add_thin_lv(planned_lv)
        return True

    def _find_vg(self, vg_name):
        return next((vg for vg in self.devicegraph.lvm_vgs if vg.name == vg_name), None)

    def _add_lv_reuse(self, planned_lv, planned_vg, section):
        vg = self._find_vg(planned_vg.volume_group_name)
        if vg is None:
            self.issues_list.add(MissingReusableDevice, section)
            return

        if section.used_pool:
            if not any(lv.is_thin_pool and lv.lvname == section.used_pool for lv in vg.lvs):
                self.issues_list.add(ThinPoolNotFound, section, "used_pool", section.used_pool)
                return

        if section.lv_name:
            device = next((lv for lv in vg.lvs if lv.lvname == section.lv_name), None)
        elif section.label:
            device = next((lv for lv in vg.lvs if lv.format.label == section.label), None)
        else:
            self.issues_list.add(MissingReuseInfo, section)
            return

        if device is None:
            self.issues_list.add(MissingReusableDevice, section)
            return

        if not section.lv_name:
            planned_lv.logical_volume_name = device.lvname
        if planned_lv.filesystem_type is None and device.filesystem is not None:
            planned_lv.filesystem_type = device.filesystem.type
        self.add_device_reuse(planned_lv, device, section)

    def _add_thin_pool_reuse(self, pool, planned_vg):
        if not any(lv.reusing for lv in pool.thin_lvs):
            return
        vg = self._find_vg(planned_vg.volume_group_name)
        if vg is None:
            return
        device = next((lv for lv in vg.lvs if lv.lvname == pool.logical_volume_name), None)
        if device is not None:
            pool.reuse_name = device.name
            pool.reuse_sid = device.id

    def _add_vg_reuse(self, planned_vg, drive):
        keep = bool(drive.keep_unknown_lv)
        planned_vg.make_space_policy = MAKE_SPACE_KEEP if keep else MAKE_SPACE_REMOVE
        if not keep and not any(lv.reusing for lv in planned_vg.all_lvs):
            return

        vg = self._find_vg(planned_vg.volume_group_name)
        if vg is None:
            self.issues_list.add(MissingReusableDevice, drive)
            return

        log.info("volume group %s will be reused", vg.name)
        planned_vg.reuse_name = vg.name
        planned_vg.reuse_sid = vg.id
        planned_vg.extent_size = vg.pe_size
        planned_vg.pvs = [pv.name for pv in vg.pvs]
        planned_vg.total_size = vg.size
        planned_vg.available_space = vg.free_space
