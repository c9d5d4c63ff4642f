# lvm.py
# Planned LVM volume groups and logical volumes.
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

from ..devicelibs.lvm import LVM_PE_SIZE, LVM_PE_START, align_to_extents, usable_pv_size
from ..devicelibs.partition import PartitionId
from ..devices import LVMLogicalVolumeDevice
from ..size import Size
from .device import PlannedDevice
from .mixins import HasSize, CanBeEncrypted, CanBeFormatted
from .partition import PlannedPartition

import logging
log = logging.getLogger("partplan")

USE_NEEDED = "use_needed"
USE_AVAILABLE = "use_available"
SIZE_STRATEGIES = (USE_NEEDED, USE_AVAILABLE)

# what to do with the existing logical volumes of a reused volume group
MAKE_SPACE_NEEDED = "needed"
MAKE_SPACE_KEEP = "keep"
MAKE_SPACE_REMOVE = "remove"
MAKE_SPACE_POLICIES = (MAKE_SPACE_NEEDED, MAKE_SPACE_KEEP, MAKE_SPACE_REMOVE)


def default_lv_name(mount_point):
    """ Name for a logical volume mounted at mount_point, None if there is none.

        "/" gives "root", "/var/log" gives "var_log" and swap gives "swap".
    """
    if mount_point == "swap":
        return "swap"
    if not mount_point or not mount_point.startswith("/"):
        return None
    if mount_point == "/":
        return "root"
    return mount_point.lstrip("/").replace("/", "_")


class PlannedLvmLv(PlannedDevice, HasSize, CanBeEncrypted, CanBeFormatted):

    """ A logical volume to create (or to reuse) in a planned volume group. """

    _to_string_attrs = ["mount_point", "reuse_name", "min_size", "max_size",
                        "logical_volume_name", "lv_type"]

    def __init__(self, mount_point=None, filesystem_type=None):
        PlannedDevice.__init__(self)
        self._init_has_size()
        self._init_can_be_formatted(mount_point, filesystem_type)
        self._init_can_be_encrypted()
        self.lv_type = LVMLogicalVolumeDevice.NORMAL
        self.thin_lvs = []
        self.thin_pool = None
        self.stripes = None
        self.stripe_size = None
        self.disk = None
        self.logical_volume_name = default_lv_name(mount_point)

    @property
    def is_thin_pool(self):
        return self.lv_type == LVMLogicalVolumeDevice.THIN_POOL

    @property
    def is_thin(self):
        return self.lv_type == LVMLogicalVolumeDevice.THIN

    def add_thin_lv(self, lv):
        """ Add a thin volume to this thin pool. """
        if lv.lv_type != LVMLogicalVolumeDevice.THIN:
            raise ValueError("only thin volumes can be added to a thin pool")
        lv.thin_pool = self.logical_volume_name
        self.thin_lvs.append(lv)

    def size_in(self, container):
        """ Size of the volume in the given VG (or thin pool) """
        if self.percent_size is not None:
            extent_size = getattr(container, "pe_size", None) or container.vg.pe_size
            size = container.size * self.percent_size / 100
            return align_to_extents(size, extent_size)
        if self.is_thin:
            return container.size if self.max_size.is_unlimited else self.max_size
        return self.size

    def _reuse(self, device, devicegraph):
        if self.resize and not self.max_size.is_unlimited and self.max_size != device.size:
            devicegraph.resize_device(device, self.max_size)
        super(PlannedLvmLv, self)._reuse(device, devicegraph)


class PlannedLvmVg(PlannedDevice):

    """ A volume group to create (or to reuse).

        Besides the logical volumes, the planned volume group knows how
        much space is still needed from new physical volumes and how big
        such physical volumes must be to provide it.
    """

    _to_string_attrs = ["volume_group_name", "reuse_name", "size_strategy"]

    def __init__(self, volume_group_name=None, lvs=None):
        PlannedDevice.__init__(self)
        self.volume_group_name = volume_group_name
        self.lvs = list(lvs or [])
        self.pvs = []
        self.pvs_candidate_devices = []
        self._size_strategy = USE_NEEDED
        self.extent_size = LVM_PE_SIZE
        self._make_space_policy = MAKE_SPACE_NEEDED
        self.pvs_encryption_password = None
        self.pvs_encryption_method = None
        self.total_size = Size(0)
        self.available_space = Size(0)

    @classmethod
    def from_real_vg(cls, vg):
        """ A planned volume group reusing the given real one """
        planned = cls(volume_group_name=vg.name)
        planned.reuse_name = vg.name
        planned.reuse_sid = vg.id
        planned.extent_size = vg.pe_size
        planned.pvs = [pv.name for pv in vg.pvs]
        planned.total_size = vg.size
        planned.available_space = vg.free_space
        return planned

    @property
    def size_strategy(self):
        return self._size_strategy

    @size_strategy.setter
    def size_strategy(self, strategy):
        if strategy not in SIZE_STRATEGIES:
            raise ValueError("unknown size strategy %s" % strategy)
        self._size_strategy = strategy

    @property
    def make_space_policy(self):
        return self._make_space_policy

    @make_space_policy.setter
    def make_space_policy(self, policy):
        if policy not in MAKE_SPACE_POLICIES:
            raise ValueError("unknown make space policy %s" % policy)
        self._make_space_policy = policy

    @property
    def all_lvs(self):
        """ Planned volumes, thin volumes included """
        result = []
        for lv in self.lvs:
            result.append(lv)
            result.extend(lv.thin_lvs)
        return result

    def _extents_ceil(self, size):
        return align_to_extents(size, self.extent_size, roundup=True)

    @property
    def target_size(self):
        """ Space needed to hold the minimum size of all the volumes """
        return sum((self._extents_ceil(lv.min_size) for lv in self.lvs), Size(0))

    def _reusable_space(self):
        if not self.reusing:
            return Size(0)
        if self.make_space_policy == MAKE_SPACE_KEEP:
            return self.available_space
        return self.total_size

    @property
    def missing_space(self):
        """ Space that must be provided by new physical volumes """
        missing = self.target_size - self._reusable_space()
        return max(missing, Size(0))

    @property
    def max_extra_space(self):
        """ Maximum space new physical volumes could be asked to provide """
        if any(lv.max_size.is_unlimited for lv in self.lvs):
            return Size.unlimited()
        total = sum((self._extents_ceil(lv.max_size) for lv in self.lvs), Size(0))
        return max(total - self._reusable_space(), Size(0))

    @property
    def pv_overhead(self):
        """ Space of every physical volume not usable for extents """
        return LVM_PE_START + CanBeEncrypted.encryption_overhead(self._pv_encryption_method())

    def _pv_encryption_method(self):
        if self.pvs_encryption_method:
            return self.pvs_encryption_method
        if self.pvs_encryption_password:
            return "luks1"
        return None

    def useful_pv_space(self, size):
        """ Space a physical volume of the given size adds to the VG """
        if size.is_unlimited:
            return size
        return usable_pv_size(size, self.extent_size, overhead=self.pv_overhead)

    def real_pv_size(self, useful_size):
        """ Size a physical volume needs to add useful_size to the VG """
        if useful_size.is_unlimited:
            return useful_size
        return self._extents_ceil(useful_size) + self.pv_overhead

    @property
    def min_pv_size(self):
        """ Smallest physical volume that makes sense """
        return self.real_pv_size(self.extent_size)

    @property
    def forced_disk_name(self):
        """ Disk all the physical volumes must be in, if any volume asks for one """
        return next((lv.disk for lv in self.lvs if lv.disk), None)

    def minimal_pv_partition(self):
        """ A planned partition to be used as physical volume of this VG """
        pv = PlannedPartition()
        pv.partition_id = PartitionId.LVM
        pv.lvm_volume_group_name = self.volume_group_name
        pv.encryption_password = self.pvs_encryption_password
        pv.encryption_method = self.pvs_encryption_method
        pv.disk = self.forced_disk_name
        pv.min_size = self.min_pv_size
        return pv

    def single_pv_partition(self):
        """ A planned partition able to provide all the missing space alone """
        pv = self.minimal_pv_partition()
        pv.set_size_limits(self.real_pv_size(self.missing_space),
                           self.real_pv_size(self.max_extra_space))
        return pv
