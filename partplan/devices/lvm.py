# lvm.py
# Device classes for LVM volume groups and logical volumes.
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

from ..devicelibs import lvm
from ..errors import LVMError
from ..size import Size
from .device import Device
from .storage import StorageDevice

import logging
log = logging.getLogger("partplan")


class LVMVolumeGroupDevice(StorageDevice):

    """ An LVM Volume Group """
    _type = "lvmvg"
    _dev_dir = "/dev"

    def __init__(self, name, parents=None, pe_size=None, exists=False, uuid=None):
        """
            :param name: the device name (generally a device node's basename)
            :type name: str
            :keyword exists: does this device exist?
            :type exists: bool
            :keyword parents: a list of parent devices (physical volumes)
            :type parents: list of :class:`StorageDevice`
            :keyword pe_size: physical extent size
            :type pe_size: :class:`~.size.Size`
        """
        self.pe_size = pe_size or lvm.LVM_PE_SIZE
        StorageDevice.__init__(self, name, parents=parents, exists=exists, uuid=uuid)

    def _add_parent(self, parent):
        if parent.formatted_device.format.type != "lvmpv":
            raise ValueError("addPV: device is not set up as a PV")
        Device._add_parent(self, parent)
        parent.formatted_device.format.vg_name = self.name

    @property
    def vg_name(self):
        return self.name

    @property
    def pvs(self):
        """ A list of this VG's PVs (the devices holding the PV format) """
        return self.parents[:]

    @property
    def lvs(self):
        """ A list of this VG's LVs, thin LVs included """
        lvs = []
        for child in self.children:
            if child.type == "lvmlv":
                lvs.append(child)
                lvs.extend(c for c in child.children if c.type == "lvmlv")
        return lvs

    def align(self, size, roundup=False):
        """ Align a size to a multiple of physical extent size. """
        return lvm.align_to_extents(size, self.pe_size, roundup=roundup)

    def pv_usable_space(self, pv_size):
        """ Space usable for extents in a PV of the given size """
        return lvm.usable_pv_size(pv_size, self.pe_size)

    def _get_size(self):
        """ The size of this VG """
        return sum((self.pv_usable_space(pv.formatted_device.size) for pv in self.pvs), Size(0))

    def _set_size(self, newsize):
        raise ValueError("the size of a VG is defined by its PVs")

    @property
    def extents(self):
        """ Number of extents in this VG """
        return int(self.size // self.pe_size)

    @property
    def free_space(self):
        """ The amount of free space in this VG. """
        used = sum((lv.vg_space_used for lv in self.lvs), Size(0))
        free = self.size - used
        log.debug("vg %s has %s free", self.name, free)
        return free

    @property
    def disks(self):
        _disks = []
        for pv in self.pvs:
            for disk in pv.disks:
                if disk not in _disks:
                    _disks.append(disk)
        return _disks

    def is_name_valid(self, name):
        return lvm.is_lvm_name_valid(name)


class LVMLogicalVolumeDevice(StorageDevice):

    """ An LVM Logical Volume

        Normal volumes and thin pools are children of the volume group;
        thin volumes are children of their thin pool.
    """
    _type = "lvmlv"
    _resizable = True

    NORMAL = "normal"
    THIN_POOL = "thin_pool"
    THIN = "thin"

    def __init__(self, name, parents=None, size=None, uuid=None, fmt=None,
                 exists=False, lv_type=NORMAL, stripes=None, stripe_size=None):
        """
            :param name: the LV name (without the VG name)
            :type name: str
            :keyword parents: the VG (or the thin pool for thin volumes)
            :keyword size: the LV's size (virtual size for thin volumes)
            :type size: :class:`~.size.Size`
            :keyword lv_type: normal, thin_pool or thin
            :keyword int stripes: number of stripes
            :keyword stripe_size: size of each stripe
            :type stripe_size: :class:`~.size.Size`
        """
        if lv_type not in (self.NORMAL, self.THIN_POOL, self.THIN):
            raise ValueError("invalid LV type %s" % lv_type)
        self.lv_type = lv_type
        self.stripes = stripes
        self.stripe_size = stripe_size
        self._lvname = name
        StorageDevice.__init__(self, name, parents=parents, size=size, uuid=uuid,
                               fmt=fmt, exists=exists)

    def _get_name(self):
        return lvm.dm_name(self.vg.name, self._lvname)

    @property
    def lvname(self):
        """ The LV's name (not including VG name). """
        return self._lvname

    @lvname.setter
    def lvname(self, value):
        if not lvm.is_lvm_name_valid(value):
            raise ValueError("%s is not a valid LV name" % value)
        self._lvname = value

    @property
    def path(self):
        return "%s/%s/%s" % (self._dev_dir, self.vg.name, self._lvname)

    @property
    def vg(self):
        """ This Logical Volume's Volume Group. """
        if not self.parents:
            raise LVMError("logical volume %s has no volume group" % self._lvname)
        parent = self.parents[0]
        if parent.type == "lvmlv":
            return parent.vg
        return parent

    @property
    def pool(self):
        """ The thin pool of a thin volume """
        return self.parents[0] if self.is_thin_lv else None

    @property
    def is_thin_pool(self):
        return self.lv_type == self.THIN_POOL

    @property
    def is_thin_lv(self):
        return self.lv_type == self.THIN

    @property
    def thin_lvs(self):
        return [c for c in self.children if c.type == "lvmlv"]

    @property
    def vg_space_used(self):
        """ Space taken from the VG (thin volumes take none) """
        if self.is_thin_lv:
            return Size(0)
        return self.vg.align(self.size, roundup=True)

    @property
    def disks(self):
        return self.vg.disks

    @property
    def dict(self):
        d = super(LVMLogicalVolumeDevice, self).dict
        d.update({"vgname": self.vg.name, "lvname": self.lvname, "lv_type": self.lv_type,
                  "stripes": self.stripes})
        return d
