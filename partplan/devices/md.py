# md.py
# Device class for software RAID arrays.
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

from ..devicelibs import mdraid
from ..errors import DeviceError
from ..size import Size
from .device import Device
from .disk import Partitionable
from .storage import StorageDevice

import logging
log = logging.getLogger("partplan")


class MDRaidArrayDevice(Partitionable, StorageDevice):

    """ An mdraid device. """
    _type = "mdarray"

    def __init__(self, name, level=None, parents=None, chunk_size=None,
                 parity=None, uuid=None, fmt=None, exists=False, metadata_version=None):
        """
            :param name: the device name (generally a device node's basename)
            :type name: str
            :keyword level: the device's RAID level
            :type level: any valid RAID level descriptor
            :keyword parents: the member devices, in array order
            :type parents: list of :class:`StorageDevice`
            :keyword chunk_size: chunk size for the device
            :type chunk_size: :class:`~.size.Size`
            :keyword str parity: parity algorithm
            :keyword str metadata_version: the version of the device's md metadata
        """
        self._level = None
        self.level = level or "raid1"
        self.chunk_size = chunk_size or mdraid.MD_CHUNK_SIZE
        self.parity = parity
        self.metadata_version = metadata_version or "default"
        StorageDevice.__init__(self, name, fmt=fmt, uuid=uuid, parents=parents,
                               exists=exists)

    @property
    def level(self):
        """ Return the raid level

            :returns: raid level value
            :rtype:   an object that represents a RAID level
        """
        return self._level

    @level.setter
    def level(self, value):
        """ Set the RAID level.

            :param value: new raid level
            :type value: a valid raid level descriptor
            :raises :class:`~.errors.RaidError`: if value is not a valid level
        """
        self._level = mdraid.raid_levels.raid_level(value)

    def _add_parent(self, parent):
        if parent.formatted_device.format.type != "mdmember":
            raise DeviceError("%s is not an MD RAID member" % parent.name)
        Device._add_parent(self, parent)
        parent.formatted_device.format.md_name = self.name

    @property
    def members(self):
        return self.parents[:]

    def _get_size(self):
        """ The array size, limited by the smallest member """
        if len(self.parents) < self.level.min_members:
            return Size(0)
        sizes = [m.size for m in self.parents]
        return Size(self.level.get_size(sizes, superblock_size=mdraid.MD_SUPERBLOCK_SIZE))

    def _set_size(self, newsize):
        raise ValueError("the size of an MD RAID is defined by its members")

    @property
    def disks(self):
        _disks = []
        for member in self.parents:
            for disk in member.disks:
                if disk not in _disks:
                    _disks.append(disk)
        return _disks

    @property
    def dict(self):
        d = super(MDRaidArrayDevice, self).dict
        d.update({"level": str(self.level), "members": [m.name for m in self.parents],
                  "chunk_size": self.chunk_size})
        return d
