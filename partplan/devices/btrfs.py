# btrfs.py
# Device class for multi-device btrfs filesystems.
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

from ..devicelibs import btrfs
from ..errors import DeviceError
from ..formats import get_format
from ..size import Size
from .device import Device
from .storage import StorageDevice

import logging
log = logging.getLogger("partplan")


class BTRFSVolumeDevice(StorageDevice):

    """ A btrfs filesystem spanning one or more block devices.

        The member devices hold a btrfs format; the volume device holds the
        format describing the whole filesystem (mount point, label...).
    """
    _type = "btrfs volume"
    _dev_dir = None

    def __init__(self, name, parents=None, data_level=None, metadata_level=None,
                 fmt=None, uuid=None, exists=False):
        """
            :param name: the volume name
            :type name: str
            :keyword parents: the member devices
            :type parents: list of :class:`StorageDevice`
            :keyword data_level: the data RAID level
            :type data_level: any valid RAID level descriptor
            :keyword metadata_level: the metadata RAID level
            :type metadata_level: any valid RAID level descriptor
        """
        self.data_level = btrfs.raid_levels.raid_level(data_level) if data_level else None
        self.metadata_level = btrfs.metadata_levels.raid_level(metadata_level) if metadata_level else None
        fmt = fmt or get_format("btrfs", uuid=uuid, exists=exists)
        StorageDevice.__init__(self, name, fmt=fmt, uuid=uuid, parents=parents,
                               exists=exists)

    def _add_parent(self, parent):
        if parent.formatted_device.format.type != "btrfs":
            raise DeviceError("%s is not a btrfs member" % parent.name)
        Device._add_parent(self, parent)

    @property
    def path(self):
        return "btrfs:%s" % self.name

    @property
    def members(self):
        return self.parents[:]

    def _get_size(self):
        sizes = [m.size for m in self.parents]
        if not sizes:
            return Size(0)
        level = self.data_level or btrfs.raid_levels.raid_level("single")
        if len(sizes) < level.min_members:
            return Size(0)
        return Size(level.get_size(sizes))

    def _set_size(self, newsize):
        raise ValueError("the size of a btrfs volume is defined by its members")

    @property
    def disks(self):
        _disks = []
        for member in self.parents:
            for disk in member.disks:
                if disk not in _disks:
                    _disks.append(disk)
        return _disks
