# compound.py
# Planned software RAID, bcache and btrfs devices.
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

from ..devicelibs import mdraid, btrfs
from .device import PlannedDevice
from .mixins import CanBeEncrypted, CanBeFormatted, CanBeComponent

import logging
log = logging.getLogger("partplan")


class PartitionedDevice(object):

    """ Mixin for planned devices that can hold a partition table. """

    def _init_partitioned(self):
        self.ptable_type = None
        self.partitions = []

    @property
    def partitioned(self):
        return bool(self.partitions)


class PlannedMd(PlannedDevice, CanBeEncrypted, CanBeFormatted, CanBeComponent, PartitionedDevice):

    """ A software RAID to create (or to reuse). """

    _to_string_attrs = ["name", "md_level", "mount_point", "reuse_name"]

    def __init__(self, name=None, mount_point=None, filesystem_type=None):
        PlannedDevice.__init__(self)
        self._init_can_be_formatted(mount_point, filesystem_type)
        self._init_can_be_encrypted()
        self._init_can_be_component()
        self._init_partitioned()
        self.name = name
        self._md_level = mdraid.raid_levels.raid_level("raid1")
        self.chunk_size = None
        self.md_parity = None
        self.devices_order = []

    @property
    def md_level(self):
        return self._md_level

    @md_level.setter
    def md_level(self, level):
        # raises RaidError for unknown levels
        self._md_level = mdraid.raid_levels.raid_level(level)

    @property
    def md_name(self):
        """ Name of the array without any /dev prefix """
        return mdraid.short_name(self.name)

    def name_matches(self, name):
        """ Whether name refers to this RAID """
        return name is not None and mdraid.short_name(name) == self.md_name

    def sorted_members(self, devices):
        """ The given member devices, sorted following :attr:`devices_order` """
        def position(device):
            for idx, name in enumerate(self.devices_order):
                if name in (device.name, device.path):
                    return (idx, "")
            return (len(self.devices_order), device.name)

        return sorted(devices, key=position)


class PlannedBcache(PlannedDevice, CanBeEncrypted, CanBeFormatted, CanBeComponent,
                    PartitionedDevice):

    """ A bcache device to create (or to reuse). """

    _to_string_attrs = ["name", "cache_mode", "mount_point", "reuse_name"]

    def __init__(self, name=None, mount_point=None, filesystem_type=None):
        PlannedDevice.__init__(self)
        self._init_can_be_formatted(mount_point, filesystem_type)
        self._init_can_be_encrypted()
        self._init_can_be_component()
        self._init_partitioned()
        self.name = name
        self.cache_mode = None

    @property
    def bcache_name(self):
        return self.name.rsplit("/", 1)[-1] if self.name else None

    def name_matches(self, name):
        return name is not None and name.rsplit("/", 1)[-1] == self.bcache_name


class PlannedBtrfs(PlannedDevice, CanBeFormatted):

    """ A multi-device btrfs filesystem to create (or to reuse).

        The members are the planned devices whose btrfs_name is the name
        of this filesystem.
    """

    _to_string_attrs = ["name", "mount_point", "reuse_name"]

    def __init__(self, name=None, mount_point=None):
        PlannedDevice.__init__(self)
        self._init_can_be_formatted(mount_point, "btrfs")
        self.name = name
        self._data_raid_level = None
        self._metadata_raid_level = None

    @property
    def data_raid_level(self):
        return self._data_raid_level

    @data_raid_level.setter
    def data_raid_level(self, level):
        self._data_raid_level = btrfs.raid_levels.raid_level(level) if level else None

    @property
    def metadata_raid_level(self):
        return self._metadata_raid_level

    @metadata_raid_level.setter
    def metadata_raid_level(self, level):
        self._metadata_raid_level = btrfs.metadata_levels.raid_level(level) if level else None
