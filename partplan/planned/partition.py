# partition.py
# Planned partitions and whole disks.
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

from ..devicelibs.partition import PartitionId
from ..size import Size
from .device import PlannedDevice
from .mixins import HasSize, CanBeEncrypted, CanBeFormatted, CanBeComponent

import logging
log = logging.getLogger("partplan")


class PlannedPartition(PlannedDevice, HasSize, CanBeEncrypted, CanBeFormatted, CanBeComponent):

    """ A partition to create (or to reuse) in a partitionable device. """

    _to_string_attrs = ["mount_point", "reuse_name", "min_size", "max_size", "disk",
                        "max_start_offset", "weight"]

    def __init__(self, mount_point=None, filesystem_type=None):
        PlannedDevice.__init__(self)
        self._init_has_size()
        self._init_can_be_formatted(mount_point, filesystem_type)
        self._init_can_be_encrypted()
        self._init_can_be_component()
        self.partition_id = None
        self.primary = False
        self.disk = None
        self.max_start_offset = None
        self.ptable_type = None
        self.boot = False

    @property
    def effective_partition_id(self):
        """ Partition id for the new partition """
        if self.partition_id is not None:
            return self.partition_id
        if self.lvm_volume_group_name:
            return PartitionId.LVM
        if self.raid_name:
            return PartitionId.RAID
        if self.swap:
            return PartitionId.SWAP
        return PartitionId.LINUX

    def shrink(self, devicegraph):
        """ Whether reusing the partition makes it smaller """
        if not (self.resize and self.reusing):
            return False
        device = self.find_reused(devicegraph)
        if device is None:
            return False
        return self._target_size(device) < device.size

    def _target_size(self, device):
        if self.max_size.is_unlimited:
            return device.size
        return self.max_size

    def _reuse(self, device, devicegraph):
        if self.resize:
            target = self._target_size(device)
            if target != device.size:
                devicegraph.resize_device(device, target)
        if self.partition_id is not None and self.reformat:
            device.partition_id = self.partition_id
        super(PlannedPartition, self)._reuse(device, devicegraph)


class PlannedDisk(PlannedDevice, CanBeEncrypted, CanBeFormatted, CanBeComponent):

    """ A whole disk (or disk-like device) that is formatted or used as a
        component directly, or that holds a new set of partitions.
    """

    _to_string_attrs = ["reuse_name", "mount_point", "ptable_type"]

    def __init__(self, mount_point=None, filesystem_type=None):
        PlannedDevice.__init__(self)
        self._init_can_be_formatted(mount_point, filesystem_type)
        self._init_can_be_encrypted()
        self._init_can_be_component()
        self.ptable_type = None
        self.partitions = []

    @property
    def min_size(self):
        return Size(0)

    def _reuse(self, device, devicegraph):
        if self.partitions:
            return
        if self.reformat or self.component or device.filesystem is None:
            devicegraph.wipe_device(device)
            self.format(device, devicegraph)
        else:
            self.setup_reused_filesystem(device, devicegraph)
