# partition.py
# Device class for partitions.
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

from ..devicelibs.partition import PartitionId, PartitionType
from ..size import Size
from .storage import StorageDevice

import logging
log = logging.getLogger("partplan")


class PartitionDevice(StorageDevice):

    """ A disk partition.

        The region of a partition is expressed in blocks of the sector size
        of the device holding it.
    """
    _type = "partition"
    _resizable = True

    def __init__(self, name, fmt=None, uuid=None, parents=None, exists=False,
                 region=None, part_type=PartitionType.PRIMARY, partition_id=None,
                 number=None, boot=False):
        """
            :param name: the device name (generally a device node's basename)
            :type name: str
            :keyword exists: does this device exist?
            :type exists: bool
            :keyword parents: the disk holding the partition
            :type parents: list of :class:`~.devices.disk.Partitionable`
            :keyword fmt: this device's formatting
            :type fmt: :class:`~.formats.DeviceFormat`
            :keyword region: the region of the disk used by the partition
            :type region: :class:`~.devices.lib.Region`
            :keyword part_type: primary, extended or logical
            :type part_type: :class:`~.devicelibs.partition.PartitionType`
            :keyword partition_id: partition type code
            :type partition_id: :class:`~.devicelibs.partition.PartitionId`
            :keyword int number: the partition number
            :keyword bool boot: the legacy boot flag
        """
        if region is None:
            raise ValueError("partitions need a region")
        self.region = region
        self.part_type = part_type
        self.number = number
        self.boot = boot
        StorageDevice.__init__(self, name, fmt=fmt, uuid=uuid, parents=parents,
                               exists=exists)
        if partition_id is None:
            partition_id = PartitionId.EXTENDED if self.is_extended else PartitionId.LINUX
        self.partition_id = partition_id

    def __str__(self):
        s = StorageDevice.__str__(self)
        s += (" part_type: %(type)s  region: %(start)d-%(end)d" %
              {"type": self.part_type.value, "start": self.region.start,
               "end": self.region.end})
        return s

    def _get_size(self):
        return self.region.size

    def _set_size(self, newsize):
        if not isinstance(newsize, Size):
            raise ValueError("new size must be of type Size")
        self.region = self.region.with_size(newsize)

    @property
    def disk(self):
        """ The disk (or disk-like device) this partition resides on """
        return self.parents[0] if self.parents else None

    @property
    def partition_table(self):
        return self.disk.partition_table

    @property
    def is_extended(self):
        return self.part_type == PartitionType.EXTENDED

    @property
    def is_logical(self):
        return self.part_type == PartitionType.LOGICAL

    @property
    def is_primary(self):
        return self.part_type == PartitionType.PRIMARY

    @property
    def resizable(self):
        return self._resizable and self.exists and not self.is_extended

    @property
    def end_overhead(self):
        """ Space after the end of the partition lost to alignment """
        grain = self.partition_table.alignment
        remainder = self.region.end_offset % grain
        if not remainder:
            return Size(0)
        return grain - remainder

    @property
    def logical_partitions(self):
        """ Logical partitions held by this (extended) partition """
        if not self.is_extended:
            return []
        return [p for p in self.disk.logical_partitions]

    @property
    def dict(self):
        d = super(PartitionDevice, self).dict
        d.update({"part_type": self.part_type.value, "number": self.number,
                  "partition_id": self.partition_id.name, "boot": self.boot,
                  "start": self.region.start, "length": self.region.length})
        return d

