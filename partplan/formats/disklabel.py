# disklabel.py
# Device format classes for partition tables.
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

from . import DeviceFormat, register_device_format
from ..devicelibs.partition import PartitionTableType, PartitionType
from ..devicelibs.partition import PARTITION_ALIGNMENT, GPT_END_OVERHEAD_SECTORS
from ..size import Size

import logging
log = logging.getLogger("partplan")


class DiskLabel(DeviceFormat):

    """ Disklabel """
    _type = "disklabel"
    _name = "partition table"
    _aliases = ["partition_table"]

    _max_primary = {PartitionTableType.MSDOS: 4,
                    PartitionTableType.GPT: 128,
                    PartitionTableType.IMPLICIT: 1}

    def __init__(self, **kwargs):
        """
            :keyword label_type: type of disklabel to create
            :type label_type: :class:`~.devicelibs.partition.PartitionTableType` or str
            :keyword sector_size: sector size of the device holding the label
            :type sector_size: :class:`~.size.Size`
        """
        DeviceFormat.__init__(self, **kwargs)
        self._label_type = PartitionTableType.find(kwargs.get("label_type")) or PartitionTableType.GPT
        self.sector_size = kwargs.get("sector_size", Size(512))

    def __str__(self):
        return "%s partition table (%s)" % (self.label_type.value, self.device)

    @property
    def label_type(self):
        """ The disklabel type (eg: 'gpt', 'msdos') """
        return self._label_type

    @property
    def max_primary(self):
        """ Maximum number of primary (or extended) partitions """
        return self._max_primary[self._label_type]

    @property
    def extended_possible(self):
        """ Whether the label supports an extended partition """
        return self._label_type == PartitionTableType.MSDOS

    @property
    def boot_flag_supported(self):
        """ Whether partitions on this label carry a legacy boot flag """
        return self._label_type == PartitionTableType.MSDOS

    @property
    def alignment(self):
        """ Alignment grain for the start of partitions """
        if self._label_type == PartitionTableType.IMPLICIT:
            return self.sector_size
        return PARTITION_ALIGNMENT

    @property
    def start_overhead(self):
        """ Space at the start of the device not usable by partitions """
        if self._label_type == PartitionTableType.IMPLICIT:
            return Size(0)
        return PARTITION_ALIGNMENT

    @property
    def end_overhead(self):
        """ Space at the end of the device not usable by partitions """
        if self._label_type == PartitionTableType.GPT:
            return self.sector_size * GPT_END_OVERHEAD_SECTORS
        return Size(0)

    def partition_type_supported(self, part_type):
        if part_type == PartitionType.PRIMARY:
            return True
        return self.extended_possible

    @property
    def dict(self):
        d = super(DiskLabel, self).dict
        d.update({"label_type": self.label_type.value})
        return d


register_device_format(DiskLabel)
