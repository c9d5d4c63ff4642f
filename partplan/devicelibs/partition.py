# partition.py
# Partition ids and partition table types.
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

from enum import Enum

from ..size import Size

# partitions never start before this offset and are aligned to it
PARTITION_ALIGNMENT = Size("1 MiB")

# space reserved at the beginning of every logical partition for its EBR
LOGICAL_PARTITION_OVERHEAD = Size("1 MiB")

# GPT keeps a backup header and partition entries at the end of the disk
GPT_END_OVERHEAD_SECTORS = 33

# first number used by logical partitions on msdos disk labels
FIRST_LOGICAL_NUMBER = 5


class PartitionId(Enum):
    """ On-disk partition type codes. """
    DOS12 = 0x01
    DOS16 = 0x06
    NTFS = 0x07
    DOS32 = 0x0c
    EXTENDED = 0x05
    PREP = 0x41
    SWAP = 0x82
    LINUX = 0x83
    LVM = 0x8e
    RAID = 0xfd
    ESP = 0xef
    BIOS_BOOT = 0x101
    WINDOWS_BASIC_DATA = 0x102
    MICROSOFT_RESERVED = 0x103
    UNKNOWN = 0x0

    @classmethod
    def find(cls, value):
        """ Return the id for a number or a name, None if unknown.

            :param value: an integer code, a name ("linux", "swap"...) or an id
        """
        if isinstance(value, cls) or value is None:
            return value
        if isinstance(value, int):
            for member in cls:
                if member.value == value:
                    return member
            return None
        value = str(value).strip().lower()
        for member in cls:
            if member.name.lower() == value:
                return member
        try:
            return cls.find(int(value, 0))
        except ValueError:
            return None

    @property
    def is_linux_system(self):
        return self in (PartitionId.LINUX, PartitionId.SWAP, PartitionId.LVM,
                        PartitionId.RAID)


class PartitionType(Enum):
    PRIMARY = "primary"
    EXTENDED = "extended"
    LOGICAL = "logical"


class PartitionTableType(Enum):
    MSDOS = "msdos"
    GPT = "gpt"
    IMPLICIT = "implicit"

    @classmethod
    def find(cls, value):
        if isinstance(value, cls) or value is None:
            return value
        value = str(value).strip().lower()
        if value == "dos":
            value = "msdos"
        for member in cls:
            if member.value == value:
                return member
        return None
