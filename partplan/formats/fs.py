# fs.py
# Filesystem classes for the storage planning engine.
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
""" Filesystem classes. """

from enum import Enum

from . import DeviceFormat, register_device_format
from ..devicelibs.partition import PartitionId


class MountByType(Enum):
    """ How a filesystem is referenced in fstab. """
    DEVICE = "device"
    UUID = "uuid"
    LABEL = "label"
    ID = "id"
    PATH = "path"

    @classmethod
    def find(cls, value):
        """ Return the member for the given name, None if unknown. """
        if isinstance(value, cls) or value is None:
            return value
        for member in cls:
            if member.value == str(value).lower():
                return member
        return None


class FS(DeviceFormat):

    """ Filesystem base class. """
    _type = "Abstract Filesystem Class"  # fs type name
    _name = None
    _mountable = True
    _partition_id = PartitionId.LINUX

    def __init__(self, **kwargs):
        """
            :keyword mountpoint: the filesystem's mountpoint
            :type mountpoint: str
            :keyword mount_by: how to reference the filesystem in fstab
            :type mount_by: :class:`MountByType`
            :keyword bool read_only: whether to mount it read only

            See :class:`~.formats.DeviceFormat` for the other keywords.
        """
        DeviceFormat.__init__(self, **kwargs)
        self.mountpoint = kwargs.get("mountpoint")
        self.mount_by = MountByType.find(kwargs.get("mount_by"))
        self.read_only = kwargs.get("read_only", False)

    def __str__(self):
        return "%s filesystem %s (%s)" % (self.type, self.mountpoint or "", self.device)

    @property
    def name(self):
        return self._name or self.type

    @property
    def is_filesystem(self):
        return True

    @property
    def dict(self):
        d = super(FS, self).dict
        d.update({"mountpoint": self.mountpoint, "read_only": self.read_only,
                  "mount_by": self.mount_by.value if self.mount_by else None})
        return d


class Ext2FS(FS):

    """ ext2 filesystem. """
    _type = "ext2"
    _resizable = True


register_device_format(Ext2FS)


class Ext3FS(Ext2FS):

    """ ext3 filesystem. """
    _type = "ext3"


register_device_format(Ext3FS)


class Ext4FS(Ext3FS):

    """ ext4 filesystem. """
    _type = "ext4"


register_device_format(Ext4FS)


class FATFS(FS):

    """ FAT filesystem. """
    _type = "vfat"
    _aliases = ["fat", "fat32"]
    _resizable = True
    _partition_id = PartitionId.DOS32


register_device_format(FATFS)


class EFIFS(FATFS):
    _type = "efi"
    _name = "EFI System Partition"
    _aliases = []
    _partition_id = PartitionId.ESP


register_device_format(EFIFS)


class BTRFS(FS):

    """ btrfs filesystem """
    _type = "btrfs"
    _resizable = True

    def __init__(self, **kwargs):
        """
            :keyword list subvolumes: paths of the subvolumes to create
            :keyword str default_subvolume: prefix of the subvolumes
            :keyword bool quota: enable quota support

            See :class:`FS` for the other keywords.
        """
        FS.__init__(self, **kwargs)
        self.subvolumes = kwargs.get("subvolumes") or []
        self.default_subvolume = kwargs.get("default_subvolume")
        self.quota = kwargs.get("quota", False)
        self.snapshots = kwargs.get("snapshots", False)


register_device_format(BTRFS)


class XFS(FS):

    """ XFS filesystem """
    _type = "xfs"
    # xfs can only grow
    _resizable = False


register_device_format(XFS)


class NTFS(FS):

    """ ntfs filesystem. """
    _type = "ntfs"
    _resizable = True
    _partition_id = PartitionId.NTFS


register_device_format(NTFS)


class SwapSpace(FS):

    """ Swap space """
    _type = "swap"
    _resizable = True
    _partition_id = PartitionId.SWAP

    def __init__(self, **kwargs):
        kwargs.setdefault("mountpoint", "swap")
        FS.__init__(self, **kwargs)


register_device_format(SwapSpace)


class NFS(FS):

    """ NFS filesystem. """
    _type = "nfs"
    _aliases = ["nfs4"]
    _partition_id = None


register_device_format(NFS)


class TmpFS(FS):

    """ tmpfs filesystem. """
    _type = "tmpfs"
    _partition_id = None


register_device_format(TmpFS)
