# mixins.py
# Capabilities shared by several kinds of planned devices.
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

from ..devicelibs import crypto
from ..flags import flags
from ..formats import get_format
from ..size import Size, ROUND_DOWN

import logging
log = logging.getLogger("partplan")


class HasSize(object):

    """ Mixin for planned devices with a flexible size.

        The final size of the device is calculated distributing the
        available space among all the devices sharing it, see
        :func:`~.partitioning.distribute_space`.
    """

    def _init_has_size(self):
        self.size = Size(0)
        self._min_size = Size(0)
        self._max_size = Size.unlimited()
        self._weight = 0
        self._percent_size = None

    @property
    def min_size(self):
        """ Minimum size, always zero for a reused device """
        if getattr(self, "reuse_name", None):
            return Size(0)
        return self._min_size

    @min_size.setter
    def min_size(self, size):
        size = Size(size)
        if size < Size(0):
            raise ValueError("negative minimum size %s" % size)
        if size > self._max_size:
            raise ValueError("minimum size %s is bigger than the maximum %s" % (size, self._max_size))
        self._min_size = size

    @property
    def max_size(self):
        return self._max_size

    @max_size.setter
    def max_size(self, size):
        size = Size(size)
        if size < self._min_size:
            raise ValueError("maximum size %s is smaller than the minimum %s" % (size, self._min_size))
        self._max_size = size

    def set_size_limits(self, min_size, max_size):
        """ Set both limits at once, validating them together. """
        min_size = Size(min_size)
        max_size = Size(max_size)
        if min_size > max_size:
            raise ValueError("minimum size %s is bigger than the maximum %s" % (min_size, max_size))
        self._min_size = Size(0)
        self._max_size = max_size
        self.min_size = min_size

    @property
    def weight(self):
        """ Share of the extra space this device gets """
        return self._weight

    @weight.setter
    def weight(self, weight):
        if weight < 0:
            raise ValueError("negative weight %s" % weight)
        self._weight = weight

    @property
    def percent_size(self):
        """ Size as a percentage of the device holding it, None if not used """
        return self._percent_size

    @percent_size.setter
    def percent_size(self, percent):
        if percent is not None and not 0 <= percent <= 100:
            raise ValueError("invalid percentage %s" % percent)
        self._percent_size = percent

    def size_in(self, container):
        """ Size corresponding to :attr:`percent_size` in the given device """
        block_size = getattr(container, "sector_size", Size(1))
        return (container.size * self.percent_size / 100).round_to_nearest(block_size,
                                                                          rounding=ROUND_DOWN)


class CanBeFormatted(object):

    """ Mixin for planned devices that can hold a filesystem. """

    def _init_can_be_formatted(self, mount_point=None, filesystem_type=None):
        self.mount_point = mount_point
        self.filesystem_type = filesystem_type
        self.label = None
        self.uuid = None
        self.mount_by = None
        self.fstab_options = None
        self.mkfs_options = None
        self.read_only = False
        self.reformat = False
        self.subvolumes = []
        self.default_subvolume = None
        self.snapshots = False

    @property
    def btrfs(self):
        return self.filesystem_type == "btrfs"

    @property
    def root(self):
        return self.mount_point == "/"

    @property
    def swap(self):
        return self.filesystem_type == "swap" or self.mount_point == "swap"

    def final_device(self, device, devicegraph):  # pylint: disable=unused-argument
        """ The device that will hold the filesystem """
        return device

    def format_args(self):
        """ Keyword arguments for the new format """
        args = {"mountpoint": self.mount_point or None, "label": self.label,
                "uuid": self.uuid, "mount_by": self.mount_by,
                "read_only": self.read_only, "create_options": self.mkfs_options}
        if self.fstab_options:
            args["options"] = ",".join(self.fstab_options)
        if self.btrfs:
            args.update({"subvolumes": list(self.subvolumes),
                         "default_subvolume": self.default_subvolume,
                         "snapshots": self.snapshots and self.root})
        return args

    def format(self, device, devicegraph):
        """ Create the filesystem (and the encryption, if needed) on device.

            :param device: the plain device
            :param devicegraph: the graph the device belongs to
            :type devicegraph: :class:`~.devicegraph.Devicegraph`
            :returns: the new format or None if no filesystem was requested
        """
        final = self.final_device(device, devicegraph)
        if not self.filesystem_type:
            return None

        if final.children:
            devicegraph.recursive_remove(final, remove_device=False)
        final.format = get_format(self.filesystem_type, **self.format_args())
        log.debug("formatted %s as %s", final.name, self.filesystem_type)
        return final.format

    def setup_reused_filesystem(self, device, devicegraph):
        """ Format the reused device again or just set its mount point """
        if self.reformat:
            return self.format(device, devicegraph)

        filesystem = device.filesystem
        if filesystem is not None:
            if self.mount_point:
                filesystem.mountpoint = self.mount_point
            if self.fstab_options:
                filesystem.options = ",".join(self.fstab_options)
            if self.mount_by:
                filesystem.mount_by = self.mount_by
        return filesystem


class CanBeEncrypted(object):

    """ Mixin for planned devices that can be encrypted.

        It must be listed before :class:`CanBeFormatted` in the bases of the
        planned device, so it can put the LUKS layer below the filesystem.
    """

    def _init_can_be_encrypted(self):
        self.encryption_password = None
        self.encryption_method = None

    @property
    def encrypt(self):
        return bool(self.encryption_method or self.encryption_password)

    @staticmethod
    def encryption_overhead(method=None):
        """ Space used by the encryption header of the given method """
        if method is None:
            return Size(0)
        return crypto.luks_metadata_size(method)

    @property
    def effective_encryption_method(self):
        if self.encryption_method:
            return self.encryption_method
        return "luks2" if flags.luks2_default else "luks1"

    def _create_encryption(self):
        if not self.encrypt:
            return False
        if not getattr(self, "reusing", False):
            return True
        return getattr(self, "reformat", False)

    def final_device(self, device, devicegraph):
        if not self._create_encryption():
            log.debug("no need to encrypt %s", device.name)
            return super(CanBeEncrypted, self).final_device(device, devicegraph)

        if device.children:
            devicegraph.recursive_remove(device, remove_device=False)
        luks = devicegraph.encrypt_device(device, self.encryption_password,
                                          luks_version=self.effective_encryption_method)
        log.info("%s encrypted, using %s", device.name, luks.name)
        return luks


class CanBeComponent(object):

    """ Mixin for planned devices that can be part of another device.

        A device can be used as LVM physical volume, MD RAID member, Btrfs
        member or Bcache backing/caching device. The bigger device is
        referenced by name.
    """

    def _init_can_be_component(self):
        self.lvm_volume_group_name = None
        self.raid_name = None
        self.btrfs_name = None
        self.bcache_backing_for = None
        self.bcache_caching_for = None

    @property
    def component(self):
        """ Whether the device is part of another one """
        return any((self.lvm_volume_group_name, self.raid_name, self.btrfs_name,
                    self.bcache_backing_for, self.bcache_caching_for))

    def pv_for(self, vg_name):
        return self.lvm_volume_group_name is not None and self.lvm_volume_group_name == vg_name

    def btrfs_member_for(self, btrfs_name):
        return self.btrfs_name is not None and self.btrfs_name == btrfs_name
