# storage.py
# Base class for block device classes.
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

from ..formats import get_format
from ..size import Size
from .device import Device
from .lib import LINUX_SECTOR_SIZE, ResizeInfo

import logging
log = logging.getLogger("partplan")


class StorageDevice(Device):

    """ A block device: something with a size and a format. """

    _type = "storage"
    _dev_dir = "/dev"
    _resizable = False                  # the device type supports resizing
    _partitionable = False
    _is_disk = False
    _encrypted = False

    def __init__(self, name, fmt=None, uuid=None, size=None, parents=None,
                 exists=False):
        """
            :param str name: the device name, usually the basename of its node
            :keyword fmt: the format on the device, none if not given
            :type fmt: :class:`~.formats.DeviceFormat`
            :keyword str uuid: the device's own UUID (not the filesystem's)
            :keyword size: the device's size
            :type size: :class:`~.size.Size`
            :keyword parents: the devices this one is built on
            :type parents: :class:`Device` or a list of them
            :keyword bool exists: whether the device is already on disk
        """
        if isinstance(parents, Device):
            parents = [parents]

        if not exists and not self.is_name_valid(name):
            raise ValueError("%s is not a valid name for a %s" % (name, self._type))

        self.exists = exists
        self.uuid = uuid
        self._size = Size(0) if size is None else Size(size)
        self._format = get_format(None)
        self._resize_info = None
        super(StorageDevice, self).__init__(name, parents=parents)

        self.format = fmt

    def __str__(self):
        desc = "%s %s %s" % ("existing" if self.exists else "new", self.size,
                             super(StorageDevice, self).__str__())
        if self.format.type:
            desc += " with %s" % self.format
        return desc

    @property
    def dict(self):
        d = super(StorageDevice, self).dict
        d.update({"exists": self.exists, "size": self.size, "path": self.path,
                  "format": self.format.dict})
        return d

    @property
    def path(self):
        """ The device node """
        return "%s/%s" % (self._dev_dir, self.name)

    @property
    def sector_size(self):
        return LINUX_SECTOR_SIZE

    def _get_size(self):
        return self._size

    def _set_size(self, newsize):
        if not isinstance(newsize, Size):
            raise ValueError("%r is not a Size" % (newsize,))
        self._size = newsize

    size = property(lambda d: d._get_size(),
                    lambda d, s: d._set_size(s),
                    doc="The device's size")

    def _get_format(self):
        return self._format

    def _set_format(self, fmt):
        if fmt is None:
            fmt = get_format(None, exists=self.exists)
        fmt.device = self.path
        self._format = fmt

    format = property(lambda d: d._get_format(),
                      lambda d, f: d._set_format(f),
                      doc="The format on the device")

    @property
    def partitionable(self):
        return self._partitionable

    @property
    def is_disk(self):
        return self._is_disk

    @property
    def encrypted(self):
        """ True if this device is the plain layer of a LUKS device. """
        return self.format.type == "luks"

    @property
    def encryption(self):
        """ The LUKS device built on top of this one, if any. """
        return next((c for c in self.children if c.type == "luks/dm-crypt"), None)

    @property
    def filesystem(self):
        """ The filesystem of the device, looking through its encryption. """
        if self.encryption:
            return self.encryption.filesystem
        if self.format.is_filesystem:
            return self.format
        return None

    @property
    def formatted_device(self):
        """ The device that actually holds the format (the LUKS device when
            this one is encrypted).
        """
        return self.encryption or self

    @property
    def disks(self):
        """ A list of all disks this device depends on, including itself. """
        _disks = []
        for parent in self.parents:
            for disk in parent.disks:
                if disk not in _disks:
                    _disks.append(disk)

        if self.is_disk and not self.format.type == "mdmember":
            _disks.append(self)

        return _disks

    @property
    def resizable(self):
        return self._resizable and self.exists

    def _default_resize_info(self):
        fmt = self.formatted_device.format
        if not self.resizable or not (fmt.resizable or fmt.type is None):
            return ResizeInfo(False, self.size, self.size)
        min_size = max(fmt.min_size, Size("1 MiB"))
        if self.encryption:
            min_size += self.format.metadata_size
        return ResizeInfo(min_size < self.size, min(min_size, self.size), self.size)

    def resize_info(self):
        """ Limits for resizing this device.

            :rtype: :class:`~.lib.ResizeInfo`
        """
        if self._resize_info is not None:
            return self._resize_info
        return self._default_resize_info()

    def set_resize_info(self, info):
        """ Override the resize limits calculated for this device. """
        self._resize_info = info

    @property
    def recoverable_size(self):
        """ Space that could be freed by shrinking the device. """
        info = self.resize_info()
        if not info.resize_ok:
            return Size(0)
        return self.size - info.min_size

