# cache.py
# Device class for bcache devices.
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

from ..errors import DeviceError
from ..size import Size
from .device import Device
from .disk import Partitionable
from .storage import StorageDevice

import logging
log = logging.getLogger("partplan")

# space used by the bcache superblock on the backing device
BCACHE_SUPERBLOCK_SIZE = Size("8 KiB")

CACHE_MODES = ("writethrough", "writeback", "writearound", "none")


class BcacheDevice(Partitionable, StorageDevice):

    """ A bcache device, made of a backing device and an optional caching one. """
    _type = "bcache"

    def __init__(self, name, backing_device=None, caching_device=None, cache_mode=None,
                 fmt=None, exists=False, uuid=None):
        """
            :param name: the device name (generally a device node's basename)
            :type name: str
            :keyword backing_device: the slow device holding the data
            :type backing_device: :class:`StorageDevice`
            :keyword caching_device: the fast device used as cache
            :type caching_device: :class:`StorageDevice`
            :keyword str cache_mode: one of writethrough, writeback, writearound, none
        """
        if cache_mode is not None and cache_mode not in CACHE_MODES:
            raise ValueError("invalid cache mode %s" % cache_mode)
        self.cache_mode = cache_mode or "writethrough"
        parents = [d for d in (backing_device, caching_device) if d is not None]
        StorageDevice.__init__(self, name, fmt=fmt, uuid=uuid, parents=parents,
                               exists=exists)

    def _add_parent(self, parent):
        if parent.formatted_device.format.type != "bcache":
            raise DeviceError("%s is not a bcache member" % parent.name)
        Device._add_parent(self, parent)
        parent.formatted_device.format.bcache_name = self.name

    def _member(self, role):
        return next((p for p in self.parents if p.formatted_device.format.role == role), None)

    @property
    def backing_device(self):
        return self._member("backing")

    @property
    def caching_device(self):
        return self._member("caching")

    def attach_caching_device(self, device):
        """ Add a caching device to a bcache that has none """
        if self.caching_device is not None:
            raise DeviceError("%s already has a caching device" % self.name)
        self.parents.append(device)

    def _get_size(self):
        backing = self.backing_device
        if backing is None:
            return Size(0)
        return backing.size - BCACHE_SUPERBLOCK_SIZE

    def _set_size(self, newsize):
        raise ValueError("the size of a bcache device is defined by its backing device")

    @property
    def disks(self):
        backing = self.backing_device
        return backing.disks if backing else []
