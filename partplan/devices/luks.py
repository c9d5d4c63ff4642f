# luks.py
# Device class for LUKS encrypted devices.
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

from ..size import Size
from .storage import StorageDevice

import logging
log = logging.getLogger("partplan")


class LUKSDevice(StorageDevice):

    """ A mapped LUKS device. """
    _type = "luks/dm-crypt"
    _dev_dir = "/dev/mapper"

    def __init__(self, name, fmt=None, uuid=None, parents=None, exists=False):
        """
            :param name: the device name (generally a device node's basename)
            :type name: str
            :keyword exists: does this device exist?
            :type exists: bool
            :keyword parents: a list containing the plain (encrypted) device
            :type parents: list of :class:`StorageDevice`
            :keyword fmt: this device's formatting
            :type fmt: :class:`~.formats.DeviceFormat` or a subclass of it
        """
        StorageDevice.__init__(self, name, fmt=fmt, uuid=uuid, parents=parents,
                               exists=exists)

    @property
    def slave(self):
        """ The plain device this LUKS device is mapped from """
        return self.parents[0]

    def _get_size(self):
        if not self.parents:
            return Size(0)
        return self.slave.size - self.slave.format.metadata_size

    def _set_size(self, newsize):
        raise ValueError("the size of a LUKS device follows its plain device")

    @property
    def disks(self):
        return self.slave.disks

    @property
    def encryption(self):
        return None

    @property
    def filesystem(self):
        if self.format.is_filesystem:
            return self.format
        return None
