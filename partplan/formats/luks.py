# luks.py
# Device format classes for LUKS encryption.
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
from ..devicelibs import crypto
from ..devicelibs.partition import PartitionId

import logging
log = logging.getLogger("partplan")


class LUKS(DeviceFormat):

    """ A LUKS device. """
    _type = "luks"
    _name = "LUKS"
    _aliases = ["crypto_LUKS", "luks1", "luks2"]
    _partition_id = PartitionId.LINUX

    def __init__(self, **kwargs):
        """
            :keyword passphrase: the LUKS passphrase
            :type passphrase: str
            :keyword luks_version: luks format version ("luks1" or "luks2")
            :type luks_version: str
            :keyword name: the name of the mapped device
            :type name: str
            :keyword cipher: the cipher to use
            :keyword key_size: the key size in bits
            :type key_size: int
            :keyword pbkdf: key derivation function (luks2 only)
            :type pbkdf: str
        """
        DeviceFormat.__init__(self, **kwargs)
        self.passphrase = kwargs.get("passphrase")
        self.luks_version = kwargs.get("luks_version") or crypto.DEFAULT_LUKS_VERSION
        if not crypto.is_luks_version_valid(self.luks_version):
            raise ValueError("unknown LUKS version %s" % self.luks_version)
        self.map_name = kwargs.get("name")
        self.cipher = kwargs.get("cipher")
        self.key_size = kwargs.get("key_size")
        self.pbkdf = kwargs.get("pbkdf")

    def __repr__(self):
        return "%s cipher=%s map_name=%s version=%s>" % (DeviceFormat.__repr__(self)[:-1],
                                                        self.cipher, self.map_name,
                                                        self.luks_version)

    @property
    def metadata_size(self):
        """ Space used by the LUKS header """
        return crypto.luks_metadata_size(self.luks_version)


register_device_format(LUKS)
