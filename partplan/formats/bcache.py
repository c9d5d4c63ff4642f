# bcache.py
# Device format classes for bcache members.
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
from ..devicelibs.partition import PartitionId

import logging
log = logging.getLogger("partplan")


class BcacheMember(DeviceFormat):

    """ A bcache backing or caching device. """
    _type = "bcache"
    _name = "bcache"
    _partition_id = PartitionId.LINUX

    BACKING = "backing"
    CACHING = "caching"

    def __init__(self, **kwargs):
        """
            :keyword role: "backing" or "caching"
            :keyword bcache_name: name of the bcache device it belongs to
        """
        DeviceFormat.__init__(self, **kwargs)
        self.role = kwargs.get("role", self.BACKING)
        if self.role not in (self.BACKING, self.CACHING):
            raise ValueError("invalid bcache role %s" % self.role)
        self.bcache_name = kwargs.get("bcache_name")


register_device_format(BcacheMember)
