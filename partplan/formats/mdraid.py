# mdraid.py
# Device format classes for MD RAID members.
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


class MDRaidMember(DeviceFormat):

    """ An mdraid member disk. """
    _type = "mdmember"
    _name = "software RAID"
    _aliases = ["linux_raid_member", "raid"]
    _partition_id = PartitionId.RAID

    def __init__(self, **kwargs):
        """
            :keyword md_uuid: the UUID of the array this device belongs to
            :keyword str md_name: name of the array this device belongs to
        """
        DeviceFormat.__init__(self, **kwargs)
        self.md_uuid = kwargs.get("md_uuid")
        self.md_name = kwargs.get("md_name")


register_device_format(MDRaidMember)
