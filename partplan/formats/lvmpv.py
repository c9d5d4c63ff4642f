# lvmpv.py
# Device format classes for LVM physical volumes.
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
from ..devicelibs import lvm
from ..devicelibs.partition import PartitionId


class LVMPhysicalVolume(DeviceFormat):

    """ Marks a device as storage for an LVM volume group.

        :attr:`vg_name` is set by the volume group the device is added to
        and stays None for an orphan PV.
    """
    _type = "lvmpv"
    _name = "physical volume (LVM)"
    _aliases = ["LVM2_member", "lvm"]
    _partition_id = PartitionId.LVM

    def __init__(self, **kwargs):
        """
            :keyword str vg_name: the volume group using this PV
            :keyword pe_start: where the first extent starts
            :type pe_start: :class:`~.size.Size`
        """
        DeviceFormat.__init__(self, **kwargs)
        self.vg_name = kwargs.get("vg_name")
        self.pe_start = kwargs.get("pe_start", lvm.LVM_PE_START)

    @property
    def dict(self):
        d = super(LVMPhysicalVolume, self).dict
        d.update({"vg_name": self.vg_name, "pe_start": self.pe_start})
        return d


register_device_format(LVMPhysicalVolume)
