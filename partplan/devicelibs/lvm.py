# lvm.py
# LVM constants.
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

import re

from ..size import Size, ROUND_DOWN, ROUND_UP

# metadata area at the beginning of every physical volume
LVM_PE_START = Size("1 MiB")
# default physical extent size of new volume groups
LVM_PE_SIZE = Size("4 MiB")

# vgname + lvname must fit in the device-mapper name; keep each half short
LVM_MAX_NAME_LEN = 55

_NAME_RE = re.compile(r'^[a-zA-Z0-9+_.][a-zA-Z0-9+_.-]*$')


def is_lvm_name_valid(name):
    """ Whether name can be used for a volume group or a logical volume.

        :param str name: the candidate name
        :rtype: bool
    """
    if not name or name in (".", ".."):
        return False
    if len(name) > LVM_MAX_NAME_LEN:
        return False
    return _NAME_RE.match(name) is not None


def align_to_extents(size, extent_size, roundup=False):
    """ Round a size to a multiple of the extent size. """
    return size.round_to_nearest(extent_size, rounding=ROUND_UP if roundup else ROUND_DOWN)


def usable_pv_size(pv_size, extent_size, overhead=LVM_PE_START):
    """ Space a physical volume of pv_size contributes to its volume group.

        :param pv_size: size of the device holding the PV
        :type pv_size: :class:`~.size.Size`
        :param extent_size: the VG's extent size
        :type extent_size: :class:`~.size.Size`
        :keyword overhead: space of the PV not usable for extents
        :type overhead: :class:`~.size.Size`
    """
    usable = pv_size - overhead
    if usable < Size(0):
        return Size(0)
    return align_to_extents(usable, extent_size)


def dm_name(vg_name, lv_name):
    """ Device-mapper name of a logical volume ("vg-lv", dashes doubled). """
    return "%s-%s" % (vg_name.replace("-", "--"), lv_name.replace("-", "--"))
