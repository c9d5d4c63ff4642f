# mdraid.py
# MD RAID constants.
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
from . import raid

# these defaults were determined empirically
MD_SUPERBLOCK_SIZE = Size("2 MiB")
MD_CHUNK_SIZE = Size("512 KiB")

raid_levels = raid.RAIDLevels(["raid0", "raid1", "raid4", "raid5", "raid6", "raid10", "linear"])

# parity algorithms accepted for raid5, raid6 and raid10 arrays
PARITY_ALGORITHMS = ("default", "left_asymmetric", "left_symmetric", "right_asymmetric",
                     "right_symmetric", "first", "last", "near_2", "near_3", "offset_2",
                     "offset_3", "far_2", "far_3")


def short_name(name):
    """ Name of an array without the /dev or /dev/md prefix.

        :param str name: something like "md0", "/dev/md0" or "/dev/md/data"
    """
    for prefix in ("/dev/md/", "/dev/"):
        if name.startswith(prefix):
            return name[len(prefix):]
    return name
