# crypto.py
# LUKS constants.
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

LUKS1_METADATA_SIZE = Size("2 MiB")
LUKS2_METADATA_SIZE = Size("16 MiB")

LUKS_METADATA_SIZES = {"luks1": LUKS1_METADATA_SIZE,
                       "luks2": LUKS2_METADATA_SIZE}
DEFAULT_LUKS_VERSION = "luks1"


def luks_metadata_size(luks_version=None):
    """ Space used by the LUKS header of the given version. """
    return LUKS_METADATA_SIZES[luks_version or DEFAULT_LUKS_VERSION]


def is_luks_version_valid(luks_version):
    return luks_version in LUKS_METADATA_SIZES
