# size_parser.py
# Parsing of the size expressions used in profiles.
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
from decimal import Decimal

from ..size import Size, parse_spec
from ..volume_spec import VolumeSpecifications

import logging
log = logging.getLogger("partplan")

SWAP_AUTO_MIN = Size("512 MiB")
SWAP_AUTO_MAX = Size("2 GiB")

_PERCENT_RE = re.compile(r"^(?P<number>\d+(\.\d+)?)\s*%$")


class SizeInfo(object):

    """ Result of parsing a size expression.

        When :attr:`percentage` is set, min and max are left to be
        calculated relative to the device hosting the planned device.
    """

    def __init__(self, min_size, max_size, percentage=None, unlimited=False):
        self.min = min_size
        self.max = max_size
        self.percentage = percentage
        self.unlimited = unlimited

    def __repr__(self):
        return "SizeInfo(min=%s, max=%s, percentage=%s, unlimited=%s)" % (
            self.min, self.max, self.percentage, self.unlimited)


class SizeParser(object):

    """ Turns size tokens like "10", "5GB", "50%", "max" or "auto" into
        size limits.
    """

    def __init__(self, volume_specs=None):
        """
            :keyword volume_specs: defaults for "auto" sizes, an empty table
                by default
            :type volume_specs: :class:`~.volume_spec.VolumeSpecifications`
        """
        self.volume_specs = volume_specs if volume_specs is not None else VolumeSpecifications()

    def parse(self, size_spec, mount_point=None, min_size=None, max_size=None):
        """ Parse a size expression.

            :param size_spec: the expression, None or empty for the defaults
            :param str mount_point: mount point, used by "auto"
            :keyword min_size: default and minimum value
            :type min_size: :class:`~.size.Size`
            :keyword max_size: default and maximum value
            :type max_size: :class:`~.size.Size`
            :returns: the parsed limits, None if the expression is invalid
            :rtype: :class:`SizeInfo` or None
        """
        min_size = Size(1) if min_size is None else min_size
        max_size = Size.unlimited() if max_size is None else max_size

        spec = "" if size_spec is None else str(size_spec).strip()
        if not spec:
            return SizeInfo(min_size, max_size, unlimited=max_size.is_unlimited)

        spec = spec.lower()
        if spec == "max":
            return SizeInfo(min_size, Size.unlimited(), unlimited=True)

        if spec == "auto":
            return self._auto_size(mount_point)

        match = _PERCENT_RE.match(spec)
        if match:
            percentage = Decimal(match.group("number"))
            if not 0 < percentage <= 100:
                log.warning("invalid percentage %s", spec)
                return None
            return SizeInfo(min_size, max_size, percentage=percentage)

        try:
            number = parse_spec(spec, legacy_units=True)
        except ValueError:
            log.warning("invalid size %s", spec)
            return None

        if number <= 0:
            log.warning("invalid size %s", spec)
            return None

        size = Size(number)
        return SizeInfo(size, size)

    def _auto_size(self, mount_point):
        spec = self.volume_specs.for_mount_point(mount_point)
        if spec is not None:
            return SizeInfo(spec.min_size, spec.max_size)
        if mount_point == "swap":
            return SizeInfo(SWAP_AUTO_MIN, SWAP_AUTO_MAX)
        log.warning("no automatic size for %s", mount_point)
        return None
