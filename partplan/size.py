# size.py
# Python module to represent storage sizes
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
from collections import namedtuple
from decimal import Decimal, InvalidOperation
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP as _DECIMAL_HALF_UP
import functools

Unit = namedtuple("Unit", ["factor", "abbr"])

B = Unit(1, "B")
KiB = Unit(1024, "KiB")
MiB = Unit(1024 ** 2, "MiB")
GiB = Unit(1024 ** 3, "GiB")
TiB = Unit(1024 ** 4, "TiB")
PiB = Unit(1024 ** 5, "PiB")
EiB = Unit(1024 ** 6, "EiB")

KB = Unit(1000, "KB")
MB = Unit(1000 ** 2, "MB")
GB = Unit(1000 ** 3, "GB")
TB = Unit(1000 ** 4, "TB")
PB = Unit(1000 ** 5, "PB")
EB = Unit(1000 ** 6, "EB")

ROUND_UP = "up"
ROUND_DOWN = "down"
ROUND_HALF_UP = "half-up"

_BINARY_UNITS = [B, KiB, MiB, GiB, TiB, PiB, EiB]
_DECIMAL_UNITS = [KB, MB, GB, TB, PB, EB]

# single letter prefixes ("5 G", "5g") are always binary
_PREFIXES = "KMGTPE"

_SPEC_RE = re.compile(r"^\s*(?P<number>[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?)\s*(?P<unit>[a-zA-Z]*)\s*$")


def unit_str(unit):
    """ Return a string representation of unit.

        :param unit: a named unit, e.g., KiB
        :rtype: str
    """
    return unit.abbr


def _find_unit(abbr, legacy_units=False):
    """ Look up the unit for the given abbreviation.

        :param str abbr: unit abbreviation, case does not matter
        :param bool legacy_units: read decimal abbreviations as binary ones
        :returns: the unit or None
    """
    abbr = abbr.lower()
    if abbr in ("", "b", "byte", "bytes"):
        return B

    for unit in _BINARY_UNITS + _DECIMAL_UNITS:
        if unit.abbr.lower() == abbr:
            if legacy_units and unit in _DECIMAL_UNITS:
                return _BINARY_UNITS[_DECIMAL_UNITS.index(unit) + 1]
            return unit

    if len(abbr) == 1 and abbr.upper() in _PREFIXES:
        return _BINARY_UNITS[_PREFIXES.index(abbr.upper()) + 1]

    return None


def parse_spec(spec, legacy_units=False):
    """ Parse a size specification string into a number of bytes.

        :param str spec: a string like "45 MiB", "1.5G" or "2048"
        :keyword bool legacy_units: if True, "GB" means GiB and so on
        :returns: the number of bytes
        :rtype: Decimal
        :raises ValueError: if the specification is not valid
    """
    if not isinstance(spec, str):
        raise ValueError("invalid size specification: %r" % (spec,))

    match = _SPEC_RE.match(spec)
    if not match:
        raise ValueError("invalid size specification: %r" % spec)

    unit = _find_unit(match.group("unit"), legacy_units=legacy_units)
    if unit is None:
        raise ValueError("invalid size unit in specification: %r" % spec)

    try:
        number = Decimal(match.group("number"))
    except InvalidOperation:
        raise ValueError("invalid size specification: %r" % spec)

    return number * unit.factor


@functools.total_ordering
class Size(object):
    """ Common class to represent storage device and filesystem sizes.
        Can handle parsing strings such as 45MB or 6.7GiB to initialize
        itself, or can be initialized with a numerical size in bytes.
        Also generates human readable strings to a specified number of
        decimal places.

        A special "unlimited" value, bigger than any other size, can be
        obtained with :meth:`unlimited`.
    """

    def __init__(self, value=0):
        """ Initialize a new Size object.

            :param value: a size in bytes, a size specification string
                          or another :class:`Size`
        """
        self._unlimited = False
        if isinstance(value, Size):
            self._bytes = value._bytes
            self._unlimited = value._unlimited
        elif isinstance(value, str):
            self._bytes = int(parse_spec(value))
        elif isinstance(value, (int, float, Decimal)):
            self._bytes = int(value)
        else:
            raise ValueError("invalid value for Size: %r" % (value,))

    @classmethod
    def unlimited(cls):
        """ A size bigger than any other one. """
        size = cls(0)
        size._unlimited = True
        return size

    @property
    def is_unlimited(self):
        return self._unlimited

    def get_bytes(self):
        if self._unlimited:
            raise ValueError("unlimited size has no number of bytes")
        return self._bytes

    def __int__(self):
        return self.get_bytes()

    def __index__(self):
        return self.get_bytes()

    def __hash__(self):
        return hash((self._bytes, self._unlimited))

    def __bool__(self):
        return self._unlimited or self._bytes != 0

    @staticmethod
    def _other(other):
        if isinstance(other, Size):
            return other
        if isinstance(other, (int, Decimal)):
            return Size(other)
        return None

    def __eq__(self, other):
        other = self._other(other)
        if other is None:
            return NotImplemented
        return self._unlimited == other._unlimited and self._bytes == other._bytes

    def __lt__(self, other):
        other = self._other(other)
        if other is None:
            return NotImplemented
        if self._unlimited:
            return False
        if other._unlimited:
            return True
        return self._bytes < other._bytes

    def __abs__(self):
        if self._unlimited:
            return Size.unlimited()
        return Size(abs(self._bytes))

    def __neg__(self):
        if self._unlimited:
            raise ValueError("cannot negate an unlimited size")
        return Size(-self._bytes)

    def __add__(self, other):
        other = self._other(other)
        if other is None:
            return NotImplemented
        if self._unlimited or other._unlimited:
            return Size.unlimited()
        return Size(self._bytes + other._bytes)

    # needed to make sum() work with Size arguments
    __radd__ = __add__

    def __sub__(self, other):
        other = self._other(other)
        if other is None:
            return NotImplemented
        if other._unlimited:
            raise ValueError("cannot subtract an unlimited size")
        if self._unlimited:
            return Size.unlimited()
        return Size(self._bytes - other._bytes)

    def __rsub__(self, other):
        other = self._other(other)
        if other is None:
            return NotImplemented
        return other - self

    def __mul__(self, other):
        if isinstance(other, Size):
            raise ValueError("cannot multiply two sizes")
        if self._unlimited:
            return Size.unlimited()
        return Size(Decimal(self._bytes) * Decimal(other))
    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, Size):
            if self._unlimited or other._unlimited:
                raise ValueError("cannot divide unlimited sizes")
            return Decimal(self._bytes) / Decimal(other._bytes)
        if self._unlimited:
            return Size.unlimited()
        return Size(Decimal(self._bytes) / Decimal(other))

    def __floordiv__(self, other):
        if isinstance(other, Size):
            if self._unlimited or other._unlimited:
                raise ValueError("cannot divide unlimited sizes")
            return self._bytes // other._bytes
        if self._unlimited:
            return Size.unlimited()
        return Size(self._bytes // int(other))

    def __mod__(self, other):
        other = self._other(other)
        if self._unlimited or other._unlimited:
            raise ValueError("cannot compute the modulo of unlimited sizes")
        return Size(self._bytes % other._bytes)

    def __deepcopy__(self, memo_dict):
        return Size(self)

    def __copy__(self):
        return Size(self)

    def __repr__(self):
        return "Size (%s)" % self.human_readable()

    def __str__(self):
        return self.human_readable()

    def convert_to(self, spec=None):
        """ Return the size in the units indicated by the specifier.

            :param spec: a units specifier
            :type spec: a units specifier or :class:`Size`
            :returns: a numeric value in the units indicated by the specifier
            :rtype: Decimal
            :raises ValueError: if Size unit specifier is non-positive
        """
        if isinstance(spec, Size):
            if spec == Size(0):
                raise ValueError("cannot convert to 0 size")
            return self / spec
        spec = B if spec is None else spec
        return Decimal(self.get_bytes()) / Decimal(spec.factor)

    def human_readable(self, min_unit=B, max_places=2):
        """ Return a string representation of this size with appropriate
            size specifier and in the specified number of decimal places.
            Values are always represented using binary not decimal units.

            :param min_unit: the smallest unit the returned representation should use
            :param max_places: number of decimal places to use
            :type max_places: an integer type or NoneType
            :returns: a representation of the size
            :rtype: str
        """
        if self._unlimited:
            return "unlimited"

        if isinstance(min_unit, str):
            min_unit = _find_unit(min_unit)

        value = Decimal(self._bytes)
        unit = min_unit
        for candidate in _BINARY_UNITS[_BINARY_UNITS.index(min_unit):]:
            if abs(value) / candidate.factor < 1 and candidate is not min_unit:
                break
            unit = candidate

        number = value / unit.factor
        if max_places is not None:
            number = number.quantize(Decimal(1).scaleb(-max_places), rounding=_DECIMAL_HALF_UP)
        text = format(number, "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return "%s %s" % (text, unit.abbr)

    def round_to_nearest(self, size, rounding):
        """ Rounds to nearest unit specified as a named constant or a Size.

            :param size: a size specifier
            :type size: a named constant like KiB, or any non-negative Size
            :keyword rounding: which direction to round
            :type rounding: one of ROUND_UP, ROUND_DOWN, or ROUND_HALF_UP
            :returns: Size rounded to nearest whole specified unit
            :rtype: :class:`Size`

            If size is Size(0), returns Size(0).
        """
        if rounding not in (ROUND_UP, ROUND_DOWN, ROUND_HALF_UP):
            raise ValueError("invalid rounding specifier")

        if isinstance(size, Size):
            if size.get_bytes() == 0:
                return Size(0)
            elif size < Size(0):
                raise ValueError("invalid rounding size: %s" % size)
            factor = size.get_bytes()
        else:
            factor = size.factor

        if self._unlimited:
            return Size.unlimited()

        decimal_rounding = {ROUND_UP: ROUND_CEILING,
                            ROUND_DOWN: ROUND_FLOOR,
                            ROUND_HALF_UP: _DECIMAL_HALF_UP}[rounding]
        units = (Decimal(self._bytes) / factor).quantize(Decimal(1), rounding=decimal_rounding)
        return Size(units * factor)

    def ensure_percent_reserve(self, percent):
        """Get a new size with given space reserve.

            :param percent: number of percent to reserve
            :returns: a new size with :param:`percent` space reserve
            :rtype: :class:`Size`

            >>> Size("80 GiB").ensure_percent_reserve(20)
            Size (100 GiB)
        """
        return Size(Decimal(self.get_bytes()) / (1 - (Decimal(percent) / 100)))
