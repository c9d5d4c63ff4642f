# lib.py
# Helper types shared by the device classes.
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
from ..util import div_up

LINUX_SECTOR_SIZE = Size(512)


class ParentList(object):

    """ The parents of a device.

        An ordered collection without duplicates. Every append and remove
        first calls a hook, so the device can keep the other end of the
        relation (the parent's children) up to date. Items can be read by
        index but not assigned.
    """

    def __init__(self, items=None, appendfunc=None, removefunc=None):
        """
            :keyword items: the initial parents, no hooks are run for them
            :keyword appendfunc: called with the item before it is added
            :type appendfunc: callable
            :keyword removefunc: called with the item before it is removed
            :type removefunc: callable
        """
        self.items = list(items or [])
        self.appendfunc = appendfunc
        self.removefunc = removefunc

    def __iter__(self):
        return iter(self.items)

    def __contains__(self, item):
        return item in self.items

    def __getitem__(self, i):
        return self.items[i]

    def __len__(self):
        return len(self.items)

    def __repr__(self):
        return "ParentList(%r)" % self.items

    def append(self, item):
        if item in self.items:
            raise ValueError("%s is already a parent" % item)
        if self.appendfunc:
            self.appendfunc(item)
        self.items.append(item)

    def remove(self, item):
        if item not in self.items:
            raise ValueError("%s is not a parent" % item)
        if self.removefunc:
            self.removefunc(item)
        self.items.remove(item)


class Region(object):

    """ A contiguous range of blocks on a device.

        start and length are expressed in blocks of block_size bytes.
    """

    def __init__(self, start, length, block_size=LINUX_SECTOR_SIZE):
        if start < 0 or length < 0:
            raise ValueError("invalid region start=%d length=%d" % (start, length))
        self.start = start
        self.length = length
        self.block_size = block_size

    def __repr__(self):
        return "Region(start=%d, length=%d, block_size=%d)" % (self.start, self.length,
                                                                int(self.block_size))

    def __eq__(self, other):
        if not isinstance(other, Region):
            return NotImplemented
        return (self.start, self.length, self.block_size) == (other.start, other.length, other.block_size)

    def __hash__(self):
        return hash((self.start, self.length))

    @property
    def end(self):
        """ Last block of the region """
        return self.start + self.length - 1

    @property
    def size(self):
        return self.block_size * self.length

    @property
    def start_offset(self):
        """ Offset of the region from the start of the device """
        return self.block_size * self.start

    @property
    def end_offset(self):
        """ Offset of the first byte after the region """
        return self.block_size * (self.end + 1)

    def inside(self, other):
        """ Whether the region is contained in other """
        return self.start >= other.start and self.end <= other.end

    def overlaps(self, other):
        return self.start <= other.end and other.start <= self.end

    def blocks(self, size, round_up=False):
        """ Number of blocks needed to hold size bytes """
        if round_up:
            return div_up(int(size), int(self.block_size))
        return int(size) // int(self.block_size)

    def align_up(self, block, grain):
        """ First block at or after block whose offset is a multiple of grain """
        grain_blocks = max(self.blocks(grain), 1)
        return div_up(block, grain_blocks) * grain_blocks

    def with_size(self, size):
        """ A new region starting where this one does with the given size """
        return Region(self.start, self.blocks(size), self.block_size)


class ResizeInfo(object):

    """ The limits within which a device can be resized. """

    def __init__(self, resize_ok, min_size, max_size, reasons=None):
        self.resize_ok = resize_ok
        self.min_size = min_size
        self.max_size = max_size
        self.reasons = reasons or []

    def __repr__(self):
        return "ResizeInfo(resize_ok=%s, min_size=%s, max_size=%s)" % (self.resize_ok,
                                                                        self.min_size,
                                                                        self.max_size)
