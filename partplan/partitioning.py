# partitioning.py
# Distribution of free space among planned devices.
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

import copy
from decimal import Decimal

from .errors import NotEnoughFreeSpaceError
from .size import Size, ROUND_UP

import logging
log = logging.getLogger("partplan")


class Request(object):

    """ A request for space.

        Request instances are used for calculating how much to grow
        planned devices. All the quantities are expressed in units of the
        rounding of the :class:`Chunk` holding the request.
    """

    def __init__(self, device, unit):
        """
            :param device: the planned device being requested
            :type device: :class:`~.planned.PlannedDevice`
            :param unit: the size of one unit
            :type unit: :class:`~.size.Size`
        """
        self.device = device
        self.growth = 0                     # growth in units
        self.max_growth = 0                 # max growth in units, 0 for no limit
        self.base = int(device.weight)      # share of the extra space
        self.done = self.base <= 0          # can we grow this request more?

        if not self.done and not device.max_size.is_unlimited:
            self.max_growth = int((device.max_size - device.size) // unit)
            if self.max_growth <= 0:
                # max size is less than or equal to the current size
                self.done = True

    @property
    def id(self):
        """ The planned id of the device this request corresponds to. """
        return self.device.planned_id

    def __repr__(self):
        s = ("%(type)s instance --\n"
             "id = %(id)s  base = %(base)d  growth = %(growth)d  max_grow = %(max_grow)d\n"
             "done = %(done)s" %
             {"type": self.__class__.__name__, "id": self.id,
              "base": self.base, "growth": self.growth,
              "max_grow": self.max_growth, "done": self.done})
        return s


class Chunk(object):

    """ An amount of free space from which devices will be allocated """

    def __init__(self, length, unit, requests=None):
        """
            :param int length: the number of free units
            :param unit: the size of one unit
            :type unit: :class:`~.size.Size`
            :keyword requests: list of requests to add
            :type requests: list of :class:`Request`
        """
        self.length = length
        self.unit = unit
        self.pool = length                  # free unit count
        self.base = 0                       # sum of growable requests' base
        self.requests = []                  # list of Request instances
        for req in requests or []:
            self.add_request(req)

    def __repr__(self):
        s = ("%(type)s instance --\n"
             "length = %(length)d  size = %(size)s\n"
             "remaining = %(rem)d  pool = %(pool)d" %
             {"type": self.__class__.__name__, "length": self.length,
              "size": self.length_to_size(self.length),
              "pool": self.pool, "rem": self.remaining})
        return s

    def add_request(self, req):
        """ Add a request to this chunk.

            :param req: the request to add
            :type req: :class:`Request`
        """
        log.debug("adding request %s to chunk", req.id)
        self.requests.append(req)
        if not req.done:
            self.base += req.base

    @property
    def growth(self):
        """ Sum of growth for all requests in this chunk. """
        return sum(r.growth for r in self.requests)

    @property
    def remaining(self):
        """ Number of requests still being grown in this chunk. """
        return len([r for r in self.requests if not r.done])

    @property
    def done(self):
        """ True if we are finished growing all requests in this chunk. """
        return self.remaining == 0 or self.pool == 0

    def length_to_size(self, length):
        return self.unit * length

    def trim_over_grown_request(self, req, base=None):
        """ Enforce max growth and return extra units to the pool.

            :param req: the request to trim
            :type req: :class:`Request`
            :keyword base: base unit count to adjust if req is done growing
            :type base: int
            :returns: the new base or None if no base was given
            :rtype: int or None
        """
        if req.max_growth and req.growth >= req.max_growth:
            if req.growth > req.max_growth:
                # we've grown beyond the maximum. put some back.
                extra = req.growth - req.max_growth
                log.debug("taking back %d (%s) from %s", extra,
                          self.length_to_size(extra), req.id)
                self.pool += extra
                req.growth = req.max_growth

            # this request no longer factors into the growable base used to
            # determine what fraction of the pool each request gets
            if base is not None:
                base -= req.base
            req.done = True

        return base

    def grow_requests(self):
        """ Calculate growth amounts for requests in this chunk.

            Given a total number of available units, requests receive an
            allotment proportional to their base (the weight of the planned
            device). That means a request with weight 4 will grow four times
            as fast as a request with weight 1.
        """
        log.debug("Chunk.grow_requests: %r", self)

        # the base for the next loop through the chunk's requests, it stays
        # the same for all requests in any given growth iteration
        new_base = self.base
        last_pool = 0
        while not self.done and self.pool and last_pool != self.pool:
            last_pool = self.pool
            self.base = new_base
            log.debug("%d requests and %d (%s) left in chunk",
                      self.remaining, self.pool, self.length_to_size(self.pool))
            for req in self.requests:
                if req.done:
                    continue

                share = Decimal(req.base) / Decimal(self.base)
                growth = int(share * last_pool)  # truncate, don't round
                req.growth += growth
                self.pool -= growth
                new_base = self.trim_over_grown_request(req, base=new_base)

        if self.pool:
            # allocate any leftovers in pool to the first request that can
            # still grow
            for req in self.requests:
                if req.done:
                    continue

                req.growth += self.pool
                self.pool = 0
                self.trim_over_grown_request(req)
                if self.pool == 0:
                    break

        for req in self.requests:
            if req.growth:
                log.debug("growing %s by %s", req.id, self.length_to_size(req.growth))


def _adjust_size_to_last_slot(device, space_size, align_grain):
    """ Make the last device end at the last aligned position of the space.

        The device keeps its size if the adjustment would take it below its
        minimum size.
    """
    last_slot_size = space_size % align_grain
    if not last_slot_size:
        return
    adjusted = device.size - (align_grain - last_slot_size)
    if adjusted >= device.min_size:
        device.size = adjusted


def distribute_space(devices, space_size, rounding=None, align_grain=None):
    """ Distribute a given amount of space among several planned devices.

        Every device gets at least its minimum size (rounded up) and the
        rest of the space is shared according to the devices' weights and
        limited by their maximum sizes.

        :param devices: the devices sharing the space
        :type devices: list of :class:`~.planned.mixins.HasSize`
        :param space_size: the size of the space
        :type space_size: :class:`~.size.Size`
        :keyword rounding: the size of every device is a multiple of this
        :type rounding: :class:`~.size.Size`
        :keyword align_grain: alignment grain of the partition table
        :type align_grain: :class:`~.size.Size`
        :returns: copies of the devices with their size set
        :raises: :class:`~.errors.NotEnoughFreeSpaceError`
    """
    needed_size = sum((d.min_size for d in devices), Size(0))
    if space_size < needed_size:
        log.error("not enough space: needed %s, available %s", needed_size, space_size)
        raise NotEnoughFreeSpaceError("needed %s, available %s" % (needed_size, space_size))

    rounding = rounding or align_grain or Size(1)

    new_list = []
    for device in devices:
        new_dev = copy.copy(device)
        new_dev.size = device.min_size.round_to_nearest(rounding, rounding=ROUND_UP)
        new_list.append(new_dev)

    if not new_list:
        return new_list

    adjust_to_end = align_grain is not None
    if adjust_to_end:
        _adjust_size_to_last_slot(new_list[-1], space_size, align_grain)

    extra_size = space_size - sum((d.size for d in new_list), Size(0))
    unused = extra_size
    if extra_size >= rounding:
        log.info("distributing %s of extra space among %d devices", extra_size, len(new_list))
        requests = [Request(d, rounding) for d in new_list]
        chunk = Chunk(int(extra_size // rounding), rounding, requests=requests)
        chunk.grow_requests()
        for req in requests:
            req.device.size += chunk.length_to_size(req.growth)
        unused = extra_size - chunk.length_to_size(chunk.growth)

    if unused:
        log.info("could not distribute %s", unused)
    if adjust_to_end and unused < align_grain:
        new_list[-1].size += unused

    return new_list
