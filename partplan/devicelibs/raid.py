#
# raid.py
# representation of RAID levels
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

from ..errors import RaidError


class RAIDLevel(object):

    """ A way of combining several member devices into one.

        :attr:`data_members` tells how many members' worth of space is
        left for data in an array with a given number of members. Only
        the smallest member counts: the rest of a bigger one is wasted.
    """

    def __init__(self, name, min_members, data_members, nick=None, aliases=None):
        """
            :param str name: canonical name, like "raid1" or "linear"
            :param int min_members: fewest members the level works with
            :param data_members: members count to data capacity (in members)
            :type data_members: callable
            :keyword str nick: a nickname like "mirror"
            :keyword list aliases: other accepted names
        """
        self.name = name
        self.min_members = min_members
        self.data_members = data_members
        self.nick = nick
        self._aliases = aliases or []

    @property
    def names(self):
        """ Every descriptor that designates this level """
        return [n for n in [self.name, self.nick] + self._aliases if n is not None]

    def get_net_array_size(self, member_count, smallest_member_size):
        """ Space for data in an array of member_count equal members.

            :param int member_count: the number of members
            :param smallest_member_size: usable size of the smallest member
            :type smallest_member_size: :class:`~.size.Size`
            :raises :class:`~.errors.RaidError`: too few members or a negative size
        """
        if member_count < self.min_members:
            raise RaidError("%s requires at least %d members" % (self.name, self.min_members))
        if smallest_member_size < 0:
            raise RaidError("member size %s is negative" % smallest_member_size)
        return smallest_member_size * self.data_members(member_count)

    def get_size(self, member_sizes, superblock_size=0):
        """ Space for data in an array made of members of the given sizes.

            :param member_sizes: the sizes of the members
            :type member_sizes: list of :class:`~.size.Size`
            :keyword superblock_size: metadata space taken from every member
            :type superblock_size: :class:`~.size.Size`
        """
        if not member_sizes:
            return 0
        return self.get_net_array_size(len(member_sizes), min(member_sizes) - superblock_size)

    def __str__(self):
        return self.name

    def __repr__(self):
        return "<RAIDLevel %s>" % self.name


def _numbered(number, min_members, data_members, nick=None):
    return RAIDLevel("raid%d" % number, min_members, data_members, nick=nick,
                     aliases=["RAID%d" % number, str(number), number])


RAID0 = _numbered(0, 2, lambda n: n, nick="stripe")
RAID1 = _numbered(1, 2, lambda n: 1, nick="mirror")
RAID4 = _numbered(4, 3, lambda n: n - 1)
RAID5 = _numbered(5, 3, lambda n: n - 1)
RAID6 = _numbered(6, 4, lambda n: n - 2)
RAID10 = _numbered(10, 4, lambda n: n // 2)

# not really RAID, but md and btrfs accept them where they want a level
Linear = RAIDLevel("linear", 1, lambda n: n, aliases=["LINEAR"])
Single = RAIDLevel("single", 1, lambda n: n, aliases=["SINGLE"])
Dup = RAIDLevel("dup", 1, lambda n: n / 2, aliases=["DUP"])

STANDARD_LEVELS = (RAID0, RAID1, RAID4, RAID5, RAID6, RAID10, Linear, Single, Dup)


class RAIDLevels(object):

    """ The RAID levels some kind of device supports. """

    def __init__(self, levels):
        """
            :param levels: descriptors of standard levels, duplicates ignored
            :type levels: iterable
            :raises :class:`~.errors.RaidError`: for an unknown descriptor
        """
        self._levels = []
        for descriptor in levels:
            level = self._lookup(descriptor, STANDARD_LEVELS)
            if level not in self._levels:
                self._levels.append(level)

    @staticmethod
    def _lookup(descriptor, levels):
        if isinstance(descriptor, str):
            descriptor = descriptor.strip()
        for level in levels:
            if descriptor is level or descriptor in level.names:
                return level
        raise RaidError("invalid RAID level descriptor %s" % descriptor)

    def raid_level(self, descriptor):
        """ The supported level designated by descriptor.

            :param descriptor: a level name, nickname, number or level object
            :raises :class:`~.errors.RaidError`: if no supported level matches
        """
        return self._lookup(descriptor, self._levels)

    def __iter__(self):
        return iter(self._levels)
