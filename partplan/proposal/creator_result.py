# creator_result.py
# Results of turning planned devices into real ones.
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

from collections import OrderedDict

import logging
log = logging.getLogger("partplan")


class DeviceShrinkage(object):

    """ A planned device that had to be created smaller than requested. """

    def __init__(self, planned, real):
        """
            :param planned: the planned device as originally requested
            :type planned: :class:`~.planned.PlannedDevice`
            :param real: the device created for it
            :type real: :class:`~.devices.StorageDevice`
        """
        self.planned = planned
        self.real = real

    def __repr__(self):
        return "<DeviceShrinkage %r -> %s diff=%s>" % (self.planned, self.real.name, self.diff)

    @property
    def diff(self):
        """ How much smaller than its minimum size the device is """
        return self.planned.min_size - self.real.size


class CreatorResult(object):

    """ The device graph produced by a creator, along with the planned
        devices that were turned into new devices of that graph.

        Results are immutable: :meth:`merge` returns a new one.
    """

    def __init__(self, devicegraph, devices_map=None, shrinkages=None):
        """
            :param devicegraph: the resulting graph
            :type devicegraph: :class:`~.devicegraph.Devicegraph`
            :keyword devices_map: planned devices indexed by the name of the
                new device
            :type devices_map: dict of str => :class:`~.planned.PlannedDevice`
            :keyword shrinkages: devices created smaller than planned
            :type shrinkages: list of :class:`DeviceShrinkage`
        """
        self.devicegraph = devicegraph
        # planned_id => (device name, planned device)
        self._entries = OrderedDict()
        for name, planned in (devices_map or {}).items():
            self._entries[planned.planned_id] = (name, planned)
        self.shrinkages = list(shrinkages or [])

    def __repr__(self):
        return "<CreatorResult devices=%s shrinkages=%s>" % (self.created_names(),
                                                             self.shrinkages)

    @classmethod
    def _from_entries(cls, devicegraph, entries, shrinkages):
        result = cls(devicegraph, shrinkages=shrinkages)
        result._entries.update(entries)
        return result

    def merge(self, other):
        """ A new result with the graph of other and the devices of both """
        entries = OrderedDict(self._entries)
        entries.update(other._entries)  # pylint: disable=protected-access
        return self._from_entries(other.devicegraph, entries,
                                  self.shrinkages + other.shrinkages)

    def with_shrinkages(self, shrinkages):
        """ A copy of this result with some more shrinkages """
        return self._from_entries(self.devicegraph, self._entries,
                                  self.shrinkages + list(shrinkages))

    @property
    def devices_map(self):
        """ Planned devices indexed by the name of the new device """
        return OrderedDict((name, planned) for name, planned in self._entries.values())

    @property
    def planned_devices(self):
        return [planned for _name, planned in self._entries.values()]

    @property
    def names(self):
        """ Names of the new devices indexed by planned id """
        return OrderedDict((planned_id, entry[0]) for planned_id, entry in self._entries.items())

    def created_names(self, predicate=None):
        """ Names of the new devices whose planned device satisfies predicate

            :keyword predicate: filter for the planned devices, all by default
            :type predicate: callable
        """
        return [name for name, planned in self._entries.values()
                if predicate is None or predicate(planned)]

    def name_for(self, planned):
        """ Name of the device created for a planned device (or planned id) """
        planned_id = getattr(planned, "planned_id", planned)
        entry = self._entries.get(planned_id)
        return entry[0] if entry else None

    def real_device(self, planned):
        """ The device created for a planned device, None if there is none """
        name = self.name_for(planned)
        if name is None:
            return None
        return self.devicegraph.find_by_any_name(name)
