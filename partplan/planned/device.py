# device.py
# Base class for planned devices.
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

from ..util import ObjectID

import logging
log = logging.getLogger("partplan")


class PlannedDevice(ObjectID):

    """ A device to be created, or an existing device to be reused.

        Planned devices describe an intent: they are produced by the
        planners, read by the space maker and the distribution calculator
        and consumed by the creators, which turn them into real devices of
        a :class:`~.devicegraph.Devicegraph`.

        The planned id is kept in copies of the object, so it can be used to
        map a copy back to the original planned device.
    """

    _to_string_attrs = ["reuse_name"]

    def __init__(self):
        self.reuse_name = None
        self.reuse_sid = None
        self.resize = False

    def __repr__(self):
        attrs = ", ".join("%s=%s" % (a, getattr(self, a)) for a in self._to_string_attrs
                          if getattr(self, a, None) is not None)
        return "<%s %d%s>" % (self.__class__.__name__, self.planned_id,
                              " " + attrs if attrs else "")

    @property
    def planned_id(self):
        return self.id

    @property
    def reusing(self):
        """ Whether an existing device is reused instead of creating a new one """
        return bool(self.reuse_name or self.reuse_sid is not None)

    def find_reused(self, devicegraph):
        """ The real device to reuse, None if not found """
        device = None
        if self.reuse_sid is not None:
            device = devicegraph.get_device_by_id(self.reuse_sid)
        if device is None and self.reuse_name:
            device = devicegraph.find_by_any_name(self.reuse_name)
        return device

    def reuse_device(self, devicegraph):
        """ Adapt the reused device in the given graph.

            :returns: the reused device
        """
        device = self.find_reused(devicegraph)
        if device is None:
            log.error("device to reuse not found for %r", self)
            return None

        log.info("reusing %s for %r", device.name, self)
        self._reuse(device, devicegraph)
        return device

    def _reuse(self, device, devicegraph):
        setup = getattr(self, "setup_reused_filesystem", None)
        if setup is not None:
            setup(device, devicegraph)
