# device.py
# Base class for all devices.
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

from .. import util
from ..storage_log import log_method_call

import logging
log = logging.getLogger("partplan")

from .lib import ParentList


class Device(util.ObjectID):

    """ A node of a devicegraph.

        Every device keeps two lists in sync: the devices it is built on
        (:attr:`parents`) and the devices built on it (:attr:`children`).
        Appending to the parent list registers the device as a child of
        the new parent, removing from it undoes that.

        :attr:`id` survives :meth:`~.Devicegraph.copy`, so a device of a
        copied graph can be matched with its original.
    """

    _type = "device"

    def __init__(self, name, parents=None):
        """
            :param str name: the device name, usually the basename of its node
            :keyword parents: the devices this one is built on
            :type parents: list of :class:`Device`
        """
        util.ObjectID.__init__(self)
        if parents is not None and not isinstance(parents, list):
            raise ValueError("parents must be a list of devices")

        self._name = name
        self._children = []
        self._parents = ParentList(appendfunc=self._add_parent,
                                   removefunc=self._remove_parent)
        for parent in parents or []:
            self._parents.append(parent)

    def __deepcopy__(self, memo):
        # the parent list holds bound methods of this very instance
        clone = self.__class__.__new__(self.__class__)
        memo[id(self)] = clone
        clone.__dict__.update(copy.deepcopy(self.__dict__, memo))
        return clone

    def __repr__(self):
        return "<%s %s id=%d parents=%s>" % (self.__class__.__name__, self.name, self.id,
                                            [p.name for p in self.parents])

    def __str__(self):
        return "%s %s (%d)" % (self.type, self.name, self.id)

    def _add_parent(self, parent):
        parent.add_child(self)

    def _remove_parent(self, parent):
        parent.remove_child(self)

    @property
    def parents(self):
        """ Devices this device is built on """
        return self._parents

    @parents.setter
    def parents(self, parents):
        for parent in list(self._parents):
            self._parents.remove(parent)
        for parent in parents:
            self._parents.append(parent)

    @property
    def children(self):
        """ Devices built directly on this one """
        return list(self._children)

    def add_child(self, child):
        log_method_call(self, name=self.name, child=child._name, kids=len(self._children))
        if child in self._children:
            raise ValueError("%s is already a child of %s" % (child._name, self.name))
        self._children.append(child)

    def remove_child(self, child):
        log_method_call(self, name=self.name, child=child._name, kids=len(self._children))
        self._children.remove(child)

    @property
    def dict(self):
        return {"type": self.type, "name": self.name,
                "parents": [p.name for p in self.parents]}

    def depends_on(self, dep):
        """ Whether dep is one of the devices this one is built on.

            :param dep: the other device
            :type dep: :class:`Device`
            :rtype: bool
        """
        return any(p is dep or p.depends_on(dep) for p in self.parents)

    def _get_name(self):
        return self._name

    def _set_name(self, value):
        if not self.is_name_valid(value):
            raise ValueError("%s is not a valid name for a %s" % (value, self.type))
        self._name = value

    name = property(lambda s: s._get_name(),
                    lambda s, v: s._set_name(v),
                    doc="This device's name")

    @property
    def isleaf(self):
        """ Whether nothing is built on this device """
        return not self._children

    @property
    def type(self):
        return self._type

    @property
    def ancestors(self):
        """ This device plus every device it is built on, closest first """
        result = [self]
        for device in result:
            result.extend(p for p in device.parents if p not in result)
        return result

    @property
    def descendants(self):
        """ Every device built on this one, not including itself """
        result = []
        pending = self.children
        while pending:
            device = pending.pop(0)
            if device not in result:
                result.append(device)
                pending.extend(device.children)
        return result

    def is_name_valid(self, name):  # pylint: disable=unused-argument
        return True
