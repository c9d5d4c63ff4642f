# __init__.py
# Entry point for anaconda storage formats subpackage.
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

from ..util import ObjectID
from ..size import Size

import logging
log = logging.getLogger("partplan")

# format classes by type
device_formats = {}


def register_device_format(fmt_class):
    """ Make a format class known to :func:`get_format`. """
    if not issubclass(fmt_class, DeviceFormat):
        raise ValueError("%s is not a DeviceFormat subclass" % fmt_class)
    device_formats[fmt_class._type] = fmt_class
    log.debug("format class %s registered as %s", fmt_class.__name__, fmt_class._type)


def get_device_format_class(fmt_type):
    """ The format class for a type name or one of its aliases.

        :param str fmt_type: a type name like "ext4" or an alias like "lvm"
        :returns: the class or None if the type is not known
    """
    if not fmt_type:
        return device_formats.get(fmt_type)
    if fmt_type in device_formats:
        return device_formats[fmt_type]
    return next((c for c in device_formats.values() if fmt_type in c._aliases), None)


def get_format(fmt_type, *args, **kwargs):
    """ A new format instance of the given type.

        Unknown types get a plain :class:`DeviceFormat` that keeps the
        requested name, so a profile asking for an unusual filesystem
        still ends up with something to show.

        :param str fmt_type: the format type name
        :returns: the new format
        :rtype: :class:`DeviceFormat`

        Remaining arguments go to the format class constructor.
    """
    fmt = (get_device_format_class(fmt_type) or DeviceFormat)(*args, **kwargs)
    if fmt_type and fmt.type is None:
        fmt._name = fmt_type
    log.debug("get_format(%s): %s (%d)", fmt_type, fmt.__class__.__name__, fmt.id)
    return fmt


class DeviceFormat(ObjectID):

    """ Content of a block device.

        The base class stands for "nothing recognized": a blank device,
        or one whose content partplan does not model.
    """
    _type = None
    _name = "Unknown"
    _aliases = []
    _partition_id = None                # id for a partition holding this format
    _resizable = False                  # can be shrunk
    _mountable = False

    def __init__(self, **kwargs):
        """
            :keyword str device: path of the device holding the format
            :keyword str uuid: the format's UUID
            :keyword str label: the format's label
            :keyword bool exists: whether the format is already on disk
            :keyword str options: mount options
            :keyword str create_options: extra options for mkfs and friends
            :keyword min_size: space used by existing contents
            :type min_size: :class:`~.size.Size`
        """
        ObjectID.__init__(self)
        self.device = kwargs.get("device")
        self.uuid = kwargs.get("uuid")
        self.label = kwargs.get("label")
        self.exists = kwargs.get("exists", False)
        self.options = kwargs.get("options")
        self.create_options = kwargs.get("create_options")
        self._min_instance_size = kwargs.get("min_size", Size(0))

    def __repr__(self):
        return "<%s %s id=%d device=%s uuid=%s exists=%s>" % (self.__class__.__name__, self.type,
                                                           self.id, self.device, self.uuid,
                                                           self.exists)

    def __deepcopy__(self, memo):
        clone = self.__class__.__new__(self.__class__)
        memo[id(self)] = clone
        clone.__dict__.update(copy.deepcopy(self.__dict__, memo))
        return clone

    def __str__(self):
        return "%s (%s)" % (self.name, self.device)

    @property
    def name(self):
        return self._name

    @property
    def type(self):
        return self._type

    def is_type(self, *fmt_types):
        """ Whether this format is one of the given types. """
        return self.type in fmt_types

    @property
    def partition_id(self):
        """ The partition id a partition holding this format should use. """
        return self._partition_id

    @property
    def resizable(self):
        """ Can formats of this type be shrunk? """
        return self._resizable

    @property
    def mountable(self):
        return self._mountable

    @property
    def min_size(self):
        """ Minimum size of this format instance, zero if unknown. """
        return self._min_instance_size

    @min_size.setter
    def min_size(self, size):
        self._min_instance_size = size

    @property
    def is_filesystem(self):
        return False

    @property
    def dict(self):
        return {"type": self.type, "name": self.name, "device": self.device,
                "uuid": self.uuid, "label": self.label, "exists": self.exists}


register_device_format(DeviceFormat)

# import the format modules (which register their device formats)
from . import fs, disklabel, luks, lvmpv, mdraid, bcache  # noqa: E402,F401 pylint: disable=wrong-import-position
