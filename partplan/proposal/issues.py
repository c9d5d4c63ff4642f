# issues.py
# Non-fatal problems found while processing a profile.
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

import logging
log = logging.getLogger("partplan")

WARN = "warn"
FATAL = "fatal"


class Issue(object):

    """ A problem found in a section of the profile.

        Issues are collected in an :class:`IssuesList` instead of being
        raised, so all the problems of a profile can be reported at once.
    """
    severity = WARN

    def __init__(self, section=None, attr=None, value=None, new_value=None):
        """
            :keyword section: the profile section with the problem
            :keyword str attr: the attribute with the problem
            :keyword value: the offending value
            :keyword new_value: the value used instead (or what was done)
        """
        self.section = section
        self.attr = attr
        self.value = value
        self.new_value = new_value

    def __repr__(self):
        return "<%s attr=%s value=%r new_value=%r>" % (self.__class__.__name__, self.attr,
                                                      self.value, self.new_value)

    @property
    def fatal(self):
        return self.severity == FATAL

    @property
    def message(self):
        return "%s: %s" % (self.__class__.__name__, self.attr)


class InvalidValue(Issue):

    """ An attribute has a value that cannot be used. """

    @property
    def message(self):
        return "invalid value %r for %s, using %r instead" % (self.value, self.attr, self.new_value)


class MissingValue(Issue):

    """ A mandatory attribute is missing. """
    severity = FATAL

    @property
    def message(self):
        return "missing value for %s" % self.attr


class MissingReuseInfo(Issue):

    """ Not enough information to find a device to reuse. """
    severity = FATAL

    @property
    def message(self):
        return "not enough information to find the device to reuse"


class MissingReusableDevice(Issue):

    """ The device to reuse was not found. """
    severity = FATAL

    @property
    def message(self):
        return "device to reuse not found"


class MissingReusableFilesystem(Issue):

    """ The device to reuse has no filesystem to reuse. """
    severity = FATAL

    @property
    def message(self):
        return "the device to reuse has no filesystem"


class NoDisk(Issue):

    """ No suitable disk was found for a drive section. """
    severity = FATAL

    @property
    def message(self):
        return "no suitable disk found"


class NoPartitionable(Issue):

    """ The device cannot hold partitions. """

    @property
    def message(self):
        return "the device cannot hold a partition table, %s ignored" % self.attr


class SurplusPartitions(Issue):

    """ Only the first partition section of a drive is used. """

    @property
    def message(self):
        return "only the first partition section is used"


class ThinPoolNotFound(Issue):

    """ A thin volume refers to an unknown thin pool. """
    severity = FATAL

    @property
    def message(self):
        return "thin pool %s not found" % self.value


class ConflictingAttrs(Issue):

    """ Several mutually exclusive attributes are present. """

    @property
    def message(self):
        return "%s set together with %s, only %s is used" % (self.attr, ", ".join(self.value),
                                                            self.attr)


class InvalidEncryption(Issue):

    """ The encryption method is unknown. """
    severity = FATAL

    @property
    def message(self):
        return "unknown encryption method %s" % self.value


class ShrinkedPlannedDevices(Issue):

    """ Some planned devices had to be made smaller to fit. """

    def __init__(self, device_shrinkages):
        Issue.__init__(self)
        self.device_shrinkages = device_shrinkages

    @property
    def message(self):
        return "%d devices were shrunk to fit in the available space" % len(self.device_shrinkages)


class IssuesList(object):

    """ A list of issues. """

    def __init__(self):
        self._items = []

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)

    def __getitem__(self, i):
        return self._items[i]

    def add(self, issue_class, *args, **kwargs):
        """ Create and register an issue.

            :param issue_class: the kind of issue
            :returns: the new issue
        """
        issue = issue_class(*args, **kwargs)
        self._items.append(issue)
        log.warning("profile issue: %s", issue.message)
        return issue

    def append(self, issue):
        self._items.append(issue)

    @property
    def fatal(self):
        """ Whether any issue prevents a valid result """
        return any(issue.fatal for issue in self._items)

    def of_type(self, issue_class):
        return [issue for issue in self._items if isinstance(issue, issue_class)]
