# nodev.py
# Planned filesystems not backed by a block device.
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

from .device import PlannedDevice
from .mixins import CanBeFormatted


class PlannedNfs(PlannedDevice, CanBeFormatted):

    """ An NFS share to mount. """

    _to_string_attrs = ["server", "path", "mount_point"]

    def __init__(self, server=None, path=None, mount_point=None):
        PlannedDevice.__init__(self)
        self._init_can_be_formatted(mount_point, "nfs")
        self.server = server
        self.path = path

    @property
    def share(self):
        return "%s:%s" % (self.server, self.path)


class PlannedTmpfs(PlannedDevice, CanBeFormatted):

    """ A tmpfs to mount. """

    _to_string_attrs = ["mount_point"]

    def __init__(self, mount_point=None):
        PlannedDevice.__init__(self)
        self._init_can_be_formatted(mount_point, "tmpfs")
