# nodev.py
# Device classes for filesystems without a block device.
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

from ..formats import get_format
from .storage import StorageDevice

import logging
log = logging.getLogger("partplan")


class NoDevice(StorageDevice):

    """ A nodev device for nodev filesystems like tmpfs or nfs. """
    _type = "nodev"

    def __init__(self, name, fmt=None, exists=False):
        StorageDevice.__init__(self, name, fmt=fmt, exists=exists)

    @property
    def path(self):
        """ Device node representing this device. """
        return self.name

    @property
    def disks(self):
        return []


class NFSDevice(NoDevice):

    """ An NFS device """
    _type = "nfs"

    def __init__(self, server, share, fmt=None, exists=False):
        """
            :param str server: the NFS server
            :param str share: the exported path
        """
        self.server = server
        self.share = share
        fmt = fmt or get_format("nfs", exists=exists)
        NoDevice.__init__(self, "%s:%s" % (server, share), fmt=fmt, exists=exists)


class TmpFSDevice(NoDevice):

    """ A tmpfs device """
    _type = "tmpfs"

    def __init__(self, name="tmpfs", fmt=None, exists=False):
        fmt = fmt or get_format("tmpfs", exists=exists)
        NoDevice.__init__(self, name, fmt=fmt, exists=exists)
