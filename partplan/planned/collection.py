# collection.py
# Collection of planned devices.
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

from .compound import PlannedBcache, PlannedBtrfs, PlannedMd
from .lvm import PlannedLvmVg
from .nodev import PlannedNfs, PlannedTmpfs
from .partition import PlannedDisk, PlannedPartition


class DevicesCollection(object):

    """ An immutable list of planned devices with typed accessors.

        Partitions nested in planned disks, RAIDs and bcaches and the
        logical volumes of the planned volume groups are reachable through
        the accessors even though they are not part of the top level list.
    """

    def __init__(self, devices=None):
        self._devices = list(devices or [])

    def __iter__(self):
        return iter(self.all)

    def __len__(self):
        return len(self.all)

    def __repr__(self):
        return "<DevicesCollection %r>" % self._devices

    @property
    def devices(self):
        """ The top level planned devices """
        return self._devices[:]

    def append(self, devices):
        return self.__class__(self._devices + list(devices))

    def _of_type(self, cls):
        return [d for d in self._devices if isinstance(d, cls)]

    @property
    def disk_partitions(self):
        """ Partitions in plain disks """
        result = self._of_type(PlannedPartition)
        for disk in self.disks:
            result.extend(disk.partitions)
        return result

    @property
    def md_partitions(self):
        return [p for md in self.mds for p in md.partitions]

    @property
    def bcache_partitions(self):
        return [p for bcache in self.bcaches for p in bcache.partitions]

    @property
    def partitions(self):
        return self.disk_partitions + self.md_partitions + self.bcache_partitions

    @property
    def disks(self):
        return self._of_type(PlannedDisk)

    @property
    def vgs(self):
        return self._of_type(PlannedLvmVg)

    @property
    def lvs(self):
        return [lv for vg in self.vgs for lv in vg.all_lvs]

    @property
    def mds(self):
        return self._of_type(PlannedMd)

    @property
    def bcaches(self):
        return self._of_type(PlannedBcache)

    @property
    def btrfs_filesystems(self):
        return self._of_type(PlannedBtrfs)

    @property
    def nfs_filesystems(self):
        return self._of_type(PlannedNfs)

    @property
    def tmpfs_filesystems(self):
        return self._of_type(PlannedTmpfs)

    @property
    def all(self):
        """ Every planned device, nested ones included """
        return (self.partitions + self.disks + self.vgs + self.lvs + self.mds + self.bcaches +
                self.btrfs_filesystems + self.nfs_filesystems + self.tmpfs_filesystems)

    @property
    def mountable_devices(self):
        return [d for d in self.all if getattr(d, "mount_point", None)]

    def find(self, planned_id):
        """ The planned device with the given id, None if not found """
        return next((d for d in self.all if d.planned_id == planned_id), None)
