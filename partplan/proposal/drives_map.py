# drives_map.py
# Mapping of device names to profile drive sections.
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

from .issues import NoDisk

import logging
log = logging.getLogger("partplan")


class DrivesMap(object):

    """ Assigns every drive section of the profile to a device name.

        Disk drives with an explicit device are fixed to that disk (or to the
        disk holding that device). Flexible disk drives, the ones without a
        device, get the first disk not used by any other drive and not
        matched by their skip list. The rest of drives are keyed by the
        device name they define.
    """

    def __init__(self, devicegraph, partitioning, issues_list):
        """
            :param devicegraph: graph holding the disks
            :param partitioning: the profile
            :type partitioning: :class:`~.profile.PartitioningSection`
            :param issues_list: list to register problems in
            :type issues_list: :class:`~.issues.IssuesList`
        """
        self._drives = OrderedDict()
        self.issues_list = issues_list

        self._add_disks(partitioning.disk_drives, devicegraph)
        for drive in partitioning.lvm_drives:
            self._drives[drive.device] = drive
        for drive in partitioning.md_drives:
            self._drives[drive.name_for_md()] = drive
        for drives in (partitioning.bcache_drives, partitioning.btrfs_drives,
                       partitioning.nfs_drives, partitioning.tmpfs_drives):
            for drive in drives:
                self._drives[drive.device] = drive

    def __iter__(self):
        return iter(self._drives.items())

    def __len__(self):
        return len(self._drives)

    def __getitem__(self, name):
        return self._drives[name]

    def get(self, name, default=None):
        return self._drives.get(name, default)

    def items(self):
        return self._drives.items()

    @property
    def disk_names(self):
        """ Names of all the mapped devices, in profile order """
        return list(self._drives.keys())

    @property
    def partitions(self):
        """ Whether any drive has partition sections """
        return any(drive.partitions for drive in self._drives.values())

    @property
    def use_snapshots(self):
        if not self._drives:
            return True
        return any(d.enable_snapshots is None or d.enable_snapshots
                   for d in self._drives.values())

    def _add_disks(self, drives, devicegraph):
        fixed = [d for d in drives if d.device]
        flexible = [d for d in drives if not d.device]

        for drive in fixed:
            disk = self._find_disk(devicegraph, drive.device)
            if disk is None:
                self.issues_list.add(NoDisk, drive)
                continue
            self._drives[disk.name] = drive

        for drive in flexible:
            disk = self._first_usable_disk(drive, devicegraph)
            if disk is None:
                self.issues_list.add(NoDisk, drive)
                continue
            log.info("flexible drive assigned to %s", disk.name)
            self._drives[disk.name] = drive

    def _first_usable_disk(self, drive, devicegraph):
        for disk in devicegraph.disks:
            if disk.name in self._drives:
                continue
            if drive.skip_list.matches(disk):
                log.debug("disk %s skipped by the skip list", disk.name)
                continue
            return disk
        return None

    @staticmethod
    def _find_disk(devicegraph, device_name):
        device = devicegraph.find_by_any_name(device_name)
        if device is None:
            return None
        return next((d for d in [device] + list(device.ancestors) if d.is_disk), None)
