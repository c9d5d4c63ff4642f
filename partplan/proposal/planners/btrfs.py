# btrfs.py
# Planner for multi-device btrfs drive sections.
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

from ...devicelibs import btrfs
from ...errors import RaidError
from ...planned import PlannedBtrfs
from ..issues import InvalidValue, MissingReusableDevice, NoPartitionable, SurplusPartitions
from .common import DrivePlanner

import logging
log = logging.getLogger("partplan")


class BtrfsPlanner(DrivePlanner):

    """ Plans a btrfs filesystem spanning several devices.

        The drive describes the filesystem with its first partition section;
        the members are the devices whose btrfs_name is the drive device.
    """

    def planned_devices(self, drive):
        self._add_issues(drive)
        section = drive.partitions[0] if drive.partitions else None
        planned = PlannedBtrfs(name=drive.device)
        if section is not None:
            self.configure_filesystem(planned, section, drive)
        planned.filesystem_type = "btrfs"
        planned.data_raid_level = self._raid_level(drive, "data_raid_level", btrfs.raid_levels)
        planned.metadata_raid_level = self._raid_level(drive, "metadata_raid_level",
                                                       btrfs.metadata_levels)
        if section is not None and section.create is False:
            self._add_btrfs_reuse(planned, section)
        return [planned]

    def _add_issues(self, drive):
        if drive.wanted_partitions:
            self.issues_list.add(NoPartitionable, drive, "disklabel")
        if len(drive.partitions) > 1:
            self.issues_list.add(SurplusPartitions, drive)

    def _raid_level(self, drive, attr_name, levels):
        options = drive.btrfs_options
        level = getattr(options, attr_name, None) if options is not None else None
        if not level:
            return None
        try:
            return levels.raid_level(level)
        except RaidError:
            self.issues_list.add(InvalidValue, options, attr_name, level, "default")
            return None

    def _add_btrfs_reuse(self, planned, section):
        device = None
        if section.uuid:
            device = next((b for b in self.devicegraph.btrfs_volumes
                           if b.format.uuid == section.uuid or b.uuid == section.uuid), None)
        if device is None:
            self.issues_list.add(MissingReusableDevice, section)
            return
        planned.reuse_name = device.name
        planned.reuse_sid = device.id
        planned.reformat = bool(section.format)
