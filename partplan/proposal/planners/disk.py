# disk.py
# Planner for disk drive sections.
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

from ...planned import PlannedDisk
from ..issues import NoDisk, SurplusPartitions
from .common import DrivePlanner

import logging
log = logging.getLogger("partplan")


class DiskPlanner(DrivePlanner):

    """ Plans the partitions of a disk, or the disk itself.

        A disk is used without a partition table when the drive says
        ``disklabel: none`` or has a partition section with
        ``partition_nr: 0``. Only that section is used then.
    """

    def planned_devices(self, drive):
        disk = self.devicegraph.find_by_any_name(drive.device)
        if disk is None:
            self.issues_list.add(NoDisk, drive)
            return []

        if drive.unwanted_partitions:
            return self._planned_for_full_disk(disk, drive)
        return [self._planned_for_partitions(disk, drive)]

    def _planned_for_full_disk(self, disk, drive):
        section = drive.master_partition
        if section is None:
            return []
        if len(drive.partitions) > 1:
            self.issues_list.add(SurplusPartitions, drive)

        planned = PlannedDisk()
        self.configure_device(planned, section, drive)
        planned.reuse_name = disk.name
        planned.reuse_sid = disk.id
        planned.reformat = bool(section.format) or section.create is not False
        log.info("disk %s used without partition table", disk.name)
        return [planned]

    def _planned_for_partitions(self, disk, drive):
        planned = PlannedDisk()
        planned.reuse_name = disk.name
        planned.reuse_sid = disk.id
        planned.ptable_type = drive.disklabel
        for section in drive.partitions:
            partition = self.plan_partition(disk.name, drive, section, max_size=disk.size)
            if partition is not None:
                planned.partitions.append(partition)
        return planned
