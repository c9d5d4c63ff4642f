# md.py
# Planner for MD RAID drive sections.
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

from ...devicelibs import mdraid
from ...errors import RaidError
from ...planned import PlannedMd
from ...size import KiB, Size
from ..issues import InvalidValue, MissingReusableDevice, MissingValue
from .common import DrivePlanner

import logging
log = logging.getLogger("partplan")

DEFAULT_LEVEL = "raid1"


class MdPlanner(DrivePlanner):

    """ Plans software RAIDs.

        Three kinds of drives are supported: the old style generic
        ``/dev/md`` drive, with one RAID per partition section, a drive for
        a RAID used without partition table and a drive for a partitioned
        RAID.
    """

    def planned_devices(self, drive):
        if drive.device == "/dev/md":
            mds = [self._md_from_section(drive, s) for s in drive.partitions]
            return [md for md in mds if md is not None]
        elif drive.unwanted_partitions:
            return [self._non_partitioned_md(drive)]
        return [self._partitioned_md(drive)]

    def _non_partitioned_md(self, drive):
        md = PlannedMd(name=drive.name_for_md())
        section = drive.master_partition
        if section is not None:
            self.configure_device(md, section, drive)
            if section.create is False:
                self._add_md_reuse(md, section)
        self._add_raid_options(md, drive.raid_options or (section.raid_options if section else None))
        return md

    def _partitioned_md(self, drive):
        md = PlannedMd(name=drive.device)
        md.ptable_type = drive.disklabel
        self._add_raid_options(md, drive.raid_options)
        existing = self._find_md_to_reuse(md)
        for section in drive.partitions:
            partition = self.plan_partition(existing.name if existing else md.md_name, drive,
                                            section)
            if partition is not None:
                md.partitions.append(partition)
        if any(p.reusing for p in md.partitions):
            self._add_md_reuse(md, drive)
        return md

    def _md_from_section(self, drive, section):
        if section.partition_nr is None and not (section.raid_options and
                                                 section.raid_options.raid_name):
            self.issues_list.add(MissingValue, section, "partition_nr")
            return None

        if section.raid_options is not None and section.raid_options.raid_name:
            name = section.raid_options.raid_name
        else:
            name = "/dev/md/%s" % section.partition_nr
        md = PlannedMd(name=name)
        self.configure_device(md, section, drive)
        if section.create is False:
            self._add_md_reuse(md, section)
        self._add_raid_options(md, section.raid_options)
        return md

    def _add_raid_options(self, md, raid_options):
        md.md_level = self._raid_level(raid_options)
        if raid_options is None:
            return
        if raid_options.raid_name:
            md.name = raid_options.raid_name
        if raid_options.chunk_size:
            md.chunk_size = self._chunk_size(raid_options.chunk_size)
        if raid_options.parity_algorithm:
            if raid_options.parity_algorithm in mdraid.PARITY_ALGORITHMS:
                md.md_parity = raid_options.parity_algorithm
            else:
                self.issues_list.add(InvalidValue, raid_options, "parity_algorithm",
                                     raid_options.parity_algorithm, "default")
        if raid_options.device_order:
            md.devices_order = list(raid_options.device_order)

    def _raid_level(self, raid_options):
        if raid_options is None or not raid_options.raid_type:
            return DEFAULT_LEVEL
        try:
            return mdraid.raid_levels.raid_level(raid_options.raid_type)
        except RaidError:
            self.issues_list.add(InvalidValue, raid_options, "raid_type", raid_options.raid_type,
                                 DEFAULT_LEVEL)
            return DEFAULT_LEVEL

    @staticmethod
    def _chunk_size(value):
        """ Plain numbers are KiB, like in mdadm """
        value = str(value).strip()
        if value.isdigit():
            return Size(int(value) * KiB.factor)
        return Size(value)

    def _find_md_to_reuse(self, md):
        return next((r for r in self.devicegraph.md_raids if md.name_matches(r.name)), None)

    def _add_md_reuse(self, md, section):
        device = self._find_md_to_reuse(md)
        if device is None:
            self.issues_list.add(MissingReusableDevice, section)
            return
        md.reuse_name = device.name
        md.reuse_sid = device.id
