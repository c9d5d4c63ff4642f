# nodev.py
# Planners for NFS and tmpfs drive sections.
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

from ...planned import PlannedNfs, PlannedTmpfs
from ..issues import MissingValue, NoPartitionable, SurplusPartitions
from .common import DrivePlanner

import logging
log = logging.getLogger("partplan")

OLD_NFS_DEVICE = "/dev/nfs"


class NfsPlanner(DrivePlanner):

    """ Plans NFS mounts.

        In the old format the drive device is ``/dev/nfs`` and every
        partition section is a share, with the share in its ``device``
        attribute. In the new format the drive device is the share and the
        first partition section holds the mount point.
    """

    def planned_devices(self, drive):
        if drive.wanted_partitions:
            self.issues_list.add(NoPartitionable, drive, "disklabel")

        if drive.device == OLD_NFS_DEVICE:
            planned = [self._planned_old_format(s) for s in drive.partitions]
            return [p for p in planned if p is not None]

        if len(drive.partitions) > 1:
            self.issues_list.add(SurplusPartitions, drive)
        section = drive.partitions[0] if drive.partitions else None
        if not drive.device:
            self.issues_list.add(MissingValue, drive, "device")
            return []
        if section is None or not section.mount:
            self.issues_list.add(MissingValue, section or drive, "mount")
            return []
        return [self._create_planned_nfs(drive.device, section)]

    def _planned_old_format(self, section):
        missing = [a for a in ("device", "mount") if not getattr(section, a)]
        for attr_name in missing:
            self.issues_list.add(MissingValue, section, attr_name)
        if missing:
            return None
        return self._create_planned_nfs(section.device, section)

    @staticmethod
    def _create_planned_nfs(share, section):
        server, _sep, path = share.partition(":")
        planned = PlannedNfs(server=server, path=path, mount_point=section.mount)
        planned.fstab_options = DrivePlanner._fstab_options(section.fstab_options) or []
        log.debug("planned NFS share %s:%s on %s", server, path, section.mount)
        return planned


class TmpfsPlanner(DrivePlanner):

    """ Plans one tmpfs for every partition section with a mount point. """

    def planned_devices(self, drive):
        result = []
        for section in drive.partitions:
            if not section.mount:
                self.issues_list.add(MissingValue, section, "mount")
                continue
            planned = PlannedTmpfs(mount_point=section.mount)
            planned.fstab_options = self._fstab_options(section.fstab_options)
            result.append(planned)
        return result
