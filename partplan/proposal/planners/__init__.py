# __init__.py
# Turning profile drive sections into planned devices.
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

import attr

from ...planned import DevicesCollection
from ...profile import CT_BCACHE, CT_BTRFS, CT_DISK, CT_LVM, CT_MD, CT_NFS, CT_TMPFS
from .bcache import BcachePlanner
from .btrfs import BtrfsPlanner
from .common import DrivePlanner
from .disk import DiskPlanner
from .lvm import VgPlanner
from .md import MdPlanner
from .nodev import NfsPlanner, TmpfsPlanner

import logging
log = logging.getLogger("partplan")

PLANNERS = {CT_DISK: DiskPlanner,
            CT_LVM: VgPlanner,
            CT_MD: MdPlanner,
            CT_BCACHE: BcachePlanner,
            CT_BTRFS: BtrfsPlanner,
            CT_NFS: NfsPlanner,
            CT_TMPFS: TmpfsPlanner}


def get_planner(drive_type, devicegraph, issues_list, size_parser=None):
    """ Return a planner for the given drive type.

        :param str drive_type: one of the CT_* drive types
        :param devicegraph: the graph to look for reusable devices in
        :param issues_list: where to register problems
        :returns: the planner, None for unknown drive types
        :rtype: :class:`~.common.DrivePlanner`
    """
    planner_class = PLANNERS.get(drive_type)
    if planner_class is None:
        return None
    return planner_class(devicegraph, issues_list, size_parser=size_parser)


class DevicesPlanner(object):

    """ Plans the devices of every drive in a drives map. """

    def __init__(self, devicegraph, issues_list, size_parser=None):
        self.devicegraph = devicegraph
        self.issues_list = issues_list
        self.size_parser = size_parser

    def planned_devices(self, drives_map):
        """ The planned devices for all the drives

            :param drives_map: drives of the profile by device name
            :type drives_map: :class:`~partplan.proposal.drives_map.DrivesMap`
            :rtype: :class:`~.planned.DevicesCollection`
        """
        devices = []
        for name, drive in drives_map.items():
            planner = get_planner(drive.type, self.devicegraph, self.issues_list,
                                  size_parser=self.size_parser)
            if planner is None:
                log.warning("unknown drive type %s for %s", drive.type, name)
                continue
            if drive.type == CT_DISK:
                drive = attr.evolve(drive, device=name)
            devices.extend(planner.planned_devices(drive))

        log.debug("planned devices: %s", devices)
        return DevicesCollection(devices)


__all__ = ["DevicesPlanner", "DrivePlanner", "DiskPlanner", "VgPlanner", "MdPlanner",
           "BcachePlanner", "BtrfsPlanner", "NfsPlanner", "TmpfsPlanner", "get_planner"]
