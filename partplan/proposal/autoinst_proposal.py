# autoinst_proposal.py
# Storage proposal based on a partitioning profile.
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

from ..errors import NoDiskSpaceError, UnexpectedCallError
from ..profile import CT_DISK, PartitioningSection
from ..storage_log import log_exception_info
from .autoinst_devices_creator import AutoinstDevicesCreator
from .autoinst_space_maker import AutoinstSpaceMaker
from .creators import PartitionTableCreator
from .drives_map import DrivesMap
from .issues import IssuesList, ShrinkedPlannedDevices
from .planners import DevicesPlanner

import logging
log = logging.getLogger("partplan")


class AutoinstProposal(object):

    """ Calculates the device graph described by a partitioning profile.

        Problems found in the profile are stored in :attr:`issues_list`.
        If the profile cannot be honored, the proposal is marked as failed
        and :attr:`devices` is None.
    """

    def __init__(self, partitioning=None, devicegraph=None, issues_list=None, size_parser=None):
        """
            :keyword partitioning: the decoded profile, a list of drives
            :type partitioning: list of dict or :class:`~.profile.PartitioningSection`
            :keyword devicegraph: the graph to start from
            :type devicegraph: :class:`~.devicegraph.Devicegraph`
            :keyword issues_list: where to store the problems found
            :type issues_list: :class:`~.issues.IssuesList`
            :keyword size_parser: parser for the size attributes
            :type size_parser: :class:`~.size_parser.SizeParser`
        """
        if isinstance(partitioning, PartitioningSection):
            self.partitioning = partitioning
        else:
            self.partitioning = PartitioningSection.from_list(partitioning or [])
        self.initial_devicegraph = devicegraph
        self.issues_list = issues_list if issues_list is not None else IssuesList()
        self.size_parser = size_parser
        self._devices = None
        self.planned_devices = None
        self.failed = False
        self._proposed = False

    @property
    def proposed(self):
        return self._proposed

    @property
    def devices(self):
        """ The proposed graph, None if the proposal failed

            :raises: :class:`~.errors.UnexpectedCallError` if the proposal
                has not been calculated yet
        """
        if not self._proposed:
            raise UnexpectedCallError("the proposal has not been calculated yet")
        return self._devices

    def propose(self):
        """ Calculate the new device graph, available in :attr:`devices`

            :returns: the new graph, None if the proposal failed
        """
        self._proposed = True
        try:
            self._devices = self._calculate_proposal()
        except NoDiskSpaceError:
            log_exception_info(log.error, "the profile does not fit in the disks")
            self._devices = None
            self.failed = True
        return self._devices

    def _calculate_proposal(self):
        drives = DrivesMap(self.initial_devicegraph, self.partitioning, self.issues_list)
        if self.issues_list.fatal:
            log.error("fatal problems found in the profile: %s", list(self.issues_list))
            self.failed = True
            return None

        if not drives.partitions:
            log.info("no partitions were specified, only cleaning the disks")
            space_maker = AutoinstSpaceMaker(self.issues_list)
            return space_maker.cleaned_devicegraph(self.initial_devicegraph, drives, [])

        planner = DevicesPlanner(self.initial_devicegraph, self.issues_list, self.size_parser)
        self.planned_devices = planner.planned_devices(drives)
        space_maker = AutoinstSpaceMaker(self.issues_list)
        planned_devices = space_maker.pinned_devices(self.initial_devicegraph, self.planned_devices)
        devicegraph = space_maker.cleaned_devicegraph(self.initial_devicegraph, drives,
                                                      planned_devices)
        self._add_partition_tables(devicegraph, drives)

        creator = AutoinstDevicesCreator(devicegraph)
        result = creator.populated_devicegraph(planned_devices, drives.disk_names)
        if result.shrinkages:
            self.issues_list.add(ShrinkedPlannedDevices, result.shrinkages)
        return result.devicegraph

    @staticmethod
    def _add_partition_tables(devicegraph, drives):
        """ Create the partition tables requested for empty disks """
        for name, drive in drives.items():
            if drive.type != CT_DISK or not drive.partitions or drive.unwanted_partitions:
                continue
            disk = devicegraph.find_by_any_name(name)
            if disk is None or disk.partitions:
                continue
            current = disk.partition_table.label_type if disk.partition_table else None
            PartitionTableCreator().create_or_update(devicegraph, disk, drive.disklabel or current)
