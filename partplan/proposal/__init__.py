# __init__.py
# Planning and creation of storage proposals.
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

from .autoinst_devices_creator import AutoinstDevicesCreator
from .autoinst_proposal import AutoinstProposal
from .autoinst_space_maker import AutoinstSpaceMaker
from .creator_result import CreatorResult, DeviceShrinkage
from .creators import (BcacheCreator, BtrfsCreator, DiskCreator, LvmCreator, MdCreator,
                       NfsCreator, PartitionCreator, PartitionTableCreator, TmpfsCreator,
                       creator_for)
from .devicegraph_generator import DevicegraphGenerator
from .distribution_calculator import DistributionCalculator
from .drives_map import DrivesMap
from .issues import IssuesList
from .settings import Delete, ProposalSettings, Resize, SpaceSettings, Wipe
from .size_parser import SizeInfo, SizeParser
from .space_maker import SpaceMaker, SpaceResult

__all__ = ["AutoinstDevicesCreator", "AutoinstProposal", "AutoinstSpaceMaker", "BcacheCreator",
           "BtrfsCreator", "CreatorResult", "Delete", "DeviceShrinkage", "DevicegraphGenerator",
           "DiskCreator", "DistributionCalculator", "DrivesMap", "IssuesList", "LvmCreator",
           "MdCreator", "NfsCreator", "PartitionCreator", "PartitionTableCreator",
           "ProposalSettings", "Resize", "SizeInfo", "SizeParser", "SpaceMaker", "SpaceResult",
           "SpaceSettings", "TmpfsCreator", "Wipe", "creator_for"]
