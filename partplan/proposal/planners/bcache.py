# bcache.py
# Planner for bcache drive sections.
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

from ...devices.cache import CACHE_MODES
from ...planned import PlannedBcache
from ..issues import InvalidValue, MissingReusableDevice
from .common import DrivePlanner

import logging
log = logging.getLogger("partplan")


class BcachePlanner(DrivePlanner):

    """ Plans a bcache device, partitioned or used as a whole. """

    def planned_devices(self, drive):
        bcache = PlannedBcache(name=drive.device)
        self._add_bcache_options(bcache, drive)

        if drive.unwanted_partitions:
            section = drive.master_partition
            if section is not None:
                self.configure_device(bcache, section, drive)
                if section.create is False:
                    self._add_bcache_reuse(bcache, section)
        else:
            bcache.ptable_type = drive.disklabel
            existing = self._find_bcache_to_reuse(bcache)
            container_name = existing.name if existing else bcache.bcache_name
            for section in drive.partitions:
                partition = self.plan_partition(container_name, drive, section)
                if partition is not None:
                    bcache.partitions.append(partition)
            if any(p.reusing for p in bcache.partitions):
                self._add_bcache_reuse(bcache, drive)
        return [bcache]

    def _add_bcache_options(self, bcache, drive):
        options = drive.bcache_options
        if options is None or not options.cache_mode:
            return
        if options.cache_mode in CACHE_MODES:
            bcache.cache_mode = options.cache_mode
        else:
            self.issues_list.add(InvalidValue, options, "cache_mode", options.cache_mode, None)

    def _find_bcache_to_reuse(self, bcache):
        return next((b for b in self.devicegraph.bcaches if bcache.name_matches(b.name)), None)

    def _add_bcache_reuse(self, bcache, section):
        device = self._find_bcache_to_reuse(bcache)
        if device is None:
            self.issues_list.add(MissingReusableDevice, section)
            return
        bcache.reuse_name = device.name
        bcache.reuse_sid = device.id
