# volume_spec.py
# Per mount point defaults for planned volumes.
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

from .size import Size

import logging
log = logging.getLogger("partplan")


class VolumeSpecification(object):

    """ Default values for the volume mounted at a given mount point. """

    def __init__(self, mount_point, fs_type=None, min_size=None, max_size=None,
                 btrfs_read_only=False, subvolumes=None, btrfs_default_subvolume=None):
        """
            :param str mount_point: the mount point the entry applies to
            :keyword str fs_type: default filesystem type
            :keyword min_size: minimum size for "auto" sizes
            :type min_size: :class:`~.size.Size`
            :keyword max_size: maximum size for "auto" sizes
            :type max_size: :class:`~.size.Size`
            :keyword bool btrfs_read_only: mount the root btrfs read only
            :keyword list subvolumes: default btrfs subvolumes
            :keyword str btrfs_default_subvolume: prefix of the subvolumes
        """
        self.mount_point = mount_point
        self.fs_type = fs_type
        self.min_size = Size(min_size) if min_size is not None else Size(0)
        self.max_size = Size(max_size) if max_size is not None else Size.unlimited()
        self.btrfs_read_only = btrfs_read_only
        self.subvolumes = list(subvolumes or [])
        self.btrfs_default_subvolume = btrfs_default_subvolume

    def __repr__(self):
        return "<VolumeSpecification %s fs_type=%s min=%s max=%s>" % (
            self.mount_point, self.fs_type, self.min_size, self.max_size)


class VolumeSpecifications(object):

    """ Table of :class:`VolumeSpecification` entries keyed by mount point.

        The table is product configuration: a new one is empty and callers
        register the entries they need. It reaches the planners through
        :class:`~.proposal.SizeParser`.
    """

    def __init__(self, specs=None):
        """
            :keyword specs: initial entries
            :type specs: list of :class:`VolumeSpecification`
        """
        self._specs = {}
        for spec in specs or []:
            self.register(spec)

    def __repr__(self):
        return "<VolumeSpecifications %s>" % sorted(self._specs)

    def __len__(self):
        return len(self._specs)

    def register(self, spec):
        """ Add (or replace) the entry for the mount point of spec """
        log.debug("registering volume specification %r", spec)
        self._specs[spec.mount_point] = spec

    def for_mount_point(self, mount_point):
        """ The specification for a mount point, None if there is none """
        if not mount_point:
            return None
        return self._specs.get(mount_point)
