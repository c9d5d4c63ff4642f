# settings.py
# Settings for the storage proposals.
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

from ..planned.lvm import USE_NEEDED
from ..size import Size

import logging
log = logging.getLogger("partplan")

BIGGER_RESIZE = "bigger_resize"


class SpaceAction(object):

    """ Something the space maker may (or must) do to a device. """

    kind = None

    def __init__(self, device):
        """
            :param str device: name of the device
        """
        self.device = device

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.device)

    def is_type(self, *kinds):
        return self.kind in kinds

    @property
    def mandatory(self):
        return False


class Delete(SpaceAction):

    """ Delete a partition. Mandatory deletions always happen. """

    kind = "delete"

    def __init__(self, device, mandatory=False):
        SpaceAction.__init__(self, device)
        self._mandatory = mandatory

    @property
    def mandatory(self):
        return self._mandatory


class Resize(SpaceAction):

    """ Shrink a partition, within the given limits. """

    kind = "resize"

    def __init__(self, device, min_size=None, max_size=None):
        """
            :param str device: name of the partition
            :keyword min_size: the partition is never made smaller than this
            :type min_size: :class:`~.size.Size`
            :keyword max_size: the partition is made at least this small
            :type max_size: :class:`~.size.Size`
        """
        SpaceAction.__init__(self, device)
        self.min_size = Size(min_size) if min_size is not None else None
        self.max_size = Size(max_size) if max_size is not None else None

    @property
    def mandatory(self):
        return self.max_size is not None


class Wipe(SpaceAction):

    """ Remove all the partitions (and the content) of a disk. """

    kind = "wipe"


class SpaceSettings(object):

    """ How to make space for the new partitions """

    def __init__(self, strategy=BIGGER_RESIZE, actions=None):
        if strategy != BIGGER_RESIZE:
            raise ValueError("unknown space strategy %s" % strategy)
        self.strategy = strategy
        self.actions = list(actions or [])

    def actions_of(self, kind):
        return [a for a in self.actions if a.is_type(kind)]


class ProposalSettings(object):

    """ Settings of a proposal run.

        :attr candidate_devices: names of the disks that can be used
        :attr space_settings: a :class:`SpaceSettings`
        :attr encryption_password: password for encrypted physical volumes
        :attr encryption_method: luks1 or luks2, the default one if None
        :attr use_lvm: whether the proposal is based on LVM
        :attr use_snapshots: enable snapshots for a btrfs root
        :attr lvm_vg_strategy: size strategy of the proposed volume group
        :attr lvm_vg_reuse: whether an existing volume group can be reused
    """

    def __init__(self, candidate_devices=None, space_settings=None, encryption_password=None,
                 use_lvm=False, encryption_method=None):
        self.candidate_devices = list(candidate_devices or [])
        self.space_settings = space_settings or SpaceSettings()
        self.encryption_password = encryption_password
        self.use_lvm = use_lvm
        self.encryption_method = encryption_method
        self.use_snapshots = True
        self.lvm_vg_strategy = USE_NEEDED
        self.lvm_vg_reuse = True

    def __repr__(self):
        return "<ProposalSettings candidate_devices=%s use_lvm=%s>" % (self.candidate_devices,
                                                                        self.use_lvm)
