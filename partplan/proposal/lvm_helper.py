# lvm_helper.py
# Helper to place a set of planned logical volumes in a volume group.
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

from ..planned import PlannedLvmVg
from .creators import LvmCreator, DEFAULT_VG_NAME

import logging
log = logging.getLogger("partplan")


class LvmHelper(object):

    """ Decides which volume group will hold the planned logical volumes.

        The volume group is a new one unless an existing one is chosen with
        :meth:`set_reused_volume_group`.
    """

    def __init__(self, planned_lvs, settings):
        """
            :param planned_lvs: the volumes to create
            :type planned_lvs: list of :class:`~.planned.PlannedLvmLv`
            :param settings: the proposal settings
            :type settings: :class:`~.settings.ProposalSettings`
        """
        self.planned_lvs = list(planned_lvs)
        self.settings = settings
        self._volume_group = None
        self._reused_volume_group = None

    @property
    def vg_strategy(self):
        return self.settings.lvm_vg_strategy

    @property
    def volume_group(self):
        """ The planned volume group, reused or new """
        if self._volume_group is None:
            self._volume_group = self._reused_volume_group or self._new_volume_group()
        return self._volume_group

    @property
    def partitions_in_vg(self):
        """ Names of the physical volumes of the (reused) volume group """
        return self.volume_group.pvs

    def set_reused_volume_group(self, vg):
        """ Use an existing volume group, None to go back to a new one """
        self._volume_group = None
        self._reused_volume_group = None
        if vg is None:
            return
        planned = PlannedLvmVg.from_real_vg(vg)
        planned.lvs = list(self.planned_lvs)
        self._setup(planned)
        self._reused_volume_group = planned
        log.info("trying to reuse volume group %s", vg.name)

    def reusable_volume_groups(self, devicegraph):
        """ Volume groups that could hold the volumes, most suitable first.

            Groups big enough come first (the smallest of them first), then
            the rest, biggest first.
        """
        if not self._try_to_reuse():
            return []
        target = self.volume_group.target_size
        vgs = devicegraph.lvm_vgs
        big = sorted((vg for vg in vgs if vg.size >= target), key=lambda vg: (vg.size, vg.name))
        small = sorted((vg for vg in vgs if vg.size < target), key=lambda vg: (vg.size, vg.name),
                       reverse=True)
        return big + small

    def create_volumes(self, original_graph, pv_names=None):
        """ A copy of the graph with the volume group and its volumes

            :param original_graph: the initial graph
            :param pv_names: names of the new physical volumes
            :returns: the new graph
        """
        if not self.planned_lvs:
            return original_graph.copy()
        creator = LvmCreator(original_graph)
        return creator.create_volumes(self.volume_group, pv_names or []).devicegraph

    def _encrypt(self):
        return self.settings.encryption_password is not None

    def _try_to_reuse(self):
        if not self.settings.lvm_vg_reuse or self._encrypt():
            return False
        return not any(lv.disk for lv in self.planned_lvs)

    def _setup(self, planned_vg):
        planned_vg.size_strategy = self.vg_strategy
        planned_vg.pvs_encryption_password = self.settings.encryption_password
        planned_vg.pvs_encryption_method = self.settings.encryption_method

    def _new_volume_group(self):
        planned_vg = PlannedLvmVg(volume_group_name=DEFAULT_VG_NAME, lvs=self.planned_lvs)
        self._setup(planned_vg)
        return planned_vg
