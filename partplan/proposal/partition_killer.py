# partition_killer.py
# Deletion of partitions together with the devices using them.
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

import logging
log = logging.getLogger("partplan")


class PartitionKiller(object):

    """ Deletes partitions from a device graph.

        A partition used as a physical volume, RAID member or member of a
        multi-device btrfs is not deleted alone: the whole volume group,
        RAID or filesystem goes away, along with all its member partitions
        that are in the candidate disks.
    """

    def __init__(self, devicegraph, disks=None):
        """
            :param devicegraph: the graph to modify
            :type devicegraph: :class:`~.devicegraph.Devicegraph`
            :keyword disks: names of the disks whose partitions can be deleted
            :type disks: list of str, all disks if None
        """
        self.devicegraph = devicegraph
        self.disks = disks

    def delete(self, device_name, related=True):
        """ Delete a partition and, if needed, its siblings

            :param str device_name: name of the partition
            :keyword bool related: whether to delete the other members of
                the devices using the partition
            :returns: names of all the deleted partitions
            :rtype: list of str
        """
        partition = self._find_partition(device_name)
        if partition is None:
            return []

        users = self._multi_device_users(partition) if related else []
        if not users:
            return self._delete_partition(partition)

        log.info("deleting %s, which is part of %s", partition.name, [u.name for u in users])
        members = self._member_partitions(users)
        for user in users:
            if user in self.devicegraph.devices:
                self.devicegraph.recursive_remove(user)

        deleted = []
        for name in members:
            # removing the last logical partition removes the others
            member = self._find_partition(name)
            if member is not None:
                deleted.extend(self._delete_partition(member))
        return deleted

    def partitions_to_delete(self, device_name):
        """ Names of the partitions :meth:`delete` would remove """
        partition = self._find_partition(device_name)
        if partition is None:
            return []
        users = self._multi_device_users(partition)
        if not users:
            return [partition.name]
        return self._member_partitions(users)

    def _find_partition(self, name):
        return next((p for p in self.devicegraph.partitions if p.name == name), None)

    @staticmethod
    def _multi_device_users(partition):
        """ Volume groups, RAIDs and btrfs filesystems built on the partition """
        return [d for d in partition.formatted_device.children
                if d.type in ("lvmvg", "mdarray", "btrfs volume")]

    def _member_partitions(self, users):
        names = []
        for user in users:
            for parent in user.parents:
                plain = parent.slave if parent.type == "luks/dm-crypt" else parent
                if plain.type != "partition":
                    continue
                if self.disks is not None and plain.disk.name not in self.disks:
                    continue
                if plain.name not in names:
                    names.append(plain.name)
        log.debug("member partitions of %s: %s", [u.name for u in users], names)
        return names

    def _delete_partition(self, partition):
        log.info("deleting partition %s", partition.name)
        disk = partition.disk
        if self._last_logical(partition):
            log.info("%s is the last logical partition, deleting the extended one", partition.name)
            extended = disk.extended_partition
            names = [extended.name, partition.name]
            self.devicegraph.recursive_remove(partition)
            self.devicegraph.recursive_remove(extended)
            return names

        self.devicegraph.delete_partition(partition)
        return [partition.name]

    @staticmethod
    def _last_logical(partition):
        return partition.is_logical and len(partition.disk.logical_partitions) == 1
