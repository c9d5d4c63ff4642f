# creators.py
# Classes turning planned devices into devices of a device graph.
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

import copy
import itertools

from ..devicelibs.partition import PartitionTableType, PartitionType
from ..devices import Region
from ..errors import DeviceNotFoundError, NoDiskSpaceError, NotEnoughFreeSpaceError
from ..partitioning import distribute_space
from ..planned import (PlannedBcache, PlannedBtrfs, PlannedDisk, PlannedLvmVg, PlannedMd,
                       PlannedNfs, PlannedPartition, PlannedTmpfs)
from ..planned.lvm import MAKE_SPACE_KEEP, MAKE_SPACE_REMOVE
from ..size import Size
from ..storage_log import log_method_call
from .creator_result import CreatorResult
from .distribution_calculator import DistributionCalculator

import logging
log = logging.getLogger("partplan")

DEFAULT_VG_NAME = "system"
DEFAULT_LV_NAME = "lv"


def available_name(name, taken):
    """ name, or name plus the first number that makes it unique

        :param str name: the wanted name
        :param taken: names already in use
        :type taken: list of str
    """
    if name not in taken:
        return name
    suffix = 0
    while "%s%d" % (name, suffix) in taken:
        suffix += 1
    return "%s%d" % (name, suffix)


def numbered_name(prefix, taken):
    """ The first of prefix0, prefix1... not in taken """
    names = ("%s%d" % (prefix, n) for n in itertools.count())
    return next(name for name in names if name not in taken)


def sized_partitions(planned_partitions, container):
    """ Copies of the planned partitions with their percentage resolved.

        :param planned_partitions: the planned partitions
        :param container: the device that will hold the partitions, the
            copies are bound to it
        :returns: list of :class:`~.planned.PlannedPartition`
    """
    result = []
    for planned in planned_partitions:
        new = copy.copy(planned)
        new.disk = container.name
        if new.percent_size is not None:
            size = new.size_in(container)
            new.set_size_limits(size, size)
        result.append(new)
    return result


class Creator(object):

    """ Base class of the creators.

        A creator never modifies the graph it receives: every operation
        works on a copy and returns it inside a
        :class:`~.creator_result.CreatorResult`.
    """

    def __init__(self, original_graph):
        """
            :param original_graph: the initial device graph
            :type original_graph: :class:`~.devicegraph.Devicegraph`
        """
        self.original_graph = original_graph

    def create(self, planned, *args, **kwargs):
        raise NotImplementedError()

    def reuse(self, planned):
        """ Adapt the existing device a planned device reuses.

            :returns: the resulting graph, with no new devices
            :rtype: :class:`~.creator_result.CreatorResult`
        """
        devicegraph = self.original_graph.copy()
        planned.reuse_device(devicegraph)
        return CreatorResult(devicegraph)


class PartitionTableCreator(object):

    """ Makes sure a device has the wanted kind of partition table. """

    def create_or_update(self, devicegraph, device, ptable_type=None):
        """ Create a partition table in device, unless it already has a suitable one.

            An existing table with partitions is always kept. An empty one
            is replaced if its type is not the wanted one.

            :param devicegraph: the graph device belongs to (modified)
            :param device: the partitionable device
            :keyword ptable_type: type of the table, the preferred one for the
                device by default
            :returns: the partition table of the device
        """
        log_method_call(self, device=device.name, ptable_type=ptable_type)
        wanted = PartitionTableType.find(ptable_type) or device.preferred_ptable_type
        current = device.partition_table
        if current is not None:
            if current.label_type == wanted:
                return current
            if device.partitions:
                log.warning("keeping the %s partition table of %s, it has partitions",
                            current.label_type.value, device.name)
                return current

        if device.children or device.format.type is not None:
            devicegraph.wipe_device(device)
        return devicegraph.create_partition_table(device, wanted)


class PartitionCreator(Creator):

    """ Creates the partitions of a distribution. """

    def create_partitions(self, distribution):
        """ Create the partitions assigned to every space of the distribution.

            :param distribution: where to create every planned partition
            :type distribution: :class:`~.planned.PartitionsDistribution`
            :rtype: :class:`~.creator_result.CreatorResult`
        """
        log_method_call(self, distribution=distribution)
        devicegraph = self.original_graph.copy()
        devices_map = {}
        for assigned in distribution.spaces:
            devices_map.update(self._process_space(devicegraph, assigned))
        return CreatorResult(devicegraph, devices_map)

    create = create_partitions

    def _process_space(self, devicegraph, assigned):
        disk = devicegraph.get_device_by_id(assigned.disk.id)
        if disk is None:
            raise DeviceNotFoundError("device %s not found" % assigned.disk_name)
        if disk.partition_table is None:
            ptable_type = next((p.ptable_type for p in assigned.partitions if p.ptable_type), None)
            PartitionTableCreator().create_or_update(devicegraph, disk, ptable_type)

        try:
            partitions = distribute_space(assigned.partitions, assigned.usable_size,
                                          align_grain=assigned.align_grain)
        except NotEnoughFreeSpaceError:
            raise NoDiskSpaceError("no room for %s in %s" % (assigned.partitions, assigned.disk_name))

        initial_region = assigned.region
        num_logical = assigned.num_logical
        devices_map = {}
        for idx, planned in enumerate(partitions):
            primary = len(partitions) - idx > num_logical
            space = self._free_space_within(disk, initial_region, logical=not primary)
            if not primary and not space.in_extended:
                self._create_extended(devicegraph, disk, space.region, initial_region)
                space = self._free_space_within(disk, initial_region, logical=True)

            part_type = PartitionType.PRIMARY if primary else PartitionType.LOGICAL
            partition = self._create_partition(devicegraph, disk, space, planned, part_type)
            devices_map[partition.name] = planned
        return devices_map

    @staticmethod
    def _free_space_within(disk, initial_region, logical=False):
        """ The free space of disk that starts inside the initial region """
        for space in disk.free_spaces():
            if logical and disk.extended_partition and not space.in_extended:
                continue
            if initial_region.start <= space.region.start <= initial_region.end:
                return space
        log.error("no free space left in %s at %r", disk.name, initial_region)
        raise NoDiskSpaceError("the planned partitions do not fit in %s" % disk.name)

    @staticmethod
    def _create_extended(devicegraph, disk, region, initial_region):
        region = Region(region.start, initial_region.end - region.start + 1, region.block_size)
        log.info("creating extended partition in %s at %r", disk.name, region)
        return devicegraph.create_partition(disk, region, PartitionType.EXTENDED)

    @staticmethod
    def _create_partition(devicegraph, disk, space, planned, part_type):
        region = space.region
        length = min(region.blocks(planned.size), region.length)
        new_region = Region(region.start, length, region.block_size)
        partition = devicegraph.create_partition(disk, new_region, part_type,
                                                 planned.effective_partition_id)
        if planned.boot and disk.partition_table.boot_flag_supported:
            partition.boot = True
        planned.format(partition, devicegraph)
        log.debug("created partition %s (%s) for %r", partition.name, partition.size, planned)
        return partition


class PartitionedDeviceCreator(Creator):

    """ Shared logic of the devices that can hold planned partitions. """

    def reuse(self, planned):
        """ Reuse the device and the partitions of it that must be reused """
        devicegraph = self.original_graph.copy()
        device = planned.reuse_device(devicegraph)
        if device is None:
            raise DeviceNotFoundError("device to reuse not found for %r" % planned)

        reused = sized_partitions([p for p in planned.partitions if p.reusing], device)
        shrinking = [p for p in reused if p.shrink(devicegraph)]
        others = [p for p in reused if p not in shrinking]
        for partition in shrinking + others:
            partition.reuse_device(devicegraph)
        return CreatorResult(devicegraph)

    def _populate(self, devicegraph, device, planned):
        """ Format device or create its partitions, returning the result """
        if not planned.partitions:
            if not planned.reusing:
                planned.format(device, devicegraph)
            return CreatorResult(devicegraph, {device.name: planned})

        PartitionTableCreator().create_or_update(devicegraph, device, planned.ptable_type)
        new_partitions = sized_partitions([p for p in planned.partitions if not p.reusing], device)
        result = CreatorResult(devicegraph, {device.name: planned})
        if not new_partitions:
            return result

        calculator = DistributionCalculator()
        distribution = calculator.best_distribution(new_partitions, device.free_spaces())
        if distribution is None:
            raise NoDiskSpaceError("partitions cannot be allocated into %s" % device.name)
        return result.merge(PartitionCreator(devicegraph).create_partitions(distribution))


class DiskCreator(PartitionedDeviceCreator):

    """ Sets up a whole disk used without partitions. """

    def create(self, planned):  # pylint: disable=arguments-differ
        return self.reuse(planned)

    def reuse(self, planned):
        devicegraph = self.original_graph.copy()
        device = planned.reuse_device(devicegraph)
        if device is None:
            raise DeviceNotFoundError("device to reuse not found for %r" % planned)
        return CreatorResult(devicegraph, {device.name: planned})


class LvmCreator(Creator):

    """ Creates (or completes) a volume group and its logical volumes. """

    def create_volumes(self, planned_vg, pv_names=None):
        """ Set up the volume group, adding the given physical volumes

            :param planned_vg: the planned volume group
            :type planned_vg: :class:`~.planned.PlannedLvmVg`
            :param pv_names: names of the devices to add as physical volumes
            :type pv_names: list of str
            :rtype: :class:`~.creator_result.CreatorResult`
        """
        log_method_call(self, planned_vg=planned_vg, pv_names=pv_names)
        devicegraph = self.original_graph.copy()
        pvs = [devicegraph.resolve_device(n) for n in pv_names or []]

        if planned_vg.reusing:
            vg = planned_vg.find_reused(devicegraph)
            if vg is None:
                raise DeviceNotFoundError("volume group %s not found" % planned_vg.reuse_name)
            self._add_pvs(devicegraph, vg, pvs)
        else:
            taken = [v.name for v in devicegraph.lvm_vgs]
            name = available_name(planned_vg.volume_group_name or DEFAULT_VG_NAME, taken)
            vg = devicegraph.new_vg(name, pvs, pe_size=planned_vg.extent_size)

        new_lvs = [lv for lv in planned_vg.lvs if not lv.reusing]
        self._make_space(devicegraph, vg, planned_vg, new_lvs)
        devices_map = {vg.name: planned_vg}
        devices_map.update(self._create_logical_volumes(devicegraph, vg, new_lvs))
        return CreatorResult(devicegraph, devices_map)

    create = create_volumes

    def reuse(self, planned):
        """ Reuse the planned logical volumes of a reused volume group """
        devicegraph = self.original_graph.copy()
        if planned.reuse_device(devicegraph) is None:
            raise DeviceNotFoundError("volume group %s not found" % planned.reuse_name)
        for lv in planned.all_lvs:
            if lv.reusing:
                lv.reuse_device(devicegraph)
        return CreatorResult(devicegraph)

    @staticmethod
    def _add_pvs(devicegraph, vg, pvs):
        for pv in pvs:
            if pv.formatted_device in vg.pvs:
                continue
            if pv.formatted_device.format.type != "lvmpv":
                devicegraph.format_device(pv, "lvmpv")
            vg.parents.append(pv.formatted_device)

    @staticmethod
    def _reused_lv_names(planned_vg):
        return [lv.reuse_name for lv in planned_vg.all_lvs if lv.reusing]

    def _make_space(self, devicegraph, vg, planned_vg, new_lvs):
        """ Delete logical volumes until the new ones fit """
        needed = sum((vg.align(lv.min_size, roundup=True) for lv in new_lvs
                      if not lv.is_thin and lv.percent_size is None), Size(0))
        protected = self._reused_lv_names(planned_vg)

        if planned_vg.make_space_policy == MAKE_SPACE_REMOVE:
            for lv in self._deletable_lvs(vg, protected):
                log.info("removing logical volume %s from %s", lv.name, vg.name)
                devicegraph.recursive_remove(lv)

        missing = needed - vg.free_space
        while missing > Size(0):
            if planned_vg.make_space_policy == MAKE_SPACE_KEEP:
                candidate = None
            else:
                candidate = self._delete_candidate(self._deletable_lvs(vg, protected), missing)
            if candidate is None:
                raise NoDiskSpaceError("the volume group %s is not big enough" % vg.name)
            log.info("removing logical volume %s to make space in %s", candidate.name, vg.name)
            devicegraph.recursive_remove(candidate)
            missing = needed - vg.free_space

    @staticmethod
    def _deletable_lvs(vg, protected):
        return [lv for lv in vg.lvs if not lv.is_thin_lv and
                lv.name not in protected and lv.path not in protected and
                not any(t.name in protected or t.path in protected for t in lv.thin_lvs)]

    @staticmethod
    def _delete_candidate(lvs, missing):
        """ The smallest volume that frees enough space, or the biggest one """
        if not lvs:
            return None
        big_lvs = [lv for lv in lvs if lv.size >= missing]
        if big_lvs:
            return min(big_lvs, key=lambda lv: (lv.size, lv.name))
        return max(lvs, key=lambda lv: (lv.size, lv.name))

    def _create_logical_volumes(self, devicegraph, vg, planned_lvs):
        fixed = []
        for planned in planned_lvs:
            new = copy.copy(planned)
            if new.percent_size is not None:
                size = new.size_in(vg)
                new.set_size_limits(size, size)
            fixed.append(new)

        try:
            lvs = distribute_space(fixed, vg.free_space, rounding=vg.pe_size)
        except NotEnoughFreeSpaceError:
            raise NoDiskSpaceError("the volume group %s is not big enough" % vg.name)

        devices_map = {}
        for planned in lvs:
            lv = self._create_lv(devicegraph, vg, planned, planned.size)
            devices_map[lv.name] = planned
            if planned.is_thin_pool:
                devices_map.update(self._create_thin_lvs(devicegraph, vg, lv, planned))
        return devices_map

    def _create_lv(self, devicegraph, vg, planned, size, pool=None):
        taken = [lv.lvname for lv in vg.lvs]
        name = available_name(planned.logical_volume_name or DEFAULT_LV_NAME, taken)
        lv = devicegraph.new_lv(vg, name, size, lv_type=planned.lv_type, pool=pool,
                                stripes=planned.stripes, stripe_size=planned.stripe_size)
        planned.format(lv, devicegraph)
        log.debug("created logical volume %s (%s) for %r", lv.name, lv.size, planned)
        return lv

    def _create_thin_lvs(self, devicegraph, vg, pool, planned_pool):
        devices_map = {}
        for planned in planned_pool.thin_lvs:
            if planned.reusing:
                continue
            size = vg.align(planned.size_in(pool))
            lv = self._create_lv(devicegraph, vg, planned, size, pool=pool)
            devices_map[lv.name] = planned
        return devices_map


class MdCreator(PartitionedDeviceCreator):

    """ Creates a software RAID out of the given member devices. """

    def create_md(self, planned_md, member_names):
        """
            :param planned_md: the planned RAID
            :type planned_md: :class:`~.planned.PlannedMd`
            :param member_names: names of the member devices
            :type member_names: list of str
            :rtype: :class:`~.creator_result.CreatorResult`
        """
        log_method_call(self, planned_md=planned_md, member_names=member_names)
        devicegraph = self.original_graph.copy()
        if planned_md.reusing:
            md = planned_md.find_reused(devicegraph)
            if md is None:
                raise DeviceNotFoundError("RAID %s not found" % planned_md.reuse_name)
        else:
            members = planned_md.sorted_members([devicegraph.resolve_device(n)
                                                 for n in member_names])
            taken = [d.name for d in devicegraph.md_raids]
            name = planned_md.md_name if planned_md.name else numbered_name("md", taken)
            md = devicegraph.new_mdarray(name, members, level=planned_md.md_level,
                                         chunk_size=planned_md.chunk_size,
                                         parity=planned_md.md_parity)
            log.debug("created RAID %s out of %s", md.name, [m.name for m in members])
        return self._populate(devicegraph, md, planned_md)

    create = create_md


class BcacheCreator(PartitionedDeviceCreator):

    """ Creates a bcache device out of a backing and a caching device. """

    def create_bcache(self, planned_bcache, backing_name, caching_name=None):
        """
            :param planned_bcache: the planned bcache
            :type planned_bcache: :class:`~.planned.PlannedBcache`
            :param str backing_name: name of the backing device
            :keyword str caching_name: name of the caching device, if any
            :rtype: :class:`~.creator_result.CreatorResult`
        """
        log_method_call(self, planned_bcache=planned_bcache, backing=backing_name,
                        caching=caching_name)
        devicegraph = self.original_graph.copy()
        if planned_bcache.reusing:
            bcache = planned_bcache.find_reused(devicegraph)
            if bcache is None:
                raise DeviceNotFoundError("bcache %s not found" % planned_bcache.reuse_name)
        else:
            bcache = self._create_bcache_device(devicegraph, planned_bcache, backing_name,
                                                caching_name)
        return self._populate(devicegraph, bcache, planned_bcache)

    create = create_bcache

    @staticmethod
    def _create_bcache_device(devicegraph, planned, backing_name, caching_name):
        if backing_name is None:
            raise DeviceNotFoundError("no backing device for bcache %s" % planned.name)
        backing = devicegraph.resolve_device(backing_name)
        caching = devicegraph.resolve_device(caching_name) if caching_name else None

        taken = [d.name for d in devicegraph.bcaches]
        name = planned.bcache_name if planned.name else numbered_name("bcache", taken)
        if backing.formatted_device.children:
            devicegraph.recursive_remove(backing.formatted_device, remove_device=False)

        # a caching set can be shared by several bcache devices
        shared_cset = (caching is not None and
                       caching.formatted_device.format.type == "bcache" and
                       caching.formatted_device.format.role == "caching")
        if shared_cset:
            bcache = devicegraph.new_bcache(name, backing, cache_mode=planned.cache_mode)
            bcache.attach_caching_device(caching.formatted_device)
        else:
            if caching is not None and caching.formatted_device.children:
                devicegraph.recursive_remove(caching.formatted_device, remove_device=False)
            bcache = devicegraph.new_bcache(name, backing, caching,
                                            cache_mode=planned.cache_mode)
        log.debug("created bcache %s (backing %s, caching %s)", bcache.name, backing.name,
                  caching.name if caching else None)
        return bcache


class BtrfsCreator(Creator):

    """ Creates a multi-device btrfs filesystem. """

    def create_filesystem(self, planned_btrfs, member_names):
        """
            :param planned_btrfs: the planned filesystem
            :type planned_btrfs: :class:`~.planned.PlannedBtrfs`
            :param member_names: names of the member devices
            :type member_names: list of str
            :rtype: :class:`~.creator_result.CreatorResult`
        """
        log_method_call(self, planned_btrfs=planned_btrfs, member_names=member_names)
        devicegraph = self.original_graph.copy()
        members = [devicegraph.resolve_device(n) for n in member_names]
        if not members:
            raise DeviceNotFoundError("no devices for btrfs %s" % planned_btrfs.name)
        for member in members:
            if member.formatted_device.children:
                devicegraph.recursive_remove(member.formatted_device, remove_device=False)

        fmt_args = planned_btrfs.format_args()
        volume = devicegraph.new_btrfs(planned_btrfs.name or "btrfs", members,
                                       data_level=planned_btrfs.data_raid_level,
                                       metadata_level=planned_btrfs.metadata_raid_level,
                                       **fmt_args)
        log.debug("created btrfs %s on %s", volume.name, [m.name for m in members])
        return CreatorResult(devicegraph, {volume.name: planned_btrfs})

    create = create_filesystem


class NfsCreator(Creator):

    """ Adds an NFS share to the graph. """

    def create_nfs(self, planned_nfs):
        devicegraph = self.original_graph.copy()
        nfs = devicegraph.new_nfs(planned_nfs.server, planned_nfs.path,
                                  **planned_nfs.format_args())
        log.debug("added NFS share %s", nfs.name)
        return CreatorResult(devicegraph, {nfs.name: planned_nfs})

    create = create_nfs


class TmpfsCreator(Creator):

    """ Adds a tmpfs mount to the graph. """

    def create_tmpfs(self, planned_tmpfs):
        devicegraph = self.original_graph.copy()
        tmpfs = devicegraph.new_tmpfs(**planned_tmpfs.format_args())
        log.debug("added tmpfs at %s", planned_tmpfs.mount_point)
        return CreatorResult(devicegraph, {tmpfs.name: planned_tmpfs})

    create = create_tmpfs


CREATORS = {PlannedPartition: PartitionCreator,
            PlannedDisk: DiskCreator,
            PlannedLvmVg: LvmCreator,
            PlannedMd: MdCreator,
            PlannedBcache: BcacheCreator,
            PlannedBtrfs: BtrfsCreator,
            PlannedNfs: NfsCreator,
            PlannedTmpfs: TmpfsCreator}


def creator_for(planned, devicegraph):
    """ The creator able to handle a planned device

        :param planned: the planned device
        :param devicegraph: the graph to start from
        :returns: an instance of the appropriate :class:`Creator` subclass
        :raises: ValueError if there is no creator for such kind of device
    """
    for planned_class, creator_class in CREATORS.items():
        if isinstance(planned, planned_class):
            return creator_class(devicegraph)
    raise ValueError("no creator for %r" % planned)
