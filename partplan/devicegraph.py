# devicegraph.py
# In-memory device graph for the storage planning engine.
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
import pprint

from .devicelibs.partition import PartitionTableType, PartitionType
from .devices import BcacheDevice, BTRFSVolumeDevice, LUKSDevice, MDRaidArrayDevice
from .devices import LVMLogicalVolumeDevice, LVMVolumeGroupDevice, NFSDevice, TmpFSDevice
from .devices import NoDevice, PartitionDevice, Region
from .errors import DeviceTreeError, DeviceNotFoundError, PartitioningError
from .flags import flags
from .formats import get_format
from .size import Size, ROUND_DOWN
from .storage_log import log_method_call, log_method_return

import logging
log = logging.getLogger("partplan")

_LVM_DEVICE_CLASSES = (LVMLogicalVolumeDevice, LVMVolumeGroupDevice)


class Devicegraph(object):
    """ A quasi-tree that represents a set of storage devices.

        The graph contains a list of :class:`~.devices.StorageDevice`
        instances. Parent/child relations are kept by the devices
        themselves; the graph only knows which devices belong to it.

        Graphs are plain values: every step of the planning engine works on
        a copy obtained with :meth:`copy` and returns it. Devices keep their
        id (sid) across copies, so :meth:`get_device_by_id` finds the
        counterpart of a device in another graph.
    """
    def __init__(self):
        self._devices = []

    def __str__(self):
        done = []

        def show_subtree(root, depth):
            abbreviate_subtree = root in done
            s = "%s%s\n" % ("  " * depth, root)
            done.append(root)
            if abbreviate_subtree:
                s += "%s...\n" % ("  " * (depth + 1),)
            else:
                for child in root.children:
                    s += show_subtree(child, depth + 1)
            return s

        roots = [d for d in self._devices if not d.parents]
        tree = ""
        for root in roots:
            tree += show_subtree(root, 0)
        return tree

    def copy(self):
        """ Return an independent copy of this graph. """
        log.debug("copying device graph")
        return copy.deepcopy(self)

    #
    # Device list
    #
    @property
    def devices(self):
        """ List of devices currently in the graph """
        return self._devices[:]

    @property
    def names(self):
        """ List of devices names """
        return [d.name for d in self._devices]

    def add_device(self, newdev):
        """ Add a device to the graph.

            :param newdev: the device to add
            :type newdev: a subclass of :class:`~.devices.StorageDevice`

            Raise DeviceTreeError if the device (or another one with the same
            name) is already in the graph, or if any of its parents is not.
        """
        if newdev in self._devices:
            raise DeviceTreeError("Trying to add already existing device.")

        if not isinstance(newdev, NoDevice) and newdev.name in self.names:
            raise DeviceTreeError("Duplicate device name '%s'." % newdev.name)

        # make sure this device's parent devices are in the graph already
        for parent in newdev.parents:
            if parent not in self._devices:
                raise DeviceTreeError("parent device not in tree")

        self._devices.append(newdev)
        log.info("added %s %s (id %d) to device graph", newdev.type,
                 newdev.name, newdev.id)

    def remove_device(self, dev):
        """ Remove a device from the graph.

            :param dev: the device to remove
            :type dev: a subclass of :class:`~.devices.StorageDevice`

            .. note::

                Only leaves may be removed.
        """
        if dev not in self._devices:
            raise ValueError("Device '%s' not in tree" % dev.name)

        if not dev.isleaf:
            log.debug("%s has children %s", dev.name, pprint.pformat([c.name for c in dev.children]))
            raise ValueError("Cannot remove non-leaf device '%s'" % dev.name)

        # an LV takes its name from its VG, so get it while the parents are there
        name = dev.name
        for parent in list(dev.parents):
            dev.parents.remove(parent)

        self._devices.remove(dev)
        log.info("removed %s %s (id %d) from device graph", dev.type, name, dev.id)

    def recursive_remove(self, device, remove_device=True):
        """ Remove a device after removing its dependent devices.

            :param :class:`~.devices.StorageDevice` device: the device to remove
            :keyword bool remove_device: whether to remove the root device

            If the device is not a leaf, all of its dependents are removed
            recursively until it is a leaf device. At that point the device is
            removed, unless it is a disk. If the device is a disk, its
            formatting is removed but the disk stays in the graph.
        """
        log.debug("removing %s", device.name)
        devices = device.descendants

        # remove the most recently added devices first
        devices.reverse()

        while devices:
            log.debug("devices to remove: %s", [d.name for d in devices])
            leaves = [d for d in devices if d.isleaf]
            for leaf in leaves:
                self.remove_device(leaf)
                devices.remove(leaf)

        device.format = None
        if remove_device and not device.is_disk:
            self.remove_device(device)

    #
    # Lookups
    #
    def get_device_by_name(self, name):
        """ Return a device with a matching name.

            :param str name: the name to look for
            :returns: the first matching device found
            :rtype: :class:`~.devices.Device`
        """
        log_method_call(self, name=name)
        result = None
        if name:
            result = next((d for d in self._devices if d.name == name or
                           (isinstance(d, _LVM_DEVICE_CLASSES) and d.name == name.replace("--", "-"))),
                          None)
        log_method_return(self, result)
        return result

    def get_device_by_path(self, path):
        """ Return a device with a matching path.

            If there is more than one device with a matching path,
            prefer a leaf device to a non-leaf device.

            :param str path: the path to match
            :returns: the first matching device found
            :rtype: :class:`~.devices.Device`
        """
        log_method_call(self, path=path)
        result = None
        if path:
            result = next((d for d in reversed(self._devices) if d.path == path), None)
        log_method_return(self, result)
        return result

    def get_device_by_id(self, id_num):
        """ Return a device with specified device id (sid).

            :param int id_num: the id to look for
            :returns: the first matching device found
            :rtype: :class:`~.devices.Device`
        """
        log_method_call(self, id_num=id_num)
        result = next((d for d in self._devices if d.id == id_num), None)
        log_method_return(self, result)
        return result

    def get_device_by_uuid(self, uuid):
        """ Return a device with a matching device or format UUID. """
        log_method_call(self, uuid=uuid)
        result = None
        if uuid:
            result = next((d for d in self._devices if d.uuid == uuid or d.format.uuid == uuid), None)
        log_method_return(self, result)
        return result

    def get_device_by_label(self, label):
        """ Return a device with a matching filesystem label. """
        log_method_call(self, label=label)
        result = None
        if label:
            result = next((d for d in self._devices if d.format.label == label), None)
        log_method_return(self, result)
        return result

    def find_by_any_name(self, name):
        """ Find a device by its name, its path or its kernel name.

            :param str name: something like "sda1", "/dev/sda1" or "/dev/system/root"
            :returns: the matching device or None
        """
        if not name:
            return None
        device = self.get_device_by_path(name) or self.get_device_by_name(name)
        if device is None and name.startswith("/dev/"):
            device = self.get_device_by_name(name[len("/dev/"):])
        return device

    def resolve_device(self, name):
        """ Like :meth:`find_by_any_name`, but raise if nothing matches.

            :raises: :class:`~.errors.DeviceNotFoundError`
        """
        device = self.find_by_any_name(name)
        if device is None:
            raise DeviceNotFoundError("device %s not found" % name)
        return device

    #
    # Conveniences
    #
    @property
    def leaves(self):
        """ List of all devices upon which no other devices exist. """
        return [d for d in self._devices if d.isleaf]

    @property
    def disks(self):
        return sorted((d for d in self._devices if d.is_disk), key=lambda d: d.name)

    @property
    def partitionable_devices(self):
        """ Disks and disk-like devices (RAIDs, bcaches) able to hold partitions """
        return [d for d in self._devices if d.partitionable]

    @property
    def partitions(self):
        return sorted((d for d in self._devices if d.type == "partition"), key=lambda d: d.name)

    @property
    def lvm_vgs(self):
        return sorted((d for d in self._devices if d.type == "lvmvg"), key=lambda d: d.name)

    @property
    def lvm_lvs(self):
        return sorted((d for d in self._devices if d.type == "lvmlv"), key=lambda d: d.name)

    @property
    def lvm_pvs(self):
        """ Devices holding an LVM physical volume format """
        return [d for d in self._devices if d.format.type == "lvmpv"]

    @property
    def md_raids(self):
        return sorted((d for d in self._devices if d.type == "mdarray"), key=lambda d: d.name)

    @property
    def bcaches(self):
        return sorted((d for d in self._devices if d.type == "bcache"), key=lambda d: d.name)

    @property
    def btrfs_volumes(self):
        return [d for d in self._devices if d.type == "btrfs volume"]

    @property
    def nfs_mounts(self):
        return [d for d in self._devices if d.type == "nfs"]

    @property
    def tmpfs_mounts(self):
        return [d for d in self._devices if d.type == "tmpfs"]

    @property
    def filesystems(self):
        """ List of filesystem formats in the graph """
        return [d.format for d in self._devices if d.format.is_filesystem and
                (d.format.type != "btrfs" or isinstance(d, BTRFSVolumeDevice) or not d.children)]

    @property
    def mountpoints(self):
        """ Dict with mountpoint keys and Device values. """
        filesystems = {}
        for device in self._devices:
            if device.format.mountable and device.format.mountpoint:
                filesystems[device.format.mountpoint] = device
        return filesystems

    def free_spaces(self, disks=None):
        """ Free regions of the given partitionable devices (all by default). """
        if disks is None:
            disks = self.partitionable_devices
        spaces = []
        for disk in disks:
            spaces.extend(disk.free_spaces())
        return spaces

    #
    # Partitions
    #
    def create_partition_table(self, device, ptable_type=None):
        """ Create a new (empty) partition table on a device.

            :param device: a partitionable device without partitions
            :param ptable_type: type of the table, the preferred one by default
            :type ptable_type: :class:`~.devicelibs.partition.PartitionTableType`
            :returns: the new partition table
        """
        log_method_call(self, device=device.name, ptable_type=ptable_type)
        if not device.partitionable:
            raise DeviceTreeError("%s cannot hold a partition table" % device.name)
        if device.partitions:
            raise DeviceTreeError("cannot initialize %s, it has partitions" % device.name)

        ptable_type = PartitionTableType.find(ptable_type) or device.preferred_ptable_type
        device.format = get_format("disklabel", label_type=ptable_type,
                                   sector_size=device.sector_size)
        log.info("created %s partition table on %s", ptable_type.value, device.name)
        return device.format

    def create_partition(self, disk, region, part_type=PartitionType.PRIMARY, partition_id=None):
        """ Create a new partition in a region of a partitionable device.

            :param disk: the device holding the partition table
            :param region: region of the new partition
            :type region: :class:`~.devices.lib.Region`
            :param part_type: primary, extended or logical
            :returns: the new partition
            :rtype: :class:`~.devices.PartitionDevice`
            :raises: :class:`~.errors.PartitioningError`
        """
        log_method_call(self, disk=disk.name, start=region.start, length=region.length,
                        part_type=part_type)
        ptable = disk.partition_table
        if ptable is None:
            raise PartitioningError("%s has no partition table" % disk.name)
        if not ptable.partition_type_supported(part_type):
            raise PartitioningError("%s partitions not supported on %s" % (part_type.value, disk.name))
        if part_type == PartitionType.EXTENDED and disk.extended_partition:
            raise PartitioningError("%s already has an extended partition" % disk.name)
        if part_type == PartitionType.LOGICAL:
            extended = disk.extended_partition
            if extended is None or not region.inside(extended.region):
                raise PartitioningError("logical partition outside of an extended partition")
        elif not region.inside(disk.usable_region()):
            raise PartitioningError("partition region out of the usable space of %s" % disk.name)

        for other in disk.partitions:
            if other.is_extended and part_type == PartitionType.LOGICAL:
                continue
            if other.is_logical and part_type != PartitionType.LOGICAL:
                continue
            if other.region.overlaps(region):
                raise PartitioningError("region overlaps with %s" % other.name)

        number = disk.next_partition_number(part_type)
        part = PartitionDevice(disk.partition_name(number), parents=[disk], region=region,
                               part_type=part_type, partition_id=partition_id, number=number)
        self.add_device(part)
        return part

    def delete_partition(self, partition):
        """ Remove a partition and everything built on top of it.

            The extended partition is removed too when its last logical
            partition goes away.
        """
        log_method_call(self, partition=partition.name)
        disk = partition.disk
        self.recursive_remove(partition)
        if partition.is_logical and flags.remove_empty_ext_partitions:
            extended = disk.extended_partition
            if extended is not None and not disk.logical_partitions:
                log.debug("removing empty extended partition from %s", disk.name)
                self.remove_device(extended)

    def wipe_device(self, device):
        """ Remove all the partitions and the formatting of a device. """
        log_method_call(self, device=device.name)
        self.recursive_remove(device, remove_device=False)

    def resize_device(self, device, new_size):
        """ Change the size of a device.

            The end of a partition is aligned down to the alignment grain of
            its partition table.

            :param device: the device to resize
            :param new_size: the new target size for the device
            :type new_size: :class:`~.size.Size`
            :returns: the resulting size
        """
        log_method_call(self, device=device.name, new_size=new_size)
        info = device.resize_info()
        if new_size != device.size and not info.resize_ok:
            raise ValueError("device %s cannot be resized" % device.name)
        new_size = max(min(new_size, info.max_size), info.min_size)

        if isinstance(device, PartitionDevice):
            grain = device.partition_table.alignment
            end = (device.region.start_offset + new_size).round_to_nearest(grain, rounding=ROUND_DOWN)
            new_size = max(end - device.region.start_offset, Size(0))
            region = device.region
            device.region = Region(region.start, region.blocks(new_size), region.block_size)
        else:
            device.size = new_size

        log.info("resized %s to %s", device.name, device.size)
        return device.size

    #
    # Formatting and encryption
    #
    def format_device(self, device, fmt_type, **kwargs):
        """ Create a new format on a device (on its LUKS device if encrypted).

            :param device: the device to format
            :param str fmt_type: the format type
            :returns: the new format
        """
        target = device.formatted_device
        log_method_call(self, device=target.name, fmt_type=fmt_type)
        target.format = get_format(fmt_type, **kwargs)
        return target.format

    def encrypt_device(self, device, passphrase, luks_version=None, name=None):
        """ Encrypt a device with LUKS.

            :param device: the plain device
            :param str passphrase: the passphrase
            :keyword str luks_version: luks1 or luks2
            :keyword str name: name of the mapped device
            :returns: the LUKS device
            :rtype: :class:`~.devices.LUKSDevice`
        """
        log_method_call(self, device=device.name, passphrase=passphrase, luks_version=luks_version)
        if device.children:
            raise DeviceTreeError("cannot encrypt %s, it is in use" % device.name)
        name = name or "cr_%s" % device.name
        device.format = get_format("luks", passphrase=passphrase, luks_version=luks_version,
                                   name=name)
        luks = LUKSDevice(name, parents=[device])
        self.add_device(luks)
        return luks

    #
    # Other device types
    #
    def new_vg(self, name, pvs, pe_size=None):
        """ Create a new LVM volume group.

            :param str name: the VG name
            :param pvs: devices to use as physical volumes (they get a PV format)
            :returns: the new VG
        """
        log_method_call(self, name=name, pvs=[p.name for p in pvs])
        for pv in pvs:
            if pv.formatted_device.format.type != "lvmpv":
                self.format_device(pv, "lvmpv")
        vg = LVMVolumeGroupDevice(name, parents=[pv.formatted_device for pv in pvs], pe_size=pe_size)
        self.add_device(vg)
        return vg

    def new_lv(self, vg, name, size, lv_type=LVMLogicalVolumeDevice.NORMAL, pool=None,
               stripes=None, stripe_size=None):
        """ Create a new logical volume in a VG (or in a thin pool). """
        log_method_call(self, vg=vg.name, name=name, size=size, lv_type=lv_type)
        parent = pool if lv_type == LVMLogicalVolumeDevice.THIN else vg
        if parent is None:
            raise DeviceTreeError("thin volume %s needs a thin pool" % name)
        lv = LVMLogicalVolumeDevice(name, parents=[parent], size=size, lv_type=lv_type,
                                    stripes=stripes, stripe_size=stripe_size)
        self.add_device(lv)
        return lv

    def new_mdarray(self, name, members, level=None, chunk_size=None, parity=None):
        """ Create a new MD RAID out of the given member devices. """
        log_method_call(self, name=name, members=[m.name for m in members], level=level)
        for member in members:
            if member.formatted_device.format.type != "mdmember":
                self.format_device(member, "mdmember")
        md = MDRaidArrayDevice(name, level=level, parents=[m.formatted_device for m in members],
                               chunk_size=chunk_size, parity=parity)
        self.add_device(md)
        return md

    def new_bcache(self, name, backing_device, caching_device=None, cache_mode=None):
        """ Create a new bcache device. """
        log_method_call(self, name=name, backing=backing_device.name, cache_mode=cache_mode)
        self.format_device(backing_device, "bcache", role="backing")
        if caching_device is not None:
            self.format_device(caching_device, "bcache", role="caching")
            caching_device = caching_device.formatted_device
        bcache = BcacheDevice(name, backing_device=backing_device.formatted_device,
                              caching_device=caching_device, cache_mode=cache_mode)
        self.add_device(bcache)
        return bcache

    def new_btrfs(self, name, members, data_level=None, metadata_level=None, **fmt_args):
        """ Create a new multi-device btrfs filesystem. """
        log_method_call(self, name=name, members=[m.name for m in members])
        for member in members:
            self.format_device(member, "btrfs")
        volume = BTRFSVolumeDevice(name, parents=[m.formatted_device for m in members],
                                   data_level=data_level, metadata_level=metadata_level,
                                   fmt=get_format("btrfs", **fmt_args))
        self.add_device(volume)
        return volume

    def new_nfs(self, server, share, **fmt_args):
        """ Create a new NFS mount. """
        device = NFSDevice(server, share, fmt=get_format("nfs", **fmt_args))
        self.add_device(device)
        return device

    def new_tmpfs(self, **fmt_args):
        """ Create a new tmpfs mount. """
        device = TmpFSDevice(fmt=get_format("tmpfs", **fmt_args))
        self.add_device(device)
        return device
