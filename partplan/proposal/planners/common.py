# common.py
# Shared logic of the profile drive planners.
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

from ...devicelibs import crypto
from ...devicelibs.partition import PartitionId
from ...planned import PlannedPartition
from ...size import Size
from ..issues import (ConflictingAttrs, InvalidEncryption, InvalidValue, MissingReusableDevice,
                      MissingReusableFilesystem, MissingReuseInfo, MissingValue)
from ..size_parser import SizeParser

import logging
log = logging.getLogger("partplan")

PARTITION_MIN_SIZE = Size(1)

# the first one present in a partition section wins
USAGE_ATTRS = ["mount", "raid_name", "lvm_group", "btrfs_name", "bcache_backing_for",
               "bcache_caching_for"]

USAGE_ATTRS_MAP = {"mount": "mount_point", "lvm_group": "lvm_volume_group_name"}


class DrivePlanner(object):

    """ Base class of the planners.

        A planner turns one drive section of the profile into planned
        devices. Problems are registered in the issues list; devices with
        unusable settings are dropped instead of raising.
    """

    def __init__(self, devicegraph, issues_list, size_parser=None):
        """
            :param devicegraph: the graph to look for reusable devices in
            :param issues_list: where to register problems
            :type issues_list: :class:`~.issues.IssuesList`
            :keyword size_parser: parser for the size attributes
            :type size_parser: :class:`~.size_parser.SizeParser`
        """
        self.devicegraph = devicegraph
        self.issues_list = issues_list
        self.size_parser = size_parser or SizeParser()

    @property
    def volume_specs(self):
        """ Per mount point defaults, shared with the size parser """
        return self.size_parser.volume_specs

    def planned_devices(self, drive):
        """ The planned devices for a drive section

            :param drive: the drive section
            :type drive: :class:`~.profile.DriveSection`
            :rtype: list of :class:`~.planned.PlannedDevice`
        """
        raise NotImplementedError()

    #
    # Device configuration
    #
    def configure_device(self, device, section, drive):
        self.configure_filesystem(device, section, drive)
        self.configure_usage(device, section)
        self.configure_encryption(device, section)

    def configure_usage(self, device, section):
        present = [a for a in USAGE_ATTRS if getattr(section, a, None) not in (None, [], "")]
        if not present:
            return

        usage_attr = present[0]
        name = USAGE_ATTRS_MAP.get(usage_attr, usage_attr)
        if hasattr(device, name):
            setattr(device, name, getattr(section, usage_attr))
        if len(present) > 1:
            self.issues_list.add(ConflictingAttrs, section, usage_attr, present[1:])

    def configure_filesystem(self, device, section, drive):
        device.mount_point = section.mount
        device.label = section.label
        device.filesystem_type = self.filesystem_for(section)
        device.mount_by = section.mountby
        device.mkfs_options = section.mkfs_options
        device.fstab_options = self._fstab_options(section.fstab_options)
        device.read_only = self._read_only(section.mount)

        if device.root:
            device.snapshots = drive.enable_snapshots is not False
        if device.btrfs:
            spec = self.volume_specs.for_mount_point(device.mount_point)
            device.subvolumes = list(section.subvolumes or (spec.subvolumes if spec else []))
            device.default_subvolume = spec.btrfs_default_subvolume if spec else None

    @staticmethod
    def _fstab_options(options):
        if not options:
            return None
        if isinstance(options, str):
            return [o.strip() for o in options.split(",") if o.strip()]
        return list(options)

    def filesystem_for(self, section):
        """ Filesystem type for a section, None if it needs none """
        if section.filesystem:
            return section.filesystem
        if not section.mount:
            return None
        spec = self.volume_specs.for_mount_point(section.mount)
        if spec is not None and spec.fs_type:
            return spec.fs_type
        return "swap" if section.mount == "swap" else "btrfs"

    def _read_only(self, mount_point):
        spec = self.volume_specs.for_mount_point(mount_point)
        return bool(spec and spec.btrfs_read_only)

    def configure_encryption(self, device, section):
        if not (section.crypt_fs or section.crypt_method):
            return
        if not hasattr(device, "encryption_method"):
            return

        if section.crypt_method:
            if not crypto.is_luks_version_valid(section.crypt_method):
                self.issues_list.add(InvalidEncryption, section, "crypt_method",
                                     section.crypt_method)
                return
            device.encryption_method = section.crypt_method
        else:
            device.encryption_method = crypto.DEFAULT_LUKS_VERSION

        if not section.crypt_key:
            self.issues_list.add(MissingValue, section, "crypt_key")
            return
        device.encryption_password = section.crypt_key

    #
    # Sizes
    #
    def parse_size(self, section, min_size, max_size):
        return self.size_parser.parse(section.size, section.mount, min_size, max_size)

    def assign_size(self, device, section, min_size=PARTITION_MIN_SIZE, max_size=None):
        """ Set the size attributes of device, False if the size is not valid """
        size_info = self.parse_size(section, min_size, max_size or Size.unlimited())
        if size_info is None:
            self.issues_list.add(InvalidValue, section, "size", section.size, "skip")
            return False

        if size_info.percentage is not None:
            device.percent_size = size_info.percentage
        else:
            device.set_size_limits(size_info.min, size_info.max)
        if size_info.unlimited:
            device.weight = 1
        return True

    #
    # Reuse
    #
    def add_device_reuse(self, planned, device, section):
        planned.reuse_name = device.name
        planned.reuse_sid = device.id
        if section.uuid:
            planned.uuid = section.uuid
        planned.resize = bool(section.resize)
        planned.reformat = bool(section.format)
        self._check_reusable_filesystem(planned, device, section)

    def _check_reusable_filesystem(self, planned, device, section):
        if planned.reformat or device.filesystem is not None:
            return
        if getattr(planned, "component", False):
            return
        if planned.mount_point is None and planned.filesystem_type is None:
            return
        self.issues_list.add(MissingReusableFilesystem, section)

    def find_partition_to_reuse(self, container, section):
        if section.partition_nr is not None:
            device = next((p for p in container.partitions if p.number == section.partition_nr),
                          None)
        elif section.uuid:
            device = next((p for p in container.partitions if p.format.uuid == section.uuid), None)
        elif section.label:
            device = next((p for p in container.partitions if p.format.label == section.label),
                          None)
        else:
            self.issues_list.add(MissingReuseInfo, section)
            return None

        if device is None:
            self.issues_list.add(MissingReusableDevice, section)
        return device

    def add_partition_reuse(self, planned, container, section):
        if container is None:
            self.issues_list.add(MissingReusableDevice, section)
            return
        device = self.find_partition_to_reuse(container, section)
        if device is None:
            return
        if planned.filesystem_type is None and device.filesystem is not None:
            planned.filesystem_type = device.filesystem.type
        self.add_device_reuse(planned, device, section)

    #
    # Partitions
    #
    def plan_partition(self, container_name, drive, section, max_size=None):
        """ A planned partition for a partition section, None if it is not valid

            :param str container_name: name of the device holding the partition
        """
        partition = PlannedPartition()
        if not self.assign_size(partition, section, max_size=max_size):
            log.info("partition section dropped: %s", section)
            return None

        partition.disk = container_name
        if section.partition_id is not None:
            partition.partition_id = PartitionId.find(section.partition_id)
        if section.primary is not None:
            partition.primary = section.primary
        self.configure_device(partition, section, drive)
        if section.create is False:
            container = self.devicegraph.find_by_any_name(container_name)
            self.add_partition_reuse(partition, container, section)
        return partition
