# profile.py
# Decoded installer profile sections.
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
""" Partitioning profile sections.

    Profiles arrive already decoded as lists and dictionaries. The classes
    here give them a fixed set of attributes; unknown keys are ignored.
"""

import attr

from .size import KiB

import logging
log = logging.getLogger("partplan")

CT_DISK = "CT_DISK"
CT_LVM = "CT_LVM"
CT_MD = "CT_MD"
CT_BCACHE = "CT_BCACHE"
CT_BTRFS = "CT_BTRFS"
CT_NFS = "CT_NFS"
CT_TMPFS = "CT_TMPFS"

NO_PARTITION_TABLE = "none"

LESS_THAN = "less_than"
MORE_THAN = "more_than"
EQUAL_TO = "equal_to"


def _known_keys(cls, data, renames=None):
    """ The items of data that are attributes of cls, with renamed keys """
    renames = renames or {}
    names = [a.name for a in attr.fields(cls)]
    result = {}
    for key, value in data.items():
        key = renames.get(key, key)
        if key in names:
            result[key] = value
    return result


@attr.s
class SkipRule(object):
    """ A rule to leave a disk out of the flexible drives assignment. """

    key = attr.ib(default=None)
    predicate = attr.ib(default=EQUAL_TO)
    reference = attr.ib(default=None)

    @classmethod
    def from_dict(cls, data):
        if data.get("skip_if_less_than"):
            predicate = LESS_THAN
        elif data.get("skip_if_more_than"):
            predicate = MORE_THAN
        else:
            predicate = EQUAL_TO
        return cls(data.get("skip_key"), predicate, data.get("skip_value"))

    @property
    def valid(self):
        return None not in (self.key, self.predicate, self.reference)

    @staticmethod
    def value(disk, key):
        """ The value of a disk property used in rules """
        if key == "size_k":
            return int(disk.size.convert_to(KiB))
        elif key == "device":
            return disk.path
        elif key == "name":
            return disk.name
        return None

    def matches(self, disk):
        if not self.valid:
            return False
        value = self.value(disk, self.key)
        if value is None:
            return False
        if isinstance(value, int):
            try:
                reference = int(self.reference)
            except (TypeError, ValueError):
                return False
            if self.predicate == LESS_THAN:
                return value < reference
            elif self.predicate == MORE_THAN:
                return value > reference
            return value == reference
        return self.predicate == EQUAL_TO and value == str(self.reference)


@attr.s
class SkipListSection(object):

    rules = attr.ib(default=attr.Factory(list))

    @classmethod
    def from_list(cls, items):
        return cls([SkipRule.from_dict(i) for i in items or []])

    def matches(self, disk):
        return any(rule.matches(disk) for rule in self.rules)


@attr.s
class RaidOptionsSection(object):

    raid_name = attr.ib(default=None)
    raid_type = attr.ib(default=None)
    chunk_size = attr.ib(default=None)
    parity_algorithm = attr.ib(default=None)
    device_order = attr.ib(default=attr.Factory(list))

    @classmethod
    def from_dict(cls, data):
        return cls(**_known_keys(cls, data or {}))


@attr.s
class BcacheOptionsSection(object):

    cache_mode = attr.ib(default=None)

    @classmethod
    def from_dict(cls, data):
        return cls(**_known_keys(cls, data or {}))


@attr.s
class BtrfsOptionsSection(object):

    data_raid_level = attr.ib(default=None)
    metadata_raid_level = attr.ib(default=None)

    @classmethod
    def from_dict(cls, data):
        return cls(**_known_keys(cls, data or {}))


@attr.s
class PartitionSection(object):
    """ One partition (or logical volume, or whole device) of a drive. """

    create = attr.ib(default=True)
    filesystem = attr.ib(default=None)
    format = attr.ib(default=None)
    label = attr.ib(default=None)
    uuid = attr.ib(default=None)
    lv_name = attr.ib(default=None)
    lvm_group = attr.ib(default=None)
    mount = attr.ib(default=None)
    mountby = attr.ib(default=None)
    partition_id = attr.ib(default=None)
    partition_nr = attr.ib(default=None)
    partition_type = attr.ib(default=None)
    size = attr.ib(default=None)
    crypt_fs = attr.ib(default=False)
    crypt_method = attr.ib(default=None)
    crypt_key = attr.ib(default=None)
    raid_name = attr.ib(default=None)
    raid_options = attr.ib(default=None)
    mkfs_options = attr.ib(default=None)
    fstab_options = attr.ib(default=None)
    resize = attr.ib(default=False)
    pool = attr.ib(default=False)
    used_pool = attr.ib(default=None)
    stripes = attr.ib(default=None)
    stripe_size = attr.ib(default=None)
    bcache_backing_for = attr.ib(default=None)
    bcache_caching_for = attr.ib(default=None)
    device = attr.ib(default=None)
    btrfs_name = attr.ib(default=None)
    quotas = attr.ib(default=False)
    subvolumes = attr.ib(default=attr.Factory(list))

    @classmethod
    def from_dict(cls, data):
        values = _known_keys(cls, data, {"fstopt": "fstab_options",
                                          "stripesize": "stripe_size"})
        if values.get("raid_options") is not None:
            values["raid_options"] = RaidOptionsSection.from_dict(values["raid_options"])
        return cls(**values)

    @property
    def primary(self):
        """ Whether the partition must be primary, None if it does not matter """
        if self.partition_type is None:
            return None
        return self.partition_type == "primary"


@attr.s
class DriveSection(object):
    """ A drive: a disk, a volume group, a RAID, a bcache, a btrfs... """

    device = attr.ib(default=None)
    type = attr.ib(default=None)
    disklabel = attr.ib(default=None)
    enable_snapshots = attr.ib(default=None)
    initialize_attr = attr.ib(default=False)
    keep_unknown_lv = attr.ib(default=False)
    pesize = attr.ib(default=None)
    use = attr.ib(default=None)
    partitions = attr.ib(default=attr.Factory(list))
    skip_list = attr.ib(default=attr.Factory(SkipListSection))
    raid_options = attr.ib(default=None)
    bcache_options = attr.ib(default=None)
    btrfs_options = attr.ib(default=None)

    def __attrs_post_init__(self):
        if self.type is None:
            self.type = self.default_type(self.device)

    @classmethod
    def from_dict(cls, data):
        values = _known_keys(cls, data, {"initialize": "initialize_attr"})
        values["partitions"] = [PartitionSection.from_dict(p)
                                for p in data.get("partitions") or []]
        values["skip_list"] = SkipListSection.from_list(data.get("skip_list"))
        if "use" in values:
            values["use"] = cls.use_value(values["use"])
        if data.get("raid_options") is not None:
            values["raid_options"] = RaidOptionsSection.from_dict(data["raid_options"])
            # only supported in the partition sections
            values["raid_options"].raid_name = None
        if data.get("bcache_options") is not None:
            values["bcache_options"] = BcacheOptionsSection.from_dict(data["bcache_options"])
        if data.get("btrfs_options") is not None:
            values["btrfs_options"] = BtrfsOptionsSection.from_dict(data["btrfs_options"])
        return cls(**values)

    @staticmethod
    def default_type(device):
        device = device or ""
        if device.startswith("/dev/md"):
            return CT_MD
        elif device.startswith("/dev/bcache"):
            return CT_BCACHE
        elif device == "/dev/nfs":
            return CT_NFS
        return CT_DISK

    @staticmethod
    def use_value(use):
        """ "1,3" becomes [1, 3], anything else is kept """
        if isinstance(use, str) and use.replace(",", "").strip().isdigit():
            return [int(n) for n in use.split(",") if n.strip().isdigit()]
        return use

    @property
    def unwanted_partitions(self):
        """ Whether the device is used without a partition table """
        return (self.disklabel == NO_PARTITION_TABLE or
                any(p.partition_nr == 0 for p in self.partitions))

    @property
    def wanted_partitions(self):
        """ Whether a partition table is explicitly requested """
        return not (self.disklabel is None or self.unwanted_partitions)

    @property
    def master_partition(self):
        """ The section describing the whole device, if no table is wanted """
        if not self.unwanted_partitions:
            return None
        return next((p for p in self.partitions if p.partition_nr == 0),
                    self.partitions[0] if self.partitions else None)

    def name_for_md(self):
        """ Name of the RAID defined by this drive

            A drive with the generic "/dev/md" device takes the name from its
            first partition section.
        """
        if self.device != "/dev/md":
            return self.device
        part = self.partitions[0] if self.partitions else None
        if part is None:
            return self.device
        if part.raid_options is not None and part.raid_options.raid_name:
            return part.raid_options.raid_name
        return "/dev/md/%s" % part.partition_nr


@attr.s
class PartitioningSection(object):
    """ The whole partitioning profile: a list of drives. """

    drives = attr.ib(default=attr.Factory(list))

    @classmethod
    def from_list(cls, items):
        drives = [DriveSection.from_dict(d) for d in items or []]
        log.debug("profile with %d drives", len(drives))
        return cls(drives)

    def _of_type(self, drive_type):
        return [d for d in self.drives if d.type == drive_type]

    @property
    def disk_drives(self):
        return self._of_type(CT_DISK)

    @property
    def lvm_drives(self):
        return self._of_type(CT_LVM)

    @property
    def md_drives(self):
        return self._of_type(CT_MD)

    @property
    def bcache_drives(self):
        return self._of_type(CT_BCACHE)

    @property
    def btrfs_drives(self):
        return self._of_type(CT_BTRFS)

    @property
    def nfs_drives(self):
        return self._of_type(CT_NFS)

    @property
    def tmpfs_drives(self):
        return self._of_type(CT_TMPFS)
