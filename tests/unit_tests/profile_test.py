import unittest

from partplan.devices import DiskDevice
from partplan.profile import CT_BCACHE, CT_DISK, CT_LVM, CT_MD, CT_NFS
from partplan.profile import DriveSection, PartitionSection, PartitioningSection, SkipRule
from partplan.profile import LESS_THAN, MORE_THAN, EQUAL_TO
from partplan.size import Size


class DriveSectionTestCase(unittest.TestCase):

    def test_default_type(self):
        self.assertEqual(DriveSection.from_dict({"device": "/dev/sda"}).type, CT_DISK)
        self.assertEqual(DriveSection.from_dict({}).type, CT_DISK)
        self.assertEqual(DriveSection.from_dict({"device": "/dev/md0"}).type, CT_MD)
        self.assertEqual(DriveSection.from_dict({"device": "/dev/bcache0"}).type, CT_BCACHE)
        self.assertEqual(DriveSection.from_dict({"device": "/dev/nfs"}).type, CT_NFS)
        drive = DriveSection.from_dict({"device": "/dev/system", "type": CT_LVM})
        self.assertEqual(drive.type, CT_LVM)

    def test_from_dict(self):
        drive = DriveSection.from_dict({"device": "/dev/sda", "initialize": True, "use": "1,3",
                                        "unknown": "ignored", "disklabel": "msdos",
                                        "partitions": [{"mount": "/", "fstopt": "ro,noatime"}]})
        self.assertTrue(drive.initialize_attr)
        self.assertEqual(drive.use, [1, 3])
        self.assertEqual(drive.disklabel, "msdos")
        self.assertEqual(len(drive.partitions), 1)
        self.assertEqual(drive.partitions[0].mount, "/")
        self.assertEqual(drive.partitions[0].fstab_options, "ro,noatime")
        self.assertFalse(hasattr(drive, "unknown"))

        self.assertEqual(DriveSection.from_dict({"use": "all"}).use, "all")
        self.assertEqual(DriveSection.from_dict({"use": "linux"}).use, "linux")
        self.assertIsNone(DriveSection.from_dict({}).use)

    def test_options(self):
        drive = DriveSection.from_dict({"device": "/dev/md0",
                                        "raid_options": {"raid_type": "raid1", "raid_name": "x"},
                                        "bcache_options": {"cache_mode": "writeback"},
                                        "btrfs_options": {"data_raid_level": "single"}})
        self.assertEqual(drive.raid_options.raid_type, "raid1")
        # only supported in partition sections
        self.assertIsNone(drive.raid_options.raid_name)
        self.assertEqual(drive.bcache_options.cache_mode, "writeback")
        self.assertEqual(drive.btrfs_options.data_raid_level, "single")
        self.assertIsNone(drive.btrfs_options.metadata_raid_level)

    def test_unwanted_partitions(self):
        drive = DriveSection.from_dict({"device": "/dev/sda", "disklabel": "none",
                                        "partitions": [{"mount": "/"}, {"mount": "/home"}]})
        self.assertTrue(drive.unwanted_partitions)
        self.assertFalse(drive.wanted_partitions)
        self.assertEqual(drive.master_partition.mount, "/")

        drive = DriveSection.from_dict({"device": "/dev/sda",
                                        "partitions": [{"mount": "/"},
                                                       {"mount": "/home", "partition_nr": 0}]})
        self.assertTrue(drive.unwanted_partitions)
        self.assertEqual(drive.master_partition.mount, "/home")

        drive = DriveSection.from_dict({"device": "/dev/sda", "disklabel": "gpt",
                                        "partitions": [{"mount": "/"}]})
        self.assertFalse(drive.unwanted_partitions)
        self.assertTrue(drive.wanted_partitions)
        self.assertIsNone(drive.master_partition)

        drive = DriveSection.from_dict({"device": "/dev/sda", "partitions": [{"mount": "/"}]})
        self.assertFalse(drive.wanted_partitions)

    def test_name_for_md(self):
        self.assertEqual(DriveSection.from_dict({"device": "/dev/md0"}).name_for_md(), "/dev/md0")

        drive = DriveSection.from_dict({"device": "/dev/md",
                                        "partitions": [{"partition_nr": 1, "mount": "/"}]})
        self.assertEqual(drive.name_for_md(), "/dev/md/1")

        drive = DriveSection.from_dict({"device": "/dev/md",
                                        "partitions": [{"raid_options": {"raid_name": "/dev/md/data"}}]})
        self.assertEqual(drive.name_for_md(), "/dev/md/data")


class PartitionSectionTestCase(unittest.TestCase):

    def test_from_dict(self):
        section = PartitionSection.from_dict({"mount": "/srv", "stripesize": 4, "stripes": 2,
                                              "raid_options": {"raid_type": "raid0"},
                                              "crypt_fs": True, "crypt_key": "secret"})
        self.assertEqual(section.stripe_size, 4)
        self.assertEqual(section.stripes, 2)
        self.assertEqual(section.raid_options.raid_type, "raid0")
        self.assertTrue(section.crypt_fs)
        self.assertTrue(section.create)
        self.assertEqual(section.subvolumes, [])

    def test_primary(self):
        self.assertIsNone(PartitionSection().primary)
        self.assertTrue(PartitionSection(partition_type="primary").primary)
        self.assertFalse(PartitionSection(partition_type="logical").primary)


class SkipRuleTestCase(unittest.TestCase):

    def setUp(self):
        self.disk = DiskDevice("sda", size=Size("512 MiB"))

    def test_from_dict(self):
        rule = SkipRule.from_dict({"skip_key": "size_k", "skip_value": "1048576",
                                   "skip_if_less_than": True})
        self.assertEqual(rule.predicate, LESS_THAN)
        rule = SkipRule.from_dict({"skip_key": "size_k", "skip_value": "1",
                                   "skip_if_more_than": True})
        self.assertEqual(rule.predicate, MORE_THAN)
        self.assertEqual(SkipRule.from_dict({"skip_key": "name"}).predicate, EQUAL_TO)
        self.assertFalse(SkipRule.from_dict({"skip_key": "name"}).valid)

    def test_matches(self):
        self.assertTrue(SkipRule("size_k", LESS_THAN, "1048576").matches(self.disk))
        self.assertFalse(SkipRule("size_k", MORE_THAN, "1048576").matches(self.disk))
        self.assertTrue(SkipRule("size_k", EQUAL_TO, 524288).matches(self.disk))
        self.assertFalse(SkipRule("size_k", LESS_THAN, "big").matches(self.disk))

        self.assertTrue(SkipRule("device", EQUAL_TO, "/dev/sda").matches(self.disk))
        self.assertTrue(SkipRule("name", EQUAL_TO, "sda").matches(self.disk))
        self.assertFalse(SkipRule("name", LESS_THAN, "sda").matches(self.disk))
        self.assertFalse(SkipRule("driver", EQUAL_TO, "ahci").matches(self.disk))
        self.assertFalse(SkipRule().matches(self.disk))


class PartitioningSectionTestCase(unittest.TestCase):

    def test_from_list(self):
        partitioning = PartitioningSection.from_list([
            {"device": "/dev/sda"},
            {"device": "/dev/system", "type": CT_LVM},
            {"device": "/dev/md0"},
            {"device": "/dev/sdb"},
        ])
        self.assertEqual([d.device for d in partitioning.disk_drives], ["/dev/sda", "/dev/sdb"])
        self.assertEqual([d.device for d in partitioning.lvm_drives], ["/dev/system"])
        self.assertEqual([d.device for d in partitioning.md_drives], ["/dev/md0"])
        self.assertEqual(partitioning.bcache_drives, [])
        self.assertEqual(PartitioningSection.from_list(None).drives, [])
