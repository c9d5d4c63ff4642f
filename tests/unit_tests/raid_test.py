import unittest

from partplan.devicelibs import btrfs, mdraid, raid
from partplan.errors import RaidError
from partplan.size import Size


class RAIDLevelsTestCase(unittest.TestCase):

    def test_descriptors(self):
        for descriptor in ("raid1", "RAID1", "mirror", "1", 1, " raid1 ", raid.RAID1):
            self.assertIs(mdraid.raid_levels.raid_level(descriptor), raid.RAID1)

        self.assertIs(mdraid.raid_levels.raid_level("linear"), raid.Linear)
        with self.assertRaises(RaidError):
            mdraid.raid_levels.raid_level("single")
        with self.assertRaises(RaidError):
            btrfs.raid_levels.raid_level("dup")
        self.assertIs(btrfs.metadata_levels.raid_level("dup"), raid.Dup)

        with self.assertRaises(RaidError):
            raid.RAIDLevels(["raid7"])

    def test_sizes(self):
        sizes = [Size("10 GiB"), Size("12 GiB"), Size("10 GiB"), Size("10 GiB")]
        self.assertEqual(raid.RAID0.get_size(sizes), Size("40 GiB"))
        self.assertEqual(raid.RAID1.get_size(sizes), Size("10 GiB"))
        self.assertEqual(raid.RAID5.get_size(sizes), Size("30 GiB"))
        self.assertEqual(raid.RAID6.get_size(sizes), Size("20 GiB"))
        self.assertEqual(raid.RAID10.get_size(sizes), Size("20 GiB"))
        self.assertEqual(raid.RAID1.get_size(sizes[:2], superblock_size=Size("2 MiB")),
                         Size("10 GiB") - Size("2 MiB"))
        self.assertEqual(raid.RAID1.get_size([]), 0)

    def test_too_few_members(self):
        with self.assertRaisesRegex(RaidError, "at least 4"):
            raid.RAID6.get_size([Size("1 GiB")] * 3)
