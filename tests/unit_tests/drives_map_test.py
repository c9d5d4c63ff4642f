from partplan.profile import PartitioningSection
from partplan.proposal.drives_map import DrivesMap
from partplan.proposal.issues import IssuesList, NoDisk
from partplan.size import Size

from .graphtestcase import GraphTestCase


class DrivesMapTestCase(GraphTestCase):

    def setUp(self):
        super(DrivesMapTestCase, self).setUp()
        self.sda = self.add_disk("sda", size=Size("10 GiB"))
        self.sdb = self.add_disk("sdb", size=Size("500 GiB"))
        self.sdc = self.add_disk("sdc", size=Size("20 GiB"))
        self.add_partition(self.sda, 1, 1024, "ext4")
        self.issues = IssuesList()

    def drives_map(self, drives):
        return DrivesMap(self.graph, PartitioningSection.from_list(drives), self.issues)

    def test_fixed_drives(self):
        drives = self.drives_map([{"device": "/dev/sdb"}, {"device": "/dev/sda1"}])
        self.assertEqual(drives.disk_names, ["sdb", "sda"])
        self.assertEqual(drives["sdb"].device, "/dev/sdb")
        self.assertEqual(len(drives), 2)
        self.assertFalse(self.issues)

    def test_missing_disk(self):
        drives = self.drives_map([{"device": "/dev/sdz"}])
        self.assertEqual(len(drives), 0)
        self.assertTrue(self.issues.fatal)
        self.assertEqual(len(self.issues.of_type(NoDisk)), 1)

    def test_flexible_drives(self):
        drives = self.drives_map([{}, {"device": "/dev/sda"}, {}])
        self.assertEqual(drives.disk_names, ["sda", "sdb", "sdc"])
        self.assertIsNone(drives["sdb"].device)

        self.issues = IssuesList()
        drives = self.drives_map([{}, {}, {}, {}])
        self.assertEqual(len(drives), 3)
        self.assertEqual(len(self.issues.of_type(NoDisk)), 1)

    def test_skip_list(self):
        skip_small = {"skip_key": "size_k", "skip_value": str(15 * 1024 * 1024),
                      "skip_if_less_than": True}
        drives = self.drives_map([{"skip_list": [{"skip_key": "name", "skip_value": "sda"}]},
                                  {"skip_list": [skip_small]}])
        self.assertEqual(drives.disk_names, ["sdb", "sdc"])
        self.assertIsNone(drives.get("sda"))

    def test_other_drives(self):
        drives = self.drives_map([
            {"device": "/dev/sda", "partitions": [{"lvm_group": "system"}]},
            {"device": "/dev/system", "type": "CT_LVM", "enable_snapshots": False},
            {"device": "/dev/md", "partitions": [{"partition_nr": 0}]},
            {"device": "/dev/nfs", "partitions": [{"mount": "/home"}]},
        ])
        self.assertEqual(drives.disk_names, ["sda", "/dev/system", "/dev/md/0", "/dev/nfs"])
        self.assertTrue(drives.partitions)
        self.assertTrue(drives.use_snapshots)

    def test_no_partitions(self):
        drives = self.drives_map([{"device": "/dev/sda", "enable_snapshots": False}])
        self.assertFalse(drives.partitions)
        self.assertFalse(drives.use_snapshots)
