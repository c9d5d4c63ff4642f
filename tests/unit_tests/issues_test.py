import unittest

from partplan.profile import PartitionSection
from partplan.proposal.issues import (InvalidValue, IssuesList, MissingValue, NoDisk,
                                      ShrinkedPlannedDevices, SurplusPartitions)


class IssuesListTestCase(unittest.TestCase):

    def test_add(self):
        issues = IssuesList()
        self.assertFalse(issues)
        self.assertFalse(issues.fatal)

        section = PartitionSection(size="abc")
        issue = issues.add(InvalidValue, section, "size", "abc", "skip")
        self.assertIs(issues[0], issue)
        self.assertIs(issue.section, section)
        self.assertEqual(issue.value, "abc")
        self.assertEqual(issue.new_value, "skip")
        self.assertEqual(issue.message, "invalid value 'abc' for size, using 'skip' instead")
        self.assertFalse(issue.fatal)
        self.assertTrue(issues)
        self.assertFalse(issues.fatal)

        issues.add(MissingValue, section, "crypt_key")
        self.assertTrue(issues.fatal)
        self.assertEqual(len(issues), 2)
        self.assertEqual(issues.of_type(MissingValue)[0].message, "missing value for crypt_key")
        self.assertEqual(issues.of_type(NoDisk), [])

    def test_append(self):
        issues = IssuesList()
        issue = ShrinkedPlannedDevices(["shrinkage"])
        issues.append(issue)
        self.assertEqual(list(issues), [issue])
        self.assertEqual(issue.device_shrinkages, ["shrinkage"])
        self.assertIn("1 devices", issue.message)

    def test_severity(self):
        self.assertTrue(NoDisk().fatal)
        self.assertFalse(SurplusPartitions().fatal)
