from decimal import Decimal
import unittest

from partplan.proposal.size_parser import SizeParser, SWAP_AUTO_MIN, SWAP_AUTO_MAX
from partplan.size import Size
from partplan.volume_spec import VolumeSpecification, VolumeSpecifications


class SizeParserTestCase(unittest.TestCase):

    def setUp(self):
        self.parser = SizeParser()

    def test_fixed_sizes(self):
        info = self.parser.parse("5GB")
        self.assertEqual(info.min, Size("5 GiB"))
        self.assertEqual(info.max, Size("5 GiB"))
        self.assertIsNone(info.percentage)
        self.assertFalse(info.unlimited)

        info = self.parser.parse("1024")
        self.assertEqual(info.min, Size(1024))
        self.assertEqual(self.parser.parse("1.5 G").min, Size("1.5 GiB"))
        self.assertEqual(self.parser.parse(" 500 mb ").max, Size("500 MiB"))

    def test_max(self):
        info = self.parser.parse("max")
        self.assertEqual(info.min, Size(1))
        self.assertTrue(info.max.is_unlimited)
        self.assertTrue(info.unlimited)

        info = self.parser.parse("MAX", min_size=Size("1 GiB"))
        self.assertEqual(info.min, Size("1 GiB"))

    def test_defaults(self):
        for spec in (None, "", "  "):
            info = self.parser.parse(spec)
            self.assertEqual(info.min, Size(1))
            self.assertTrue(info.max.is_unlimited)
            self.assertTrue(info.unlimited)

        info = self.parser.parse(None, min_size=Size("1 GiB"), max_size=Size("2 GiB"))
        self.assertEqual(info.max, Size("2 GiB"))
        self.assertFalse(info.unlimited)

    def test_percentage(self):
        info = self.parser.parse("50%")
        self.assertEqual(info.percentage, Decimal(50))
        self.assertEqual(self.parser.parse("12.5 %").percentage, Decimal("12.5"))
        self.assertEqual(self.parser.parse("100%").percentage, Decimal(100))

        self.assertIsNone(self.parser.parse("0%"))
        self.assertIsNone(self.parser.parse("150%"))

    def test_auto(self):
        info = self.parser.parse("auto", "swap")
        self.assertEqual(info.min, SWAP_AUTO_MIN)
        self.assertEqual(info.max, SWAP_AUTO_MAX)

        self.assertIsNone(self.parser.parse("auto", "/"))

        specs = VolumeSpecifications([VolumeSpecification("/", "btrfs", min_size="5 GiB",
                                                          max_size="10 GiB")])
        parser = SizeParser(volume_specs=specs)
        info = parser.parse("auto", "/")
        self.assertEqual(info.min, Size("5 GiB"))
        self.assertEqual(info.max, Size("10 GiB"))

        # every parser has its own table
        self.assertIsNone(self.parser.parse("auto", "/"))
        self.assertIsNone(SizeParser().parse("auto", "/"))

        specs.register(VolumeSpecification("swap", min_size="1 GiB", max_size="1 GiB"))
        self.assertEqual(parser.parse("auto", "swap").max, Size("1 GiB"))
        self.assertEqual(self.parser.parse("auto", "swap").max, SWAP_AUTO_MAX)

    def test_invalid(self):
        for spec in ("abc", "-5", "0", "5 XB", "%"):
            self.assertIsNone(self.parser.parse(spec), spec)
