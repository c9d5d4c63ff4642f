import unittest

from partplan.errors import NotEnoughFreeSpaceError
from partplan.partitioning import Chunk, Request, distribute_space
from partplan.planned import PlannedPartition
from partplan.size import Size


def planned(min_size, max_size=None, weight=0):
    device = PlannedPartition()
    device.set_size_limits(Size(min_size), Size.unlimited() if max_size is None else Size(max_size))
    device.weight = weight
    return device


class PartitioningTestCase(unittest.TestCase):

    def test_chunk(self):
        unit = Size(1)
        dev1 = planned(0, weight=10)
        req1 = Request(dev1, unit)

        dev2 = planned(0, weight=0)
        req2 = Request(dev2, unit)
        self.assertTrue(req2.done)

        chunk = Chunk(60, unit, requests=[req1, req2])
        self.assertEqual(chunk.pool, 60)
        self.assertEqual(chunk.base, 10)

        dev3 = planned(0, max_size=35, weight=20)
        req3 = Request(dev3, unit)
        self.assertEqual(req3.max_growth, 35)

        chunk.add_request(req3)
        self.assertEqual(chunk.base, 30)
        self.assertEqual(chunk.length_to_size(30), Size(30))

        chunk.grow_requests()

        # the chunk is done growing since its pool has been exhausted
        self.assertTrue(chunk.done)
        self.assertEqual(chunk.pool, 0)

        # there is still one request remaining since req1 has no maximum growth
        self.assertEqual(chunk.remaining, 1)

        # Requests are grown at rates proportional to their weight. If req3
        # had no max growth it would get 40 units and req1 would get 20.
        # Since req3 has a limit, it will get 35 and req1 will get its 20
        # plus the leftovers from req3, which comes out to 25.
        self.assertEqual(req1.growth, 25)
        self.assertEqual(req2.growth, 0)
        self.assertEqual(req3.growth, 35)

    def test_request_id(self):
        dev = planned(0, weight=1)
        self.assertEqual(Request(dev, Size(1)).id, dev.planned_id)

    def test_request_at_max_size(self):
        dev = planned("1 GiB", max_size="1 GiB", weight=1)
        dev.size = Size("1 GiB")
        req = Request(dev, Size("1 MiB"))
        self.assertTrue(req.done)


class DistributeSpaceTestCase(unittest.TestCase):

    def test_distribute_by_weight(self):
        dev1 = planned("1 GiB", weight=1)
        dev2 = planned("1 GiB", weight=3)
        result = distribute_space([dev1, dev2], Size("10 GiB"), rounding=Size("1 MiB"))

        self.assertEqual(result[0].size, Size("3 GiB"))
        self.assertEqual(result[1].size, Size("7 GiB"))

        # the original devices are left untouched
        self.assertEqual(dev1.size, Size(0))
        self.assertEqual(result[0].planned_id, dev1.planned_id)
        self.assertEqual(result[1].planned_id, dev2.planned_id)

    def test_max_size_is_honored(self):
        dev1 = planned("1 GiB", max_size="2 GiB", weight=1)
        dev2 = planned("1 GiB", weight=1)
        result = distribute_space([dev1, dev2], Size("10 GiB"), rounding=Size("1 MiB"))

        self.assertEqual(result[0].size, Size("2 GiB"))
        self.assertEqual(result[1].size, Size("8 GiB"))

    def test_no_weight_no_growth(self):
        dev1 = planned("1 GiB")
        dev2 = planned("1 GiB", weight=1)
        result = distribute_space([dev1, dev2], Size("10 GiB"), rounding=Size("1 MiB"))

        self.assertEqual(result[0].size, Size("1 GiB"))
        self.assertEqual(result[1].size, Size("9 GiB"))

        # nobody wants the extra space
        result = distribute_space([dev1], Size("10 GiB"), align_grain=Size("1 MiB"))
        self.assertEqual(result[0].size, Size("1 GiB"))

    def test_min_sizes_rounded_up(self):
        dev = planned(Size("1 MiB") + 1)
        result = distribute_space([dev], Size("10 MiB"), rounding=Size("1 MiB"))
        self.assertEqual(result[0].size, Size("2 MiB"))

    def test_not_enough_space(self):
        dev1 = planned("6 GiB", weight=1)
        dev2 = planned("5 GiB")
        with self.assertRaises(NotEnoughFreeSpaceError):
            distribute_space([dev1, dev2], Size("10 GiB"))

    def test_empty_list(self):
        self.assertEqual(distribute_space([], Size("1 GiB")), [])

    def test_leftover_goes_to_last_device(self):
        grain = Size("1 MiB")
        space = Size("10 GiB") - Size(33 * 512)
        root = planned("1 GiB", weight=1)
        swap = planned("512 MiB", max_size="2 GiB")
        result = distribute_space([root, swap], space, align_grain=grain)

        self.assertEqual(result[0].size, Size("9727 MiB"))
        self.assertEqual(result[1].size, Size("512 MiB") + grain - Size(33 * 512))
        self.assertEqual(sum((d.size for d in result), Size(0)), space)
