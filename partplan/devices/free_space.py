# free_space.py
# Free regions of partitionable devices.
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

from ..size import Size


class FreeDiskSpace(object):

    """ A contiguous unused region of a partitionable device.

        Besides the region itself, a free space knows whether it is located
        inside an extended partition, whether it already exists in the
        device graph (or only appears after resizing a partition) and whether
        it is actually the region of an existing partition that is going to
        be reused, in which case it can only host a single planned partition.
    """

    def __init__(self, disk, region, align_grain=None, in_extended=False,
                 exists=True, growing=False, reused_partition=False):
        """
            :param disk: the device holding the region
            :type disk: :class:`~.devices.disk.Partitionable`
            :param region: the free region
            :type region: :class:`~.devices.lib.Region`
            :keyword align_grain: alignment grain for new partitions
            :type align_grain: :class:`~.size.Size`
            :keyword bool in_extended: the region is inside an extended partition
            :keyword bool exists: the region is already free in the device graph
            :keyword bool growing: the region grows by resizing a partition
            :keyword bool reused_partition: the region is an existing partition
        """
        self.disk = disk
        self.region = region
        self.align_grain = align_grain or Size("1 MiB")
        self.in_extended = in_extended
        self.exists = exists
        self.growing = growing
        self.reused_partition = reused_partition

    def __repr__(self):
        return "<FreeDiskSpace disk=%s start=%s size=%s%s>" % (
            self.disk_name, self.start_offset, self.disk_size,
            " growing" if self.growing else "")

    @property
    def disk_name(self):
        return self.disk.name

    @property
    def disk_size(self):
        """ Size of the region """
        return self.region.size

    @property
    def start_offset(self):
        return self.region.start_offset

    @property
    def end_offset(self):
        return self.region.end_offset

    @property
    def partition_table(self):
        """ The partition table of the disk, or the one it would get if it has none """
        return self.disk.partition_table or self.disk.default_partition_table()
