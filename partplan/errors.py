# errors.py
# Exception classes for the storage planning engine.
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


class StorageError(Exception):
    pass

# Device


class DeviceError(StorageError):
    pass

# DeviceGraph


class DeviceTreeError(StorageError):
    pass


class DeviceNotFoundError(StorageError):
    pass

# partitioning


class PartitioningError(StorageError):
    pass


class NotEnoughFreeSpaceError(StorageError):
    pass


class NoDiskSpaceError(NotEnoughFreeSpaceError):
    """ No distribution of the planned devices fits in the available space,
        even after freeing as much space as the settings allow.
    """
    pass


class NoMorePartitionSlotError(PartitioningError):
    """ The partition table has no free slot for a new partition. """
    pass

# raid


class RaidError(StorageError):
    pass

# lvm


class LVMError(StorageError):
    pass

# proposal


class ProposalError(StorageError):
    pass


class UnexpectedCallError(ProposalError):
    """ A proposal result was requested before calculating it. """
    pass

# storage manager


class TransactionError(StorageError):
    pass
