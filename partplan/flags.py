# flags.py
# Process-wide switches for the storage planning engine.
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


class Flags(object):

    def __init__(self):
        self.reset()

    def reset(self):
        #
        # mode of operation
        #
        self.debug = False

        #
        # enable/disable functionality
        #

        # an extended partition left without logical partitions is removed
        # together with its last logical partition
        self.remove_empty_ext_partitions = True

        # use LUKS2 instead of LUKS1 when a profile asks for encryption
        # without naming a method
        self.luks2_default = False


flags = Flags()
