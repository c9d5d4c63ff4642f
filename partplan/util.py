# util.py
# Miscellaneous helpers for the storage planning engine.
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

import itertools
import logging
import os

from .flags import flags

log = logging.getLogger("partplan")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ObjectID(object):

    """ Base for objects whose identity must survive a deep copy.

        Each instance gets a number, unique among all ObjectID instances,
        as its ``id`` attribute before ``__init__`` runs. Copies made with
        :func:`copy.deepcopy` keep that number, so a device or a format can
        be matched across devicegraph copies.
    """
    _counter = itertools.count()

    def __new__(cls, *args, **kwargs):
        # pylint: disable=unused-argument
        obj = super(ObjectID, cls).__new__(cls)
        obj.id = next(ObjectID._counter)  # pylint: disable=attribute-defined-outside-init
        return obj


def div_up(dividend, divisor):
    """ Integer division rounding towards positive infinity. """
    return -(-dividend // divisor)


def set_up_logging(log_dir="/tmp", log_prefix="partplan", console_logs=None):
    """ Send partplan's messages to <log_dir>/<log_prefix>.log and the console.

        :keyword str log_dir: directory for the log file
        :keyword str log_prefix: base name of the log file
        :keyword list console_logs: names of other loggers to show on the console
    """
    formatter = logging.Formatter(LOG_FORMAT)
    log.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(os.path.realpath(os.path.join(log_dir, log_prefix + ".log")))
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if flags.debug else logging.INFO)
    console_handler.setFormatter(formatter)

    # python warnings end up in the log file too
    warning_log = logging.getLogger("py.warnings")
    logging.captureWarnings(True)

    for logger in (log, warning_log):
        logger.addHandler(file_handler)
    for logger in [log, warning_log] + [logging.getLogger(name) for name in console_logs or []]:
        logger.addHandler(console_handler)
