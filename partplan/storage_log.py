# storage_log.py
# Logging helpers for the storage planning engine.
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

import inspect
import logging
import sys
import traceback

log = logging.getLogger("partplan")
log.addHandler(logging.NullHandler())

_HELPERS = frozenset(["_caller", "log_method_call", "log_method_return", "log_exception_info"])

# keyword arguments whose values never reach the log
_SECRET_WORDS = ("password", "passphrase", "crypt_key", "key")


def _caller():
    """ Name and stack depth of the first function that is not a helper """
    stack = inspect.stack(0)
    for idx, frame in enumerate(stack):
        if frame[3] not in _HELPERS:
            return frame[3], len(stack) - idx
    return "unknown function?", 0


def _loggable(key, value):
    if value and any(word in key.lower() for word in _SECRET_WORDS):
        return "Skipped"
    return value


def log_method_call(d, *args, **kwargs):
    """ Log a call to a method of d at debug level, indented by stack depth """
    methodname, depth = _caller()
    fmt = "%s%s.%s:" + " %s ;" * len(args)
    fmt_args = [" " * depth, d.__class__.__name__, methodname] + list(args)
    for key in sorted(kwargs):
        fmt += " %s: %s ;"
        fmt_args.extend([key, _loggable(key, kwargs[key])])
    log.debug(fmt, *fmt_args)


def log_method_return(d, retval):
    methodname, depth = _caller()
    log.debug("%s%s.%s returned %s", " " * depth, d.__class__.__name__, methodname, retval)


def log_exception_info(log_func=log.debug, fmt_str=None, fmt_args=None):
    """Log the exception being handled, with its traceback.

       :param log_func: the logging function, which sets the severity
       :param str fmt_str: a format string for an additional message
       :param fmt_args: arguments for the format string
       :type fmt_args: list of str
    """
    _methodname, depth = _caller()
    indent = " " * depth
    log_func("%sCaught exception, continuing.", indent)
    if fmt_str:
        log_func("%sProblem description: " + fmt_str, indent, *(fmt_args or []))
    log_func("%sBegin exception details.", indent)
    for entry in traceback.format_exception(*sys.exc_info()):
        for line in entry.rstrip().split("\n"):
            if line:
                log_func("%s    %s", indent, line.rstrip())
    log_func("%sEnd exception details.", indent)
