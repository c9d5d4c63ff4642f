# manager.py
# Keeps the system, current and working device graphs.
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

from contextlib import contextmanager

from .devicegraph import Devicegraph
from .errors import TransactionError
from .storage_log import log_exception_info, log_method_call

import logging
log = logging.getLogger("partplan")


class StorageManager(object):

    """ Owner of the device graphs of a session.

        The system graph describes the machine as it was found and never
        changes. The current graph is the layout accepted so far. Changes
        are done in a working graph obtained with :meth:`begin`, which only
        replaces the current one after an explicit :meth:`commit`.
    """

    def __init__(self, system=None):
        """
            :keyword system: the graph of the machine, an empty one by default
            :type system: :class:`~.devicegraph.Devicegraph`
        """
        self._system = system if system is not None else Devicegraph()
        self._current = self._system.copy()
        self._working = None
        self.proposal = None

    @property
    def system(self):
        """ A copy of the graph of the machine as it was found """
        return self._system.copy()

    @property
    def current(self):
        return self._current

    @property
    def working(self):
        """ The graph being modified, None if there is no transaction """
        return self._working

    def begin(self):
        """ Start a transaction

            :returns: a copy of the current graph to work on
            :raises: :class:`~.errors.TransactionError` if a transaction is
                already in progress
        """
        if self._working is not None:
            raise TransactionError("a transaction is already in progress")
        self._working = self._current.copy()
        log.debug("transaction started")
        return self._working

    def commit(self, devicegraph=None):
        """ Make a graph the current one, ending the transaction

            :keyword devicegraph: the graph to commit, the working graph by
                default
            :raises: :class:`~.errors.TransactionError` if there is nothing
                to commit
        """
        log_method_call(self, devicegraph=devicegraph)
        devicegraph = devicegraph if devicegraph is not None else self._working
        if devicegraph is None:
            raise TransactionError("there is no device graph to commit")
        self._current = devicegraph
        self._working = None
        log.info("new current device graph committed")

    def rollback(self):
        """ Discard the working graph """
        if self._working is not None:
            log.info("discarding the working device graph")
        self._working = None

    @contextmanager
    def transaction(self):
        """ A working graph committed on success and discarded on errors

            Example::

                with manager.transaction() as devicegraph:
                    devicegraph.create_partition_table(disk)
        """
        devicegraph = self.begin()
        try:
            yield devicegraph
        except BaseException:
            # KeyboardInterrupt and GeneratorExit must not leave the transaction open
            log_exception_info(log.info, "rolling back the transaction")
            self.rollback()
            raise
        self.commit(devicegraph)

    def reset(self):
        """ Forget every change, going back to the system graph """
        self._working = None
        self._current = self._system.copy()
        self.proposal = None

    def apply_proposal(self, proposal):
        """ Commit the graph of a successful proposal

            :param proposal: an already calculated proposal
            :returns: True if the graph was committed
            :raises: :class:`~.errors.UnexpectedCallError` if the proposal has
                not been calculated
        """
        self.proposal = proposal
        if proposal.failed or proposal.devices is None:
            log.warning("not applying a failed proposal")
            return False
        self._working = None
        self.commit(proposal.devices)
        return True
