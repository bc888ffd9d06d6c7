##############################################################################
#
# Copyright (c) 2003 Zope Corporation and Contributors.
# All Rights Reserved.
#
# This software is subject to the provisions of the Zope Public License,
# Version 2.1 (ZPL).  A copy of the ZPL should accompany this distribution.
# THIS SOFTWARE IS PROVIDED "AS IS" AND ANY AND ALL EXPRESS OR IMPLIED
# WARRANTIES ARE DISCLAIMED, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED
# WARRANTIES OF TITLE, MERCHANTABILITY, AGAINST INFRINGEMENT, AND FITNESS
# FOR A PARTICULAR PURPOSE.
#
##############################################################################
"""
Transaction-bound mail delivery

Messages handed to a `DirectTransportDelivery` reach the transport only
when the current transaction commits.
"""

from email.message import Message

import transaction
from transaction.interfaces import IDataManagerSavepoint
from transaction.interfaces import ISavepointDataManager
from zope.interface import implementer

from repoze.sendgrid.interfaces import IMailDelivery
from repoze.sendgrid.message import MailMessage


@implementer(ISavepointDataManager)
class TransportDataManager(object):
    """Joins a transaction and sends one message during ``tpc_finish``.

    The return value of the transport's ``send`` is kept in `result`.
    """
    def __init__(self, transport, message, failed_recipients=None,
                 transaction_manager=None):
        self.transport = transport
        self.message = message
        self.failed_recipients = failed_recipients
        if transaction_manager is None:
            transaction_manager = transaction.manager
        self.transaction_manager = transaction_manager
        self.transaction = None
        self.tpc_phase = 0
        self.result = None
        self.sent = False
        self.aborted = False

    def join_transaction(self, trans=None):
        if trans is None:
            trans = self.transaction_manager.get()
        if self.transaction is not None and self.transaction is not trans:
            raise ValueError("Already joined to another transaction")
        if self.transaction is None:
            trans.join(self)
        self.transaction = trans

    def _check(self, trans):
        if self.transaction is None:
            raise ValueError("Not in a transaction")
        if self.transaction is not trans:
            raise ValueError("In a different transaction")

    def commit(self, trans):
        self._check(trans)

    def abort(self, trans):
        self._check(trans)
        if self.tpc_phase != 0:
            raise ValueError("TPC in progress")
        self.aborted = True

    def sortKey(self):
        return str(id(self))

    def savepoint(self):
        if self.transaction is None:
            raise ValueError("Not in a transaction")
        return TransportDataSavepoint(self)

    def tpc_begin(self, trans, subtransaction=False):
        self._check(trans)
        if self.tpc_phase != 0:
            raise ValueError("TPC in progress")
        if subtransaction:
            raise ValueError("Subtransactions not supported")
        self.tpc_phase = 1

    def tpc_vote(self, trans):
        self._check(trans)
        if self.tpc_phase != 1:
            raise ValueError("TPC phase error: %d" % self.tpc_phase)
        self.tpc_phase = 2

    def tpc_finish(self, trans):
        self._check(trans)
        if self.tpc_phase != 2:
            raise ValueError("TPC phase error: %d" % self.tpc_phase)
        self.result = self.transport.send(self.message,
                                          self.failed_recipients)
        self.sent = True

    def tpc_abort(self, trans):
        self._check(trans)
        if self.sent:
            raise ValueError("TPC already finished")
        self.tpc_phase = 0
        self.aborted = True


@implementer(IDataManagerSavepoint)
class TransportDataSavepoint(object):
    """Nothing to roll back: the message is not sent before commit."""

    def __init__(self, data_manager):
        self.data_manager = data_manager

    def rollback(self):
        pass


@implementer(IMailDelivery)
class DirectTransportDelivery(object):

    def __init__(self, transport, transaction_manager=None):
        self.transport = transport
        if transaction_manager is None:
            transaction_manager = transaction.manager
        self.transaction_manager = transaction_manager

    def send(self, message, failed_recipients=None):
        if isinstance(message, Message):
            message = MailMessage.from_email(message)
        elif not isinstance(message, MailMessage):
            raise ValueError(
                'Message must be MailMessage or email.message.Message')
        if not message.sender:
            raise ValueError('Message has no sender')
        data_manager = TransportDataManager(
            self.transport, message, failed_recipients,
            transaction_manager=self.transaction_manager)
        data_manager.join_transaction()
        return data_manager
