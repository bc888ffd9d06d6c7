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
"""Transport events and a simple dispatcher for them.
"""
__docformat__ = 'restructuredtext'

from zope.interface import implementer

from repoze.sendgrid.interfaces import IEventDispatcher
from repoze.sendgrid.interfaces import ISendEvent
from repoze.sendgrid.interfaces import ISendListener
from repoze.sendgrid.interfaces import ITransportExceptionEvent
from repoze.sendgrid.interfaces import ITransportExceptionListener

RESULT_PENDING = 0x0001
RESULT_SUCCESS = 0x0010
RESULT_TENTATIVE = 0x0100
RESULT_FAILED = 0x1000

BEFORE_SEND_PERFORMED = 'before_send_performed'
SEND_PERFORMED = 'send_performed'
EXCEPTION_THROWN = 'exception_thrown'


class Event(object):

    def __init__(self, source):
        self.source = source
        self._bubble_cancelled = False

    def bubble_cancelled(self):
        return self._bubble_cancelled

    def cancel_bubble(self, cancel=True):
        self._bubble_cancelled = cancel


@implementer(ISendEvent)
class SendEvent(Event):
    __doc__ = ISendEvent.__doc__

    def __init__(self, source, message):
        super(SendEvent, self).__init__(source)
        self.message = message
        self.result = RESULT_PENDING
        self.failed_recipients = []

    def set_result(self, result):
        self.result = result

    def set_failed_recipients(self, recipients):
        self.failed_recipients = recipients


@implementer(ITransportExceptionEvent)
class TransportExceptionEvent(Event):
    __doc__ = ITransportExceptionEvent.__doc__

    def __init__(self, source, exception):
        super(TransportExceptionEvent, self).__init__(source)
        self.exception = exception


@implementer(IEventDispatcher)
class SimpleEventDispatcher(object):
    """Calls listeners synchronously, in the order they were bound.

    Each event type is handled by one listener interface; only listeners
    providing it are called.  A handler returning a true value cancels the
    event and no further listeners see it.
    """

    _listener_interfaces = (
        (ISendEvent, ISendListener),
        (ITransportExceptionEvent, ITransportExceptionListener),
    )

    def __init__(self):
        self.listeners = []

    def create_send_event(self, source, message):
        return SendEvent(source, message)

    def create_transport_exception_event(self, source, exception):
        return TransportExceptionEvent(source, exception)

    def bind_event_listener(self, listener):
        if listener not in self.listeners:
            self.listeners.append(listener)

    def dispatch_event(self, evt, target):
        iface = self._listener_interface(evt)
        if target not in iface.names():
            raise ValueError(
                '%r is not handled by %s' % (target, iface.__name__))
        for listener in list(self.listeners):
            if not iface.providedBy(listener):
                continue
            if getattr(listener, target)(evt):
                evt.cancel_bubble()
            if evt.bubble_cancelled():
                break

    def _listener_interface(self, evt):
        for event_iface, listener_iface in self._listener_interfaces:
            if event_iface.providedBy(evt):
                return listener_iface
        raise ValueError('Unknown event: %r' % (evt,))
