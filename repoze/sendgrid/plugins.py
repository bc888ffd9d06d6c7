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
import logging

from zope.interface import implementer

from repoze.sendgrid.interfaces import ISendListener
from repoze.sendgrid.interfaces import ITransportExceptionListener


@implementer(ISendListener, ITransportExceptionListener)
class LoggingPlugin(object):
    """Logs every send and transport error.  Never cancels anything."""
    log = logging.getLogger("LoggingPlugin")

    def before_send_performed(self, evt):
        message = evt.message
        self.log.debug("Sending %r to %s",
                       message.subject, ", ".join(_recipients(message)))

    def send_performed(self, evt):
        message = evt.message
        self.log.info("Sent %r to %s",
                      message.subject, ", ".join(_recipients(message)))

    def exception_thrown(self, evt):
        self.log.error("Transport error: %s", evt.exception)


def _recipients(message):
    for recipients in (message.to, message.cc, message.bcc):
        for address in recipients:
            yield address
