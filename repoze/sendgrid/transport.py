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
from email.message import Message

from python_http_client.exceptions import HTTPError
from sendgrid.helpers.mail import Bcc
from sendgrid.helpers.mail import Cc
from sendgrid.helpers.mail import Content
from sendgrid.helpers.mail import From
from sendgrid.helpers.mail import Mail
from sendgrid.helpers.mail import To
from zope.interface import implementer

from repoze.sendgrid import event
from repoze.sendgrid.event import SimpleEventDispatcher
from repoze.sendgrid.interfaces import ITransport
from repoze.sendgrid.message import MailMessage

ACCEPTED = 202


class TransportError(Exception):
    """Sending through SendGrid failed.

    `response` is whatever the client returned (or raised), `cause` the
    exception which triggered this one, if any.
    """

    def __init__(self, message, cause=None, response=None):
        super(TransportError, self).__init__(message)
        self.cause = cause
        self.response = response

    @property
    def status_code(self):
        return getattr(self.response, 'status_code', None)


@implementer(ITransport)
class SendGridTransport(object):
    """Sends messages through the SendGrid v3 API.

    `client` is a ``sendgrid.SendGridAPIClient`` (or anything with a
    compatible ``send`` method).  When no `event_dispatcher` is given, the
    transport gets a private `SimpleEventDispatcher`.
    """
    log = logging.getLogger("SendGridTransport")

    mail_factory = Mail  # allow replacement for testing.

    def __init__(self, client, event_dispatcher=None):
        self.client = client
        if event_dispatcher is None:
            event_dispatcher = SimpleEventDispatcher()
        self.event_dispatcher = event_dispatcher
        self.started = False

    def is_started(self):
        return self.started

    def start(self):
        self.started = True

    def stop(self):
        self.started = False

    def ping(self):
        return True

    def register_plugin(self, listener):
        self.event_dispatcher.bind_event_listener(listener)

    def send(self, message, failed_recipients=None):
        if isinstance(message, Message):
            message = MailMessage.from_email(message)
        elif not isinstance(message, MailMessage):
            raise ValueError(
                'Message must be MailMessage or email.message.Message')
        if not message.sender:
            raise ValueError('Message has no sender')

        evt = self.event_dispatcher.create_send_event(self, message)
        if evt is not None:
            self.event_dispatcher.dispatch_event(
                evt, event.BEFORE_SEND_PERFORMED)
            if evt.bubble_cancelled():
                self.log.debug("Sending of %r cancelled by a listener.",
                               message.subject)
                return 0

        mail, count = self._build_mail(message)

        try:
            response = self.client.send(mail)
        except HTTPError as e:
            error = TransportError(
                'Response error: %s' % e.status_code, e, e)
            error.__cause__ = e
            return self._throw_exception(error)
        except OSError as e:
            error = TransportError('Connection error: %s' % e, e)
            error.__cause__ = e
            return self._throw_exception(error)

        if response.status_code == ACCEPTED:
            if evt is not None:
                evt.set_result(event.RESULT_SUCCESS)
                evt.set_failed_recipients(failed_recipients)
                self.event_dispatcher.dispatch_event(
                    evt, event.SEND_PERFORMED)
            self.log.info("Mail from %s to %d recipient(s) sent.",
                          next(iter(message.sender)), count)
            return count

        return self._throw_exception(TransportError(
            'Response error: %s' % response.status_code,
            response=response))

    def _build_mail(self, message):
        """Translate `message` into a SendGrid ``Mail``.

        Returns the mail and the number of recipients added to it.
        """
        mail = self.mail_factory()

        # only the first sender is honoured
        address, name = next(iter(message.sender.items()))
        mail.from_email = From(address, name)

        count = 0
        for recipients, kind, add in ((message.to, To, mail.add_to),
                                      (message.cc, Cc, mail.add_cc),
                                      (message.bcc, Bcc, mail.add_bcc)):
            for address, name in recipients.items():
                add(kind(address, name))
                count += 1

        if message.subject is not None:
            mail.subject = message.subject
        if message.body is not None:
            mail.add_content(Content(message.content_type, message.body))
        for child in message.children:
            mail.add_content(Content(child.content_type, child.body))

        return mail, count

    def _throw_exception(self, error):
        evt = self.event_dispatcher.create_transport_exception_event(
            self, error)
        if evt is None:
            raise error
        self.event_dispatcher.dispatch_event(evt, event.EXCEPTION_THROWN)
        if not evt.bubble_cancelled():
            raise error
        self.log.warning("Transport error swallowed by a listener: %s",
                         error)
