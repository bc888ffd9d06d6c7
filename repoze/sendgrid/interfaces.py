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
"""`repoze.sendgrid` interfaces

Sending e-mail through SendGrid works as follows:

- An application builds a `MailMessage` (or a stdlib `email.message.Message`)
  and hands it to a transport (`ITransport`).

- The transport asks its event dispatcher (`IEventDispatcher`) for a send
  event and lets registered listeners look at it.  Any listener may cancel
  the send before anything reaches SendGrid.

- The transport translates the message into a SendGrid `Mail` request and
  passes it to the SendGrid API client.  A ``202 Accepted`` response counts
  as success; anything else is a `TransportError`.

- Transport errors are offered to the listeners as an exception event.  A
  listener may swallow the error, otherwise it is raised to the caller.

- A delivery (`IMailDelivery`) can defer the call to the transport until
  the current transaction commits.
"""

from zope.interface import Attribute, Interface


class ITransport(Interface):
    """A pluggable mail delivery backend.
    """

    def is_started():
        """Return the advisory started flag."""

    def start():
        """Mark the transport as started."""

    def stop():
        """Mark the transport as stopped."""

    def ping():
        """Return ``True`` if the transport is usable."""

    def register_plugin(listener):
        """Bind `listener` to the transport's event dispatcher."""

    def send(message, failed_recipients=None):
        """Send a message immediately.

        `message` is a `MailMessage`, or a `Message` object from the
        stdlib `email.message` module.

        `failed_recipients` is an optional list handed to the send event
        on success.

        Returns the number of accepted recipients, ``0`` when a listener
        cancelled the send, or ``None`` when a listener swallowed a
        transport error.
        """


class IMailDelivery(Interface):
    """Send an email at transaction commit.
    """

    transport = Attribute("The ITransport used to send messages.")

    transaction_manager = Attribute("The transaction manager to use.")

    def send(message, failed_recipients=None):
        """Schedule `message` for sending.

        The message is handed to the transport when the current
        transaction commits; nothing is sent if it aborts.
        """


class IEvent(Interface):
    """Something that happened in a transport."""

    source = Attribute("The transport which raised the event.")

    def bubble_cancelled():
        """Return ``True`` if a listener cancelled the event."""

    def cancel_bubble(cancel=True):
        """Stop the event from reaching further listeners."""


class ISendEvent(IEvent):
    """A message is about to be, or has been, sent."""

    message = Attribute("The MailMessage being sent.")

    result = Attribute("One of the RESULT_* constants.")

    failed_recipients = Attribute("Addresses which were not accepted.")

    def set_result(result):
        """Record the outcome of the send."""

    def set_failed_recipients(recipients):
        """Record the addresses which were not accepted."""


class ITransportExceptionEvent(IEvent):
    """A transport failed to send a message."""

    exception = Attribute("The TransportError which was raised.")


class IEventDispatcher(Interface):
    """Synchronous hub for transport events.
    """

    def create_send_event(source, message):
        """Return an ISendEvent, or ``None`` to skip eventing."""

    def create_transport_exception_event(source, exception):
        """Return an ITransportExceptionEvent, or ``None`` to raise
        `exception` without consulting listeners."""

    def bind_event_listener(listener):
        """Add `listener` after the ones already bound."""

    def dispatch_event(evt, target):
        """Call the `target` method of each listener able to handle `evt`,
        in the order they were bound, until one of them cancels it."""


class ISendListener(Interface):
    """Listens to send events.

    A handler that returns a true value cancels the event.
    """

    def before_send_performed(evt):
        """Called before the message is handed to SendGrid."""

    def send_performed(evt):
        """Called after SendGrid accepted the message."""


class ITransportExceptionListener(Interface):
    """Listens to transport errors.

    A handler that returns a true value swallows the error.
    """

    def exception_thrown(evt):
        """Called when the transport is about to raise an error."""
