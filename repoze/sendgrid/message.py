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
In-memory message model handed to the SendGrid transport.
"""

from collections import OrderedDict
from email.header import decode_header, make_header
from email.utils import getaddresses


def addresses(value):
    """Normalize `value` to an ordered ``address -> name`` mapping.

    Accepts a mapping, a single address string, a single ``(address, name)``
    tuple, or an iterable whose items are address strings or
    ``(address, name)`` pairs.  A 2-tuple whose second item is not an
    address is read as one ``(address, name)`` pair.
    """
    result = OrderedDict()
    if not value:
        return result
    if isinstance(value, str) or _is_pair(value):
        value = [value]
    elif hasattr(value, 'items'):
        value = value.items()
    for item in value:
        if isinstance(item, str):
            address, name = item, None
        else:
            address, name = item
        result[address] = name or None
    return result


def _is_pair(value):
    if not isinstance(value, tuple) or len(value) != 2:
        return False
    address, name = value
    if not isinstance(address, str):
        return False
    return name is None or (isinstance(name, str) and '@' not in name)


class MimePart(object):

    def __init__(self, body, content_type='text/plain'):
        self.body = body
        self.content_type = content_type

    def __repr__(self):
        return '<MimePart %s>' % self.content_type


class MailMessage(object):
    """A message with one sender, To/Cc/Bcc recipients, a primary body and
    any number of alternative child parts.

    Recipient attributes are ordered ``address -> display name`` mappings.
    """

    def __init__(self, subject=None, body=None, content_type='text/plain',
                 sender=None, to=None, cc=None, bcc=None, children=()):
        self.subject = subject
        self.body = body
        self.content_type = content_type
        self.sender = addresses(sender)
        self.to = addresses(to)
        self.cc = addresses(cc)
        self.bcc = addresses(bcc)
        self.children = list(children)

    def attach(self, body, content_type='text/plain'):
        part = MimePart(body, content_type)
        self.children.append(part)
        return part

    @classmethod
    def from_email(cls, message):
        """Build a `MailMessage` from an `email.message.Message`.

        The first inline ``text/*`` part becomes the body; any further ones
        become children. Attachments and non-text parts are dropped.
        """
        result = cls(subject=_decode(message['Subject']))
        for attr, header in (('sender', 'From'), ('to', 'To'),
                             ('cc', 'Cc'), ('bcc', 'Bcc')):
            pairs = getaddresses(message.get_all(header, []))
            setattr(result, attr, addresses(
                [(address, name) for name, address in pairs if address]))

        for part in message.walk():
            if part.is_multipart():
                continue
            if part.get_content_maintype() != 'text':
                continue
            if part.get_content_disposition() == 'attachment':
                continue
            body = _payload(part)
            if result.body is None:
                result.body = body
                result.content_type = part.get_content_type()
            else:
                result.attach(body, part.get_content_type())
        return result


def _decode(value):
    if value is None:
        return None
    return str(make_header(decode_header(value)))


def _payload(part):
    payload = part.get_payload(decode=True)
    if payload is None:
        return ''
    charset = part.get_content_charset() or 'utf-8'
    return payload.decode(charset, 'replace')
