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
import os.path
import shutil
import sys
from io import StringIO
from tempfile import mkdtemp
from unittest import TestCase

from repoze.sendgrid.console import ConsoleApp
from repoze.sendgrid.tests.test_transport import ResponseStub


class LoggerStub(object):

    def __init__(self):
        self.infos = []
        self.errors = []

    def error(self, msg, *args, **kwargs):
        self.errors.append((msg, args, kwargs))

    def info(self, msg, *args, **kwargs):
        self.infos.append((msg, args, kwargs))


def _makeClientFactory(status_code=202):
    clients = []

    class SendGridAPIClientStub(object):

        def __init__(self, api_key=None, host=None):
            self.api_key = api_key
            self.host = host
            self.sent = []
            clients.append(self)

        def send(self, mail):
            self.sent.append(mail)
            return ResponseStub(status_code)

    SendGridAPIClientStub.clients = clients
    return SendGridAPIClientStub


class TestConsoleApp(TestCase):

    def setUp(self):
        self.dir = mkdtemp()
        self.message_path = os.path.join(self.dir, "message.eml")
        with open(self.message_path, "w") as f:
            f.write(test_message)

        self.save_stderr = sys.stderr
        sys.stderr = self.stderr = StringIO()

    def tearDown(self):
        sys.stderr = self.save_stderr
        shutil.rmtree(self.dir)

    def _makeApp(self, cmdline, status_code=202):
        app = ConsoleApp(cmdline.split())
        app.client_factory = _makeClientFactory(status_code)
        app.log = LoggerStub()
        return app

    def _captureLoggedErrors(self, cmdline):
        from repoze.sendgrid import console
        logged = []
        with _Monkey(console, _log_error=logged.append):
            app = ConsoleApp(cmdline.split())
        return app, logged

    def test_args_simple_ok(self):
        cmdline = "sgsend %s" % self.message_path
        app = ConsoleApp(cmdline.split())
        self.assertEqual("sgsend", app.script_name)
        self.assertFalse(app._error)
        self.assertEqual(self.message_path, app.message_path)
        self.assertEqual(None, app.api_key)
        self.assertEqual("https://api.sendgrid.com", app.host)

    def test_args_full_monty(self):
        cmdline = "sgsend --api-key SG.key --host http://localhost:3030 %s" % (
            self.message_path)
        app = ConsoleApp(cmdline.split())
        self.assertFalse(app._error)
        self.assertEqual("SG.key", app.api_key)
        self.assertEqual("http://localhost:3030", app.host)

    def test_args_no_message(self):
        app, logged = self._captureLoggedErrors("sgsend")
        self.assertTrue(app._error)
        self.assertEqual(len(logged), 1)

    def test_args_api_key_no_api_key(self):
        cmdline = "sgsend %s --api-key" % self.message_path
        app, logged = self._captureLoggedErrors(cmdline)
        self.assertTrue(app._error)
        self.assertEqual(len(logged), 1)

    def test_args_host_no_host(self):
        cmdline = "sgsend %s --host" % self.message_path
        app, logged = self._captureLoggedErrors(cmdline)
        self.assertTrue(app._error)
        self.assertEqual(len(logged), 1)

    def test_args_config_no_config(self):
        cmdline = "sgsend %s --config" % self.message_path
        app, logged = self._captureLoggedErrors(cmdline)
        self.assertTrue(app._error)
        self.assertEqual(len(logged), 1)

    def test_args_bad_arg(self):
        cmdline = "sgsend --foo %s" % self.message_path
        app, logged = self._captureLoggedErrors(cmdline)
        self.assertTrue(app._error)
        self.assertEqual(len(logged), 1)

    def test_args_too_many_messages(self):
        cmdline = "sgsend %s foobar" % self.message_path
        app, logged = self._captureLoggedErrors(cmdline)
        self.assertTrue(app._error)
        self.assertEqual(len(logged), 1)

    def test_ini_parse(self):
        ini_path = os.path.join(self.dir, "sgsend.ini")
        with open(ini_path, "w") as f:
            f.write(test_ini)

        cmdline = "sgsend --config %s" % ini_path
        app = ConsoleApp(cmdline.split())
        self.assertFalse(app._error)
        self.assertEqual("SG.from-ini", app.api_key)
        self.assertEqual("http://testhost", app.host)
        self.assertEqual("hammer/dont/hurt/em.eml", app.message_path)

        # Override nothing, make sure defaults come through
        with open(ini_path, "w") as f:
            f.write("[app:sgsend]\n\nhost=http://testhost\n")

        cmdline = "sgsend --config %s %s" % (ini_path, self.message_path)
        app = ConsoleApp(cmdline.split())
        self.assertFalse(app._error)
        self.assertEqual(None, app.api_key)
        self.assertEqual("http://testhost", app.host)
        self.assertEqual(self.message_path, app.message_path)

    def test_main_w_error(self):
        app, logged = self._captureLoggedErrors("sgsend")
        app.client_factory = _makeClientFactory()
        self.assertEqual(app.main(), 1)
        self.assertEqual(app.client_factory.clients, [])

    def test_main(self):
        cmdline = "sgsend --api-key SG.key %s" % self.message_path
        app = self._makeApp(cmdline)
        self.assertEqual(app.main(), 0)
        client, = app.client_factory.clients
        self.assertEqual(client.api_key, "SG.key")
        self.assertEqual(client.host, "https://api.sendgrid.com")
        self.assertEqual(len(client.sent), 1)
        self.assertEqual(len(app.log.infos), 1)
        msg, args, kwargs = app.log.infos[0]
        self.assertEqual(args, (self.message_path, 2))

    def test_main_missing_message_file(self):
        cmdline = "sgsend %s" % os.path.join(self.dir, "missing.eml")
        app = self._makeApp(cmdline)
        self.assertEqual(app.main(), 1)
        self.assertEqual(len(app.log.errors), 1)
        msg, args, kwargs = app.log.errors[0]
        self.assertTrue(kwargs["exc_info"])
        client, = app.client_factory.clients
        self.assertEqual(client.sent, [])

    def test_main_transport_error(self):
        cmdline = "sgsend %s" % self.message_path
        app = self._makeApp(cmdline, status_code=400)
        self.assertEqual(app.main(), 1)
        self.assertEqual(len(app.log.errors), 1)


test_ini = """[app:sgsend]
api_key = SG.from-ini
host = http://testhost
message_path = hammer/dont/hurt/em.eml
"""

test_message = """From: John Doe <john@doe.com>
To: receiver@domain.org, A name <other@domain.org>
Subject: Your subject

Here is the message itself
"""


class _Monkey(object):

    def __init__(self, module, **replacements):
        self.module = module
        self.orig = {}
        self.replacements = replacements

    def __enter__(self):
        for k, v in self.replacements.items():
            orig = getattr(self.module, k, self)
            if orig is not self:
                self.orig[k] = orig
            setattr(self.module, k, v)

    def __exit__(self, *exc_info):
        for k, v in self.replacements.items():
            if k in self.orig:
                setattr(self.module, k, self.orig[k])
            else: #pragma NO COVER
                delattr(self.module, k)
