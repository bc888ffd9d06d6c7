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
import os
import sys
from configparser import ConfigParser
from email import message_from_binary_file

from sendgrid import SendGridAPIClient

from repoze.sendgrid.plugins import LoggingPlugin
from repoze.sendgrid.transport import SendGridTransport
from repoze.sendgrid.transport import TransportError


def _log_error(msg): #pragma NO COVER
    sys.stderr.write(msg)


def string_or_none(s):
    if s == 'None':
        return None
    return s


class ConsoleApp(object):
    """Sends a single RFC 2822 message file through SendGrid.

    The API key is taken from ``--api-key``, the config file, or, failing
    both, from the ``SENDGRID_API_KEY`` environment variable.
    """
    _usage = """%(script_name)s [OPTIONS] path/to/message.eml

    OPTIONS:
        --api-key           SendGrid API key.  Default is the value of the
                            SENDGRID_API_KEY environment variable.

        --host              Base URL of the SendGrid API.  Default is
                            https://api.sendgrid.com.

        --config <inifile>  Get configuration from specified ini file.  Will
                            look for etc/sgsend.ini, by default, where etc is
                            parallel to the bin directory where the python
                            executable is found.  If this option is not
                            specified and etc/sgsend.ini is not in filesystem,
                            no config file will be read and default values
                            will be used for all options.
    """
    log = logging.getLogger("ConsoleApp")

    client_factory = SendGridAPIClient  # allow replacement for testing.

    _error = False
    api_key = None
    host = "https://api.sendgrid.com"
    message_path = None

    def __init__(self, argv=sys.argv):
        self.script_name = argv[0]
        self._load_config()
        self._process_args(argv[1:])

    def main(self):
        if self._error:
            return 1

        client = self.client_factory(api_key=self.api_key, host=self.host)
        transport = SendGridTransport(client)
        transport.register_plugin(LoggingPlugin())

        try:
            with open(self.message_path, 'rb') as fp:
                message = message_from_binary_file(fp)
        except OSError:
            self.log.error("Could not read %s", self.message_path,
                           exc_info=True)
            return 1

        try:
            count = transport.send(message)
        except (TransportError, ValueError):
            self.log.error("Could not send %s", self.message_path,
                           exc_info=True)
            return 1
        self.log.info("%s accepted for %d recipient(s).",
                      self.message_path, count)
        return 0

    def _process_args(self, args):
        got_message_path = False
        log_usage = False
        while args:
            arg = args.pop(0)
            if arg == "--api-key":
                if not args:
                    log_usage = True
                else:
                    self.api_key = args.pop(0)

            elif arg == "--host":
                if not args:
                    log_usage = True
                else:
                    self.host = args.pop(0)

            elif arg == "--config":
                if not args:
                    log_usage = True
                else:
                    self._load_config(args.pop(0))

            elif arg.startswith("-") or got_message_path:
                log_usage = True

            else:
                self.message_path = arg
                got_message_path = True

        if not self.message_path:
            log_usage = True

        if log_usage:
            self._error_usage()

    def _load_config(self, path=None):
        if path is None:
            # Look in etc directory relative to bin directory of current
            # Python executable for "sgsend.ini".
            exe = sys.executable
            root = os.path.dirname(os.path.dirname(exe))
            path = os.path.join(root, "etc", "sgsend.ini")
            if not os.path.exists(path):
                return

        section = "app:sgsend"
        names = [
            "api_key",
            "host",
            "message_path",
        ]
        defaults = dict([(name, str(getattr(self, name))) for name in names])
        config = ConfigParser(defaults)
        config.read(path)
        if not config.has_section(section):
            config.add_section(section)

        self.api_key = string_or_none(config.get(section, "api_key"))
        self.host = config.get(section, "host")
        self.message_path = string_or_none(
            config.get(section, "message_path"))

    def _error_usage(self):
        _log_error(self._usage % {"script_name": self.script_name})
        self._error = True


def run_console(): #pragma NO COVERAGE
    logging.basicConfig()
    app = ConsoleApp()
    sys.exit(app.main())


if __name__ == "__main__": #pragma NO COVERAGE
    run_console()
