#!/usr/bin/python3
# Copyright (c) 2024 by Fred Morris Tacoma WA
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Miscellaneous configuration prerequisites.

Service kinds are bit flags; a backend advertises the kinds it can answer
by OR-ing them together:

    K_ALIAS          aliases(5) style expansion of a local name
    K_VIRTUAL        virtual domains and virtual user rewrites
    K_CREDENTIALS    user:password pairs for SMTP AUTH
    K_NETADDR        network addresses and prefixes
"""

import logging

# Longest line an SMTP session will put up with. Values and lookup keys at or
# over this length are rejected.
MAX_LINE_SIZE = 2048
MAX_USERNAME_SIZE = MAX_LINE_SIZE
MAX_PASSWORD_SIZE = MAX_LINE_SIZE
MAX_TABLENAME_SIZE = MAX_LINE_SIZE
MAX_LOCALPART_SIZE = 64
MAX_DOMAINPART_SIZE = 255

K_ALIAS       = 0x01
K_VIRTUAL     = 0x02
K_CREDENTIALS = 0x04
K_NETADDR     = 0x08

K_ALL = K_ALIAS | K_VIRTUAL | K_CREDENTIALS | K_NETADDR

SERVICE_NAMES = {
        K_ALIAS:        'alias',
        K_VIRTUAL:      'virtual',
        K_CREDENTIALS:  'credentials',
        K_NETADDR:      'netaddr'
    }
SERVICE_KINDS = dict((v,k) for k,v in SERVICE_NAMES.items())

T_STATIC = 'static'
T_DB = 'db'

LOGGING = logging.WARNING

class MailTablesError(Exception):
    """Base class for everything raised on purpose by this package."""
    pass

class ConfigurationError(MailTablesError):
    """An invalid/inconsistent configuration."""
    def __init__(self, reason, additional=None):
        self.reason = reason
        self.additional = additional or {}
        return

    def __str__(self):
        if not self.additional:
            return self.reason
        return '{} ({})'.format(self.reason,
                                ', '.join('{}:{}'.format(k,str(self.additional[k])) for k in self.additional.keys())
                               )

class TableError(MailTablesError):
    """A table was used in a way its contract does not allow."""
    pass

class DecodeError(MailTablesError):
    """A value was found but could not be turned into a record.

    This is never the same thing as "not found".
    """
    def __init__(self, reason, key=None):
        MailTablesError.__init__(self, reason)
        self.reason = reason
        self.key = key
        return

class FatalTableError(MailTablesError):
    """An internal contract was violated. Don't catch this."""
    pass

class Loader(object):
    """Base class for all config generators/loaders."""
    pass

def service_name(kind):
    return SERVICE_NAMES.get(kind, 'unknown({})'.format(kind))

def DEFAULT_CONFIG(minimal=False):
    """A function so that it generates a fresh one every time.

    Minimal causes the dictionary to be suitable for updating another
    config.
    """
    if minimal:
        config = dict()
    else:
        config = dict(
                    logging=LOGGING
                 )
    config['tables'] = []
    return config
