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

"""Query a Table.

REQUIRES PYTHON 3.6 OR BETTER

Loads the tables configuration, builds the tables and looks one key up, a
lot like postmap -q does:

    table_query.py aliases alias root
    table_query.py -c /etc/mail/tables.conf vdomains virtual example.com
    table_query.py --exists aliases alias root

The reply is printed as a code and some text:

    200 <record>        found
    201 found           found, but no record (virtual domain, --exists)
    500 not found
    400 <reason>        bad request, or the value didn't decode

Anything but 200 or 201 exits with a nonzero status.
"""

import sys
from os import path
import argparse
import logging

import mailtables
from mailtables.config_base import SERVICE_KINDS, MailTablesError
from mailtables.decode import Credentials
from mailtables.utils import WrappedFunctionResult

CONFIG_FILE = ('table_query.conf','mailtables.conf')

def resolve_config_files(config_file_names=CONFIG_FILE):
    code_path = path.dirname(path.abspath(__file__))
    return (code_path + '/' + f for f in config_file_names)

class ValidRequest(WrappedFunctionResult):
    """Valid if the validation function returns nothing."""
    def check_for_success(self):
        return not self.result and True or False

def format_record(record):
    if isinstance(record, Credentials):
        return record.username
    if hasattr(record, 'nodes'):
        return ', '.join(str(node) for node in record.nodes)
    return str(record)

class Request(object):
    """One query against a registry.

    Request(registry, table, kind, key).response is the reply.
    """
    def __init__(self, registry, table, kind, key, exists=False):
        self.registry = registry
        self.response = ''
        self.code = 0
        validated = ValidRequest()
        if validated(self.validate_request(table, kind, key)).success:
            if exists:
                self.exists(table, key)
            else:
                self.get(table, SERVICE_KINDS[kind.lower()], key)
        else:
            self.reply(400, validated.result)
        return

    def validate_request(self, table, kind, key):
        if table not in self.registry:
            return 'no such table'
        if kind.lower() not in SERVICE_KINDS:
            return 'unrecognized service'
        if not key:
            return 'empty key'
        return ''

    def reply(self, code, text):
        self.code = code
        self.response = '{} {}'.format(code, text)
        return

    def get(self, table, kind, key):
        try:
            result = mailtables.lookup(self.registry, table, key, kind)
        except mailtables.TableError as e:
            self.reply(400, e)
            return
        if result.error:
            self.reply(400, result.reason)
        elif result.empty:
            self.reply(201, 'found')
        elif result.success:
            self.reply(200, format_record(result.record))
        else:
            self.reply(500, 'not found')
        return

    def exists(self, table, key):
        try:
            found = self.registry.find(table).exists(key)
        except mailtables.TableError as e:
            self.reply(400, e)
            return
        if found:
            self.reply(201, 'found')
        else:
            self.reply(500, 'not found')
        return

def load_registry(config_files):
    """Load the first configuration file found, and build its tables."""
    last_exception = None
    for file_name in config_files:
        try:
            with open(file_name, "r") as f:
                config = mailtables.load_config(f, raise_on_error=True)
            break
        except FileNotFoundError as e:
            last_exception = e
    else:
        raise FileNotFoundError('No configuration file could be found. ({})'.format(last_exception))
    logging.getLogger().setLevel(config.logging)
    return config.build_registry()

def main(argv=None):
    parser = argparse.ArgumentParser(description='Look a key up in a table.')
    parser.add_argument('-c', '--config', help='tables configuration file')
    parser.add_argument('--exists', action='store_true', help='only check whether the key is present')
    parser.add_argument('table', help='table name')
    parser.add_argument('kind', help='alias, virtual, credentials or netaddr')
    parser.add_argument('key', help='key to look up')
    args = parser.parse_args(argv)

    logging.basicConfig()

    config_files = args.config and (args.config,) or resolve_config_files()
    try:
        registry = load_registry(config_files)
    except (MailTablesError, ValueError, OSError) as e:
        logging.fatal('Unable to load configuration: {}'.format(e))
        return 1

    request = Request(registry, args.table, args.kind, args.key, args.exists)
    print(request.response)
    registry.close()

    return request.code in (200, 201) and 0 or 1

if __name__ == "__main__":
    sys.exit(main())
