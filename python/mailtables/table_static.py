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

"""The static backend.

Entries live in memory, in the order they were read, in Table.contents.
Lookups are a linear scan and the first matching key wins; keys don't have
to be unique.

Reloading builds a whole new table and then trades names and ids with the
live one. The live table's contents are never touched while it's live.
"""

import logging

from .config_base import K_ALL
from .backend import TableBackend
from .parser import ParseError, table_config_parser
from .utils import LookupResult

class StaticBackend(TableBackend):

    capabilities = K_ALL

    def config(self, table, source):
        # No config? Ok.
        if source is None:
            return True
        try:
            table.contents = table_config_parser(source)
        except ParseError as e:
            logging.error('Table "{}": {}'.format(table.name, e))
            return False
        return True

    def open(self, table):
        return table

    def close(self, handle):
        handle.contents = []
        return

    def update(self, table, source):
        name = table.name

        # No config? Ok.
        if source is None:
            logging.info('Table "{}" successfully updated'.format(name))
            return True

        registry = table.registry
        replacement = registry.create(table.source, config=table.config)
        try:
            configured = replacement.configure(source)
        except Exception:
            registry.destroy(replacement)
            logging.info('Failed to update table "{}"'.format(name))
            raise
        if not configured:
            registry.destroy(replacement)
            logging.info('Failed to update table "{}"'.format(name))
            return False
        replacement.open()

        # The replacement becomes the table; what was the table goes away.
        registry.exchange_identity(table, replacement)
        registry.destroy(table)

        logging.info('Table "{}" successfully updated'.format(name))
        return True

    def lookup(self, handle, key, kind):
        for entry_key, value in handle.contents:
            if entry_key == key:
                return self.decode_value(key, value, kind)
        return LookupResult.not_found()

    def compare(self, handle, key, kind, predicate):
        for entry_key, value in handle.contents:
            if predicate(key, entry_key):
                return True
        return False
