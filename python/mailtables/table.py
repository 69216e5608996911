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

"""Tables and the registry which owns them.

A Table is a named handle onto one backend. Tables are created by a
TableRegistry, which hands out ids and lets you find a table again by name
or by id:

    registry = TableRegistry()
    table = registry.add(T_STATIC, 'aliases', source=open('/etc/mail/aliases'))
    result = table.lookup('root', K_ALIAS)

Reloading (Table.update()) replaces the table: the registry afterwards
returns a different Table object under the same name and id. Don't hold on
to Table objects across a reload; look them up again.
"""

import logging

from .config_base import TableError, MAX_TABLENAME_SIZE, T_STATIC, T_DB, SERVICE_NAMES, service_name
from .table_static import StaticBackend
from .table_db import DBBackend

BACKENDS = {
        T_STATIC:   StaticBackend,
        T_DB:       DBBackend
    }

def new_backend(source):
    """Backend factory, keyed by backend kind."""
    if source not in BACKENDS:
        raise TableError('Unknown table backend: {}'.format(source))
    return BACKENDS[source]()

class Table(object):
    """A named, capability tagged handle to a key/value lookup source."""

    def __init__(self, registry, name, id, source, config=None):
        self.registry = registry
        self.name = name
        self.id = id
        self.source = source
        self.config = config
        self.backend = new_backend(source)
        self.contents = []
        self.handle = None
        return

    def __repr__(self):
        return '<Table "{}" id:{} {}>'.format(self.name, self.id, self.source)

    @property
    def capabilities(self):
        return self.backend.capabilities

    @property
    def usable(self):
        return self.handle is not None

    def configure(self, source=None):
        return self.backend.config(self, source)

    def open(self):
        """Acquire backend storage.

        Failure is logged and leaves the table unusable, but isn't raised.
        """
        self.handle = self.backend.open(self)
        if self.handle is None:
            logging.warning('Table "{}" could not be opened.'.format(self.name))
            return False
        return True

    def close(self):
        if self.handle is not None:
            self.backend.close(self.handle)
            self.handle = None
        return

    def update(self, source=None):
        """Reload the table from source.

        On success the registry's entry for this name is a new Table.
        """
        return self.backend.update(self, source)

    def reload(self):
        """Reload from the file named by config, if there is one."""
        if self.source != T_STATIC or not self.config:
            return self.update(None)
        with open(self.config, 'r', encoding='utf-8') as fh:
            return self.update(fh)

    def check_usable(self, kind):
        if self.handle is None:
            raise TableError('Table "{}" is not open.'.format(self.name))
        if kind is None:
            return
        # Exactly one service kind, not a mask.
        if kind not in SERVICE_NAMES:
            raise TableError('Table "{}": not a service kind: {}'.format(self.name, kind))
        if not (kind & self.capabilities):
            raise TableError('Table "{}" does not provide {}.'.format(self.name, service_name(kind)))
        return

    def lookup(self, key, kind):
        """Returns a LookupResult."""
        self.check_usable(kind)
        return self.backend.lookup(self.handle, key, kind)

    def exists(self, key):
        self.check_usable(None)
        return self.backend.lookup(self.handle, key, None).success

    def compare(self, key, kind, predicate):
        self.check_usable(kind)
        return self.backend.compare(self.handle, key, kind, predicate)

class TableRegistry(object):
    """Owns tables for the lifetime of the process."""

    def __init__(self):
        self.tables = {}
        self.ids = {}
        self.last_id = 0
        return

    def __len__(self):
        return len(self.tables)

    def __iter__(self):
        return iter(sorted(self.tables.values(), key=lambda t:t.id))

    def __contains__(self, name):
        return name in self.tables

    def create(self, source, name=None, config=None):
        """Create and register a table. It still has to be configured and opened."""
        if name is not None:
            if not name or len(name.encode('utf-8')) >= MAX_TABLENAME_SIZE:
                raise TableError('Bad table name: {}'.format(name[:32]))
            if name in self.tables:
                raise TableError('Table "{}" already defined.'.format(name))
        self.last_id += 1
        if name is None:
            name = '<dynamic:{}>'.format(self.last_id)
        table = Table(self, name, self.last_id, source, config)
        self.tables[table.name] = table
        self.ids[table.id] = table
        return table

    def add(self, source, name, config=None, source_text=None):
        """Create, configure and open a table.

        For a static table source_text is handed to the tokenizer (a stream,
        a string, or a Loader). Raises TableError if the configuration is
        refused.
        """
        table = self.create(source, name, config)
        try:
            configured = table.configure(source_text)
        except Exception:
            self.destroy(table)
            raise
        if not configured:
            self.destroy(table)
            raise TableError('Table "{}" configuration refused.'.format(name))
        table.open()
        logging.info('Table "{}" ({}) created.'.format(table.name, table.source))
        return table

    def destroy(self, table):
        """Close the table and forget about it."""
        if self.tables.get(table.name) is table:
            del self.tables[table.name]
        if self.ids.get(table.id) is table:
            del self.ids[table.id]
        table.close()
        table.contents = []
        logging.debug('Table "{}" destroyed.'.format(table.name))
        return

    def exchange_identity(self, table, other):
        """Swap name and id between two tables, and reindex both."""
        table.name, other.name = other.name, table.name
        table.id, other.id = other.id, table.id
        for t in (table, other):
            self.tables[t.name] = t
            self.ids[t.id] = t
        return

    def find(self, name):
        if name not in self.tables:
            raise TableError('No such table: {}'.format(name))
        return self.tables[name]

    def find_by_id(self, id):
        if id not in self.ids:
            raise TableError('No such table id: {}'.format(id))
        return self.ids[id]

    def update(self, name, source=None):
        return self.find(name).update(source)

    def close(self):
        for table in list(self):
            self.destroy(table)
        return
