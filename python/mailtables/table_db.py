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

"""The db backend.

A read-only, hashed key/value file built by something else (makemap or
equivalent) and opened with dbm. Table.config is the path to it.

Keys and values are stored with a trailing NUL byte, the way makemap writes
them. Lookup keys get one appended; fetched keys and values have it removed.
"""

import dbm
import logging

from .config_base import FatalTableError, K_ALL, MAX_LINE_SIZE
from .backend import TableBackend
from .utils import LookupResult

ENCODING = 'utf-8'

def to_db_key(key):
    return key.encode(ENCODING) + b'\0'

def from_db_bytes(data):
    """Strip the NUL and decode. Raises UnicodeDecodeError."""
    if data.endswith(b'\0'):
        data = data[:-1]
    return data.decode(ENCODING)

class DBHandle(object):
    """An open db file; get(), scan() and close() are all there is."""
    def __init__(self, db, path):
        self.db = db
        self.path = path
        return

    def get(self, key):
        """Raw value for the (already encoded) key, or None."""
        try:
            return self.db[key]
        except KeyError:
            return None

    def scan(self):
        """Every stored key, once.

        Walks the cursor when the db has one (dbm.gnu), rather than building
        the whole key list.
        """
        if not hasattr(self.db, 'firstkey'):
            for key in self.db.keys():
                yield key
            return
        key = self.db.firstkey()
        while key is not None:
            yield key
            key = self.db.nextkey(key)
        return

    def close(self):
        self.db.close()
        return

class DBBackend(TableBackend):

    capabilities = K_ALL
    MODE = 'r'

    def config(self, table, source):
        return True

    def update(self, table, source):
        return True

    def open(self, table):
        try:
            db = dbm.open(table.config, self.MODE)
        except (dbm.error[0], OSError, TypeError) as e:
            logging.warning('Table "{}": unable to open {}: {}'.format(table.name, table.config, e))
            return None
        return DBHandle(db, table.config)

    def close(self, handle):
        handle.close()
        return

    def lookup(self, handle, key, kind):
        db_key = to_db_key(key)
        if len(db_key) > MAX_LINE_SIZE:
            raise FatalTableError('table_db lookup: key too long')
        value = handle.get(db_key)
        if value is None:
            return LookupResult.not_found()
        try:
            value = from_db_bytes(value)
        except UnicodeDecodeError as e:
            logging.debug('Table lookup "{}": value is not {}: {}'.format(key, ENCODING, e.reason))
            return LookupResult.decode_error('Value is not {}.'.format(ENCODING))
        return self.decode_value(key, value, kind)

    def compare(self, handle, key, kind, predicate):
        for db_key in handle.scan():
            try:
                stored_key = from_db_bytes(db_key)
            except UnicodeDecodeError:
                logging.debug('Skipping stored key {!r}: not {}'.format(db_key, ENCODING))
                continue
            logging.debug('key: {}, stored key: {}'.format(key, stored_key))
            if predicate(key, stored_key):
                return True
        return False
