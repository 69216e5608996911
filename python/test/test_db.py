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

import sys
import unittest
import dbm
import tempfile
from os import path

if '..' not in sys.path:
    sys.path.insert(0,'..')

from mailtables.config_base import T_DB, MAX_LINE_SIZE, TableError, FatalTableError, \
                                   K_ALIAS, K_VIRTUAL, K_CREDENTIALS
from mailtables.table import TableRegistry
from mailtables.table_db import DBHandle
from mailtables.matching import domain_match

ENTRIES = {
        'root':                     'gilles, /var/mail/root',
        'auth-user':                'gilles:secret',
        'auth-bad':                 ':secret',
        'vhost.example.com':        '',
        'user@vhost.example.com':   'gilles@example.org',
        'broken@vhost.example.com': 'a,,b'
    }

def makemap(file_name, entries):
    """Write entries the way makemap does, NUL terminated."""
    db = dbm.open(file_name, 'n')
    try:
        for key, value in entries.items():
            db[key.encode() + b'\0'] = value.encode() + b'\0'
    finally:
        db.close()
    return file_name

class TestDBTable(unittest.TestCase):
    """Lookups against a db file."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.file_name = makemap(path.join(self.tmpdir.name, 'table'), ENTRIES)
        self.registry = TableRegistry()
        self.table = self.registry.add(T_DB, 'db', config=self.file_name)
        return

    def tearDown(self):
        self.registry.close()
        self.tmpdir.cleanup()
        return

    def test_alias(self):
        result = self.table.lookup('root', K_ALIAS)
        self.assertTrue(result.success)
        self.assertEqual([str(node) for node in result.record], ['gilles', '/var/mail/root'])
        return

    def test_not_found(self):
        result = self.table.lookup('postmaster', K_ALIAS)
        self.assertFalse(result.success)
        self.assertFalse(result.error)
        return

    def test_credentials(self):
        """The terminating NUL is not part of the password."""
        result = self.table.lookup('auth-user', K_CREDENTIALS)
        self.assertEqual(result.record.password, 'secret')
        self.assertTrue(self.table.lookup('auth-bad', K_CREDENTIALS).error)
        return

    def test_virtual(self):
        self.assertTrue(self.table.lookup('vhost.example.com', K_VIRTUAL).empty)
        result = self.table.lookup('user@vhost.example.com', K_VIRTUAL)
        self.assertEqual(str(result.record.nodes[0]), 'gilles@example.org')
        self.assertTrue(self.table.lookup('broken@vhost.example.com', K_VIRTUAL).error)
        return

    def test_key_too_long(self):
        """That's a bug in the caller."""
        self.assertRaises(FatalTableError, self.table.lookup, 'x' * MAX_LINE_SIZE, K_ALIAS)
        self.assertFalse(self.table.lookup('x' * (MAX_LINE_SIZE - 1), K_ALIAS).success)
        return

    def test_compare_visits_everything_once(self):
        """An always false predicate sees every key exactly once, then gives up."""
        seen = []
        def predicate(wanted, key):
            seen.append(key)
            return False
        self.assertFalse(self.table.compare('anything', K_ALIAS, predicate))
        self.assertEqual(sorted(seen), sorted(ENTRIES.keys()))
        return

    def test_compare(self):
        self.assertTrue(self.table.compare('VHOST.EXAMPLE.COM', K_VIRTUAL, domain_match))
        self.assertFalse(self.table.compare('example.com', K_VIRTUAL, domain_match))
        return

    def test_update_is_a_noop(self):
        self.assertTrue(self.table.update('whatever'))
        self.assertIs(self.registry.find('db'), self.table)
        self.assertTrue(self.table.lookup('root', K_ALIAS).success)
        return

    def test_read_only(self):
        self.assertRaises(Exception, self.table.handle.db.__setitem__, b'new\0', b'value\0')
        return

class TestDBOpenFailure(unittest.TestCase):

    def test_missing_file(self):
        """Not fatal, but the table can't be used."""
        registry = TableRegistry()
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertLogs(level='WARNING'):
                table = registry.add(T_DB, 'missing', config=path.join(tmpdir, 'nope'))
        self.assertFalse(table.usable)
        self.assertRaises(TableError, table.lookup, 'root', K_ALIAS)
        return

class TestDBEncoding(unittest.TestCase):
    """Stored bytes which aren't UTF-8."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.file_name = path.join(self.tmpdir.name, 'table')
        db = dbm.open(self.file_name, 'n')
        try:
            db[b'auth-odd\0'] = b'gilles:\xffsecret\0'
            db[b'\xffodd\0'] = b'value\0'
            db[b'auth-user\0'] = b'gilles:secret\0'
        finally:
            db.close()
        self.registry = TableRegistry()
        self.table = self.registry.add(T_DB, 'db', config=self.file_name)
        return

    def tearDown(self):
        self.registry.close()
        self.tmpdir.cleanup()
        return

    def test_value_not_text(self):
        """Not silently repaired: it's a decode error."""
        result = self.table.lookup('auth-odd', K_CREDENTIALS)
        self.assertTrue(result.error)
        self.assertIsNone(result.record)
        self.assertEqual(self.table.lookup('auth-user', K_CREDENTIALS).record.password, 'secret')
        return

    def test_compare_skips_undecodable_keys(self):
        seen = []
        def predicate(wanted, key):
            seen.append(key)
            return False
        self.assertFalse(self.table.compare('anything', K_ALIAS, predicate))
        self.assertEqual(sorted(seen), ['auth-odd', 'auth-user'])
        return

class CursorOnlyDB(object):
    """Has firstkey() and nextkey() like dbm.gnu, but no keys()."""
    def __init__(self, keys):
        self.stored = keys
        return

    def firstkey(self):
        return self.stored[0] if self.stored else None

    def nextkey(self, key):
        i = self.stored.index(key) + 1
        return self.stored[i] if i < len(self.stored) else None

class TestDBHandle(unittest.TestCase):

    def test_scan_cursor(self):
        keys = [b'a\0', b'b\0', b'c\0']
        self.assertEqual(list(DBHandle(CursorOnlyDB(keys), 'x').scan()), keys)
        self.assertEqual(list(DBHandle(CursorOnlyDB([]), 'x').scan()), [])
        return

    def test_scan_keys(self):
        self.assertEqual(list(DBHandle({b'a\0': b'1\0'}, 'x').scan()), [b'a\0'])
        return

if __name__ == '__main__':
    unittest.main(verbosity=2)
