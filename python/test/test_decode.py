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
import gc
import weakref
from unittest import mock
from ipaddress import ip_address

if '..' not in sys.path:
    sys.path.insert(0,'..')

from mailtables.config_base import DecodeError, MAX_LINE_SIZE, K_ALIAS, K_CREDENTIALS, K_NETADDR
import mailtables.decode as decode
from mailtables.expand import alias_parse, EXPAND_USERNAME, EXPAND_ADDRESS, EXPAND_FILENAME, \
                              EXPAND_FILTER, EXPAND_INCLUDE

class TrackingParser(object):
    """Wraps alias_parse() and keeps a weak reference to every node it makes."""
    def __init__(self):
        self.made = []
        return

    def __call__(self, text):
        node = alias_parse(text)
        self.made.append(weakref.ref(node))
        return node

    def live(self):
        gc.collect()
        return [ref for ref in self.made if ref() is not None]

class TestCredentials(unittest.TestCase):
    """user:password values."""

    def test_good(self):
        """Username and password are split on the colon."""
        credentials = decode.decode_credentials('auth', 'ab:c')
        self.assertEqual(credentials.username, 'ab')
        self.assertEqual(credentials.password, 'c')
        return

    def test_first_colon(self):
        """Only the first colon separates."""
        credentials = decode.decode_credentials('auth', 'gilles:pa:ss')
        self.assertEqual(credentials.username, 'gilles')
        self.assertEqual(credentials.password, 'pa:ss')
        return

    def test_empty_password(self):
        self.assertRaises(DecodeError, decode.decode_credentials, 'auth', 'a:')
        self.assertRaises(DecodeError, decode.decode_credentials, 'auth', 'ab:')
        return

    def test_empty_username(self):
        self.assertRaises(DecodeError, decode.decode_credentials, 'auth', ':b')
        self.assertRaises(DecodeError, decode.decode_credentials, 'auth', ':bc')
        return

    def test_no_separator(self):
        self.assertRaises(DecodeError, decode.decode_credentials, 'auth', 'abc')
        return

    def test_too_short(self):
        """Anything under three bytes can't be user:password."""
        self.assertRaises(DecodeError, decode.decode_credentials, 'auth', 'xy')
        self.assertRaises(DecodeError, decode.decode_credentials, 'auth', 'ab')
        self.assertRaises(DecodeError, decode.decode_credentials, 'auth', '')
        return

    def test_too_long(self):
        """At or over the line size is rejected, not truncated."""
        value = 'u:' + 'p' * (MAX_LINE_SIZE - 2)
        self.assertRaises(DecodeError, decode.decode_credentials, 'auth', value)
        value = 'u:' + 'p' * (MAX_LINE_SIZE - 3)
        self.assertEqual(len(decode.decode_credentials('auth', value).password), MAX_LINE_SIZE - 3)
        return

    def test_field_bounds(self):
        """Username and password have bounds of their own."""
        with mock.patch.object(decode, 'MAX_USERNAME_SIZE', 4):
            self.assertRaises(DecodeError, decode.decode_credentials, 'auth', 'gill:pw')
            self.assertEqual(decode.decode_credentials('auth', 'gil:pw').username, 'gil')
        with mock.patch.object(decode, 'MAX_PASSWORD_SIZE', 4):
            self.assertRaises(DecodeError, decode.decode_credentials, 'auth', 'u:pass')
            self.assertEqual(decode.decode_credentials('auth', 'u:pas').password, 'pas')
        return

    def test_no_value(self):
        """A key-only entry has nothing to decode."""
        self.assertRaises(DecodeError, decode.decode_credentials, 'auth', None)
        return

    def test_repr_hides_password(self):
        self.assertNotIn('secret', repr(decode.decode_credentials('auth', 'gilles:secret')))
        return

class TestAlias(unittest.TestCase):
    """Comma separated recipients."""

    def test_kinds_of_recipient(self):
        expansion = decode.decode_alias('root',
                        'gilles, eric@example.com, /var/mail/root, |/usr/bin/vacation -a root, :include:/etc/mail/staff')
        self.assertEqual([node.type for node in expansion],
                         [EXPAND_USERNAME, EXPAND_ADDRESS, EXPAND_FILENAME, EXPAND_FILTER, EXPAND_INCLUDE])
        self.assertEqual(expansion.nodes[1].domain, 'example.com')
        self.assertEqual(expansion.nodes[3].command, '/usr/bin/vacation -a root')
        self.assertEqual(expansion.nodes[4].path, '/etc/mail/staff')
        return

    def test_single(self):
        expansion = decode.decode_alias('root', 'gilles')
        self.assertEqual(len(expansion), 1)
        self.assertEqual(expansion.nodes[0].user, 'gilles')
        return

    def test_empty_recipient(self):
        self.assertRaises(DecodeError, decode.decode_alias, 'root', 'a,,c')
        self.assertRaises(DecodeError, decode.decode_alias, 'root', 'a, ,c')
        self.assertRaises(DecodeError, decode.decode_alias, 'root', 'a,')
        self.assertRaises(DecodeError, decode.decode_alias, 'root', '')
        return

    def test_rejected_recipient(self):
        self.assertRaises(DecodeError, decode.decode_alias, 'root', 'gilles, not a user')
        self.assertRaises(DecodeError, decode.decode_alias, 'root', 'gilles, eric@')
        self.assertRaises(DecodeError, decode.decode_alias, 'root', 'gilles, |')
        return

    def test_nothing_kept_on_failure(self):
        """Nodes parsed before the bad recipient don't survive."""
        parser = TrackingParser()
        with self.assertRaises(DecodeError):
            decode.decode_alias('root', 'a, b, bad recipient', parser=parser)
        self.assertEqual(len(parser.made), 2)
        self.assertEqual(parser.live(), [])
        return

class TestVirtual(unittest.TestCase):
    """Virtual domains and virtual users."""

    def test_domain_key(self):
        """No "@" in the key: found, nothing to rewrite, value ignored."""
        self.assertIsNone(decode.decode_virtual('example.com', 'anything'))
        self.assertIsNone(decode.decode_virtual('example.com', 'a,,c'))
        self.assertIsNone(decode.decode_virtual('example.com', None))
        return

    def test_trimmed(self):
        expansion = decode.decode_virtual('user@example.com', 'a, b ,c')
        self.assertIsInstance(expansion, decode.VirtualExpansion)
        self.assertEqual([node.user for node in expansion], ['a', 'b', 'c'])
        return

    def test_empty_recipient_released(self):
        """The partial list is thrown away."""
        parser = TrackingParser()
        with self.assertRaises(DecodeError):
            decode.decode_virtual('user@example.com', 'a,,c', parser=parser)
        self.assertEqual(len(parser.made), 1)
        self.assertEqual(parser.live(), [])
        return

    def test_success_kept(self):
        """Sanity check of the tracking parser itself."""
        parser = TrackingParser()
        expansion = decode.decode_virtual('user@example.com', 'a, b', parser=parser)
        self.assertEqual(len(parser.live()), 2)
        del expansion
        self.assertEqual(parser.live(), [])
        return

class TestNetaddr(unittest.TestCase):
    """Addresses and prefixes."""

    def test_prefix(self):
        netaddr = decode.decode_netaddr('lan', '192.168.0.0/16')
        self.assertEqual(netaddr.address, ip_address('192.168.0.0'))
        self.assertEqual(netaddr.prefix, 16)
        return

    def test_bare_address(self):
        self.assertEqual(decode.decode_netaddr('lo', '127.0.0.1').prefix, 32)
        self.assertEqual(decode.decode_netaddr('lo', '::1').prefix, 128)
        return

    def test_bad(self):
        self.assertRaises(DecodeError, decode.decode_netaddr, 'x', '300.1.1.1')
        self.assertRaises(DecodeError, decode.decode_netaddr, 'x', '10.0.0.0/33')
        self.assertRaises(DecodeError, decode.decode_netaddr, 'x', '10.0.0.0/')
        self.assertRaises(DecodeError, decode.decode_netaddr, 'x', 'example.com')
        return

class TestDispatch(unittest.TestCase):

    def test_dispatch(self):
        self.assertEqual(decode.decode(K_CREDENTIALS, 'auth', 'a:b').username, 'a')
        self.assertEqual(len(decode.decode(K_ALIAS, 'root', 'a, b')), 2)
        self.assertEqual(decode.decode(K_NETADDR, 'lo', '::1').prefix, 128)
        return

    def test_unknown_kind(self):
        self.assertRaises(ValueError, decode.decode, 0x80, 'key', 'value')
        return

if __name__ == '__main__':
    unittest.main(verbosity=2)
