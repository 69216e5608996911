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

"""Turning raw table values into records.

There is one decoder per service kind. Every decoder takes the key which was
looked up and the raw value found for it, and either returns a record or
raises DecodeError:

    decode_credentials(key, value) -> Credentials
    decode_alias(key, value)       -> AliasExpansion
    decode_virtual(key, value)     -> VirtualExpansion or None
    decode_netaddr(key, value)     -> NetworkAddress

decode_virtual() returns None for a key without an "@": that's a virtual
domain and finding it is all that matters. None is a successful outcome here.

Decoding is all or nothing. If any part of a value is bad no record is
returned, and nothing which was built along the way is kept.
"""

from .config_base import DecodeError, MAX_LINE_SIZE, MAX_USERNAME_SIZE, MAX_PASSWORD_SIZE, \
                         K_ALIAS, K_VIRTUAL, K_CREDENTIALS, K_NETADDR, service_name
from .expand import alias_parse
from .netaddr import text_to_netaddr

class Credentials(object):
    def __init__(self, username, password):
        self.username = username
        self.password = password
        return

    def __eq__(self, other):
        if not isinstance(other, Credentials):
            return NotImplemented
        return self.username == other.username and self.password == other.password

    def __repr__(self):
        # Never show the password.
        return '<Credentials: {}>'.format(self.username)

class Expansion(object):
    """An ordered, non-empty list of ExpansionNodes."""
    def __init__(self, nodes):
        self.nodes = nodes
        return

    def __len__(self):
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def __repr__(self):
        return '<{}: {}>'.format(type(self).__name__, ', '.join(str(node) for node in self.nodes))

class AliasExpansion(Expansion):
    pass

class VirtualExpansion(Expansion):
    pass

def byte_length(value):
    return len(value.encode('utf-8'))

def expand_recipients(key, value, parser=alias_parse):
    """Split a comma separated value and parse every recipient.

    Raises DecodeError on the first empty or unparseable recipient, in
    which case the partial list is cleared before the exception escapes.
    """
    if value is None:
        raise DecodeError('No value.', key)
    nodes = []
    try:
        for recipient in value.split(','):
            recipient = recipient.strip()
            if not recipient:
                raise DecodeError('Empty recipient.', key)
            try:
                nodes.append(parser(recipient))
            except ValueError as e:
                raise DecodeError('Bad recipient "{}": {}'.format(recipient, e), key)
    except DecodeError:
        nodes.clear()
        raise
    return nodes

def decode_credentials(key, value):
    """Credentials are stored as user:password."""
    if value is None:
        raise DecodeError('No value.', key)
    length = byte_length(value)
    if length < 3:
        raise DecodeError('Too short for credentials.', key)
    # Too big to fit in an SMTP session line.
    if length >= MAX_LINE_SIZE:
        raise DecodeError('Too long for credentials.', key)

    username, colon, password = value.partition(':')
    if not colon:
        raise DecodeError('No separator in credentials.', key)
    if not username:
        raise DecodeError('Empty username.', key)
    if not password:
        raise DecodeError('Empty password.', key)
    # The field bounds equal the line bound today, so these only bite if they shrink.
    if byte_length(username) >= MAX_USERNAME_SIZE:
        raise DecodeError('Username too long.', key)
    if byte_length(password) >= MAX_PASSWORD_SIZE:
        raise DecodeError('Password too long.', key)

    return Credentials(username, password)

def decode_alias(key, value, parser=alias_parse):
    return AliasExpansion(expand_recipients(key, value, parser))

def decode_virtual(key, value, parser=alias_parse):
    # Domain key, discard value.
    if '@' not in key:
        return None
    return VirtualExpansion(expand_recipients(key, value, parser))

def decode_netaddr(key, value):
    if value is None:
        raise DecodeError('No value.', key)
    try:
        return text_to_netaddr(value)
    except ValueError as e:
        raise DecodeError('Bad network address "{}": {}'.format(value, e), key)

DECODERS = {
        K_ALIAS:        decode_alias,
        K_VIRTUAL:      decode_virtual,
        K_CREDENTIALS:  decode_credentials,
        K_NETADDR:      decode_netaddr
    }

def decode(kind, key, value):
    """Dispatch to the decoder for the service kind."""
    if kind not in DECODERS:
        raise ValueError('No decoder for service {}'.format(service_name(kind)))
    return DECODERS[kind](key, value)
