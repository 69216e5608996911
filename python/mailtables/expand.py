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

"""Recipient targets.

An alias or virtual value is a comma separated list of recipients. Each one
is parsed by alias_parse() into an ExpansionNode:

    |/usr/local/bin/procmail    filter    (command)
    :include:/etc/mail/staff    include   (path)
    /var/mail/archive           filename  (path)
    gilles@example.com          address   (user, domain)
    gilles                      username  (user)

alias_parse() raises ValueError for anything it won't accept.
"""

from string import ascii_letters, digits

from .config_base import MAX_LOCALPART_SIZE, MAX_DOMAINPART_SIZE

EXPAND_USERNAME = 'username'
EXPAND_ADDRESS = 'address'
EXPAND_FILENAME = 'filename'
EXPAND_FILTER = 'filter'
EXPAND_INCLUDE = 'include'

INCLUDE_PREFIX = ':include:'

LOCALPART_LETTERS = set(ascii_letters + digits + '.-_+')
DOMAIN_LETTERS = set(ascii_letters + digits + '-')

class ExpansionNode(object):
    """One parsed recipient target."""
    def __init__(self, type, user=None, domain=None, path=None, command=None):
        self.type = type
        self.user = user
        self.domain = domain
        self.path = path
        self.command = command
        return

    def __eq__(self, other):
        if not isinstance(other, ExpansionNode):
            return NotImplemented
        return str(self) == str(other) and self.type == other.type

    def __hash__(self):
        return hash((self.type, str(self)))

    def __repr__(self):
        return '<ExpansionNode {}: {}>'.format(self.type, str(self))

    def __str__(self):
        if   self.type == EXPAND_USERNAME:
            return self.user
        elif self.type == EXPAND_ADDRESS:
            return '{}@{}'.format(self.user, self.domain)
        elif self.type == EXPAND_FILENAME:
            return self.path
        elif self.type == EXPAND_INCLUDE:
            return INCLUDE_PREFIX + self.path
        return '|' + self.command

def to_localpart(value):
    if not value:
        raise ValueError('Empty user / local part.')
    if len(value) > MAX_LOCALPART_SIZE:
        raise ValueError('User / local part too long: {}'.format(value))
    if not set(value) <= LOCALPART_LETTERS:
        raise ValueError('Not a valid user / local part: {}'.format(value))
    if value.startswith('.') or value.endswith('.') or '..' in value:
        raise ValueError('Misplaced dot in user / local part: {}'.format(value))
    return value

def to_domain(value):
    if not value:
        raise ValueError('Empty domain.')
    if len(value) > MAX_DOMAINPART_SIZE:
        raise ValueError('Domain too long: {}'.format(value))
    for label in value.split('.'):
        if not label or not set(label) <= DOMAIN_LETTERS:
            raise ValueError('Not a valid domain: {}'.format(value))
        if label.startswith('-') or label.endswith('-'):
            raise ValueError('Misplaced hyphen in domain: {}'.format(value))
    return value.lower()

def to_path(value):
    if not value.startswith('/'):
        raise ValueError('Not an absolute path: {}'.format(value))
    if len(value) == 1 or any(c.isspace() for c in value):
        raise ValueError('Not a valid path: {}'.format(value))
    return value

def alias_parse(text):
    """Parse one (already trimmed) recipient into an ExpansionNode."""
    if not text:
        raise ValueError('Empty recipient.')

    if text.startswith('|'):
        command = text[1:].strip()
        if not command:
            raise ValueError('Empty filter command.')
        return ExpansionNode(EXPAND_FILTER, command=command)

    if text.startswith(INCLUDE_PREFIX):
        return ExpansionNode(EXPAND_INCLUDE, path=to_path(text[len(INCLUDE_PREFIX):].strip()))

    if text.startswith('/'):
        return ExpansionNode(EXPAND_FILENAME, path=to_path(text))

    if '@' in text:
        user, domain = text.rsplit('@', 1)
        return ExpansionNode(EXPAND_ADDRESS, user=to_localpart(user), domain=to_domain(domain))

    return ExpansionNode(EXPAND_USERNAME, user=to_localpart(text))
