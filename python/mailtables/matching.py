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

"""Predicates for Table.compare().

Each one is called as predicate(wanted, stored_key) and returns True or False.
They never raise for garbage input; garbage just doesn't match.
"""

from .netaddr import text_to_netaddr

def domain_match(wanted, stored_key):
    """Case insensitive domain match.

    A stored key of "*.example.com" or ".example.com" matches any subdomain
    of example.com, but not example.com itself.
    """
    wanted = wanted.lower().rstrip('.')
    stored_key = stored_key.lower().rstrip('.')
    if stored_key.startswith('*.'):
        stored_key = stored_key[1:]
    if stored_key.startswith('.'):
        return len(wanted) > len(stored_key) and wanted.endswith(stored_key)
    return wanted == stored_key

def netaddr_match(wanted, stored_key):
    """The wanted address lies within the stored network."""
    try:
        network = text_to_netaddr(stored_key)
        return text_to_netaddr(wanted) in network
    except ValueError:
        return False

def mailaddr_match(wanted, stored_key):
    """Matches "user@domain", "@domain" or "domain" entries.

    The domain part is compared case insensitively, the user part exactly.
    """
    if '@' not in wanted:
        return False
    user, domain = wanted.rsplit('@', 1)
    if '@' not in stored_key:
        return domain_match(domain, stored_key)
    stored_user, stored_domain = stored_key.rsplit('@', 1)
    if stored_user and stored_user != user:
        return False
    return domain_match(domain, stored_domain)
