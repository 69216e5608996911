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

"""Lookup tables for a mail transfer agent.

A table answers one of four questions about a key, depending on the service
kind asked for:

    K_ALIAS:       what are the delivery targets for this alias?
    K_VIRTUAL:     is this address in a virtual domain, and what does it
                   rewrite to?
    K_CREDENTIALS: what credentials authenticate this user?
    K_NETADDR:     what network does this entry describe?

There are the following major components:

    decode:        Turns a raw value into a record, one decoder per service.
    backend:       What a table backend has to do.
    table_static:  Entries held in memory, read from a text file.
    table_db:      A read-only dbm file built elsewhere.
    table:         Tables and the registry that owns them.
    matching:      Predicates for Table.compare().
    config:        The tables configuration file.

There are two methods here which you generally need to "make it go":

    1) load_config(stream, raise_on_error=False) -> config.Configuration

            stream:     use a filehandle ;-)
            Returns:    a configuration you can use

        This is an alias for config.from_text(). Call build_registry() on
        the result to get a TableRegistry.

    2) lookup(registry, name, key, kind) -> utils.LookupResult

        Find the named table and look key up in it.
"""

from .config import from_text as load_config
from .config_base import K_ALIAS, K_VIRTUAL, K_CREDENTIALS, K_NETADDR, T_STATIC, T_DB, \
                         ConfigurationError, TableError, DecodeError, FatalTableError
from .table import TableRegistry

def lookup(registry, name, key, kind):
    """Look key up in the table called name."""
    return registry.find(name).lookup(key, kind)
