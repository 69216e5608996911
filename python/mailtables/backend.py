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

"""What every table backend does.

A backend is stateless as far as the tables it serves are concerned; state
lives in the Table (see table.Table) and in the handle returned by open().
The operations are:

    config(table, source) -> bool
        Accept (or reject) a configuration source for the table.

    open(table) -> handle or None
        Acquire whatever storage the backend uses. None means the table
        can't be used; it is not an exception.

    update(table, source) -> bool
        Reload. The live table is never modified in place.

    close(handle)
        Release the storage.

    lookup(handle, key, kind) -> utils.LookupResult
        Find key and decode its value for the service kind. With kind=None
        only the presence of the key is reported.

    compare(handle, key, kind, predicate) -> bool
        True if predicate(key, stored_key) is true for any stored key.

Backends don't check that kind is among their capabilities; that is the
caller's job.
"""

import logging

from .config_base import DecodeError, K_ALL, service_name
from .decode import decode
from .utils import LookupResult

class TableBackend(object):
    """Base class for table backends."""

    capabilities = K_ALL

    def config(self, table, source):
        raise NotImplementedError()

    def open(self, table):
        raise NotImplementedError()

    def update(self, table, source):
        raise NotImplementedError()

    def close(self, handle):
        raise NotImplementedError()

    def lookup(self, handle, key, kind):
        raise NotImplementedError()

    def compare(self, handle, key, kind, predicate):
        raise NotImplementedError()

    def decode_value(self, key, value, kind):
        """Shared by lookup() implementations once a raw value is in hand."""
        if kind is None:
            return LookupResult.found()
        try:
            return LookupResult.found(decode(kind, key, value))
        except DecodeError as e:
            logging.debug('{} lookup of "{}" failed to decode: {}'.format(service_name(kind), key, e.reason))
            return LookupResult.decode_error(e.reason)
