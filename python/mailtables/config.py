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

"""All about configurations.

The central fixture of this module is the Configuration. A function
from_text() is provided to parse a configuration from text, and
Configuration.build_registry() turns the declared tables into a
TableRegistry full of open tables.
"""

import logging

from .config_base import ConfigurationError, TableError, Loader, DEFAULT_CONFIG, T_STATIC
from .parser import StreamParsingLoader
from .table import TableRegistry

def from_text(stream, raise_on_error=False):
    """Convenience method loads a Configuration.

    Accepts either a stream/filehandle object (which can be turned into an
    instance of StreamParsingLoader) or else an instance of a subclass
    of Loader.
    """
    if not isinstance(stream, Loader):
        stream = StreamParsingLoader(stream)

    return Configuration().load(stream, raise_on_error)

class Configuration(object):
    """A Configuration and the means to build tables from it."""

    def __init__(self):
        """Create an empty, default configuration.

        A new Configuration is empty except for some defaults. You will typically
        call load() to update the configuration.
        """
        self.config = DEFAULT_CONFIG()
        self.error = 'Not configured.'
        return

    @property
    def logging(self):
        return self.config['logging']

    @property
    def tables(self):
        return self.config['tables']

    def update_config(self, new_config):
        """Update the current config with the contents of the new one.

        FLUENT: returns the object.
        """
        self.config.update(new_config)
        return self

    def load(self, loader, raise_on_error=False):
        """Use the loader to update the configuration.

        FLUENT: returns the object.
        """
        self.error = ''
        try:
            self.update_config(loader.load())
        except (ConfigurationError, ValueError) as e:
            if raise_on_error:
                raise e
            self.error = ' {}: {}'.format(type(e).__name__, e)
            logging.error(self.error)
        return self

    def build_registry(self, registry=None):
        """Create, configure and open every declared table.

        Raises ConfigurationError if a table can't be set up. A db table which
        merely fails to open is logged and left unusable.
        """
        if registry is None:
            registry = TableRegistry()
        for declaration in self.tables:
            additional = dict(line_number=declaration.line_number, table=declaration.name)
            try:
                if declaration.source == T_STATIC:
                    with open(declaration.path, 'r', encoding='utf-8') as fh:
                        registry.add(declaration.source, declaration.name, declaration.path, fh)
                else:
                    registry.add(declaration.source, declaration.name, declaration.path)
            except (OSError, TableError) as e:
                raise ConfigurationError('Unable to set up table: {}'.format(e), additional)
        return registry
