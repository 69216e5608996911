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

"""Parsing text.

There are two kinds of text parsed here.

Static table sources
--------------------

One entry per line:

    # comment, only at the start of a line
    key value
    key: value
    key

The key is everything up to the first white space, the value is the rest of
the line. A trailing ":" on the key is dropped when a value follows, so that
aliases(5) files work as is. A key by itself is a list entry (domains,
networks) with no value. Use table_config_parser().

Tables configuration
--------------------

    LOGGING: info
    TABLE aliases STATIC /etc/mail/aliases
    TABLE vdomains DB /etc/mail/vdomains.db

Use config.from_text() rather than the loader directly.
"""

import logging
from io import StringIO

from .config_base import ConfigurationError, Loader, DEFAULT_CONFIG, MAX_LINE_SIZE, \
                         T_STATIC, T_DB

class ParseError(ConfigurationError):
    """A parsing error occurred."""
    pass

LOGGING_LEVELS = dict(debug=logging.DEBUG, info=logging.INFO, warning=logging.WARNING, error=logging.ERROR, critical=logging.CRITICAL)

def to_loglevel(value):
    orig_value = value
    value = value.lower()
    if value not in LOGGING_LEVELS:
        raise ValueError('Not a valid logging level: {}'.format(orig_value))
    return LOGGING_LEVELS[value]

TABLE_KINDS = dict(STATIC=T_STATIC, FILE=T_STATIC, DB=T_DB)

def to_table_kind(value):
    orig_value = value
    value = value.upper()
    if value not in TABLE_KINDS:
        raise ValueError('Not a valid table kind: {}'.format(orig_value))
    return TABLE_KINDS[value]

class TableDeclaration(object):
    """One TABLE statement."""
    def __init__(self, name, source, path, line_number=None):
        self.name = name
        self.source = source
        self.path = path
        self.line_number = line_number
        return

    def __repr__(self):
        return '<TableDeclaration {} {} {}>'.format(self.name, self.source, self.path)

class LineLoader(Loader):
    """Reads a stream a line at a time, keeping track of line numbers."""

    def __init__(self, fh):
        """Create a loader for the supplied filehandle."""
        self.fh = fh
        self.line_number = 0
        return

    def parse_error(self, reason, **kwargs):
        additional = dict(line_number=self.line_number)
        additional.update(kwargs)
        raise ParseError(reason, additional)

    def read_line(self):
        """Returns the next line, stripped of surrounding white space.

        Comment lines come back empty. A "#" anywhere but the start of the
        line is data. Returns None at the end of the stream.
        """
        self.line_number += 1
        try:
            line = self.fh.readline()
        except UnicodeDecodeError as e:
            self.parse_error('Not valid text: {}'.format(e.reason))
        if not line:
            return None
        if len(line.encode('utf-8')) >= MAX_LINE_SIZE:
            self.parse_error('Line too long.')
        line = line.strip()
        if line.startswith('#'):
            return ''
        return line

    def lines(self):
        while True:
            line = self.read_line()
            if line is None:
                break
            if line:
                yield line
        return

class StaticTableLoader(LineLoader):
    """Tokenizes a static table source into (key, value) entries."""

    def load(self):
        entries = []
        for line in self.lines():
            parts = line.split(maxsplit=1)
            key = parts[0]
            if len(parts) == 1:
                entries.append((key, None))
                continue
            if key.endswith(':') and len(key) > 1:
                key = key[:-1]
            entries.append((key, parts[1]))
        return entries

class StreamParsingLoader(LineLoader):
    """Creates a configuration dictionary by parsing a text stream.

    Configuration.load() will call our load().
    """

    CONFIG_MAP = {
            'LOGGING': ('logging', to_loglevel)
        }

    def __init__(self, fh):
        LineLoader.__init__(self, fh)
        self.config = DEFAULT_CONFIG(minimal=True)
        return

    def load(self):
        """Load and parse the stream."""
        for line in self.lines():
            self.statement(line)
        return self.config

    def statement(self, line):
        if not (self.config_statement(line) or self.table_statement(line)):
            self.parse_error('Syntax Error: Unrecognized statement "{}"'.format(line.split()[0]))
        return

    def config_statement(self, line):
        item, colon, value = line.partition(':')
        item = ' '.join(item.split()).upper()
        if not colon or item not in self.CONFIG_MAP:
            return False
        config_item = self.CONFIG_MAP[item]
        self.config[config_item[0]] = config_item[1](value.strip())
        return True

    def table_statement(self, line):
        words = line.split()
        if words[0].upper() != 'TABLE':
            return False
        if len(words) != 4:
            self.parse_error('Syntax Error: expected "TABLE <name> <kind> <path>"')
        try:
            source = to_table_kind(words[2])
        except ValueError as e:
            self.parse_error(str(e))
        names = set(t.name for t in self.config['tables'])
        if words[1] in names:
            self.parse_error('Table "{}" declared twice.'.format(words[1]))
        self.config['tables'].append(TableDeclaration(words[1], source, words[3], self.line_number))
        return True

class MultilineStringLoader(StreamParsingLoader):
    """A StreamParsingLoader which takes a multiline string.

    This is used for testing.
    """
    def __init__(self, text):
        StreamParsingLoader.__init__(self, StringIO(text))
        return

def table_config_parser(source):
    """Turn the source for a static table into a list of (key, value) entries.

    source can be a Loader, a filehandle or a string. Raises ParseError.
    """
    if isinstance(source, str):
        source = StringIO(source)
    if not isinstance(source, Loader):
        source = StaticTableLoader(source)
    return source.load()
