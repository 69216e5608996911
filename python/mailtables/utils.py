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

"""Utility classes."""

NOT_FOUND = 0
FOUND = 1
DECODE_ERROR = -1

class WrappedFunctionResult(object):
    """Wraps the result of calling a function.

    Call the instance with the function result; check success afterwards:

        validated = ValidThing()
        if validated(validate(thing)).success:
            ...

    Subclasses override check_for_success().
    """
    def __init__(self):
        self.result = None
        return

    def __call__(self, result):
        self.result = result
        return self

    def check_for_success(self):
        return self.result and True or False

    @property
    def success(self):
        return self.check_for_success()

class LookupResult(object):
    """The outcome of a table lookup.

    There are four of them and they mean different things:

        not found       the key is not in the table
        found, empty    the key is there but carries no payload (virtual
                        domain keys, existence checks)
        found           the key is there and record is the decoded value
        decode error    the key is there but its value is malformed

    A decode error is not "not found"; don't treat it like one.
    """
    def __init__(self, status, record=None, reason=None):
        self.status = status
        self.record = record
        self.reason = reason
        return

    @classmethod
    def not_found(cls):
        return cls(NOT_FOUND)

    @classmethod
    def found(cls, record=None):
        return cls(FOUND, record)

    @classmethod
    def decode_error(cls, reason):
        return cls(DECODE_ERROR, reason=reason)

    @property
    def success(self):
        return self.status == FOUND

    @property
    def empty(self):
        return self.status == FOUND and self.record is None

    @property
    def error(self):
        return self.status == DECODE_ERROR

    def __bool__(self):
        return self.success

    def __repr__(self):
        if self.status == NOT_FOUND:
            return '<LookupResult: not found>'
        if self.status == DECODE_ERROR:
            return '<LookupResult: decode error: {}>'.format(self.reason)
        return '<LookupResult: found {}>'.format(self.record)
