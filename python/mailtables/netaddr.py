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

"""Network addresses with a prefix length."""

from ipaddress import ip_address, ip_network

class NetworkAddress(object):
    """An address and a prefix length, e.g. 192.168.0.0/16."""
    def __init__(self, address, prefix):
        self.address = address
        self.prefix = prefix
        return

    @property
    def network(self):
        """The network containing address (host bits cleared)."""
        return ip_network('{}/{}'.format(self.address, self.prefix), strict=False)

    def __contains__(self, other):
        if not isinstance(other, NetworkAddress):
            other = ip_address(other)
        else:
            other = other.address
        if other.version != self.address.version:
            return False
        return other in self.network

    def __eq__(self, other):
        if not isinstance(other, NetworkAddress):
            return NotImplemented
        return self.address == other.address and self.prefix == other.prefix

    def __hash__(self):
        return hash((self.address, self.prefix))

    def __repr__(self):
        return '<NetworkAddress {}/{}>'.format(self.address, self.prefix)

    def __str__(self):
        return '{}/{}'.format(self.address, self.prefix)

def text_to_netaddr(text):
    """Parse "address" or "address/prefix".

    A bare address gets the full prefix length for its family. Raises
    ValueError if the text is not acceptable.
    """
    text = text.strip()
    if not text:
        raise ValueError('Empty network address.')
    address, slash, prefix = text.partition('/')
    address = ip_address(address)
    if not slash:
        return NetworkAddress(address, address.max_prefixlen)
    if not prefix.isdigit():
        raise ValueError('Not a valid prefix length: {}'.format(prefix))
    prefix = int(prefix)
    if prefix > address.max_prefixlen:
        raise ValueError('Prefix length out of range: {}'.format(prefix))
    return NetworkAddress(address, prefix)
