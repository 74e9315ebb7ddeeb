# (c) Copyright 2021 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
import os, re
from binascii import b2a_hex
from eth_utils import to_checksum_address, is_checksum_address

from .constants import *
from .exceptions import InvalidAddress
from .compat import CT_priv_to_pubkey, pubkey_to_address_bytes

# show bytes as hex in a string
B2A = lambda x: b2a_hex(x).decode('ascii')

# same, but how Ethereum folks like it
to_hex = lambda x: '0x' + B2A(x)

_ADDR_RE = re.compile(r'^0x[0-9a-fA-F]{40}$')

def strip_0x(s):
    return s[2:] if s[0:2] in ('0x', '0X') else s

def hex_to_bytes(s):
    # accept with or without 0x; raises ValueError on junk
    s = strip_0x(s.strip())
    if len(s) % 2:
        raise ValueError("odd number of hex digits")
    return bytes.fromhex(s)

def int_to_min_bytes(num):
    # big-endian, no leading zero bytes; zero is the empty string
    if num < 0:
        raise ValueError("negative integer")
    return num.to_bytes((num.bit_length() + 7) // 8, 'big')

def pick_payment_nonce():
    # random 32-bit value for payment requests
    return int.from_bytes(os.urandom(PAYMENT_NONCE_SIZE), 'big')

def is_address(text):
    # textual form: 0x + 40 hex; if mixed case, checksum must be right
    if not isinstance(text, str) or not _ADDR_RE.match(text):
        return False
    body = text[2:]
    if body == body.lower() or body == body.upper():
        return True
    return is_checksum_address(text)

def parse_address(text):
    # text form => 20 bytes, or raise
    if isinstance(text, (bytes, bytearray)):
        if len(text) != ADDRESS_SIZE:
            raise InvalidAddress(f"Address must be {ADDRESS_SIZE} bytes, got {len(text)}")
        return bytes(text)

    if not isinstance(text, str) or not _ADDR_RE.match(text):
        raise InvalidAddress(f"Not an address: {text!r}")

    if not is_address(text):
        raise InvalidAddress(f"Bad checksum on address: {text}")

    return bytes.fromhex(text[2:])

def normalize_address(text):
    # validate and return the checksummed form
    return to_checksum_address(parse_address(text))

def privkey_to_address(privkey):
    # only used with caller-provided test keys, we never make keys
    return to_checksum_address(pubkey_to_address_bytes(CT_priv_to_pubkey(privkey)))

def network_name(chain_id):
    # display name for a chain id, even unknown ones
    try:
        return NETWORK_NAMES[chain_id][0]
    except KeyError:
        return f'Network {chain_id}'

def usdt_address(chain_id):
    # USDT token contract on BNB chain networks we know
    for net in BNB_NETWORKS.values():
        if net['chain_id'] == chain_id:
            return net['usdt']
    return None

# EOF
