#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Recursive Length Prefix (RLP) serialization, as used by Ethereum.
#
# - items are byte strings or lists of items
# - ints are encoded as minimal big-endian byte strings: zero is b''
# - text is utf-8
# - see <https://ethereum.org/en/developers/docs/data-structures-and-encoding/rlp/>
#
from .utils import int_to_min_bytes

SHORT_STRING = 0x80
LONG_STRING = 0xb7
SHORT_LIST = 0xc0
LONG_LIST = 0xf7

def _header(length, offset):
    # length prefix for a string (offset=0x80) or list (offset=0xc0)
    if length < 56:
        return bytes([offset + length])

    ll = int_to_min_bytes(length)
    return bytes([offset + 55 + len(ll)]) + ll

def as_bytes(item):
    # the byte string an atom encodes as
    if isinstance(item, bool):
        # ambiguous, callers should say what they mean
        raise TypeError("bool is not an RLP item")
    if isinstance(item, int):
        return int_to_min_bytes(item)
    if isinstance(item, str):
        return item.encode('utf-8')
    if isinstance(item, (bytes, bytearray)):
        return bytes(item)

    raise TypeError(f"Cannot RLP encode: {type(item).__name__}")

def encode(item):
    # serialize an item (atom or nested list)
    if isinstance(item, (list, tuple)):
        body = b''.join(encode(i) for i in item)
        return _header(len(body), SHORT_LIST) + body

    raw = as_bytes(item)
    if len(raw) == 1 and raw[0] < SHORT_STRING:
        # single low byte is its own encoding
        return raw

    return _header(len(raw), SHORT_STRING) + raw

def _decode_one(buf, pos):
    # returns (item, next position)
    if pos >= len(buf):
        raise ValueError("RLP: truncated")

    first = buf[pos]

    if first < SHORT_STRING:
        return bytes([first]), pos+1

    is_list = (first >= SHORT_LIST)
    if first <= LONG_STRING or SHORT_LIST <= first <= LONG_LIST:
        # short form: length is in the prefix byte
        length = first - (SHORT_LIST if is_list else SHORT_STRING)
        start = pos + 1
    else:
        # long form: next N bytes are the length
        ll = first - (LONG_LIST if is_list else LONG_STRING)
        lbytes = buf[pos+1:pos+1+ll]
        if len(lbytes) != ll:
            raise ValueError("RLP: truncated length")
        if lbytes[0] == 0:
            raise ValueError("RLP: length has leading zero")
        length = int.from_bytes(lbytes, 'big')
        if length < 56:
            raise ValueError("RLP: long form used for short item")
        start = pos + 1 + ll

    end = start + length
    if end > len(buf):
        raise ValueError("RLP: truncated body")

    if not is_list:
        body = bytes(buf[start:end])
        if length == 1 and body[0] < SHORT_STRING:
            raise ValueError("RLP: single byte not canonical")
        return body, end

    rv = []
    here = start
    while here < end:
        sub, here = _decode_one(buf, here)
        rv.append(sub)
    if here != end:
        raise ValueError("RLP: list overruns its length")

    return rv, end

def decode(buf):
    # inverse of encode, but atoms come back as bytes (no type info in RLP)
    item, end = _decode_one(bytes(buf), 0)
    if end != len(buf):
        raise ValueError("RLP: trailing garbage")
    return item

def decode_int(raw):
    # minimal big-endian bytes => int
    if raw[0:1] == b'\x00':
        raise ValueError("RLP: integer has leading zero")
    return int.from_bytes(raw, 'big')

# EOF
