#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# eip712.py
#
# Structured data for signing, per EIP-712.
#
#   digest = keccak256(0x19 || 0x01 || domainSeparator || hashStruct(message))
#
# - see <https://eips.ethereum.org/EIPS/eip-712>
# - hashing is done by eth-account; here we only check the message fits its schema
# - field order in a type is significant, never reorder
#
import re
from collections import namedtuple
from dataclasses import dataclass
from typing import Dict, Tuple

from eth_account.messages import encode_typed_data
from eth_utils import to_checksum_address, ValidationError

from .constants import *
from .exceptions import SchemaMismatch, InvalidAddress
from .compat import keccak256
from .utils import parse_address, hex_to_bytes

# one member of a struct type
Field = namedtuple('Field', 'name type')

# name => ordered fields
TypeSchema = Dict[str, Tuple[Field, ...]]

DOMAIN_TYPE = 'EIP712Domain'

_ARRAY_RE = re.compile(r'^(.+)\[(\d*)\]$')
_INT_RE = re.compile(r'^(u?)int(\d*)$')
_BYTES_RE = re.compile(r'^bytes(\d+)$')
_IDENT_RE = re.compile(r'^[A-Za-z_$][A-Za-z0-9_$]*$')


@dataclass(frozen=True)
class StructuredDomain:
    name: str
    version: str
    chain_id: int
    verifying_contract: str = ZERO_ADDRESS

    def __post_init__(self):
        if not isinstance(self.name, str) or not isinstance(self.version, str):
            raise SchemaMismatch("Domain name and version must be text")
        if isinstance(self.chain_id, bool) or not isinstance(self.chain_id, int) \
                or not (0 <= self.chain_id < 2**64):
            raise SchemaMismatch(f"Bad chain id for domain: {self.chain_id!r}")
        try:
            addr = to_checksum_address(parse_address(self.verifying_contract))
        except InvalidAddress as exc:
            raise SchemaMismatch(f"Bad verifyingContract: {exc}")

        # frozen, so sneak the cleaned-up value in
        object.__setattr__(self, 'verifying_contract', addr)

    def as_dict(self):
        # JSON/wallet form, with the field names EIP-712 uses
        return dict(name=self.name, version=self.version,
                    chainId=self.chain_id, verifyingContract=self.verifying_contract)

    @classmethod
    def from_dict(cls, d):
        try:
            return cls(name=d['name'], version=d['version'],
                        chain_id=int(d['chainId']),
                        verifying_contract=d.get('verifyingContract', ZERO_ADDRESS))
        except (KeyError, TypeError, ValueError) as exc:
            raise SchemaMismatch(f"Bad domain: {exc}")


def normalize_types(types) -> TypeSchema:
    # Accept JSON-ish schemas and make them into tuples of Field
    # - [{"name": .., "type": ..}, ...] as wallets use, or (name, type) pairs
    # - the domain type, if included, is dropped: our domain is fixed
    if not isinstance(types, dict) or not types:
        raise SchemaMismatch("Type schema must be a non-empty mapping")

    rv = {}
    for type_name, fields in types.items():
        if type_name == DOMAIN_TYPE:
            continue
        if not isinstance(type_name, str) or not _IDENT_RE.match(type_name):
            raise SchemaMismatch(f"Bad type name: {type_name!r}")

        here = []
        for f in fields:
            if isinstance(f, dict):
                try:
                    f = Field(f['name'], f['type'])
                except KeyError:
                    raise SchemaMismatch(f"Field in {type_name} needs name and type")
            else:
                try:
                    f = Field(*f)
                except TypeError:
                    raise SchemaMismatch(f"Bad field in {type_name}: {f!r}")

            if not isinstance(f.name, str) or not isinstance(f.type, str):
                raise SchemaMismatch(f"Bad field in {type_name}: {f!r}")
            if f.name in (x.name for x in here):
                raise SchemaMismatch(f"Duplicate field '{f.name}' in {type_name}")
            here.append(f)

        rv[type_name] = tuple(here)

    if not rv:
        raise SchemaMismatch("No message types given")

    return rv

def _base_type(typ):
    # strip any array suffixes: Foo[2][] => Foo
    while True:
        m = _ARRAY_RE.match(typ)
        if not m:
            return typ
        typ = m.group(1)

def primary_type_of(types):
    # the one type nobody else refers to (same rule as ethers.js and eth-account)
    used = set(_base_type(f.type) for t, fields in types.items() for f in fields
                    if _base_type(f.type) != t)
    candidates = [t for t in types if t not in used]

    if len(candidates) != 1:
        raise SchemaMismatch("Cannot pick primary type; candidates: %s"
                                    % (', '.join(candidates) or 'none'))
    return candidates[0]

def find_dependencies(primary, types, found=None):
    # all struct types reachable from primary, including itself
    found = set() if found is None else found
    primary = _base_type(primary)

    if primary in found or primary not in types:
        return found

    found.add(primary)
    for f in types[primary]:
        find_dependencies(f.type, types, found)

    return found

def encode_type(primary, types):
    # "Mail(Person from,Person to,string contents)Person(string name,address wallet)"
    if primary not in types:
        raise SchemaMismatch(f"Unknown type: {primary}")

    deps = find_dependencies(primary, types)
    deps.discard(primary)

    return ''.join('%s(%s)' % (t, ','.join(f'{f.type} {f.name}' for f in types[t]))
                        for t in [primary] + sorted(deps))

def _as_int(typ, value):
    # ints may arrive as int, or decimal/hex text (JSON can't do uint256)
    if isinstance(value, bool):
        raise SchemaMismatch(f"{typ} wants an integer, got bool")
    if isinstance(value, str):
        try:
            value = int(value, 0)
        except ValueError:
            raise SchemaMismatch(f"{typ} wants an integer, got {value!r}")
    if not isinstance(value, int):
        raise SchemaMismatch(f"{typ} wants an integer, got {type(value).__name__}")
    return value

def _as_bytes(typ, value):
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return hex_to_bytes(value)
        except ValueError:
            raise SchemaMismatch(f"{typ} wants hex, got {value!r}")
    raise SchemaMismatch(f"{typ} wants bytes, got {type(value).__name__}")

def check_value(typ, value, types):
    # Check one member against its type, and return it in plain python form
    # (ints as int, bytes as bytes, addresses checksummed).
    m = _ARRAY_RE.match(typ)
    if m:
        inner, size = m.group(1), m.group(2)
        if not isinstance(value, (list, tuple)):
            raise SchemaMismatch(f"{typ} wants a list")
        if size and len(value) != int(size):
            raise SchemaMismatch(f"{typ} wants {size} items, got {len(value)}")
        return [check_value(inner, v, types) for v in value]

    if typ in types:
        return check_data(typ, value, types)

    if typ == 'string':
        if not isinstance(value, str):
            raise SchemaMismatch(f"string wants text, got {type(value).__name__}")
        return value

    if typ == 'bytes':
        return _as_bytes(typ, value)

    if typ == 'bool':
        if not isinstance(value, bool):
            raise SchemaMismatch(f"bool wants True/False, got {value!r}")
        return value

    if typ == 'address':
        try:
            return to_checksum_address(parse_address(value))
        except InvalidAddress as exc:
            raise SchemaMismatch(str(exc))

    m = _BYTES_RE.match(typ)
    if m:
        size = int(m.group(1))
        if not (1 <= size <= 32):
            raise SchemaMismatch(f"Bad type: {typ}")
        raw = _as_bytes(typ, value)
        if len(raw) != size:
            raise SchemaMismatch(f"{typ} wants {size} bytes, got {len(raw)}")
        return raw

    m = _INT_RE.match(typ)
    if m:
        signed = not m.group(1)
        bits = int(m.group(2) or 256)
        if bits % 8 or not (8 <= bits <= 256):
            raise SchemaMismatch(f"Bad type: {typ}")

        num = _as_int(typ, value)
        lo, hi = (-(1 << (bits-1)), 1 << (bits-1)) if signed else (0, 1 << bits)
        if not (lo <= num < hi):
            raise SchemaMismatch(f"Value out of range for {typ}: {num}")
        return num

    raise SchemaMismatch(f"Unknown type: {typ}")

def check_data(primary, data, types):
    # every schema field present, nothing extra; returns the cleaned-up struct
    fields = types[primary]
    if not isinstance(data, dict):
        raise SchemaMismatch(f"{primary} wants a mapping")

    names = [f.name for f in fields]
    missing = [n for n in names if n not in data]
    extra = sorted(k for k in data if k not in names)
    if missing or extra:
        raise SchemaMismatch(f"{primary} fields disagree with schema: "
                                f"missing={missing} extra={extra}")

    return {f.name: check_value(f.type, data[f.name], types) for f in fields}

def check_message(types, message, primary_type=None):
    # Whole-message check, for use before anything is hashed or shown to a wallet.
    # Returns (schema, primary type, cleaned message)
    types = normalize_types(types)
    primary = primary_type or primary_type_of(types)
    if primary not in types:
        raise SchemaMismatch(f"Unknown primary type: {primary}")

    return types, primary, check_data(primary, message, types)

def full_message(domain, types, message, primary_type=None):
    # The typed-data document, as eth-account (and wallets) want it.
    # - only types reachable from primary are included, so there is no doubt which is primary
    types, primary, clean = check_message(types, message, primary_type)
    deps = find_dependencies(primary, types)

    rv = { DOMAIN_TYPE: [dict(name=n, type=t) for n, t in EIP712_DOMAIN_FIELDS] }
    rv.update((t, [dict(name=f.name, type=f.type) for f in fields])
                    for t, fields in types.items() if t in deps)

    return dict(types=rv, primaryType=primary, domain=domain.as_dict(), message=clean)

def encode_typed(domain, types, message, primary_type=None):
    # SignableMessage: version (0x01), header (domain separator), body (struct hash)
    # - raises SchemaMismatch before doing any hashing of the message
    td = full_message(domain, types, message, primary_type)

    try:
        return encode_typed_data(full_message=td)
    except (ValueError, TypeError, ValidationError) as exc:
        raise SchemaMismatch(f"Typed data refused: {exc}")

def typed_data_digest(domain, types, message, primary_type=None):
    # The 32 bytes that actually get signed.
    sm = encode_typed(domain, types, message, primary_type)

    return keccak256(EIP191_PREFIX + sm.version + sm.header + sm.body)

# EOF
