#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# digest.py
#
# What gets signed, for each of our two signature schemes.
#
# - StructuredData: EIP-712 typed data (see eip712.py)
# - AuthorizationDelegation: keccak256(rlp([chainId, delegator, nonce]))
#
# A "context" holds everything needed to (re)build the digest. Contexts are
# values: build once, never change. The scheme is implied by the context type.
#
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from . import rlp
from .constants import *
from .exceptions import SchemaMismatch, InvalidAddress
from .compat import keccak256
from .eip712 import StructuredDomain, normalize_types, primary_type_of, typed_data_digest
from .utils import parse_address, normalize_address


class SignatureScheme(Enum):
    STRUCTURED_DATA = 'eip712'
    AUTHORIZATION_DELEGATION = 'eip7702'

    @classmethod
    def parse(cls, value):
        # accept enum, value ('eip712') or name ('structured_data')
        if isinstance(value, cls):
            return value
        for s in cls:
            if value in (s.value, s.name, s.name.lower()):
                return s
        raise ValueError(f"Unknown signature scheme: {value!r}")


@dataclass(frozen=True)
class StructuredContext:
    domain: StructuredDomain
    types: Dict[str, Any]
    message: Dict[str, Any]
    primary_type: Optional[str] = None

    scheme = SignatureScheme.STRUCTURED_DATA

    def __post_init__(self):
        types = normalize_types(self.types)
        object.__setattr__(self, 'types', types)
        if self.primary_type is None:
            object.__setattr__(self, 'primary_type', primary_type_of(types))
        elif self.primary_type not in types:
            raise SchemaMismatch(f"Unknown primary type: {self.primary_type}")

    def types_json(self):
        # schema as wallets want it: lists of {name, type}
        return {t: [dict(name=f.name, type=f.type) for f in fields]
                    for t, fields in self.types.items()}

    def as_dict(self):
        return dict(scheme=self.scheme.value, domain=self.domain.as_dict(),
                    types=self.types_json(), primaryType=self.primary_type,
                    message=self.message)


@dataclass(frozen=True)
class AuthorizationContext:
    chain_id: int
    delegator: str
    nonce: int

    scheme = SignatureScheme.AUTHORIZATION_DELEGATION

    def __post_init__(self):
        for fn in ('chain_id', 'nonce'):
            v = getattr(self, fn)
            if isinstance(v, bool) or not isinstance(v, int) or not (0 <= v < 2**64):
                raise SchemaMismatch(f"{fn} must be an unsigned 64-bit integer, got {v!r}")

        object.__setattr__(self, 'delegator', normalize_address(self.delegator))

    def as_dict(self):
        return dict(scheme=self.scheme.value, chainId=self.chain_id,
                    delegator=self.delegator, nonce=self.nonce)

# either kind
MessageContext = Union[StructuredContext, AuthorizationContext]


@dataclass(frozen=True)
class SigningInput:
    # result of the digest builder
    scheme: SignatureScheme
    digest: bytes
    context: Any = field(repr=False)


def authorization_rlp(chain_id, delegator, nonce):
    # [chainId, delegator(20 bytes), nonce], ints minimal big-endian
    return rlp.encode([chain_id, parse_address(delegator), nonce])

def authorization_digest(chain_id, delegator, nonce):
    return keccak256(authorization_rlp(chain_id, delegator, nonce))

def build_digest(ctx) -> SigningInput:
    # produce the 32 bytes the wallet must sign, for either scheme
    if isinstance(ctx, StructuredContext):
        md = typed_data_digest(ctx.domain, ctx.types, ctx.message, ctx.primary_type)
    elif isinstance(ctx, AuthorizationContext):
        md = authorization_digest(ctx.chain_id, ctx.delegator, ctx.nonce)
    else:
        raise TypeError(f"Not a message context: {type(ctx).__name__}")

    assert len(md) == DIGEST_SIZE
    return SigningInput(scheme=ctx.scheme, digest=md, context=ctx)

def context_from_dict(d, scheme=None):
    # Build a context from JSON-like input (CLI, files, web forms).
    # - scheme comes from argument, or the 'scheme' key, or is guessed from keys
    # - anything wrong is a SchemaMismatch
    if not isinstance(d, dict):
        raise SchemaMismatch("Message context must be a mapping")

    if scheme is None:
        if 'scheme' in d:
            scheme = d['scheme']
        else:
            scheme = 'eip712' if 'domain' in d else 'eip7702'
    try:
        scheme = SignatureScheme.parse(scheme)
    except ValueError as exc:
        raise SchemaMismatch(str(exc))

    try:
        if scheme is SignatureScheme.STRUCTURED_DATA:
            return StructuredContext(domain=StructuredDomain.from_dict(d['domain']),
                                    types=d['types'], message=d['message'],
                                    primary_type=d.get('primaryType'))
        else:
            return AuthorizationContext(chain_id=int(d['chainId']),
                                        delegator=d['delegator'], nonce=int(d['nonce']))
    except KeyError as exc:
        raise SchemaMismatch(f"Missing field: {exc.args[0]}")
    except (InvalidAddress, TypeError, ValueError) as exc:
        raise SchemaMismatch(str(exc))

def demo_message_context(content, chain_id, timestamp=None):
    # The "Message(string content,uint256 timestamp)" used by the demo screens.
    if timestamp is None:
        timestamp = int(time.time())

    domain = StructuredDomain(name=DEMO_DOMAIN_NAME, version=DEMO_DOMAIN_VERSION,
                                chain_id=chain_id, verifying_contract=ZERO_ADDRESS)

    return StructuredContext(domain=domain, types=DEMO_MESSAGE_TYPES,
                                message=dict(content=content, timestamp=timestamp))

# EOF
