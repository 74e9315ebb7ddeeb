#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# signature.py
#
# Parse, normalize and serialize secp256k1 signatures as wallets make them,
# and recover the signing address.
#
# Wallets give us one of:
#   - 65 bytes: r[32] s[32] v[1] with v in {27, 28} (usual) or {0, 1}
#   - 64 bytes: EIP-2098 compact form, r[32] yParityAndS[32]
# either as bytes or "0x" hex. We always normalize to r, s, rec_id (0 or 1).
#
from dataclasses import dataclass
from eth_utils import to_checksum_address

from .constants import *
from .exceptions import MalformedSignature, InvalidSignature
from .compat import CT_sig_to_pubkey, pubkey_to_address_bytes
from .utils import to_hex


@dataclass(frozen=True)
class SignatureBytes:
    r: bytes
    s: bytes
    rec_id: int

    def __post_init__(self):
        assert len(self.r) == 32 and len(self.s) == 32
        assert self.rec_id in { 0, 1 }

    @property
    def v(self):
        return V_OFFSET + self.rec_id

    @property
    def s_int(self):
        return int.from_bytes(self.s, 'big')

    @property
    def is_low_s(self):
        return self.s_int <= SECP256K1_HALF_N

    def to_bytes(self):
        # 65 bytes, v as wallets send it
        return self.r + self.s + bytes([self.v])

    def recoverable(self):
        # 65 bytes, rec_id at end: what libsecp256k1 wants
        return self.r + self.s + bytes([self.rec_id])

    @property
    def compact(self):
        # EIP-2098: parity bit lives in the top bit of s
        ys = bytearray(self.s)
        if self.rec_id:
            ys[0] |= 0x80
        return self.r + bytes(ys)

    def info(self):
        # details for display, using the same names as the web app
        return dict(signature=serialize(self), r=to_hex(self.r), s=to_hex(self.s),
                    v=self.v, recoveryId=self.rec_id, compact=to_hex(self.compact))

    def __str__(self):
        return serialize(self)


def _scalar_ok(raw):
    return 0 < int.from_bytes(raw, 'big') < SECP256K1_N

def normalize(raw):
    # Take what a wallet gave us and make a SignatureBytes, or raise MalformedSignature
    if isinstance(raw, SignatureBytes):
        return raw

    if isinstance(raw, str):
        txt = raw.strip()
        body = txt[2:] if txt[0:2] in ('0x', '0X') else txt
        try:
            raw = bytes.fromhex(body)
        except ValueError:
            raise MalformedSignature("Signature is not hex")
        if len(body) % 2:
            raise MalformedSignature("Signature is not hex")

    if not isinstance(raw, (bytes, bytearray)):
        raise MalformedSignature(f"Signature must be bytes, got {type(raw).__name__}")

    raw = bytes(raw)

    if len(raw) == SIG_SIZE:
        r, s, v = raw[0:32], raw[32:64], raw[64]
        if v in { V_OFFSET, V_OFFSET+1 }:
            rec_id = v - V_OFFSET
        elif v in { 0, 1 }:
            rec_id = v
        else:
            raise MalformedSignature(f"Unexpected recovery value: {v}")

    elif len(raw) == COMPACT_SIG_SIZE:
        r, ys = raw[0:32], bytearray(raw[32:64])
        rec_id = ys[0] >> 7
        ys[0] &= 0x7f
        s = bytes(ys)

    else:
        raise MalformedSignature(f"Signature must be 64 or 65 bytes, got {len(raw)}")

    if not _scalar_ok(r):
        raise MalformedSignature("Signature r value out of range")
    if not _scalar_ok(s):
        raise MalformedSignature("Signature s value out of range")

    return SignatureBytes(r=r, s=s, rec_id=rec_id)

def serialize(sig):
    # "0x" + 130 hex digits
    return to_hex(sig.to_bytes())

def parse(text):
    # strict inverse of serialize()
    if not isinstance(text, str):
        raise MalformedSignature("Signature must be text")
    if not text.startswith('0x'):
        raise MalformedSignature("Signature must start with 0x")
    if len(text) != 2 + (2 * SIG_SIZE):
        raise MalformedSignature(f"Signature must be {SIG_SIZE} bytes ({2*SIG_SIZE} hex digits)")

    try:
        raw = bytes.fromhex(text[2:])
    except ValueError:
        raise MalformedSignature("Signature is not hex")

    return normalize(raw)

def recover_address_bytes(digest, sig):
    # 20-byte address of whoever signed digest, or raise InvalidSignature
    if len(digest) != DIGEST_SIZE:
        raise ValueError("Digest must be exactly 32 bytes")

    if not sig.is_low_s:
        # EIP-2: s must be in lower half, else two valid sigs per message
        raise InvalidSignature("Signature s value is not canonical (high-s)")

    try:
        pubkey = CT_sig_to_pubkey(digest, sig.recoverable())
    except ValueError as exc:
        # no curve point for this r, or recovers to infinity
        raise InvalidSignature(f"Cannot recover public key: {exc}")

    return pubkey_to_address_bytes(pubkey)

def recover_address(digest, sig):
    # same, as checksummed text
    return to_checksum_address(recover_address_bytes(digest, sig))

# EOF
