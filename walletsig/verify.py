#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# verify.py
#
# Check a signature against a message context, for either scheme.
#
# - rebuilds the digest from what the caller gives us, every time
# - never raises for bad input: "invalid" is a normal answer here
# - comparing against an expected signer is a separate step: check_signer()
#
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .digest import SignatureScheme, build_digest, context_from_dict
from .exceptions import SchemaMismatch, MalformedSignature, InvalidSignature, InvalidAddress
from .signature import parse, normalize, recover_address, SignatureBytes
from .utils import normalize_address


class VerifyReason(Enum):
    MALFORMED_SIGNATURE = 'malformed_signature'
    SCHEMA_MISMATCH = 'schema_mismatch'
    RECOVERY_FAILURE = 'recovery_failure'
    SIGNER_MISMATCH = 'signer_mismatch'

# for humans, one per reason
REASON_MESSAGES = {
    VerifyReason.MALFORMED_SIGNATURE: 'The signature is not in a recognised format.',
    VerifyReason.SCHEMA_MISMATCH: 'The message does not match its type definitions.',
    VerifyReason.RECOVERY_FAILURE: 'The signature is invalid for this message.',
    VerifyReason.SIGNER_MISMATCH: 'The signature was made by a different account.',
}


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    scheme: Optional[SignatureScheme]
    recovered_address: Optional[str] = None
    reason: Optional[VerifyReason] = None
    detail: Optional[str] = None
    signature_info: Optional[dict] = None

    @property
    def message(self):
        if self.valid:
            return 'Signature is valid.'
        return REASON_MESSAGES[self.reason]

    def as_dict(self):
        rv = dict(isValid=self.valid, recoveredAddress=self.recovered_address or '',
                    signatureType=self.scheme.value if self.scheme else '')
        if not self.valid:
            rv['message'] = self.message
        if self.signature_info:
            rv['signatureInfo'] = self.signature_info
        return rv


def _fail(scheme, reason, exc, **kws):
    return VerificationResult(valid=False, scheme=scheme, reason=reason,
                                    detail=str(exc), **kws)

def verify(scheme, context, signature):
    # Recover signer of `signature` over the digest of `context`
    # - context: StructuredContext / AuthorizationContext, or a dict of same
    # - signature: "0x" + 130 hex, or SignatureBytes
    # - never raises for bad input, even an unknown scheme
    try:
        scheme = SignatureScheme.parse(scheme)
    except ValueError as exc:
        return _fail(getattr(context, 'scheme', None), VerifyReason.SCHEMA_MISMATCH, exc)

    try:
        if isinstance(context, dict):
            context = context_from_dict(context, scheme=scheme)
        if getattr(context, 'scheme', None) is not scheme:
            raise SchemaMismatch(f"Context is not for {scheme.value} signatures")
        md = build_digest(context).digest
    except (SchemaMismatch, InvalidAddress) as exc:
        return _fail(scheme, VerifyReason.SCHEMA_MISMATCH, exc)

    try:
        if isinstance(signature, SignatureBytes):
            sig = normalize(signature)
        else:
            sig = parse(signature)
    except MalformedSignature as exc:
        return _fail(scheme, VerifyReason.MALFORMED_SIGNATURE, exc)

    try:
        addr = recover_address(md, sig)
    except InvalidSignature as exc:
        return _fail(scheme, VerifyReason.RECOVERY_FAILURE, exc, signature_info=sig.info())

    return VerificationResult(valid=True, scheme=scheme, recovered_address=addr,
                                signature_info=sig.info())

def check_signer(result, expected):
    # Layer an "is it who we think?" check on top of a verify() result
    if not result.valid:
        return result

    try:
        want = normalize_address(expected)
    except InvalidAddress as exc:
        return replace(result, valid=False, reason=VerifyReason.SIGNER_MISMATCH,
                            detail=str(exc))

    if want != result.recovered_address:
        return replace(result, valid=False, reason=VerifyReason.SIGNER_MISMATCH,
                            detail=f"expected {want}, got {result.recovered_address}")

    return result

# EOF
