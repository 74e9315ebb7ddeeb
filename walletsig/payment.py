#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# payment.py
#
# Tether (USDT) payment requests, for merchants to show as a QR code.
#
# Wire format is JSON, no whitespace, keys in this order:
#
#   {"type":"tether_payment","version":"1.0","chainId":97,
#    "payment":{"recipient":..,"amount":"10.00","chainId":97,"tokenAddress":..,
#               "nonce":..,"deadline":..,"memo"?,"merchantId"?,"orderId"?},
#    "metadata":{"createdAt":..,"expiresAt":..,"merchantName"?,"description"?}}
#
# - optional keys are left out when not set
# - metadata.expiresAt is always payment.deadline
# - a payload past its deadline is dead: check at scan time AND at settlement
#
import json, re, time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from .constants import *
from .exceptions import InvalidAmount, InvalidAddress, MalformedPayload, PaymentExpired
from .utils import normalize_address, pick_payment_nonce, usdt_address

_AMOUNT_RE = re.compile(r'^[0-9]+(\.[0-9]+)?$')


@dataclass(frozen=True)
class PaymentRequest:
    recipient: str
    amount: str
    chain_id: int
    token_address: str
    nonce: int
    deadline: int
    memo: Optional[str] = None
    merchant_id: Optional[str] = None
    order_id: Optional[str] = None

@dataclass(frozen=True)
class PaymentMetadata:
    created_at: int
    expires_at: int
    merchant_name: Optional[str] = None
    description: Optional[str] = None

@dataclass(frozen=True)
class PaymentPayload:
    chain_id: int
    payment: PaymentRequest
    metadata: PaymentMetadata

    type = PAYMENT_TYPE
    version = PAYMENT_VERSION

    def as_dict(self):
        p, m = self.payment, self.metadata
        pay = dict(recipient=p.recipient, amount=p.amount, chainId=p.chain_id,
                    tokenAddress=p.token_address, nonce=p.nonce, deadline=p.deadline)
        _add_optional(pay, memo=p.memo, merchantId=p.merchant_id, orderId=p.order_id)

        meta = dict(createdAt=m.created_at, expiresAt=m.expires_at)
        _add_optional(meta, merchantName=m.merchant_name, description=m.description)

        return dict(type=self.type, version=self.version, chainId=self.chain_id,
                    payment=pay, metadata=meta)

    @property
    def ttl(self):
        return self.metadata.expires_at - self.metadata.created_at

def _add_optional(d, **kws):
    for k, v in kws.items():
        if v is not None:
            d[k] = v

def _clean_text(s):
    # strip, and blank means not given
    if s is None:
        return None
    s = str(s).strip()
    return s or None

def _chain_ok(chain_id):
    return isinstance(chain_id, int) and not isinstance(chain_id, bool) and chain_id > 0

def check_amount(amount):
    # positive decimal, as text: "10", "10.00"
    if not isinstance(amount, str):
        raise InvalidAmount(f"Amount must be decimal text, got {type(amount).__name__}")
    amount = amount.strip()
    if not _AMOUNT_RE.match(amount):
        raise InvalidAmount(f"Not a decimal amount: {amount!r}")
    try:
        if Decimal(amount) <= 0:
            raise InvalidAmount("Amount must be more than zero")
    except InvalidOperation:
        raise InvalidAmount(f"Not a decimal amount: {amount!r}")
    return amount

def build(recipient, amount, chain_id, token_address=None, ttl=DEFAULT_PAYMENT_TTL,
            memo=None, merchant_id=None, order_id=None,
            merchant_name=None, description=None, now=None):
    # Make a new payment request, good for `ttl` seconds from now
    # - raises InvalidAmount / InvalidAddress on bad input
    amount = check_amount(amount)
    recipient = normalize_address(recipient.strip() if isinstance(recipient, str) else recipient)

    if not _chain_ok(chain_id):
        raise ValueError(f"chain_id must be a positive integer, got {chain_id!r}")

    if token_address is None:
        token_address = usdt_address(chain_id)
        if token_address is None:
            raise InvalidAddress(f"No USDT contract known for chain {chain_id}; "
                                    "provide the token address")
    token_address = normalize_address(token_address)

    if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0:
        raise ValueError(f"ttl must be a positive number of seconds, got {ttl!r}")

    now = int(time.time()) if now is None else int(now)
    deadline = now + ttl

    memo = _clean_text(memo)
    if description is None:
        # same text does for both
        description = memo

    req = PaymentRequest(recipient=recipient, amount=amount, chain_id=chain_id,
                            token_address=token_address, nonce=pick_payment_nonce(),
                            deadline=deadline, memo=memo,
                            merchant_id=_clean_text(merchant_id),
                            order_id=_clean_text(order_id))

    meta = PaymentMetadata(created_at=now, expires_at=deadline,
                            merchant_name=_clean_text(merchant_name),
                            description=_clean_text(description))

    return PaymentPayload(chain_id=chain_id, payment=req, metadata=meta)

def serialize(payload):
    # text for the QR code
    return json.dumps(payload.as_dict(), separators=(',', ':'), ensure_ascii=False)

def _take(d, key, typ, where, required=True):
    # pull one field out of parsed JSON, with strict type check
    if key not in d:
        if required:
            raise MalformedPayload(f"Missing field: {where}.{key}")
        return None

    v = d[key]
    if typ is int:
        ok = isinstance(v, int) and not isinstance(v, bool)
    else:
        ok = isinstance(v, typ)
    if not ok:
        raise MalformedPayload(f"Wrong type for {where}.{key}: {type(v).__name__}")

    return v

def _no_extras(d, allowed, where):
    extra = sorted(set(d) - set(allowed))
    if extra:
        raise MalformedPayload(f"Unknown fields in {where}: {', '.join(extra)}")

def parse(text):
    # inverse of serialize(); raises MalformedPayload for anything off
    if isinstance(text, (bytes, bytearray)):
        try:
            text = text.decode('utf-8')
        except UnicodeDecodeError:
            raise MalformedPayload("Payload is not UTF-8")

    try:
        top = json.loads(text)
    except (TypeError, ValueError):
        raise MalformedPayload("Payload is not JSON")

    if not isinstance(top, dict):
        raise MalformedPayload("Payload must be a JSON object")

    if _take(top, 'type', str, 'payload') != PAYMENT_TYPE:
        raise MalformedPayload(f"Unknown payload type: {top['type']!r}")
    if _take(top, 'version', str, 'payload') != PAYMENT_VERSION:
        raise MalformedPayload(f"Unsupported payload version: {top['version']!r}")

    _no_extras(top, ['type', 'version', 'chainId', 'payment', 'metadata'], 'payload')
    chain_id = _take(top, 'chainId', int, 'payload')
    pay = _take(top, 'payment', dict, 'payload')
    meta = _take(top, 'metadata', dict, 'payload')

    _no_extras(pay, ['recipient', 'amount', 'chainId', 'tokenAddress', 'nonce', 'deadline',
                        'memo', 'merchantId', 'orderId'], 'payment')
    _no_extras(meta, ['createdAt', 'expiresAt', 'merchantName', 'description'], 'metadata')

    amount = _take(pay, 'amount', str, 'payment')
    if amount != amount.strip():
        # must come back out exactly as it went in
        raise MalformedPayload(f"Amount has extra whitespace: {amount!r}")

    try:
        req = PaymentRequest(
                recipient=normalize_address(_take(pay, 'recipient', str, 'payment')),
                amount=check_amount(amount),
                chain_id=_take(pay, 'chainId', int, 'payment'),
                token_address=normalize_address(_take(pay, 'tokenAddress', str, 'payment')),
                nonce=_take(pay, 'nonce', int, 'payment'),
                deadline=_take(pay, 'deadline', int, 'payment'),
                memo=_take(pay, 'memo', str, 'payment', required=False),
                merchant_id=_take(pay, 'merchantId', str, 'payment', required=False),
                order_id=_take(pay, 'orderId', str, 'payment', required=False))
    except (InvalidAddress, InvalidAmount) as exc:
        raise MalformedPayload(str(exc))

    md = PaymentMetadata(
                created_at=_take(meta, 'createdAt', int, 'metadata'),
                expires_at=_take(meta, 'expiresAt', int, 'metadata'),
                merchant_name=_take(meta, 'merchantName', str, 'metadata', required=False),
                description=_take(meta, 'description', str, 'metadata', required=False))

    if not _chain_ok(chain_id):
        raise MalformedPayload(f"Bad chain id: {chain_id}")
    if req.chain_id != chain_id:
        raise MalformedPayload("Chain id of payment does not match payload")
    if md.expires_at != req.deadline:
        raise MalformedPayload("Expiry does not match payment deadline")
    if md.created_at >= md.expires_at:
        raise MalformedPayload("Payload expires before it was created")
    if not (0 <= req.nonce < 2**32):
        raise MalformedPayload("Nonce out of range")

    return PaymentPayload(chain_id=chain_id, payment=req, metadata=md)

def is_expired(payload, now=None):
    now = int(time.time()) if now is None else now
    return now >= payload.metadata.expires_at

def check_payment(payload, now=None):
    # Call when scanned, and again right before settling: time passes in between.
    if is_expired(payload, now):
        raise PaymentExpired("Payment request expired at %d" % payload.metadata.expires_at)
    return payload

# EOF
