#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Digest builder: both schemes.
#
import time, pytest

from walletsig.digest import *
from walletsig.exceptions import SchemaMismatch, InvalidAddress
from conftest import TEST_ADDR

@pytest.mark.parametrize('chain_id, delegator, nonce, rlp_hex, digest_hex', [
    (97, '0x0000000000000000000000000000000000000001', 0,
        'd76194000000000000000000000000000000000000000180',
        'd27f372e07e83580a2828a7c422835e5c6ab7584799328938a3b4cf3759078d7'),
    (56, TEST_ADDR, 7,
        'd73894f39fd6e51aad88f6f4ce6ab8827279cfffb9226607',
        'b25a0d6769351bbeced3821b40e73f6c56d527735b01b6e6b7012a14103313e1'),
    (1, TEST_ADDR, 1024,
        'd90194f39fd6e51aad88f6f4ce6ab8827279cfffb92266820400',
        'e55b88641c0744c016fa541c81d5992b1b8f654d4fe7948e41d69ba6940f10a2'),
])
def test_authorization(chain_id, delegator, nonce, rlp_hex, digest_hex):
    assert authorization_rlp(chain_id, delegator, nonce).hex() == rlp_hex
    assert authorization_digest(chain_id, delegator, nonce).hex() == digest_hex

    ctx = AuthorizationContext(chain_id=chain_id, delegator=delegator.lower(), nonce=nonce)
    assert ctx.delegator == delegator
    assert ctx.scheme is SignatureScheme.AUTHORIZATION_DELEGATION

    si = build_digest(ctx)
    assert si.scheme is ctx.scheme
    assert si.digest.hex() == digest_hex
    assert si.context is ctx

def test_authorization_fails():
    for bad in [ -1, 2**64, True, 1.0, '1' ]:
        with pytest.raises(SchemaMismatch):
            AuthorizationContext(chain_id=1, delegator=TEST_ADDR, nonce=bad)
        with pytest.raises(SchemaMismatch):
            AuthorizationContext(chain_id=bad, delegator=TEST_ADDR, nonce=0)

    # biggest nonce is fine
    AuthorizationContext(chain_id=1, delegator=TEST_ADDR, nonce=2**64-1)

    with pytest.raises(InvalidAddress):
        AuthorizationContext(chain_id=1, delegator='0x' + '00'*19, nonce=0)
    with pytest.raises(InvalidAddress):
        AuthorizationContext(chain_id=1, delegator=TEST_ADDR.replace('f39F', 'F39f'), nonce=0)

def test_structured(mail_typed_data):
    ctx = context_from_dict(mail_typed_data)
    assert isinstance(ctx, StructuredContext)
    assert ctx.primary_type == 'Mail'
    assert 'EIP712Domain' not in ctx.types

    si = build_digest(ctx)
    assert si.scheme is SignatureScheme.STRUCTURED_DATA
    assert si.digest.hex() == 'be609aee343fb3c4b28e1df9e632fca64fcfaede20f02e86244efddf30957bd2'

    # JSON form goes around
    d = ctx.as_dict()
    assert d['scheme'] == 'eip712'
    assert d['types']['Person'] == [dict(name='name', type='string'),
                                    dict(name='wallet', type='address')]
    assert build_digest(context_from_dict(d)).digest == si.digest

    with pytest.raises(SchemaMismatch):
        StructuredContext(domain=ctx.domain, types=ctx.types, message=ctx.message,
                            primary_type='Letter')

def test_from_dict():
    auth = dict(chainId=97, delegator=TEST_ADDR, nonce=3)
    ctx = context_from_dict(auth)
    assert isinstance(ctx, AuthorizationContext)
    assert ctx.nonce == 3
    assert context_from_dict(dict(auth, scheme='eip7702')) == ctx
    assert context_from_dict(auth, scheme=SignatureScheme.AUTHORIZATION_DELEGATION) == ctx
    assert context_from_dict(ctx.as_dict()) == ctx

    for bad in [
        dict(chainId=97, delegator=TEST_ADDR),
        dict(chainId=97, delegator='0x1234', nonce=0),
        dict(chainId='x', delegator=TEST_ADDR, nonce=0),
        dict(auth, scheme='eip191'),
        dict(domain=dict(name='x', version='1', chainId=1)),
        'not a dict',
    ]:
        with pytest.raises(SchemaMismatch):
            context_from_dict(bad)

    # asked for typed data, but got an authorization
    with pytest.raises(SchemaMismatch):
        context_from_dict(auth, scheme='eip712')

def test_scheme_parse():
    assert SignatureScheme.parse('eip712') is SignatureScheme.STRUCTURED_DATA
    assert SignatureScheme.parse('STRUCTURED_DATA') is SignatureScheme.STRUCTURED_DATA
    assert SignatureScheme.parse('authorization_delegation') \
                is SignatureScheme.AUTHORIZATION_DELEGATION
    assert SignatureScheme.parse(SignatureScheme.AUTHORIZATION_DELEGATION) \
                is SignatureScheme.AUTHORIZATION_DELEGATION
    with pytest.raises(ValueError):
        SignatureScheme.parse('eip191')

def test_demo_context():
    ctx = demo_message_context('hello', 1, timestamp=1700000000)
    assert ctx.primary_type == 'Message'
    assert ctx.domain.name == 'Wallet Signature Test'
    assert build_digest(ctx).digest.hex() == \
        '61d3c95333b3353cf0ec9c1d25c70b820cb31d3af2c7b89042bda5eee5c03720'

    now = int(time.time())
    ctx = demo_message_context('hello', 97)
    assert now - 5 <= ctx.message['timestamp'] <= now + 5
    assert ctx.domain.chain_id == 97

    with pytest.raises(TypeError):
        build_digest(dict(chainId=1))

# EOF
