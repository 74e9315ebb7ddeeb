#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Payment request payloads.
#
import json, time, pytest

from walletsig import payment
from walletsig.exceptions import InvalidAmount, InvalidAddress, MalformedPayload, PaymentExpired
from conftest import TEST_ADDR

NOW = 1700000000
TESTNET_USDT = '0x337610d27c682E347C9cD60BD4b3b107C9d34dDd'

@pytest.fixture
def pp():
    return payment.build(TEST_ADDR.lower(), '10.00', 97, memo='Coffee',
                            merchant_name='Corner Cafe', order_id='A-17', now=NOW)

def test_build(pp):
    p, m = pp.payment, pp.metadata

    assert pp.chain_id == 97
    assert p.chain_id == 97
    assert p.recipient == TEST_ADDR
    assert p.amount == '10.00'
    assert p.token_address == TESTNET_USDT
    assert 0 <= p.nonce < 2**32
    assert p.deadline == NOW + 1800
    assert p.memo == 'Coffee'
    assert p.order_id == 'A-17'
    assert p.merchant_id is None

    assert m.created_at == NOW
    assert m.expires_at == p.deadline
    assert m.merchant_name == 'Corner Cafe'
    assert m.description == 'Coffee'
    assert pp.ttl == 1800

def test_build_options():
    pp = payment.build(TEST_ADDR, ' 5 ', 56, ttl=60, memo='  ', now=NOW)
    assert pp.payment.amount == '5'
    assert pp.payment.token_address == '0x55d398326f99059fF775485246999027B3197955'
    assert pp.payment.memo is None
    assert pp.metadata.description is None
    assert pp.ttl == 60

    # any chain, if you say which token
    pp = payment.build(TEST_ADDR, '1.5', 1, token_address=TEST_ADDR.lower(), now=NOW,
                        description='other words', memo='memo')
    assert pp.payment.token_address == TEST_ADDR
    assert pp.metadata.description == 'other words'

    # default is now
    pp = payment.build(TEST_ADDR, '1', 97)
    assert abs(pp.metadata.created_at - int(time.time())) < 5

    # nonces differ
    assert len(set(payment.build(TEST_ADDR, '1', 97).payment.nonce for i in range(10))) > 1

@pytest.mark.parametrize('amount', [
    '0', '0.00', '-1', '1e5', 'abc', '', ' ', '1.', '.5', '1,000', '0x10', 10, 1.5, None,
])
def test_bad_amount(amount):
    with pytest.raises(InvalidAmount):
        payment.build(TEST_ADDR, amount, 97, now=NOW)

def test_bad_build():
    with pytest.raises(InvalidAddress):
        payment.build('0x1234', '1', 97)
    with pytest.raises(InvalidAddress):
        payment.build(None, '1', 97)
    with pytest.raises(InvalidAddress):
        # wrong checksum
        payment.build(TEST_ADDR.replace('f39F', 'f39f'), '1', 97)
    with pytest.raises(InvalidAddress):
        # no USDT we know of on chain 1
        payment.build(TEST_ADDR, '1', 1)
    with pytest.raises(InvalidAddress):
        payment.build(TEST_ADDR, '1', 97, token_address='0xnope')

    for ttl in [ 0, -5, 1.5, True, '60' ]:
        with pytest.raises(ValueError):
            payment.build(TEST_ADDR, '1', 97, ttl=ttl)

    # chain id must be a real int, else parse() would refuse what we made
    for chain_id in [ '97', True, 0, -97, 97.0, None ]:
        with pytest.raises(ValueError):
            payment.build(TEST_ADDR, '1', chain_id, token_address=TESTNET_USDT)

def test_serialize(pp):
    txt = payment.serialize(pp)

    # compact, keys in fixed order
    assert ' ' not in txt.replace('Corner Cafe', '')
    assert txt.startswith('{"type":"tether_payment","version":"1.0","chainId":97,"payment":{')

    d = json.loads(txt)
    assert list(d) == ['type', 'version', 'chainId', 'payment', 'metadata']
    assert list(d['payment']) == ['recipient', 'amount', 'chainId', 'tokenAddress',
                                    'nonce', 'deadline', 'memo', 'orderId']
    assert list(d['metadata']) == ['createdAt', 'expiresAt', 'merchantName', 'description']
    assert d['payment']['amount'] == '10.00'
    assert d['metadata']['expiresAt'] == d['payment']['deadline']

    assert payment.parse(txt) == pp
    assert payment.parse(txt.encode('utf-8')) == pp

    # unicode is kept as-is
    pp2 = payment.build(TEST_ADDR, '3', 97, memo='Café ☕', now=NOW)
    txt = payment.serialize(pp2)
    assert 'Café ☕' in txt
    assert payment.parse(txt) == pp2

def test_expiry(pp):
    deadline = pp.payment.deadline

    assert not payment.is_expired(pp, now=NOW)
    assert not payment.is_expired(pp, now=deadline - 1)
    assert payment.is_expired(pp, now=deadline)
    assert payment.is_expired(pp)           # it's not 2023 anymore

    assert payment.check_payment(pp, now=deadline - 1) is pp
    with pytest.raises(PaymentExpired):
        payment.check_payment(pp, now=deadline)
    with pytest.raises(PaymentExpired):
        payment.check_payment(pp)

    fresh = payment.build(TEST_ADDR, '1', 97)
    assert payment.check_payment(fresh) is fresh

def _mangle(pp, fn):
    d = pp.as_dict()
    fn(d)
    return json.dumps(d)

@pytest.mark.parametrize('change', [
    lambda d: d.update(type='bitcoin_payment'),
    lambda d: d.update(version='2.0'),
    lambda d: d.update(chainId='97'),
    lambda d: d.update(chainId=56),
    lambda d: [ d.update(chainId=0), d['payment'].update(chainId=0) ],
    lambda d: [ d.update(chainId=-97), d['payment'].update(chainId=-97) ],
    lambda d: d.update(extra=1),
    lambda d: d.pop('metadata'),
    lambda d: d.update(payment=[]),
    lambda d: d['payment'].pop('recipient'),
    lambda d: d['payment'].update(recipient='0x1234'),
    lambda d: d['payment'].update(amount='-3'),
    lambda d: d['payment'].update(amount=10),
    lambda d: d['payment'].update(amount=' 10.00'),
    lambda d: d['payment'].update(amount='10.00\n'),
    lambda d: d['payment'].update(nonce=True),
    lambda d: d['payment'].update(nonce=2**32),
    lambda d: d['payment'].update(nonce=-1),
    lambda d: d['payment'].update(deadline=1.5),
    lambda d: d['payment'].update(memo=5),
    lambda d: d['payment'].update(tip='1'),
    lambda d: d['metadata'].update(expiresAt=d['metadata']['expiresAt'] + 1),
    lambda d: d['metadata'].update(createdAt=d['metadata']['expiresAt']),
    lambda d: d['metadata'].update(description=None),
    lambda d: d['metadata'].update(url='http://example.com'),
])
def test_parse_fails(pp, change):
    with pytest.raises(MalformedPayload):
        payment.parse(_mangle(pp, change))

@pytest.mark.parametrize('junk', [ '', 'hello', '[1,2]', '"text"', b'\xff\xfe', '{}' ])
def test_parse_junk(junk):
    with pytest.raises(MalformedPayload):
        payment.parse(junk)

# EOF
