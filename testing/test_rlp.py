#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# RLP encode/decode, using the well-known examples.
#
import pytest

from walletsig import rlp

LOREM = 'Lorem ipsum dolor sit amet, consectetur adipisicing elit'

@pytest.mark.parametrize('item, expect', [
    ('dog', '83646f67'),
    (['cat', 'dog'], 'c88363617483646f67'),
    ('', '80'),
    (b'', '80'),
    ([], 'c0'),
    (0, '80'),
    (b'\x00', '00'),
    (15, '0f'),
    (b'\x7f', '7f'),
    (b'\x80', '8180'),
    (1024, '820400'),
    ([[], [[]], [[], [[]]]], 'c7c0c1c0c3c0c1c0'),
    (LOREM, 'b838' + LOREM.encode('ascii').hex()),
])
def test_vectors(item, expect):
    assert rlp.encode(item).hex() == expect

def test_decode():
    assert rlp.decode(bytes.fromhex('c88363617483646f67')) == [b'cat', b'dog']
    assert rlp.decode(bytes.fromhex('c7c0c1c0c3c0c1c0')) == [[], [[]], [[], [[]]]]
    assert rlp.decode(bytes.fromhex('80')) == b''
    assert rlp.decode(bytes.fromhex('0f')) == b'\x0f'

    raw = rlp.encode(LOREM)
    assert rlp.decode(raw) == LOREM.encode('ascii')

    # long list
    items = [b'x' * 20] * 10
    assert rlp.decode(rlp.encode(items)) == items

    # authorization tuple, ints come back as bytes
    chain_id, addr, nonce = rlp.decode(bytes.fromhex(
                                'd90194f39fd6e51aad88f6f4ce6ab8827279cfffb92266820400'))
    assert rlp.decode_int(chain_id) == 1
    assert addr.hex() == 'f39fd6e51aad88f6f4ce6ab8827279cfffb92266'
    assert rlp.decode_int(nonce) == 1024
    assert rlp.decode_int(b'') == 0

@pytest.mark.parametrize('bad', [
    '',                 # nothing
    '8100',             # single low byte, should be bare
    '817f',
    'b80568656c6c6f',   # long form for short string
    'b9003800',         # length w/ leading zero
    '83646f',           # truncated
    'c383646f',         # truncated inside list
    'b8',               # missing length
    '8000',             # trailing bytes
    'c380',             # list longer than what follows
])
def test_decode_fails(bad):
    with pytest.raises(ValueError):
        rlp.decode(bytes.fromhex(bad))

def test_encode_fails():
    with pytest.raises(TypeError):
        rlp.encode(True)
    with pytest.raises(TypeError):
        rlp.encode(None)
    with pytest.raises(TypeError):
        rlp.encode([1, 2.5])
    with pytest.raises(ValueError):
        rlp.encode(-1)
    with pytest.raises(ValueError):
        rlp.decode_int(b'\x00\x01')

# EOF
