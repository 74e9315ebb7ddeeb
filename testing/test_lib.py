#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Tests for crypto library wrappers.
#
import pytest
from walletsig.constants import *
from walletsig.compat import *

def test_wrap():
    # crypto lib wrappers need to function

    assert keccak256(b'') == \
        bytes.fromhex('c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470')
    assert keccak256('') == keccak256(b'')

    pk = (1).to_bytes(32, 'big')
    pub = CT_priv_to_pubkey(pk)
    assert len(pub) == 65
    assert pub == bytes.fromhex('04'
            '79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798'
            '483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8')

    assert pubkey_to_address_bytes(pub) == \
            bytes.fromhex('7e5f4552091a69125d5dfcb7b8c2659029395bdf')

    # compressed form is accepted too
    assert pubkey_to_address_bytes(b'\x02' + pub[1:33]) == pubkey_to_address_bytes(pub)

    md = keccak256(b'abc')
    sig = CT_sign(pk, md)
    assert len(sig) == 65
    assert sig[-1] in { 0, 1 }

    # always low-s
    assert int.from_bytes(sig[32:64], 'big') <= SECP256K1_HALF_N

    assert CT_sig_to_pubkey(md, sig) == pub

def test_recover_junk():
    # r has no point on the curve
    junk = (5).to_bytes(32, 'big') + (1).to_bytes(32, 'big') + b'\x00'
    with pytest.raises(ValueError):
        CT_sig_to_pubkey(bytes(32), junk)

# EOF
