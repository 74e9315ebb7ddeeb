#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
import pytest

# well known test key (first account of hardhat/anvil), never holds real funds
TEST_KEY = 'ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80'
TEST_ADDR = '0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266'

# some other account
OTHER_ADDR = '0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf'

@pytest.fixture
def test_key():
    return bytes.fromhex(TEST_KEY)

@pytest.fixture
def signer():
    # a wallet that says yes, right away
    from walletsig.emulator import SoftwareSigner
    return SoftwareSigner(TEST_KEY, chain_id=97)

@pytest.fixture
def make_signer():
    # for the less cooperative wallets
    from walletsig.emulator import SoftwareSigner

    def doit(**kws):
        kws.setdefault('chain_id', 97)
        return SoftwareSigner(TEST_KEY, **kws)

    return doit

@pytest.fixture
def mail_typed_data():
    # the example from EIP-712 itself
    return dict(
        domain=dict(name='Ether Mail', version='1', chainId=1,
                    verifyingContract='0xCcCCccccCCCCcCCCCCCcCcCccCcCCCcCcccccccC'),
        types=dict(
            EIP712Domain=[
                dict(name='name', type='string'),
                dict(name='version', type='string'),
                dict(name='chainId', type='uint256'),
                dict(name='verifyingContract', type='address'),
            ],
            Person=[
                dict(name='name', type='string'),
                dict(name='wallet', type='address'),
            ],
            Mail=[
                dict(name='from', type='Person'),
                dict(name='to', type='Person'),
                dict(name='contents', type='string'),
            ],
        ),
        primaryType='Mail',
        message={
            'from': dict(name='Cow', wallet='0xCD2a3d9F938E13CD947Ec05AbC7FE734Df8DD826'),
            'to': dict(name='Bob', wallet='0xbBbBBBBbbBBBbbbBbbBbbbbBBbBbbbbBbBbbBBbB'),
            'contents': 'Hello, Bob!',
        },
    )

# EOF
