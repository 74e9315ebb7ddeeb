#
# (c) Copyright 2021 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# System constants.
#

# secp256k1 group order, and the "low-s" boundary (EIP-2)
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

# EIP-191: every signed structured message starts with this, then a version byte
EIP191_PREFIX = b'\x19'

# the domain fields are fixed, in this order
EIP712_DOMAIN_FIELDS = [
    ('name', 'string'),
    ('version', 'string'),
    ('chainId', 'uint256'),
    ('verifyingContract', 'address'),
]

# demo message used by the signing screens
DEMO_DOMAIN_NAME = 'Wallet Signature Test'
DEMO_DOMAIN_VERSION = '1'
DEMO_MESSAGE_TYPES = {
    'Message': [
        ('content', 'string'),
        ('timestamp', 'uint256'),
    ],
}

ZERO_ADDRESS = '0x' + ('00' * 20)

# sizes, in bytes
DIGEST_SIZE = 32
ADDRESS_SIZE = 20
SIG_SIZE = 65
COMPACT_SIG_SIZE = 64

# v values used by wallets for recovery id 0 and 1
V_OFFSET = 27

# how long we wait for the wallet to answer a signing prompt (seconds)
DEFAULT_SIGN_TIMEOUT = 120

# payment QR payloads
PAYMENT_TYPE = 'tether_payment'
PAYMENT_VERSION = '1.0'

# 30 minutes until a payment QR expires
DEFAULT_PAYMENT_TTL = 30 * 60

# nonce for payment requests: random, 32 bits
PAYMENT_NONCE_SIZE = 4

# forward error correction for payment QR (L, M, Q, H)
DEFAULT_QR_ERROR = 'M'
QR_ERROR_LEVELS = 'LMQH'

# BNB chain networks we can build payments for
BNB_NETWORKS = {
    'mainnet': dict(
        chain_id=56,
        name='BNB Smart Chain',
        symbol='BNB',
        explorer='https://bscscan.com',
        usdt='0x55d398326f99059fF775485246999027B3197955',
    ),
    'testnet': dict(
        chain_id=97,
        name='BNB Smart Chain Testnet',
        symbol='tBNB',
        explorer='https://testnet.bscscan.com',
        usdt='0x337610d27c682E347C9cD60BD4b3b107C9d34dDd',
    ),
}

# known chains, for display: chain_id => (name, symbol, is_testnet)
NETWORK_NAMES = {
    1: ('Ethereum', 'ETH', False),
    5: ('Goerli', 'GoerliETH', True),
    11155111: ('Sepolia', 'SepoliaETH', True),
    137: ('Polygon', 'MATIC', False),
    80001: ('Mumbai', 'MATIC', True),
    56: ('BSC', 'BNB', False),
    97: ('BSC Testnet', 'tBNB', True),
}

# EOF
