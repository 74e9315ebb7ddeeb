#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Wrappers for our choice of crypto libraries. AKA API Cleanup
#
# My standards:
# - pubkeys: 65 bytes, always uncompressed (0x04 || X || Y), that's what addresses hash
# - private key: 32 bytes
# - signature: 65 bytes: r[32] s[32] rec_id[1] with rec_id in {0,1}
# - no DER, no PEM, no other serializations
# - message digests (for sign/recover) are already digested
# - libsecp256k1 underneath, via coincurve <https://ofek.dev/coincurve/api/>
#
from coincurve import PrivateKey, PublicKey
from eth_hash.auto import keccak

__all__ = [ 'keccak256', 'CT_sign', 'CT_sig_to_pubkey', 'CT_priv_to_pubkey',
            'pubkey_to_address_bytes' ]

def keccak256(msg):
    # single-shot keccak-256 (the pre-standard SHA3 that Ethereum uses)
    if isinstance(msg, str):
        msg = msg.encode('utf-8')
    return keccak(bytes(msg))

def CT_priv_to_pubkey(priv):
    # return uncompressed pubkey
    assert len(priv) == 32
    return PrivateKey(priv).public_key.format(compressed=False)

def CT_sign(privkey, msg_digest):
    # returns 65 bytes: r, s, rec_id ... always low-s (libsecp256k1 normalizes)
    assert len(msg_digest) == 32
    return PrivateKey(privkey).sign_recoverable(msg_digest, hasher=None)

def CT_sig_to_pubkey(msg_digest, sig):
    # returns uncompressed pubkey; raises ValueError if nothing recoverable
    assert len(msg_digest) == 32
    assert len(sig) == 65
    assert sig[-1] in { 0, 1 }

    pub = PublicKey.from_signature_and_message(sig, msg_digest, hasher=None)
    return pub.format(compressed=False)

def pubkey_to_address_bytes(pubkey):
    # last 20 bytes of keccak over X||Y
    if len(pubkey) == 33:
        pubkey = PublicKey(pubkey).format(compressed=False)
    assert len(pubkey) == 65 and pubkey[0] == 4
    return keccak256(pubkey[1:])[-20:]

# EOF
