#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# signer.py
#
# What we need from a wallet. We never see private keys: we hand over
# digests (or typed data) and get back signature bytes, or a refusal.
#
# - all methods are coroutines, the wallet answers when the human does
# - refusal by the user must be signalled by raising SignerRejected
# - signatures may come back as bytes or hex text, 64 or 65 bytes
#
from dataclasses import dataclass


@dataclass(frozen=True)
class SignerCapabilities:
    # What the wallet (and the environment it runs in) can do.
    # - some in-app browsers can't sign raw digests at all
    structured_data: bool = True
    authorization_delegation: bool = True

    def supports(self, scheme):
        from .digest import SignatureScheme

        if scheme is SignatureScheme.STRUCTURED_DATA:
            return self.structured_data
        if scheme is SignatureScheme.AUTHORIZATION_DELEGATION:
            return self.authorization_delegation
        return False


class SignerABC:
    #
    # Abstract base class. Talks to the wallet on our behalf.
    #
    name = 'abstract'

    async def request_accounts(self):
        # list of addresses (text) the wallet will sign with, first is active
        raise NotImplementedError

    async def get_chain_id(self):
        # active chain id, as int
        raise NotImplementedError

    async def sign_typed_data(self, domain, types, message, primary_type):
        # EIP-712 signing: the wallet builds its own digest from these
        # - domain: dict w/ name, version, chainId, verifyingContract
        # - types: {TypeName: [{name, type}, ...]}
        raise NotImplementedError

    async def sign_digest(self, digest):
        # sign 32 bytes as-is, no prefixes added
        raise NotImplementedError

    def capabilities(self):
        return SignerCapabilities()

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.name)

# EOF
