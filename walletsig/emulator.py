#
# (c) Copyright 2021 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Emulate a wallet, using a private key you give us.
#
# - for testing and demos: the key is held in memory, nothing is stored
# - does not generate keys
# - can be told to refuse, or to be slow, so we can test those paths too
#
import asyncio

from .signer import SignerABC, SignerCapabilities
from .exceptions import SignerRejected
from .compat import CT_sign
from .digest import StructuredContext
from .eip712 import StructuredDomain, typed_data_digest
from .utils import hex_to_bytes, privkey_to_address


class SoftwareSigner(SignerABC):
    name = 'software'

    def __init__(self, privkey, chain_id=1, reject=False, delay=0,
                        capabilities=None, v_offset=27):
        if isinstance(privkey, str):
            privkey = hex_to_bytes(privkey)
        assert len(privkey) == 32, 'need 32-byte private key'

        self._privkey = bytes(privkey)
        self.address = privkey_to_address(self._privkey)
        self.chain_id = chain_id

        # test knobs
        self.reject = reject
        self.delay = delay
        self.v_offset = v_offset            # 27 like most wallets, or 0
        self._caps = capabilities or SignerCapabilities()

        # how many prompts the "user" has seen
        self.prompts = 0

    def capabilities(self):
        return self._caps

    async def request_accounts(self):
        return [self.address]

    async def get_chain_id(self):
        return self.chain_id

    async def _prompt(self, digest):
        # pretend a human is looking at it
        self.prompts += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.reject:
            raise SignerRejected("User rejected the request.")

        sig = CT_sign(self._privkey, digest)

        # wallets send v as 27/28
        return sig[0:64] + bytes([sig[64] + self.v_offset])

    async def sign_typed_data(self, domain, types, message, primary_type=None):
        # rebuild the digest ourselves, as a real wallet does
        if not isinstance(domain, StructuredDomain):
            domain = StructuredDomain.from_dict(domain)
        ctx = StructuredContext(domain=domain, types=types, message=message,
                                    primary_type=primary_type)

        md = typed_data_digest(ctx.domain, ctx.types, ctx.message, ctx.primary_type)

        return await self._prompt(md)

    async def sign_digest(self, digest):
        assert len(digest) == 32
        return await self._prompt(digest)

# EOF
