#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# orchestrator.py
#
# Drive one signing attempt at a time through the wallet.
#
#   IDLE -> AWAITING_SIGNER -> (SIGNED | REJECTED | TIMED_OUT)
#
# - only one attempt may be waiting on the wallet: a second request gets
#   a BUSY outcome and the wallet never hears about it
# - timeouts stop our waiting, but the prompt on the wallet side stays up;
#   there is no way to take it back, so we stay busy until it goes away
# - never retries: the user starts again if they want to
#
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .constants import *
from .digest import SignatureScheme, StructuredContext, AuthorizationContext
from .digest import build_digest, demo_message_context
from .exceptions import WalletSigError, SignerRejected, SignerTimedOut, SignerBusy
from .exceptions import UnsupportedScheme, MalformedSignature
from .signature import SignatureBytes, normalize

# Change this to see traffic details
VERBOSE = False


class SigningState(Enum):
    IDLE = 'idle'
    AWAITING_SIGNER = 'awaiting'
    SIGNED = 'signed'
    REJECTED = 'rejected'
    TIMED_OUT = 'timed_out'
    # outcome only: refused because another attempt is waiting
    BUSY = 'busy'


@dataclass(frozen=True)
class SigningOutcome:
    state: SigningState
    scheme: SignatureScheme
    signature: Optional[SignatureBytes] = None
    error: Optional[WalletSigError] = None

    @property
    def ok(self):
        return self.state is SigningState.SIGNED and self.error is None

    @property
    def message(self):
        # what to tell the human
        if self.ok:
            return 'Signed.'
        return self.error.user_message


def _retrieve(task):
    # abandoned prompt finished late: look at the result so asyncio doesn't complain
    if not task.cancelled():
        task.exception()


class SigningOrchestrator:
    #
    # Talks to one wallet, one prompt at a time.
    #
    def __init__(self, signer, capabilities=None, timeout=DEFAULT_SIGN_TIMEOUT):
        self.signer = signer
        self.caps = capabilities or signer.capabilities()
        self.timeout = timeout
        self._state = SigningState.IDLE
        self._abandoned = None          # timed-out prompt, maybe still on screen

    def __repr__(self):
        return '<%s via %r: %s>' % (self.__class__.__name__, self.signer, self._state.value)

    @property
    def state(self):
        return self._state

    @property
    def busy(self):
        # waiting on the wallet, or a prompt we gave up on is still open there
        if self._state is SigningState.AWAITING_SIGNER:
            return True
        return self._abandoned is not None and not self._abandoned.done()

    async def connect(self):
        # accounts and chain id of the wallet
        accounts = await self.signer.request_accounts()
        chain_id = await self.signer.get_chain_id()
        if VERBOSE:
            print(f"<< accounts={accounts} chain_id={chain_id}")
        return accounts, chain_id

    async def authorization_for(self, delegator, nonce):
        # EIP-7702 style authorization on the wallet's active chain
        # - nonce must come from the caller, we don't track it
        chain_id = await self.signer.get_chain_id()
        return AuthorizationContext(chain_id=chain_id, delegator=delegator, nonce=nonce)

    async def structured_message(self, content, timestamp=None):
        # demo typed-data message, on the wallet's active chain
        chain_id = await self.signer.get_chain_id()
        return demo_message_context(content, chain_id, timestamp=timestamp)

    async def _dispatch(self, ctx):
        # start the wallet prompt, per scheme
        if isinstance(ctx, StructuredContext):
            # wallet rebuilds the digest itself; ours is only for verifying later
            if VERBOSE:
                print(f">> sign_typed_data ({ctx.primary_type} on chain {ctx.domain.chain_id})")
            return await self.signer.sign_typed_data(ctx.domain.as_dict(), ctx.types_json(),
                                                        ctx.message, ctx.primary_type)

        md = build_digest(ctx).digest
        if VERBOSE:
            print(f">> sign_digest ({md.hex()})")
        return await self.signer.sign_digest(md)

    async def sign(self, ctx, timeout=None):
        # Run one signing attempt, return a SigningOutcome
        # - problems with the context itself (bad schema) raise right away,
        #   before the wallet sees anything
        scheme = ctx.scheme

        if self.busy:
            return SigningOutcome(SigningState.BUSY, scheme, error=SignerBusy())

        if not self.caps.supports(scheme):
            raise UnsupportedScheme(f"Wallet cannot do {scheme.value} signatures")

        # check it builds before we bother the human
        build_digest(ctx)

        timeout = self.timeout if timeout is None else timeout
        self._state = SigningState.AWAITING_SIGNER

        try:
            task = asyncio.ensure_future(self._dispatch(ctx))
            try:
                raw = await asyncio.wait_for(asyncio.shield(task), timeout)
            except asyncio.TimeoutError:
                task.add_done_callback(_retrieve)
                self._abandoned = task
                if VERBOSE:
                    print("<< (timed out)")
                self._state = SigningState.TIMED_OUT
                return SigningOutcome(self._state, scheme, error=SignerTimedOut())
            except SignerRejected as exc:
                if VERBOSE:
                    print("<< (rejected)")
                self._state = SigningState.REJECTED
                return SigningOutcome(self._state, scheme, error=exc)

            self._state = SigningState.SIGNED
        finally:
            if self._state is SigningState.AWAITING_SIGNER:
                # wallet blew up some other way; don't stay stuck
                self._state = SigningState.IDLE

        if VERBOSE:
            print(f"<< signed ({len(raw)} bytes)")

        try:
            sig = normalize(raw)
        except MalformedSignature as exc:
            # wallet said yes, but gave us junk: final, don't retry
            return SigningOutcome(self._state, scheme, error=exc)

        return SigningOutcome(self._state, scheme, signature=sig)

# EOF
