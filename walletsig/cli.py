#!/usr/bin/env python
#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# To use this, install with:
#
#   pip install --editable '.[cli]'
#
# That will create the command "walletsig" in your path.
#
#
import click, sys, time, json, asyncio

from walletsig.constants import *
from walletsig.exceptions import WalletSigError
from walletsig.utils import B2A, to_hex, network_name
from walletsig import __version__

# dict of options that apply to all commands
global global_opts
global_opts = dict()

# Cleanup display (supress traceback) for user-feedback exceptions
_sys_excepthook = sys.excepthook
def my_hook(ty, val, tb):
    if issubclass(ty, WalletSigError) or ty is RuntimeError:
        print("FATAL: %s" % val, file=sys.stderr)
    else:
        return _sys_excepthook(ty, val, tb)
sys.excepthook=my_hook

def fail(msg):
    # show message and stop
    click.echo(f"FAILURE: {msg}", err=True)
    sys.exit(1)

def dump_dict(d):
    for k,v in d.items():
        if isinstance(v, (bytes, bytearray)):
            v = to_hex(v)

        click.echo('%s: %s' % (k, v))

def load_json(fd):
    # JSON from a file (or stdin), fail nicely if not
    try:
        return json.load(fd)
    except ValueError as exc:
        fail(f"Not JSON: {exc}")

def _unwrap(d):
    # output of "sign" holds the context under its own key
    if isinstance(d, dict) and isinstance(d.get('context'), dict):
        return d['context']
    return d

def get_signer(chain_id):
    # the only signer we can reach from a terminal: key given by the user
    from walletsig.emulator import SoftwareSigner

    if global_opts.get('verbose', False):
        import walletsig.orchestrator as oo
        oo.VERBOSE = True

    key = global_opts.get('key')
    if not key:
        fail("Need a private key: use --key or set WALLETSIG_KEY")

    try:
        return SoftwareSigner(key, chain_id=chain_id)
    except (ValueError, AssertionError):
        fail("Private key must be 32 bytes of hex")

# Accept any prefix of a command name.
#
# from <https://click.palletsprojects.com/en/8.0.x/advanced/?#command-aliases>
class AliasedGroup(click.Group):
    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        matches = [x for x in self.list_commands(ctx)
                   if x.startswith(cmd_name)]
        if not matches:
            return None
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])
        ctx.fail(f"Ambiguous command. Pick one of: {' | '.join(sorted(matches))}")

    def resolve_command(self, ctx, args):
        # always return the full command name
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name, cmd, args


#
# Options we want for all commands
#
@click.group(cls=AliasedGroup)
@click.option('--key', '-k', default=None, envvar='WALLETSIG_KEY', metavar="HEX",
                    help="Private key for signing (testing only). Or set WALLETSIG_KEY")
@click.option('--verbose', '-v', is_flag=True,
                    help="Show traffic with wallet.")
@click.option('--pdb', is_flag=True,
                    help="Prepare patient for surgery to remove bugs.")
@click.version_option(version=__version__)
def main(**kws):
    '''
    Build, sign and verify wallet signatures (EIP-712 typed data and
    EIP-7702 style authorizations), and make USDT payment QR codes.

    You can use "ver", or "v" for "verify": any distinct prefix for all commands.

    '''
    # implement PDB option here
    if kws.pop('pdb', False):
        import pdb
        def doit(ex_cls, ex, tb):
            pdb.pm()
        sys.excepthook = doit

    # global options, mostly not considered here
    global global_opts
    global_opts.update(kws)


@main.command('digest')
@click.argument('context_file', type=click.File('rt'), required=False, metavar="[typed-data.json]")
@click.option('--content', '-m', default=None, help="Text for the demo message")
@click.option('--chain-id', '-c', type=int, default=1, help="Chain id for the demo message")
@click.option('--timestamp', '-t', type=int, default=None, help="Timestamp for the demo message (default: now)")
def show_digest(context_file, content, chain_id, timestamp):
    '''Show the EIP-712 digest of some typed data.

    Give a JSON file with domain, types, primaryType and message,
    or use --content to make the demo "Message" on any chain.
    '''
    from walletsig.digest import context_from_dict, demo_message_context, build_digest
    from walletsig.eip712 import encode_type, encode_typed

    try:
        if context_file:
            ctx = context_from_dict(load_json(context_file), scheme='eip712')
        elif content is not None:
            ctx = demo_message_context(content, chain_id, timestamp=timestamp)
        else:
            fail("Need a typed-data file, or --content")

        sm = encode_typed(ctx.domain, ctx.types, ctx.message, ctx.primary_type)
    except WalletSigError as exc:
        fail(str(exc))

    click.echo('type: ' + encode_type(ctx.primary_type, ctx.types))
    click.echo('domain: ' + B2A(sm.header))
    click.echo('struct: ' + B2A(sm.body))
    click.echo('digest: ' + B2A(build_digest(ctx).digest))

@main.command('auth-digest')
@click.argument('chain_id', type=int)
@click.argument('delegator', type=str, metavar="0xADDRESS")
@click.argument('nonce', type=int)
def show_auth_digest(chain_id, delegator, nonce):
    "Show the RLP and digest of an authorization (delegation) message"
    from walletsig.digest import AuthorizationContext, authorization_rlp, build_digest

    try:
        ctx = AuthorizationContext(chain_id=chain_id, delegator=delegator, nonce=nonce)
    except WalletSigError as exc:
        fail(str(exc))

    click.echo('rlp: ' + B2A(authorization_rlp(ctx.chain_id, ctx.delegator, ctx.nonce)))
    click.echo('digest: ' + B2A(build_digest(ctx).digest))

@main.command('sign')
@click.argument('context_file', type=click.File('rt'), required=False, metavar="[context.json]")
@click.option('--content', '-m', default=None, help="Sign the demo message with this text")
@click.option('--delegator', '-d', default=None, metavar="0xADDRESS",
                    help="Sign an authorization for this delegator contract")
@click.option('--nonce', '-n', type=int, default=0, help="Account nonce for the authorization")
@click.option('--chain-id', '-c', type=int, default=1, help="Chain id the wallet is on")
@click.option('--timeout', type=float, default=DEFAULT_SIGN_TIMEOUT, help="Seconds to wait for the wallet")
@click.option('--just-sig', '-j', is_flag=True, help='Just the signature itself, nothing more')
def sign_message(context_file, content, delegator, nonce, chain_id, timeout, just_sig):
    '''Sign a typed-data message or an authorization, with --key.

    Pick one of: a context JSON file, --content (demo message) or --delegator.
    '''
    from walletsig.digest import context_from_dict
    from walletsig.orchestrator import SigningOrchestrator

    picked = [x for x in (context_file, content, delegator) if x is not None]
    if len(picked) != 1:
        fail("Pick exactly one of: context file, --content, --delegator")

    ctx = None
    if context_file:
        try:
            ctx = context_from_dict(_unwrap(load_json(context_file)))
        except WalletSigError as exc:
            fail(str(exc))

    signer = get_signer(chain_id)
    orch = SigningOrchestrator(signer, timeout=timeout)

    async def doit(ctx):
        # demo message and authorization both use the chain the wallet is on
        if delegator:
            ctx = await orch.authorization_for(delegator, nonce)
        elif ctx is None:
            ctx = await orch.structured_message(content)

        return ctx, await orch.sign(ctx)

    try:
        ctx, outcome = asyncio.run(doit(ctx))
    except WalletSigError as exc:
        fail(str(exc))

    if not outcome.ok:
        fail(outcome.message)

    if just_sig:
        click.echo(str(outcome.signature))
        return

    click.echo(json.dumps(dict(context=ctx.as_dict(), signer=signer.address,
                                signature=str(outcome.signature)), indent=2))

@main.command('verify')
@click.argument('scheme', type=click.Choice(['eip712', 'eip7702']))
@click.argument('context_file', type=click.File('rt'), metavar="context.json")
@click.argument('signature', type=str, metavar="0xSIGNATURE")
@click.option('--expect', '-a', default=None, metavar="0xADDRESS",
                    help="Also check the signer is this address")
@click.option('--json', 'as_json', is_flag=True, help="Show result as JSON")
def verify_sig(scheme, context_file, signature, expect, as_json):
    "Check a signature and show who made it"
    from walletsig.verify import verify, check_signer

    result = verify(scheme, _unwrap(load_json(context_file)), signature)
    if expect:
        result = check_signer(result, expect)

    if as_json:
        click.echo(json.dumps(result.as_dict(), indent=2))
    elif result.valid:
        click.echo(result.recovered_address)

    if not result.valid:
        fail(f"{result.message} ({result.detail})")

@main.command('sig')
@click.argument('signature', type=str, metavar="0xSIGNATURE")
def show_sig(signature):
    "Decode a signature (65-byte or 64-byte compact) and show its parts"
    from walletsig.signature import normalize
    from walletsig.exceptions import MalformedSignature

    try:
        sig = normalize(signature)
    except MalformedSignature as exc:
        fail(str(exc))

    dump_dict(sig.info())
    click.echo('low_s: %s' % sig.is_low_s)

@main.command('pay')
@click.argument('recipient', type=str, metavar="0xADDRESS")
@click.argument('amount', type=str, metavar="10.00")
@click.option('--chain-id', '-c', type=click.IntRange(min=1),
                    default=BNB_NETWORKS['testnet']['chain_id'],
                    help="Chain id (56 = BSC, 97 = BSC testnet)")
@click.option('--token', default=None, metavar="0xADDRESS",
                    help="Token contract (default: USDT on BSC networks)")
@click.option('--ttl', type=click.IntRange(min=1), default=DEFAULT_PAYMENT_TTL,
                    help="Seconds until the request expires")
@click.option('--memo', default=None, help="Note shown to the payer")
@click.option('--merchant-name', default=None)
@click.option('--merchant-id', default=None)
@click.option('--order-id', default=None)
@click.option('--outfile', '-o', metavar="filename.png",
                        help="Save an SVG or PNG (depends on extension)", default=None,
                        type=click.File('wb'))
@click.option('--error-mode', '-e', default=DEFAULT_QR_ERROR, metavar="L|M|Q|H",
            help="Forward error correction level (L = low, H=High=bigger)")
@click.option('--json-only', '-j', is_flag=True, help="Just the payload, no QR")
def make_payment(recipient, amount, chain_id, token, ttl, memo, merchant_name,
                    merchant_id, order_id, outfile, error_mode, json_only):
    "Make a USDT payment request, and show it as a QR"
    from walletsig import payment
    from walletsig.exceptions import InvalidAmount, InvalidAddress

    try:
        pp = payment.build(recipient, amount, chain_id, token_address=token, ttl=ttl,
                            memo=memo, merchant_id=merchant_id, order_id=order_id,
                            merchant_name=merchant_name)
    except (InvalidAmount, InvalidAddress) as exc:
        fail(str(exc))

    txt = payment.serialize(pp)
    if json_only:
        click.echo(txt)
        return

    from walletsig.qr import make_qr, render_qr
    try:
        q = make_qr(txt, error=error_mode)
    except ValueError as exc:
        fail(str(exc))

    if not outfile:
        print(render_qr(q))
        click.echo(f"{amount} USDT to {pp.payment.recipient} on {network_name(chain_id)}")
        click.echo(txt)
    else:
        render_qr(q, outfile)

        click.echo(f"Wrote {outfile.tell():,} bytes to: {outfile.name}", err=1)

@main.command('scan')
@click.argument('payload_file', type=click.File('rt'), default='-', metavar="[payload.json]")
def scan_payment(payload_file):
    "Read a payment request (from QR text) and check it is still good"
    from walletsig import payment
    from walletsig.exceptions import MalformedPayload, PaymentExpired

    try:
        pp = payment.parse(payload_file.read().strip())
    except MalformedPayload as exc:
        fail(f"{exc.user_message} {exc}")

    p, m = pp.payment, pp.metadata
    dump_dict(dict(recipient=p.recipient, amount=p.amount, token=p.token_address,
                    network=network_name(pp.chain_id), nonce=p.nonce,
                    memo=p.memo or '', merchant=m.merchant_name or '',
                    expires=time.strftime('%Y-%m-%d %H:%M:%S UTC', time.gmtime(m.expires_at))))

    try:
        payment.check_payment(pp)
    except PaymentExpired as exc:
        fail(exc.user_message)

    click.echo(f"Good for {m.expires_at - int(time.time())} more seconds.")

@main.command('networks')
def list_networks():
    "List the networks we know, and USDT contracts on BNB chain"

    for chain_id, (name, symbol, is_testnet) in sorted(NETWORK_NAMES.items()):
        click.echo('%10d  %-12s %-10s %s' % (chain_id, name, symbol,
                                                'testnet' if is_testnet else ''))
    click.echo()
    for label, net in BNB_NETWORKS.items():
        click.echo('%-8s USDT: %s  (%s)' % (label, net['usdt'], net['explorer']))

# EOF
