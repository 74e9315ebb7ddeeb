#
# (c) Copyright 2021 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Exceptions
#
# - every failure kind has its own class, short code and message for humans
#

class WalletSigError(RuntimeError):
    code = 'error'
    user_message = 'Something went wrong.'

    def __init__(self, msg=None, code=None, raw_msg=None):
        self.code = code or self.code
        self.raw_msg = raw_msg or msg
        super().__init__(msg or self.user_message)

class SchemaMismatch(WalletSigError):
    # typed message and its type schema disagree
    code = 'schema_mismatch'
    user_message = 'The message does not match its type definitions.'

class MalformedSignature(WalletSigError, ValueError):
    code = 'malformed_signature'
    user_message = 'The signature is not in a recognised format.'

class MalformedPayload(WalletSigError, ValueError):
    code = 'malformed_payload'
    user_message = 'This payment QR code could not be read.'

class InvalidSignature(WalletSigError):
    # well-formed, but cryptographically no good
    code = 'invalid_signature'
    user_message = 'The signature is invalid.'

class SignerRejected(WalletSigError):
    code = 'rejected'
    user_message = 'Signing was cancelled in the wallet.'

class SignerTimedOut(WalletSigError):
    code = 'timed_out'
    user_message = 'The wallet did not respond in time. Please try again.'

class SignerBusy(WalletSigError):
    code = 'busy'
    user_message = 'A signing request is already waiting for the wallet.'

class UnsupportedScheme(WalletSigError):
    code = 'unsupported_scheme'
    user_message = 'This wallet cannot sign that kind of message.'

class InvalidAmount(WalletSigError, ValueError):
    code = 'invalid_amount'
    user_message = 'Enter a valid payment amount.'

class InvalidAddress(WalletSigError, ValueError):
    code = 'invalid_address'
    user_message = 'Enter a valid recipient address.'

class PaymentExpired(WalletSigError):
    code = 'expired'
    user_message = 'This payment request has expired.'

# EOF
