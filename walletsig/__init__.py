#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
__version__ = '0.1.0'

__all__ = [ 'SignatureScheme', 'StructuredContext', 'AuthorizationContext', 'build_digest',
            'SigningOrchestrator', 'verify' ]

# what to sign
from walletsig.digest import SignatureScheme, StructuredContext, AuthorizationContext
from walletsig.digest import build_digest

# getting it signed, and checking it
from walletsig.orchestrator import SigningOrchestrator
from walletsig.verify import verify

# EOF
