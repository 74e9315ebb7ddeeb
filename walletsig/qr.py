#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# QR codes for payment payloads.
#
# - Requires 'pyqrcode' module (and 'pypng' for PNG output)
# - one way only: we make images, we never read them
#
import pyqrcode

from .constants import DEFAULT_QR_ERROR, QR_ERROR_LEVELS
from .payment import PaymentPayload, serialize

# blank modules around the code
QUIET_ZONE = 2

def make_qr(payload, error=DEFAULT_QR_ERROR):
    # payload object, or already-serialized text => QRCode object
    if isinstance(payload, PaymentPayload):
        payload = serialize(payload)

    error = error.upper()
    if error not in QR_ERROR_LEVELS:
        raise ValueError(f"Error correction level must be one of: {', '.join(QR_ERROR_LEVELS)}")

    # JSON has lower case and punctuation, so binary mode it is
    return pyqrcode.create(payload, error=error, mode='binary', encoding='utf-8')

def scale_for_width(qr, width, quiet_zone=QUIET_ZONE):
    # biggest whole-pixel scale that fits in width
    per_module = qr.get_png_size(1, quiet_zone=quiet_zone)
    return max(1, width // per_module)

def render_qr(qr, outfile=None, scale=4, quiet_zone=QUIET_ZONE):
    # PNG or SVG to a file, depending on its name; else text for a terminal
    if outfile is None:
        return qr.terminal(quiet_zone=quiet_zone)

    if outfile.name.lower().endswith('.svg'):
        qr.svg(outfile, scale=scale, quiet_zone=quiet_zone)
    else:
        qr.png(outfile, scale=scale, quiet_zone=quiet_zone)

def as_data_url(qr, width=256, quiet_zone=QUIET_ZONE):
    # what a web page can put in an <img src=...>
    scale = scale_for_width(qr, width, quiet_zone)
    return 'data:image/png;base64,' + qr.png_as_base64_str(scale=scale, quiet_zone=quiet_zone)

# EOF
