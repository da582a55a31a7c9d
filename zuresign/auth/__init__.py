"""
ZureSign Authentication Module.

SharedKey signing and the signing error taxonomy.
"""

from zuresign.auth.exceptions import (
    SigningError,
    ConfigurationError,
    KeyFormatError,
)
from zuresign.auth.sharedkey import (
    SharedKeySigner,
    SharedKeyCredentials,
    compute_signature,
    decode_account_key,
    format_authorization_header,
)

__all__ = [
    # Exceptions
    "SigningError",
    "ConfigurationError",
    "KeyFormatError",
    # SharedKey
    "SharedKeySigner",
    "SharedKeyCredentials",
    "compute_signature",
    "decode_account_key",
    "format_authorization_header",
]
