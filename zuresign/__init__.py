"""
ZureSign: SharedKey request signing for Azure Storage

Canonicalizes outgoing storage requests and signs them with the account key.
"""

__version__ = "0.1.0"

from .auth.exceptions import ConfigurationError, KeyFormatError, SigningError
from .models import HttpMethod, SignableRequest, SigningOptions
from .signing.canonicalizer import build_signature_string
from .signing.pipeline import SigningPipeline, sign_request

__all__ = [
    "ConfigurationError",
    "HttpMethod",
    "KeyFormatError",
    "SignableRequest",
    "SigningError",
    "SigningOptions",
    "SigningPipeline",
    "build_signature_string",
    "sign_request",
    "__version__",
]
