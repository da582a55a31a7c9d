"""Signing module for ZureSign.

Header defaults, request canonicalization, and the ordered signing pipeline
for Azure Storage SharedKey authorization.
"""

from zuresign.signing.canonicalizer import (
    CanonicalizedRequest,
    SIGNATURE_STRING_HEADERS,
    build_canonicalized_headers,
    build_canonicalized_resource,
    build_signature_string,
    build_standard_header_lines,
    canonicalize,
)
from zuresign.signing.headers import (
    MS_DATE_HEADER,
    MS_VERSION_HEADER,
    add_ms_date_header,
    add_ms_version_header,
    rfc2616_date,
    utc_now,
)
from zuresign.signing.pipeline import (
    SigningPipeline,
    sign_request,
)
from zuresign.signing.tracing import (
    LoggingObserver,
    SigningEvent,
)

__all__ = [
    # Canonicalization
    "CanonicalizedRequest",
    "SIGNATURE_STRING_HEADERS",
    "build_canonicalized_headers",
    "build_canonicalized_resource",
    "build_signature_string",
    "build_standard_header_lines",
    "canonicalize",
    # Header defaults
    "MS_DATE_HEADER",
    "MS_VERSION_HEADER",
    "add_ms_date_header",
    "add_ms_version_header",
    "rfc2616_date",
    "utc_now",
    # Pipeline
    "SigningPipeline",
    "sign_request",
    # Tracing
    "LoggingObserver",
    "SigningEvent",
]
