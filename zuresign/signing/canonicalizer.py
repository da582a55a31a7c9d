"""Request canonicalization for Azure Storage SharedKey signing.

Builds the string-to-sign from a request's verb, standard headers, x-ms-*
headers and resource. The function is pure: given the same request it returns
the same string regardless of header or parameter insertion order.

Reference: https://learn.microsoft.com/en-us/rest/api/storageservices/authorize-with-shared-key
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from zuresign.auth.exceptions import ConfigurationError
from zuresign.models import SignableRequest, stringify

# Headers included in the string-to-sign, in this exact order.
SIGNATURE_STRING_HEADERS = (
    "content-encoding",
    "content-language",
    "content-length",
    "content-md5",
    "content-type",
    "date",
    "if-modified-since",
    "if-match",
    "if-none-match",
    "if-unmodified-since",
    "range",
)

MS_HEADER_PREFIX = "x-ms-"

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass
class CanonicalizedRequest:
    """Result of request canonicalization."""

    string_to_sign: str
    canonical_headers: str
    canonical_resource: str


def canonicalize(
    request: SignableRequest,
    account_name: Optional[str] = None
) -> CanonicalizedRequest:
    """Canonicalize a request for SharedKey signing.

    Args:
        request: Request with its x-ms-date and x-ms-version already set
        account_name: Account name; read from the request options when omitted

    Returns:
        CanonicalizedRequest with the string-to-sign and its components

    Raises:
        ConfigurationError: If no account name is available
    """
    account_name = account_name or request.options.account_name
    if not account_name:
        raise ConfigurationError("account_name not set")

    canonical_headers = build_canonicalized_headers(request)
    canonical_resource = build_canonicalized_resource(request, account_name)

    string_to_sign = (
        f"{request.method.value.upper()}\n"
        + build_standard_header_lines(request)
        + canonical_headers
        + canonical_resource
    )

    return CanonicalizedRequest(
        string_to_sign=string_to_sign,
        canonical_headers=canonical_headers,
        canonical_resource=canonical_resource,
    )


def build_signature_string(
    request: SignableRequest,
    account_name: Optional[str] = None
) -> str:
    """Build the string-to-sign for a request.

    Format:
    ```
    VERB\\n
    Content-Encoding\\n
    ...
    Range\\n
    CanonicalizedHeaders\\n
    CanonicalizedResource
    ```

    Example:
        >>> request = SignableRequest(
        ...     method="GET",
        ...     path="/mycontainer",
        ...     params={"restype": "container"},
        ...     headers={"x-ms-version": "2015-02-21"},
        ... )
        >>> build_signature_string(request, "myaccount").splitlines()[-2:]
        ['/myaccount/mycontainer', 'restype:container']
    """
    return canonicalize(request, account_name).string_to_sign


def build_standard_header_lines(request: SignableRequest) -> str:
    """Render one line per standard header, empty when the header is absent."""
    return "".join(
        f"{_standard_header_value(request, name)}\n"
        for name in SIGNATURE_STRING_HEADERS
    )


def _standard_header_value(request: SignableRequest, name: str) -> str:
    value = request.get_header(name)
    if value is None:
        return ""

    value = stringify(value)

    # A zero Content-Length is signed as an empty field
    if name == "content-length" and value == "0":
        return ""

    return value


def build_canonicalized_headers(request: SignableRequest) -> str:
    """Build the CanonicalizedHeaders block.

    Rules:
    1. Include every header whose name starts with "x-ms-"
    2. Sort ascending by lowercase name
    3. Collapse each run of whitespace in the value to one space
    4. Render "name:value" lines followed by a trailing newline

    Example:
        >>> request = SignableRequest(method="GET", headers={
        ...     "X-MS-Version": "2015-02-21",
        ...     "x-ms-meta-name": "a   b",
        ... })
        >>> build_canonicalized_headers(request)
        'x-ms-meta-name:a b\\nx-ms-version:2015-02-21\\n'
    """
    ms_headers: List[Tuple[str, str]] = []

    for name, value in request.headers.items():
        name_lower = name.lower()
        if name_lower.startswith(MS_HEADER_PREFIX):
            ms_headers.append((name_lower, _WHITESPACE_RUN.sub(" ", stringify(value))))

    ms_headers.sort(key=lambda item: item[0])

    return "\n".join(f"{name}:{value}" for name, value in ms_headers) + "\n"


def build_canonicalized_resource(request: SignableRequest, account_name: str) -> str:
    """Build the CanonicalizedResource string.

    Query parameters are sorted by their string form, so "10" sorts before
    "9". The sort is stable: repeated keys keep their insertion order.

    Example:
        >>> request = SignableRequest(
        ...     method="GET",
        ...     path="/mycontainer",
        ...     params={"timeout": 20, "comp": "metadata"},
        ... )
        >>> build_canonicalized_resource(request, "myaccount")
        '/myaccount/mycontainer\\ncomp:metadata\\ntimeout:20'
    """
    path = request.path
    if path and not path.startswith("/"):
        path = f"/{path}"

    canonical_resource = f"/{account_name}{path}"

    sorted_params = sorted(
        ((stringify(key), stringify(value)) for key, value in request.params),
        key=lambda item: item[0],
    )

    return canonical_resource + "".join(
        f"\n{key}:{value}" for key, value in sorted_params
    )
