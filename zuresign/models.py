"""
Request descriptor and signing options for ZureSign.

A SignableRequest is the only value the signing steps consume: verb, path,
query parameters, headers and the option bag carrying the account credentials.
"""

from email.utils import parsedate_to_datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from zuresign.auth.exceptions import ConfigurationError

DEFAULT_MS_VERSION = "2023-11-03"

HeaderValue = Union[str, int, float]
Params = Union[Mapping[Any, Any], Iterable[Tuple[Any, Any]]]


class HttpMethod(str, Enum):
    """HTTP verbs accepted by the storage REST API."""
    GET = "GET"
    HEAD = "HEAD"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    PATCH = "PATCH"
    OPTIONS = "OPTIONS"
    MERGE = "MERGE"

    @classmethod
    def parse(cls, value: Union[str, "HttpMethod"]) -> "HttpMethod":
        """Parse a verb case-insensitively."""
        if isinstance(value, cls):
            return value
        return cls(str(value).upper())


class SigningOptions(BaseModel):
    """Options recognized by the signing steps."""

    account_name: Optional[str] = Field(
        default=None,
        description="Storage account name, mandatory for signing"
    )
    account_key: Optional[str] = Field(
        default=None,
        repr=False,
        description="Base64-encoded account key, mandatory for signing"
    )
    ms_date: Optional[str] = Field(
        default=None,
        description="Request timestamp in RFC 2616 format, defaults to now"
    )
    ms_version: str = Field(
        default=DEFAULT_MS_VERSION,
        description="Storage service API version"
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("ms_date")
    @classmethod
    def validate_ms_date(cls, v: Optional[str]) -> Optional[str]:
        """Reject timestamps that are not RFC 2616 HTTP-dates."""
        if v is None:
            return v
        try:
            parsed = parsedate_to_datetime(v)
        except (TypeError, ValueError):
            parsed = None
        if parsed is None:
            raise ValueError(f"ms_date must be an RFC 2616 date, got: {v!r}")
        return v

    @classmethod
    def from_mapping(
        cls,
        options: Union["SigningOptions", Mapping[str, Any], None]
    ) -> "SigningOptions":
        """
        Build options from a plain option bag.

        Args:
            options: Mapping of option name to value, an existing instance, or None

        Returns:
            Validated SigningOptions

        Raises:
            ConfigurationError: If an option is unknown or has an invalid value
        """
        if isinstance(options, cls):
            return options
        try:
            return cls(**dict(options or {}))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid signing options: {e}") from e


def stringify(value: Any) -> str:
    """Render a header or parameter value the way it is sent on the wire."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _normalize_params(params: Optional[Params]) -> List[Tuple[Any, Any]]:
    if params is None:
        return []
    if isinstance(params, Mapping):
        return list(params.items())
    return [(key, value) for key, value in params]


class SignableRequest:
    """
    An outgoing storage request as seen by the signing steps.

    Header names are stored lowercase so every lookup is case-insensitive.
    ``headers`` is a read-only view; use ``put_header`` to change it.
    Query parameters keep their insertion order; canonicalization sorts them.
    """

    def __init__(
        self,
        method: Union[str, HttpMethod],
        path: str = "/",
        params: Optional[Params] = None,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        options: Union[SigningOptions, Mapping[str, Any], None] = None,
    ):
        self.method = HttpMethod.parse(method)
        self.path = path
        self.params: List[Tuple[Any, Any]] = _normalize_params(params)
        self._headers: Dict[str, HeaderValue] = {
            str(name).lower(): value for name, value in (headers or {}).items()
        }
        self.options = SigningOptions.from_mapping(options)

    def __repr__(self) -> str:
        return (
            f"SignableRequest(method={self.method.value!r}, path={self.path!r}, "
            f"params={self.params!r}, headers={self._headers!r})"
        )

    @property
    def headers(self) -> Mapping[str, HeaderValue]:
        return MappingProxyType(self._headers)

    @classmethod
    def from_url(
        cls,
        method: Union[str, HttpMethod],
        url: str,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        params: Optional[Params] = None,
        options: Union[SigningOptions, Mapping[str, Any], None] = None,
    ) -> "SignableRequest":
        """
        Build a request from a full URL.

        Query string pairs come first, followed by any explicit params.

        Example:
            >>> request = SignableRequest.from_url(
            ...     "GET",
            ...     "https://myaccount.blob.core.windows.net/mycontainer?restype=container",
            ...     params={"comp": "metadata"},
            ... )
            >>> request.path
            '/mycontainer'
        """
        parsed = urlsplit(url)
        query_params = parse_qsl(parsed.query, keep_blank_values=True)
        return cls(
            method=method,
            path=parsed.path or "/",
            params=query_params + _normalize_params(params),
            headers=dict(headers or {}),
            options=options,
        )

    def get_header(self, name: str, default: Optional[HeaderValue] = None) -> Optional[HeaderValue]:
        return self._headers.get(name.lower(), default)

    def has_header(self, name: str) -> bool:
        return name.lower() in self._headers

    def put_header(self, name: str, value: HeaderValue) -> "SignableRequest":
        """Set a header, replacing any existing value regardless of case."""
        self._headers[name.lower()] = value
        return self
