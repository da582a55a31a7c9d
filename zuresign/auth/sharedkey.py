"""
SharedKey signing for Azure Storage requests.

Signature = Base64(HMAC-SHA256(UTF8(StringToSign), Base64Decode(AccountKey)))

Reference: https://learn.microsoft.com/en-us/rest/api/storageservices/authorize-with-shared-key
"""

import base64
import binascii
import hashlib
import hmac
import logging
from dataclasses import dataclass

from zuresign.auth.exceptions import ConfigurationError, KeyFormatError

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
SHARED_KEY_SCHEME = "SharedKey"


@dataclass(frozen=True)
class SharedKeyCredentials:
    """Credentials for SharedKey signing."""

    account_name: str
    account_key: str  # Base64-encoded

    def __repr__(self) -> str:
        return f"SharedKeyCredentials(account_name={self.account_name!r})"


def decode_account_key(account_key: str) -> bytes:
    """
    Decode a base64 account key into raw HMAC key bytes.

    Raises:
        KeyFormatError: If the key is not valid base64
    """
    try:
        return base64.b64decode(account_key, validate=True)
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError("account_key is not valid base64") from e


def compute_signature(string_to_sign: str, account_key: str) -> str:
    """
    Compute the base64 HMAC-SHA256 signature of a string-to-sign.

    Args:
        string_to_sign: Canonical string to sign
        account_key: Base64-encoded account key

    Returns:
        Base64-encoded signature

    Raises:
        KeyFormatError: If the account key is not valid base64
    """
    key_bytes = decode_account_key(account_key)

    signature_bytes = hmac.new(
        key_bytes,
        string_to_sign.encode("utf-8"),
        hashlib.sha256
    ).digest()

    return base64.b64encode(signature_bytes).decode("utf-8")


def format_authorization_header(account_name: str, signature: str) -> str:
    return f"{SHARED_KEY_SCHEME} {account_name}:{signature}"


class SharedKeySigner:
    """
    Signs canonicalized requests with the account's shared key.

    Stateless: one instance may sign requests from any number of threads.
    """

    def credentials(self, request) -> SharedKeyCredentials:
        """
        Read and validate the signing credentials from the request options.

        The key is checked before the name.

        Raises:
            ConfigurationError: If account_key or account_name is not set
        """
        options = request.options

        if not options.account_key:
            raise ConfigurationError("account_key not set")
        if not options.account_name:
            raise ConfigurationError("account_name not set")

        return SharedKeyCredentials(
            account_name=options.account_name,
            account_key=options.account_key,
        )

    def sign(self, request, signature_string: str) -> str:
        """
        Sign a string-to-sign and set the Authorization header.

        Args:
            request: SignableRequest the signature is for
            signature_string: String produced by the canonicalizer

        Returns:
            Authorization header value

        Raises:
            ConfigurationError: If account_key or account_name is not set
            KeyFormatError: If account_key is not valid base64
        """
        credentials = self.credentials(request)
        signature = compute_signature(signature_string, credentials.account_key)
        header_value = format_authorization_header(credentials.account_name, signature)

        request.put_header(AUTHORIZATION_HEADER, header_value)
        logger.debug(f"Signed {request.method.value} request for account: {credentials.account_name}")

        return header_value
