"""Ordered signing steps for storage requests.

A pipeline is a fixed tuple of steps, each taking a SignableRequest and
returning it with headers added:

1. x-ms-date
2. x-ms-version
3. Authorization

Pipelines hold no per-request state and can be shared across threads.
"""

from functools import partial
from typing import Callable, Iterable, Optional, Tuple

from zuresign.auth.sharedkey import SharedKeySigner
from zuresign.models import SignableRequest
from zuresign.signing.canonicalizer import canonicalize
from zuresign.signing.headers import (
    Clock,
    add_ms_date_header,
    add_ms_version_header,
    utc_now,
)
from zuresign.signing.tracing import (
    STAGE_CANONICALIZED_RESOURCE,
    STAGE_SIGNATURE_STRING,
    STAGE_SIGNED,
    Observer,
    SigningEvent,
)


Step = Callable[[SignableRequest], SignableRequest]


class SigningPipeline:
    """Applies the SharedKey signing steps to a request.

    Example:
        pipeline = SigningPipeline()
        request = SignableRequest.from_url(
            "GET",
            "https://myaccount.blob.core.windows.net/mycontainer",
            params={"restype": "container"},
            options={"account_name": "myaccount", "account_key": key},
        )
        pipeline.run(request)
        request.get_header("Authorization")
    """

    def __init__(
        self,
        clock: Clock = utc_now,
        observers: Iterable[Observer] = (),
        signer: Optional[SharedKeySigner] = None,
    ):
        """Initialize pipeline.

        Args:
            clock: Time source for x-ms-date when ms_date is not configured
            observers: Callables notified at each signing stage
            signer: Signer used for the Authorization step
        """
        self.clock = clock
        self.observers: Tuple[Observer, ...] = tuple(observers)
        self.signer = signer or SharedKeySigner()
        self._steps: Tuple[Step, ...] = (
            partial(add_ms_date_header, clock=self.clock),
            add_ms_version_header,
            self.add_auth_signature,
        )

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._steps

    def with_observer(self, observer: Observer) -> "SigningPipeline":
        """Return a new pipeline that also notifies ``observer``."""
        return SigningPipeline(
            clock=self.clock,
            observers=self.observers + (observer,),
            signer=self.signer,
        )

    def run(self, request: SignableRequest) -> SignableRequest:
        """Run every step in order.

        Raises:
            ConfigurationError: If account_key or account_name is not set
            KeyFormatError: If account_key is not valid base64
        """
        for step in self._steps:
            request = step(request)
        return request

    def add_auth_signature(self, request: SignableRequest) -> SignableRequest:
        """Canonicalize the request and set its Authorization header.

        Credentials are validated before anything is computed, so a failure
        leaves no Authorization header behind.
        """
        credentials = self.signer.credentials(request)

        canonical = canonicalize(request, credentials.account_name)
        self._notify(
            STAGE_CANONICALIZED_RESOURCE,
            request,
            canonical_resource=canonical.canonical_resource,
        )
        self._notify(
            STAGE_SIGNATURE_STRING,
            request,
            signature_string=canonical.string_to_sign,
        )

        self.signer.sign(request, canonical.string_to_sign)
        self._notify(STAGE_SIGNED, request, account_name=credentials.account_name)

        return request

    def _notify(self, stage: str, request: SignableRequest, **payload) -> None:
        if not self.observers:
            return
        event = SigningEvent(stage=stage, request=request, payload=payload)
        for observer in self.observers:
            observer(event)


def sign_request(
    request: SignableRequest,
    *,
    clock: Optional[Clock] = None,
    observers: Iterable[Observer] = (),
) -> SignableRequest:
    """Sign a request with a one-off pipeline.

    Returns:
        The same request with x-ms-date, x-ms-version and Authorization set
    """
    pipeline = SigningPipeline(clock=clock or utc_now, observers=observers)
    return pipeline.run(request)
