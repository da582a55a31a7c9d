"""Observer hooks for the signing pipeline.

Observers receive one SigningEvent per stage and must not mutate the request.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from zuresign.core.logging_config import log_with_context
from zuresign.models import SignableRequest

logger = logging.getLogger(__name__)

STAGE_CANONICALIZED_RESOURCE = "canonicalized_resource"
STAGE_SIGNATURE_STRING = "signature_string"
STAGE_SIGNED = "signed"


@dataclass
class SigningEvent:
    """A point-in-time view of a request being signed."""

    stage: str
    request: SignableRequest
    payload: Dict[str, Any] = field(default_factory=dict)


Observer = Callable[[SigningEvent], None]


class LoggingObserver:
    """Logs signing events at DEBUG level.

    The account key and the computed signature are never logged.
    """

    def __init__(self, target: logging.Logger = logger, level: int = logging.DEBUG):
        self.target = target
        self.level = level

    def __call__(self, event: SigningEvent) -> None:
        if not self.target.isEnabledFor(self.level):
            return

        context: Dict[str, Any] = {
            "method": event.request.method.value,
            "path": event.request.path,
        }

        if event.stage == STAGE_CANONICALIZED_RESOURCE:
            context["canonical_resource"] = event.payload.get("canonical_resource")
            context["params"] = [str(key) for key, _ in event.request.params]
        elif event.stage == STAGE_SIGNATURE_STRING:
            context["signature_string"] = event.payload.get("signature_string")
        elif event.stage == STAGE_SIGNED:
            context["account_name"] = event.payload.get("account_name")

        log_with_context(self.target, self.level, f"Signing stage: {event.stage}", **context)
