"""
Protocol header defaults for signed storage requests.

Sets x-ms-version and x-ms-date before the request is canonicalized, so the
timestamp header and the signed string always agree.
"""

from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Callable

from zuresign.models import SignableRequest

MS_DATE_HEADER = "x-ms-date"
MS_VERSION_HEADER = "x-ms-version"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def rfc2616_date(moment: datetime) -> str:
    """
    Render a datetime as an RFC 2616 HTTP-date.

    Naive datetimes are taken to be UTC.

    Example:
        >>> rfc2616_date(datetime(2015, 6, 26, 23, 39, 12, tzinfo=timezone.utc))
        'Fri, 26 Jun 2015 23:39:12 GMT'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def add_ms_date_header(request: SignableRequest, clock: Clock = utc_now) -> SignableRequest:
    """
    Set x-ms-date from the ms_date option, or from the clock when unset.

    The clock is only read when no ms_date option is configured.
    """
    date = request.options.ms_date
    if date is None:
        date = rfc2616_date(clock())
    return request.put_header(MS_DATE_HEADER, date)


def add_ms_version_header(request: SignableRequest) -> SignableRequest:
    """Set x-ms-version from the ms_version option."""
    return request.put_header(MS_VERSION_HEADER, request.options.ms_version)
