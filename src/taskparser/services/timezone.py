"""Timezone handling for relative-date resolution.

Relative phrases like "today" must resolve in the user's calendar, not the
server's and not UTC's. The reference instant is projected into the target
IANA zone once; after that all day arithmetic works on the resulting
``date``, so no UTC midnight can shift the day.
"""

import logging
from datetime import date, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from taskparser.config import settings
from taskparser.services.models import InvalidReferenceDateError, InvalidTimezoneError

logger = logging.getLogger(__name__)

ReferenceDate = datetime | date | str | None


def local_timezone() -> tzinfo:
    """The process local timezone."""
    return datetime.now().astimezone().tzinfo or ZoneInfo("UTC")


def load_zone(name: str) -> ZoneInfo:
    """Load an IANA zone or raise InvalidTimezoneError."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimezoneError(f"Unknown timezone: {name!r}") from e


class TimezoneService:
    """Resolves timezones and projects reference instants to calendar dates.

    Features:
    - Default zone from settings.user_timezone, else the process local zone
    - Explicit per-call zones that fail fast when unknown
    - Reference dates given as datetimes, dates or ISO 8601 strings
    """

    def __init__(self, default_timezone: str | None = None):
        """Initialize timezone service.

        Args:
            default_timezone: IANA timezone name. Defaults to settings.user_timezone;
                empty means the process local timezone.
        """
        self._default_tz_name = default_timezone or settings.user_timezone
        self._default_tz: tzinfo
        if self._default_tz_name:
            try:
                self._default_tz = load_zone(self._default_tz_name)
            except InvalidTimezoneError:
                logger.warning(
                    f"Invalid configured timezone {self._default_tz_name!r}, using local time"
                )
                self._default_tz_name = ""
                self._default_tz = local_timezone()
        else:
            self._default_tz = local_timezone()

    @property
    def default_timezone(self) -> str:
        """Configured default zone name; empty when using local time."""
        return self._default_tz_name

    def resolve(self, timezone: str | None = None) -> tzinfo:
        """Zone for ``timezone``, or the default zone when it is not given."""
        if timezone:
            return load_zone(timezone)
        return self._default_tz

    def now(self, timezone: str | None = None) -> datetime:
        """Current time in the given (or default) zone."""
        return datetime.now(self.resolve(timezone))

    def local_date(self, reference: ReferenceDate = None, timezone: str | None = None) -> date:
        """Calendar date of ``reference`` as seen in ``timezone``.

        Args:
            reference: Aware datetime (converted), naive datetime (taken as
                wall time in the target zone), date (used as is), ISO 8601
                string, or None for now.
            timezone: IANA zone name. Defaults to the service default.

        Raises:
            InvalidReferenceDateError: reference is not a usable instant.
            InvalidTimezoneError: timezone is not a known IANA zone.
        """
        tz = self.resolve(timezone)

        if reference is None:
            return datetime.now(tz).date()

        if isinstance(reference, str):
            reference = parse_reference(reference)

        if isinstance(reference, datetime):
            if reference.tzinfo is None:
                return reference.date()
            return reference.astimezone(tz).date()

        if isinstance(reference, date):
            return reference

        raise InvalidReferenceDateError(
            f"Reference date must be a datetime, date or ISO 8601 string, got {type(reference).__name__}"
        )


def parse_reference(value: str) -> datetime:
    """Parse an ISO 8601 reference instant."""
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise InvalidReferenceDateError(f"Invalid reference date: {value!r}") from e


# Module-level singleton
_timezone_service: TimezoneService | None = None


def get_timezone_service() -> TimezoneService:
    """Get the singleton TimezoneService instance."""
    global _timezone_service
    if _timezone_service is None:
        _timezone_service = TimezoneService()
    return _timezone_service


def reset_timezone_service() -> None:
    """Reset the singleton (useful for testing)."""
    global _timezone_service
    _timezone_service = None


def local_date(reference: ReferenceDate = None, timezone: str | None = None) -> date:
    """Calendar date of ``reference`` in ``timezone`` (see TimezoneService.local_date)."""
    return get_timezone_service().local_date(reference, timezone)
