import re
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Annotated, Any, Iterable, List, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, ValidationError

from app.utils.money import to_cents
from app.core.config import settings
from app.core.errors import InvalidArgument


def check_identifier(value: Optional[str]) -> Optional[str]:
    """Reject identifiers that do not look like ones the persistence layer issues."""
    if value is None:
        return value
    if not re.match(settings.IDENTIFIER_PATTERN, value):
        raise ValueError(f"malformed identifier {value!r}")
    return value


Identifier = Annotated[str, AfterValidator(check_identifier)]

# amounts arrive already rounded to cents by the persistence layer; keep it that way
Money = Annotated[Decimal, AfterValidator(to_cents)]

DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def end_of_day(value: Any) -> Any:
    """A date-only upper bound covers the whole day (UTC)."""
    if isinstance(value, str) and DATE_ONLY.match(value):
        value = date.fromisoformat(value)
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.max, tzinfo=timezone.utc)
    return value


WindowEnd = Annotated[datetime, BeforeValidator(end_of_day)]


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "value"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


class Record(BaseModel):
    """Base for every record the engine consumes."""

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def coerce(cls, value: Any, label: Optional[str] = None):
        if isinstance(value, cls):
            return value
        try:
            return cls.model_validate(value)
        except ValidationError as exc:
            raise InvalidArgument(f"Invalid {label or cls.__name__}: {_describe(exc)}") from exc

    @classmethod
    def coerce_all(cls, values: Optional[Iterable[Any]], label: Optional[str] = None) -> List[Any]:
        return [cls.coerce(value, label) for value in (values or [])]
