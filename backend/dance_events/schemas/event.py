"""
Pydantic schemas for event-related request/response validation.

JSON keys are camelCase (startAt, priceCents); snake_case is accepted on input.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from dance_events.models.user import Role

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50
# Largest value an INTEGER column (ids, prices) can hold
MAX_DB_INT = 2**31 - 1


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken to be UTC; aware ones are converted to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )


class EventCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    location: str = Field(..., min_length=1, max_length=255)
    start_at: datetime
    end_at: Optional[datetime] = None
    price_cents: int = Field(..., ge=0, le=MAX_DB_INT, strict=True)

    normalize_dates = field_validator("start_at", "end_at")(as_utc)

    @model_validator(mode="after")
    def end_not_before_start(self) -> "EventCreate":
        if self.end_at is not None and self.end_at < self.start_at:
            raise ValueError("endAt must not be before startAt")
        return self


class EventUpdate(CamelModel):
    """
    Partial update. Omitted fields keep their value; explicit null clears
    the optional columns (description, endAt) and is rejected for the rest.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    price_cents: Optional[int] = Field(None, ge=0, le=MAX_DB_INT, strict=True)

    normalize_dates = field_validator("start_at", "end_at")(as_utc)

    @model_validator(mode="after")
    def required_columns_not_null(self) -> "EventUpdate":
        for name in ("title", "location", "start_at", "price_cents"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self


class CreatorSummary(CamelModel):
    id: int
    name: Optional[str]
    role: Role


class EventResponse(CamelModel):
    id: int
    title: str
    description: Optional[str]
    location: str
    start_at: datetime
    end_at: Optional[datetime]
    price_cents: int
    creator_id: int
    created_at: datetime
    updated_at: datetime


class EventDetailResponse(EventResponse):
    creator: CreatorSummary
    ticket_count: int


class EventListResponse(BaseModel):
    items: list[EventResponse]
    total: int
    page: int
    limit: int


@dataclass(frozen=True)
class EventFilters:
    q: Optional[str] = None
    city: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def build(
        cls,
        q: Optional[str] = None,
        city: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> "EventFilters":
        """Normalize raw query values: blank text is no filter, page >= 1, 1 <= limit <= 50."""
        if page is None or page < 1:
            page = 1
        if limit is None or limit < 1:
            limit = DEFAULT_PAGE_SIZE
        return cls(
            q=(q or "").strip() or None,
            city=(city or "").strip() or None,
            date_from=as_utc(date_from),
            date_to=as_utc(date_to),
            min_price=min_price,
            max_price=max_price,
            page=page,
            limit=min(limit, MAX_PAGE_SIZE),
        )

    def cache_key(self) -> str:
        parts = [
            f"q={self.q or ''}",
            f"city={self.city or ''}",
            f"from={self.date_from.isoformat() if self.date_from else ''}",
            f"to={self.date_to.isoformat() if self.date_to else ''}",
            f"min={'' if self.min_price is None else self.min_price}",
            f"max={'' if self.max_price is None else self.max_price}",
            f"page={self.page}",
            f"limit={self.limit}",
        ]
        return "&".join(parts)
