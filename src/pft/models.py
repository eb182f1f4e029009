"""Pydantic models for content metadata."""

from __future__ import annotations

import calendar
import datetime as dt
import re
import unicodedata
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import HeaderError

# Supported header options. Keys are valid options, values are defaults;
# a None default means the option is not set unless the header says so.
OPTIONS_RECIPE: dict[str, Any] = {
    "hide": False,
    "template": None,
    "refs": None,
}

_DATE_PATTERN = re.compile(r"^\s*(\d{1,4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?\s*$")


def default_options() -> dict[str, Any]:
    return {key: value for key, value in OPTIONS_RECIPE.items() if value is not None}


def slugify(text: str | None) -> str:
    """Convert text to a URL-safe slug.

    Accents are folded to ASCII, every run of other characters becomes a
    single hyphen, a trailing hyphen is dropped and the result lowercased.
    """
    if not text:
        raise ValueError("Cannot slugify an empty string")
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^A-Za-z0-9]+", "-", folded)
    slug = slug.rstrip("-").lower()
    if not slug or slug == "-":
        raise ValueError(f"Cannot slugify {text!r}: no usable characters")
    return slug


class Date(BaseModel):
    """A possibly partial calendar date: year, optional month, optional day.

    Ordering compares year, then month, then day. A missing component sorts
    before any present one, so ``2024-01`` comes before ``2024-01-01``.
    """

    model_config = ConfigDict(frozen=True)

    y: int
    m: int | None = None
    d: int | None = None

    @model_validator(mode="after")
    def _check_components(self) -> Date:
        if self.d is not None and self.m is None:
            raise ValueError("Date with a day must have a month")
        if self.m is not None and not 1 <= self.m <= 12:
            raise ValueError(f"Invalid month {self.m}")
        if self.d is not None:
            last_day = calendar.monthrange(self.y, self.m)[1] if self.y >= 1 else 31
            if not 1 <= self.d <= last_day:
                raise ValueError(f"Invalid day {self.d} for {self.y:04d}-{self.m:02d}")
        return self

    @classmethod
    def from_string(cls, text: str) -> Date:
        """Parse ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``."""
        match = _DATE_PATTERN.match(str(text))
        if match is None:
            raise ValueError(f"Date format error: {text!r}")
        y, m, d = (int(group) if group is not None else None for group in match.groups())
        try:
            return cls(y=y, m=m, d=d)
        except ValidationError as e:
            raise ValueError(f"Date format error: {text!r}: {e.errors()[0]['msg']}") from e

    @classmethod
    def from_date(cls, value: dt.date) -> Date:
        return cls(y=value.year, m=value.month, d=value.day)

    @classmethod
    def coerce(cls, value: Any) -> Date | None:
        """Build a Date from whatever a YAML loader may hand us."""
        if value is None or value == "":
            return None
        if isinstance(value, Date):
            return value
        if isinstance(value, dt.datetime):
            return cls.from_date(value.date())
        if isinstance(value, dt.date):
            return cls.from_date(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(y=value)
        if isinstance(value, str):
            return cls.from_string(value)
        raise ValueError(f"Date format error: {value!r}")

    @property
    def complete(self) -> bool:
        return self.m is not None and self.d is not None

    @property
    def has_month(self) -> bool:
        return self.m is not None

    def parts(self) -> tuple[int, ...]:
        return tuple(part for part in (self.y, self.m, self.d) if part is not None)

    def repr(self, sep: str = "-") -> str:
        width = (4, 2, 2)
        return sep.join(f"{part:0{w}d}" for part, w in zip(self.parts(), width))

    def month_of(self) -> Date:
        """The month-level date containing this one."""
        if self.m is None:
            raise ValueError(f"{self} has no month")
        return Date(y=self.y, m=self.m)

    def covers(self, other: Date) -> bool:
        """True if every component set here equals the one in ``other``."""
        mine = self.parts()
        return len(mine) <= len(other.parts()) and other.parts()[: len(mine)] == mine

    def _key(self) -> tuple[int, int, int]:
        return (self.y, self.m or 0, self.d or 0)

    def __lt__(self, other: Date) -> bool:
        return self._key() < other._key()

    def __le__(self, other: Date) -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: Date) -> bool:
        return self._key() > other._key()

    def __ge__(self, other: Date) -> bool:
        return self._key() >= other._key()

    def __str__(self) -> str:
        return self.repr("-")


class Header(BaseModel):
    """Metadata block at the top of every content file.

    A header must have a title unless its date names a month (year and month
    without a day). Any date must carry at least year and month.
    """

    title: str | None = None
    author: str | None = None
    date: Date | None = None
    tags: list[str] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=default_options)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise HeaderError(_validation_message(e)) from e

    @field_validator("title", "author", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Date | None:
        return Date.coerce(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(tag) for tag in value]

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, value: Any) -> dict[str, Any]:
        return {} if value is None else value

    @model_validator(mode="after")
    def _check_title_and_date(self) -> Header:
        check_title_and_date(self.title, self.date)
        return self

    @property
    def slug(self) -> str | None:
        return slugify(self.title) if self.title else None

    @property
    def tags_slug(self) -> list[str]:
        return [slugify(tag) for tag in self.tags]

    @property
    def hidden(self) -> bool:
        return bool(self.options.get("hide", False))

    def set_date(self, date: Date) -> None:
        """Replace the date, keeping the header valid."""
        if not isinstance(date, Date):
            raise TypeError("set_date expects a Date")
        try:
            check_title_and_date(self.title, date)
        except ValueError as e:
            raise HeaderError(str(e)) from e
        self.date = date

    def same_as(self, other: Header) -> bool:
        """Logical equality: title, author, date, tags and options."""
        return (
            self.title == other.title
            and self.author == other.author
            and self.date == other.date
            and list(self.tags) == list(other.tags)
            and dict(self.options) == dict(other.options)
        )


def check_title_and_date(title: str | None, date: Date | None) -> None:
    if date is not None:
        if date.complete:
            if not title:
                raise ValueError("Title is mandatory for headers having a complete date")
        elif date.m is None:
            raise ValueError("Year and month are mandatory for headers with date")
    elif not title:
        raise ValueError("Title is mandatory for headers not having dates")


def _validation_message(error: ValidationError) -> str:
    messages = []
    for item in error.errors():
        msg = item["msg"].removeprefix("Value error, ")
        loc = ".".join(str(x) for x in item["loc"])
        messages.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(messages)


class Diagnostic(BaseModel):
    """A recoverable problem found while loading or mapping content."""

    level: Literal["warning", "error"] = "warning"
    code: str
    message: str
    source: str | None = None

    def __str__(self) -> str:
        where = f"{self.source}: " if self.source else ""
        return f"{where}{self.message} [{self.code}]"
