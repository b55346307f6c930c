"""Typed ``Key: Value`` tag lines used by ``bagit.txt`` and ``bag-info.txt``.

Parsing splits once on the first ``": "``, validates the key/value shape,
then dispatches on the key to a typed tag or falls back to ``CustomTag``.
Serialization (``str(tag)``) is the exact inverse for well-formed tags.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bagforge.errors import BagError, ErrorKind

KEY_VERSION = "BagIt-Version"
KEY_ENCODING = "Tag-File-Character-Encoding"
KEY_DATE = "Bagging-Date"
KEY_OXUM = "Payload-Oxum"

SEPARATOR = ": "
SUPPORTED_ENCODING = "UTF-8"
_DOTTED_PAIR = re.compile(r"([0-9]+)\.([0-9]+)")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TagError(BagError):
    """Base class for malformed tag lines."""


class TagFormatError(TagError):
    """Line is not ``<key>: <value>`` or one side is empty."""


class KeyForbiddenCharacterError(TagError):
    """Tag key contains ``:``."""


class ValueForbiddenCharacterError(TagError):
    """Tag value starts or ends with whitespace."""


class ValueParsingError(TagError):
    """Value of a recognized key could not be parsed."""

    kind = ErrorKind.FORMAT

    def __init__(self, key: str, value: str, **kwargs) -> None:
        super().__init__(f"Failed to parse value {value!r} for key `{key}`", **kwargs)
        self.key = key


class UnsupportedEncodingError(TagError):
    """Tag files must declare UTF-8."""

    kind = ErrorKind.FORMAT


def validate_key_value(key: str, value: str) -> None:
    """Enforce the shape shared by every tag line."""
    if not key or not value:
        raise TagFormatError("Tag key and value must both be non-empty")
    if ":" in key:
        raise KeyForbiddenCharacterError(f"Tag key {key!r} contains forbidden character ':'")
    if value[0].isspace() or value[-1].isspace():
        raise ValueForbiddenCharacterError(
            f"Tag value for {key!r} starts or ends with whitespace"
        )


# ---------------------------------------------------------------------------
# Tag variants
# ---------------------------------------------------------------------------


class _TagBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    KEY: ClassVar[str] = ""

    @property
    def key(self) -> str:
        return self.KEY

    @property
    def value(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return f"{self.key}{SEPARATOR}{self.value}"


class BagitVersion(_TagBase):
    """``BagIt-Version: <major>.<minor>``"""

    KEY: ClassVar[str] = KEY_VERSION

    major: int = Field(ge=0, le=255)
    minor: int = Field(ge=0, le=255)

    @property
    def value(self) -> str:
        return f"{self.major}.{self.minor}"


class Encoding(_TagBase):
    """``Tag-File-Character-Encoding: UTF-8``. Only UTF-8 is supported."""

    KEY: ClassVar[str] = KEY_ENCODING

    @property
    def value(self) -> str:
        return SUPPORTED_ENCODING


class BaggingDate(_TagBase):
    """``Bagging-Date: YYYY-MM-DD``"""

    KEY: ClassVar[str] = KEY_DATE

    date: dt.date

    @property
    def value(self) -> str:
        return self.date.isoformat()


class PayloadOxum(_TagBase):
    """``Payload-Oxum: <octet_count>.<stream_count>``"""

    KEY: ClassVar[str] = KEY_OXUM

    octet_count: int = Field(ge=0)
    stream_count: int = Field(ge=0)

    @property
    def value(self) -> str:
        return f"{self.octet_count}.{self.stream_count}"


class CustomTag(_TagBase):
    """Any tag whose key is not recognized."""

    custom_key: str
    custom_value: str

    @model_validator(mode="after")
    def _check_shape(self) -> CustomTag:
        # Raises TagError itself, not a pydantic ValidationError.
        validate_key_value(self.custom_key, self.custom_value)
        return self

    @classmethod
    def of(cls, key: str, value: str) -> CustomTag:
        return cls(custom_key=key, custom_value=value)

    @property
    def key(self) -> str:
        return self.custom_key

    @property
    def value(self) -> str:
        return self.custom_value


Tag = Union[BagitVersion, Encoding, BaggingDate, PayloadOxum, CustomTag]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_dotted_pair(key: str, value: str, upper: int | None = None) -> tuple[int, int]:
    match = _DOTTED_PAIR.fullmatch(value)
    if match is None:
        raise ValueParsingError(key, value)
    first, second = int(match.group(1)), int(match.group(2))
    if upper is not None and (first > upper or second > upper):
        raise ValueParsingError(key, value)
    return first, second


def _parse_date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(value).date()
    except ValueError as exc:
        raise ValueParsingError(KEY_DATE, value) from exc


def parse_tag(line: str) -> Tag:
    """Parse one ``Key: Value`` line into a typed tag."""
    key, sep, value = line.partition(SEPARATOR)
    if not sep:
        raise TagFormatError(f"Missing ': ' separator in tag line {line!r}")
    validate_key_value(key, value)

    if key == KEY_VERSION:
        major, minor = _parse_dotted_pair(key, value, upper=255)
        return BagitVersion(major=major, minor=minor)
    if key == KEY_ENCODING:
        if value != SUPPORTED_ENCODING:
            raise UnsupportedEncodingError(
                f"Unsupported tag file encoding {value!r}, only UTF-8 is supported"
            )
        return Encoding()
    if key == KEY_DATE:
        return BaggingDate(date=_parse_date(value))
    if key == KEY_OXUM:
        octets, streams = _parse_dotted_pair(key, value)
        return PayloadOxum(octet_count=octets, stream_count=streams)
    return CustomTag.of(key, value)


def serialize_tag(tag: Tag) -> str:
    return str(tag)
