"""Output contracts of the external gazette extraction programs.

The slicer and the metadata extractor both print a single JSON document on
stdout. These models are the validated, typed form of that output.
"""

import datetime as dt
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, StrictInt, field_validator, model_validator

TRADEMARKS_SECTION = "Trademarks"
LEGAL_NOTICES_SECTION = "Legal Notices"

_DATE_FORMATS = ("%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d")


class SectionKind(str, Enum):
    TRADEMARKS = "trademarks"
    LEGAL_NOTICES = "legal_notices"
    ISSUE = "issue"


class SectionCategory(BaseModel):
    """Either one of the two fixed gazette sections or an issue with its identifier."""

    model_config = ConfigDict(frozen=True)

    kind: SectionKind
    identifier: Optional[str] = None

    @classmethod
    def from_entry_name(cls, name: str) -> "SectionCategory":
        if name == TRADEMARKS_SECTION:
            return cls(kind=SectionKind.TRADEMARKS)
        if name == LEGAL_NOTICES_SECTION:
            return cls(kind=SectionKind.LEGAL_NOTICES)
        return cls(kind=SectionKind.ISSUE, identifier=name)

    @property
    def is_fixed(self) -> bool:
        return self.kind is not SectionKind.ISSUE

    @property
    def fixed_name(self) -> Optional[str]:
        """Document name for fixed sections, None for issues."""
        if self.kind is SectionKind.TRADEMARKS:
            return TRADEMARKS_SECTION
        if self.kind is SectionKind.LEGAL_NOTICES:
            return LEGAL_NOTICES_SECTION
        return None

    @property
    def label(self) -> str:
        """Issue identifier or fixed name, whichever applies."""
        return self.identifier if self.kind is SectionKind.ISSUE else self.fixed_name


class SliceEntry(BaseModel):
    """One section cut out of the gazette by the slicer."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    start_page: int = 0
    end_page: int = 0
    position: int = 0
    full_text: Optional[str] = ""
    short_description: Optional[str] = ""
    description: Optional[str] = ""
    institutions: List[str] = Field(default_factory=list)
    tag: Optional[str] = None
    issuer: Optional[str] = None
    materia: Optional[str] = None

    _category: SectionCategory = PrivateAttr()

    @field_validator("institutions", mode="before")
    @classmethod
    def _null_institutions(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("institutions")
    @classmethod
    def _unique_institutions(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def _decide_category(self) -> "SliceEntry":
        self._category = SectionCategory.from_entry_name(self.name)
        return self

    @property
    def category(self) -> SectionCategory:
        return self._category


class SliceResult(BaseModel):
    """Slicer stdout: page count of the source PDF and the extracted sections."""

    model_config = ConfigDict(extra="ignore")

    page_count: StrictInt = Field(..., ge=0)
    files: List[SliceEntry]
    errors: List[str] = Field(default_factory=list)

    @field_validator("errors", mode="before")
    @classmethod
    def _stringify_errors(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [item if isinstance(item, str) else str(item) for item in value]
        return value

    @classmethod
    def empty(cls) -> "SliceResult":
        """Safe default used when slicing fails."""
        return cls(page_count=0, files=[])


class GazetteMetadata(BaseModel):
    number: str = Field(..., min_length=1)
    date: dt.date

    @field_validator("number", mode="before")
    @classmethod
    def _number_as_text(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("date must be a non-empty string")
        raw = value.strip()
        try:
            return dt.date.fromisoformat(raw[:10])
        except ValueError:
            pass
        for fmt in _DATE_FORMATS:
            try:
                return dt.datetime.strptime(raw, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"unparseable date {raw!r}")


class MetadataResult(BaseModel):
    """Metadata extractor stdout."""

    model_config = ConfigDict(extra="ignore")

    gazette: GazetteMetadata
