import datetime as dt

import pytest
from pydantic import ValidationError

from gazette_ingest.schemas.extraction import (
    GazetteMetadata,
    SectionCategory,
    SectionKind,
    SliceEntry,
    SliceResult,
)


class TestSectionCategory:

    @pytest.mark.parametrize(
        "name, kind, label",
        [
            ("Trademarks", SectionKind.TRADEMARKS, "Trademarks"),
            ("Legal Notices", SectionKind.LEGAL_NOTICES, "Legal Notices"),
            ("Decree 12-2025", SectionKind.ISSUE, "Decree 12-2025"),
            ("legal notices", SectionKind.ISSUE, "legal notices"),
        ],
    )
    def test_decided_from_entry_name(self, name, kind, label):
        category = SectionCategory.from_entry_name(name)

        assert category.kind is kind
        assert category.label == label
        assert category.is_fixed == (kind is not SectionKind.ISSUE)

    def test_issue_has_identifier_but_no_fixed_name(self):
        category = SectionCategory.from_entry_name("Agreement 4")

        assert category.identifier == "Agreement 4"
        assert category.fixed_name is None


class TestSliceEntry:

    def test_defaults_and_unknown_fields(self):
        entry = SliceEntry.model_validate({"name": "Decree 1", "path": "d.pdf", "confidence": 0.4})

        assert (entry.start_page, entry.end_page, entry.position) == (0, 0, 0)
        assert entry.full_text == ""
        assert entry.institutions == []
        assert entry.tag is None
        assert entry.category.kind is SectionKind.ISSUE

    def test_institutions_are_deduplicated_in_order(self):
        entry = SliceEntry(name="Decree 1", path="d.pdf", institutions=["ENEE", "SAR", "ENEE"])

        assert entry.institutions == ["ENEE", "SAR"]


class TestSliceResult:

    def test_empty_default(self):
        empty = SliceResult.empty()

        assert empty.page_count == 0
        assert empty.files == []
        assert empty.errors == []

    def test_errors_are_stringified(self):
        result = SliceResult.model_validate(
            {"page_count": 2, "files": [], "errors": ["page 2 unreadable", {"page": 3}]}
        )

        assert result.errors == ["page 2 unreadable", "{'page': 3}"]

    @pytest.mark.parametrize("page_count", [-1, "4", 2.5, None])
    def test_page_count_must_be_a_non_negative_integer(self, page_count):
        with pytest.raises(ValidationError):
            SliceResult.model_validate({"page_count": page_count, "files": []})


class TestGazetteMetadata:

    @pytest.mark.parametrize(
        "raw",
        ["2025-09-01", "2025-09-01T00:00:00", "01-09-2025", "01/09/2025", "2025/09/01", " 2025-09-01 "],
    )
    def test_accepted_date_formats(self, raw):
        assert GazetteMetadata(number="45", date=raw).date == dt.date(2025, 9, 1)

    def test_number_is_text(self):
        assert GazetteMetadata(number=36001, date="2025-09-01").number == "36001"
        assert GazetteMetadata(number=" 45 ", date="2025-09-01").number == "45"

    @pytest.mark.parametrize("raw", ["", "   ", "next week", "2025-13-45", None])
    def test_rejected_dates(self, raw):
        with pytest.raises(ValidationError):
            GazetteMetadata(number="45", date=raw)
