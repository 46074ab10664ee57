import pytest

from gazette_ingest.schemas.extraction import SliceEntry
from gazette_ingest.services.tagging_service import TaggingService, find_alternative_name_matches
from tests.fakes import (
    FakeAlternativeTagNameRepository,
    FakeAssociationRepository,
    FakeTagRepository,
)

ENAG_TAG_ID = 101
CONGRESS_TAG_ID = 102


@pytest.fixture
def tag_repo():
    return FakeTagRepository()


@pytest.fixture
def tagging(tag_repo):
    return TaggingService(
        tag_repo=tag_repo,
        document_tag_repo=FakeAssociationRepository(),
        issuer_tag_repo=FakeAssociationRepository(),
        alternative_name_repo=FakeAlternativeTagNameRepository(
            [("ENAG", ENAG_TAG_ID), ("National Congress", CONGRESS_TAG_ID), ("Congress", CONGRESS_TAG_ID)]
        ),
    )


class TestApplyTags:

    @pytest.mark.asyncio
    async def test_apply_tag_is_idempotent(self, tagging, tag_repo):
        assert await tagging.apply_tag(7, "Tenders") is True
        assert await tagging.apply_tag(7, "Tenders") is False

        assert tagging.document_tag_repo.pairs == [(7, tag_repo.id_of("Tenders"))]

    @pytest.mark.asyncio
    async def test_apply_issuer_tag_is_idempotent(self, tagging, tag_repo):
        assert await tagging.apply_issuer_tag(7, "Various") is True
        assert await tagging.apply_issuer_tag(7, "Various") is False

        assert tagging.issuer_tag_repo.pairs == [(7, tag_repo.id_of("Various"))]
        assert tagging.document_tag_repo.pairs == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["Unknown Ministry", "", "   ", None])
    async def test_unknown_or_empty_names_are_skipped(self, tagging, name):
        assert await tagging.apply_tag(7, name) is False
        assert await tagging.apply_issuer_tag(7, name) is False
        assert tagging.document_tag_repo.pairs == []
        assert tagging.issuer_tag_repo.pairs == []


class TestInstitutionDetection:

    def test_longer_word_does_not_trigger_shorter_alternate_name(self):
        assert find_alternative_name_matches("Contract awarded to ENAGAS", [("ENAG", ENAG_TAG_ID)]) == []

    def test_matches_are_deduplicated_per_tag(self):
        text = "Approved by the National Congress. Congress also resolved..."
        pairs = [("National Congress", CONGRESS_TAG_ID), ("Congress", CONGRESS_TAG_ID)]
        assert find_alternative_name_matches(text, pairs) == [CONGRESS_TAG_ID]

    @pytest.mark.asyncio
    async def test_detect_institution_tags(self, tagging):
        matched = await tagging.detect_institution_tags(9, "ENAGAS and enag signed; the national congress ratified")

        assert matched == [ENAG_TAG_ID, CONGRESS_TAG_ID]
        assert tagging.document_tag_repo.pairs == [(9, ENAG_TAG_ID), (9, CONGRESS_TAG_ID)]

    @pytest.mark.asyncio
    async def test_lookup_table_is_loaded_once(self, tagging):
        await tagging.detect_institution_tags(9, "ENAG")
        await tagging.detect_institution_tags(10, "Congress")
        await tagging.detect_institution_tags(11, None)

        assert tagging.alternative_name_repo.calls == 1

    @pytest.mark.asyncio
    async def test_empty_text_matches_nothing(self, tagging):
        assert await tagging.detect_institution_tags(9, "") == []
        assert tagging.document_tag_repo.pairs == []


class TestSectionTags:

    @pytest.mark.asyncio
    async def test_legal_notices_rules(self, tagging, tag_repo):
        entry = SliceEntry(name="Legal Notices", path="legal.pdf")

        await tagging.apply_section_tags(5, entry)

        assert tag_repo.names_of(tagging.document_tag_repo.tag_ids(5)) == {"Legal Notices", "Tenders", "Gazette"}
        assert tag_repo.names_of(tagging.issuer_tag_repo.tag_ids(5)) == {"Various"}

    @pytest.mark.asyncio
    async def test_trademarks_rules(self, tagging, tag_repo):
        entry = SliceEntry(name="Trademarks", path="marks.pdf")

        await tagging.apply_section_tags(5, entry)

        assert tag_repo.names_of(tagging.document_tag_repo.tag_ids(5)) == {
            "Trademarks",
            "Commercial",
            "Intellectual Property",
            "Gazette",
        }
        assert tag_repo.names_of(tagging.issuer_tag_repo.tag_ids(5)) == {"Various"}

    @pytest.mark.asyncio
    async def test_issue_uses_slicer_tags_and_institutions(self, tagging, tag_repo):
        entry = SliceEntry(
            name="Decree 12-2025",
            path="decree.pdf",
            tag="Tenders",
            issuer="National Gazette Authority",
            materia="Commercial",
            institutions=["Trademarks", "Unknown Agency", "Trademarks"],
        )

        await tagging.apply_section_tags(5, entry)

        assert tag_repo.names_of(tagging.document_tag_repo.tag_ids(5)) == {
            "Tenders",
            "Gazette",
            "Commercial",
            "Trademarks",
        }
        assert tag_repo.names_of(tagging.issuer_tag_repo.tag_ids(5)) == {"National Gazette Authority"}

    @pytest.mark.asyncio
    async def test_applying_section_tags_twice_creates_no_duplicates(self, tagging):
        entry = SliceEntry(name="Legal Notices", path="legal.pdf", tag="Gazette")

        await tagging.apply_section_tags(5, entry)
        first_pass = list(tagging.document_tag_repo.pairs)
        await tagging.apply_section_tags(5, entry)

        assert tagging.document_tag_repo.pairs == first_pass
        assert len(set(first_pass)) == len(first_pass)

    @pytest.mark.asyncio
    async def test_gazette_tags(self, tagging, tag_repo):
        await tagging.apply_gazette_tags(1)

        assert tag_repo.names_of(tagging.document_tag_repo.tag_ids(1)) == {"Gazette"}
        assert tag_repo.names_of(tagging.issuer_tag_repo.tag_ids(1)) == {"National Gazette Authority"}
