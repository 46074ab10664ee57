import datetime as dt

import pytest

from gazette_ingest.database.models import Document
from gazette_ingest.schemas.extraction import SliceEntry, SliceResult
from gazette_ingest.services.materializer import DocumentMaterializer
from gazette_ingest.services.tagging_service import TaggingService
from tests.fakes import (
    FakeAlternativeTagNameRepository,
    FakeAssociationRepository,
    FakeAttachmentStore,
    FakeDocumentRepository,
    FakeDocumentTypeRepository,
    FakeTagRepository,
)

PARENT_ID = 1


@pytest.fixture
def parent():
    return Document(
        id=PARENT_ID,
        name="Gazette",
        issue_id="45",
        publication_number="45",
        publication_date=dt.date(2025, 9, 1),
    )


@pytest.fixture
def document_repo(parent):
    return FakeDocumentRepository([parent])


@pytest.fixture
def store():
    return FakeAttachmentStore()


@pytest.fixture
def output_root(tmp_path, sample_pdf_content):
    gazette_dir = tmp_path / str(PARENT_ID)
    gazette_dir.mkdir()
    for filename in ("marks.pdf", "legal.pdf", "decree.pdf", "agreement.pdf"):
        (gazette_dir / filename).write_bytes(sample_pdf_content)
    return tmp_path


@pytest.fixture
def materializer(document_repo, store, output_root):
    tagging = TaggingService(
        tag_repo=FakeTagRepository(),
        document_tag_repo=FakeAssociationRepository(),
        issuer_tag_repo=FakeAssociationRepository(),
        alternative_name_repo=FakeAlternativeTagNameRepository(),
    )
    return DocumentMaterializer(
        document_repo=document_repo,
        document_type_repo=FakeDocumentTypeRepository(),
        tagging_service=tagging,
        attachment_store=store,
        output_root=str(output_root),
    )


def entries():
    return [
        SliceEntry(name="Trademarks", path="marks.pdf", start_page=1, end_page=2, position=0, full_text="Marks"),
        SliceEntry(name="Legal Notices", path="legal.pdf", start_page=3, end_page=6, position=1),
        SliceEntry(
            name="Decree 12-2025",
            path="decree.pdf",
            start_page=7,
            end_page=8,
            position=2,
            full_text="  4. Decree text",
            short_description="1) Reform of the tax code",
            description="-- The congress decrees",
        ),
    ]


@pytest.mark.asyncio
async def test_one_section_per_entry_with_source_positions(materializer, document_repo, parent):
    outcome = await materializer.materialize(parent, SliceResult(page_count=9, files=entries()))

    sections = document_repo.sections()
    assert outcome.created == 3
    assert outcome.errors == []
    assert outcome.section_ids == [section.id for section in sections]
    assert [section.position for section in sections] == [0, 1, 2]
    assert [(section.start_page, section.end_page) for section in sections] == [(1, 2), (3, 6), (7, 8)]
    assert all(section.publication_number == "45" for section in sections)
    assert all(section.publication_date == dt.date(2025, 9, 1) for section in sections)
    assert all(section.publish for section in sections)


@pytest.mark.asyncio
async def test_fixed_sections_get_generated_descriptions(materializer, document_repo, parent):
    await materializer.materialize(parent, SliceResult(page_count=9, files=entries()[:2]))

    trademarks, legal = document_repo.sections()
    assert trademarks.name == "Trademarks"
    assert trademarks.issue_id is None
    assert trademarks.short_description == "This is the Trademarks section of Gazette 45 dated 2025-09-01."
    assert trademarks.description == ""
    assert trademarks.url == "trademarks-45"
    assert legal.name == "Legal Notices"
    assert legal.url == "legalnotices-45"
    assert legal.document_type_id == 2


@pytest.mark.asyncio
async def test_issue_section_uses_cleaned_slicer_text(materializer, document_repo, parent):
    await materializer.materialize(parent, SliceResult(page_count=9, files=entries()[2:]))

    (issue,) = document_repo.sections()
    assert issue.name is None
    assert issue.issue_id == "Decree 12-2025"
    assert issue.short_description == "Reform of the tax code"
    assert issue.description == "The congress decrees"
    assert issue.full_text == "Decree text"
    assert issue.url == "decree122025-45"
    assert issue.document_type_id == 3


@pytest.mark.asyncio
async def test_attachments_are_stored_under_gazette_and_section(materializer, document_repo, store, parent):
    await materializer.materialize(parent, SliceResult(page_count=9, files=entries()[:1]))

    (section,) = document_repo.sections()
    assert store.stored[0]["filename"] == "Trademarks.pdf"
    assert store.stored[0]["content_type"] == "application/pdf"
    assert store.stored[0]["key_prefix"] == f"{PARENT_ID}/{section.id}"
    assert section.original_file == f"gazettes/{PARENT_ID}/{section.id}/Trademarks.pdf"


@pytest.mark.asyncio
async def test_attachment_failure_does_not_stop_the_batch(materializer, document_repo, store, parent):
    store.fail_for = {"Legal Notices.pdf"}
    files = entries() + [SliceEntry(name="Agreement 3", path="missing.pdf", position=3)]

    outcome = await materializer.materialize(parent, SliceResult(page_count=9, files=files))

    assert outcome.created == 4
    assert len(outcome.errors) == 2
    assert outcome.errors[0].startswith("Legal Notices:")
    assert outcome.errors[1].startswith("Agreement 3:")
    sections = document_repo.sections()
    assert [section.original_file is not None for section in sections] == [True, False, True, False]
    assert sections[1].url == "legalnotices-45"


@pytest.mark.asyncio
async def test_paths_outside_the_gazette_directory_are_rejected(materializer, document_repo, store, parent):
    files = [SliceEntry(name="Decree 1", path="../../etc/passwd", position=0)]

    outcome = await materializer.materialize(parent, SliceResult(page_count=1, files=files))

    assert outcome.created == 1
    assert "escapes" in outcome.errors[0]
    assert store.stored == []


@pytest.mark.asyncio
async def test_sections_are_tagged(materializer, parent):
    await materializer.materialize(parent, SliceResult(page_count=9, files=entries()[1:2]))

    tagging = materializer.tagging_service
    section_id = PARENT_ID + 1
    assert tagging.tag_repo.names_of(tagging.document_tag_repo.tag_ids(section_id)) == {
        "Legal Notices",
        "Tenders",
        "Gazette",
    }
    assert tagging.tag_repo.names_of(tagging.issuer_tag_repo.tag_ids(section_id)) == {"Various"}
