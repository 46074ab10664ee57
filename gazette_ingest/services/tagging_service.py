"""Rule-driven tagging of gazette and section documents."""

from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from gazette_ingest.repositories.tag_repository import (
    AlternativeTagNameRepository,
    DocumentTagRepository,
    IssuerDocumentTagRepository,
    TagRepository,
)
from gazette_ingest.schemas.extraction import SliceEntry
from gazette_ingest.services.constants import (
    GAZETTE_ISSUER_TAG,
    GAZETTE_TAG,
    SECTION_TAG_RULES,
)
from gazette_ingest.utils.logging import get_logger
from gazette_ingest.utils.text import is_word_in_text

LOGGER = get_logger(__name__)


def find_alternative_name_matches(
    full_text: Optional[str],
    alternative_names: Iterable[Tuple[str, int]],
) -> List[int]:
    """Return the canonical tag ids whose alternate name occurs as a whole word.

    Args:
        full_text: Section text as produced by OCR
        alternative_names: (alternative_name, tag_id) pairs

    Returns:
        Matching tag ids, in lookup table order, without duplicates
    """
    if not full_text:
        return []
    text = full_text.lower()
    matches: Dict[int, None] = {}
    for alternative_name, tag_id in alternative_names:
        if is_word_in_text(alternative_name, text):
            matches[tag_id] = None
    return list(matches)


class TaggingService:
    """Creates tag and issuer-tag associations without ever duplicating a pair.

    Tag names are resolved through the tag table; unknown or empty names are
    silently skipped. Lookups are cached for the lifetime of the instance,
    which is one gazette job.
    """

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        *,
        tag_repo: Optional[TagRepository] = None,
        document_tag_repo: Optional[DocumentTagRepository] = None,
        issuer_tag_repo: Optional[IssuerDocumentTagRepository] = None,
        alternative_name_repo: Optional[AlternativeTagNameRepository] = None,
    ):
        self.tag_repo = tag_repo or TagRepository(session)
        self.document_tag_repo = document_tag_repo or DocumentTagRepository(session)
        self.issuer_tag_repo = issuer_tag_repo or IssuerDocumentTagRepository(session)
        self.alternative_name_repo = alternative_name_repo or AlternativeTagNameRepository(session)
        self._tag_ids: Dict[str, Optional[int]] = {}
        self._alternative_names: Optional[List[Tuple[str, int]]] = None

    async def _resolve_tag_id(self, tag_name: Optional[str]) -> Optional[int]:
        if not tag_name or not tag_name.strip():
            return None
        if tag_name not in self._tag_ids:
            tag = await self.tag_repo.get_by_name(tag_name)
            self._tag_ids[tag_name] = tag.id if tag else None
            if tag is None:
                LOGGER.debug(f"Tag '{tag_name}' does not exist, skipping")
        return self._tag_ids[tag_name]

    async def apply_tag(self, document_id: int, tag_name: Optional[str]) -> bool:
        """Attach a general tag by name.

        Returns:
            True if a new association was created
        """
        tag_id = await self._resolve_tag_id(tag_name)
        if tag_id is None:
            return False
        return await self.document_tag_repo.ensure(document_id, tag_id)

    async def apply_issuer_tag(self, document_id: int, issuer_name: Optional[str]) -> bool:
        """Attach an issuer tag by name.

        Returns:
            True if a new association was created
        """
        tag_id = await self._resolve_tag_id(issuer_name)
        if tag_id is None:
            return False
        return await self.issuer_tag_repo.ensure(document_id, tag_id)

    async def detect_institution_tags(self, document_id: int, full_text: Optional[str]) -> List[int]:
        """Tag a document with every institution whose alternate name its text mentions.

        Returns:
            Tag ids matched in the text
        """
        if self._alternative_names is None:
            self._alternative_names = await self.alternative_name_repo.list_names()

        matched = find_alternative_name_matches(full_text, self._alternative_names)
        for tag_id in matched:
            await self.document_tag_repo.ensure(document_id, tag_id)

        if matched:
            LOGGER.debug(
                f"Detected {len(matched)} institution tags for document {document_id}",
                extra={"document_id": document_id, "tag_ids": matched},
            )
        return matched

    async def apply_section_tags(self, document_id: int, entry: SliceEntry) -> None:
        """Apply the slicer-provided tags and the fixed rules for the entry's category."""
        await self.apply_tag(document_id, entry.tag)
        await self.apply_issuer_tag(document_id, entry.issuer)
        await self.apply_tag(document_id, GAZETTE_TAG)
        if entry.materia and entry.materia.strip():
            await self.apply_tag(document_id, entry.materia)

        rules = SECTION_TAG_RULES[entry.category.kind]
        for issuer_name in rules["issuer_tags"]:
            await self.apply_issuer_tag(document_id, issuer_name)
        for tag_name in rules["tags"]:
            await self.apply_tag(document_id, tag_name)

        for institution in entry.institutions:
            await self.apply_tag(document_id, institution)

    async def apply_gazette_tags(self, document_id: int) -> None:
        """Apply the fixed tags of a parent gazette document."""
        await self.apply_issuer_tag(document_id, GAZETTE_ISSUER_TAG)
        await self.apply_tag(document_id, GAZETTE_TAG)
