"""Fixed names used when tagging and typing gazette documents.

Tags and document types are looked up by these names; a missing row makes the
corresponding step a no-op.
"""

from gazette_ingest.schemas.extraction import SectionKind

GAZETTE_DOCUMENT_NAME = "Gazette"

GAZETTE_TAG = "Gazette"
GAZETTE_ISSUER_TAG = "National Gazette Authority"
VARIOUS_ISSUER_TAG = "Various"

SECTION_TAG_RULES = {
    SectionKind.TRADEMARKS: {
        "issuer_tags": [VARIOUS_ISSUER_TAG],
        "tags": ["Trademarks", "Commercial", "Intellectual Property"],
    },
    SectionKind.LEGAL_NOTICES: {
        "issuer_tags": [VARIOUS_ISSUER_TAG],
        "tags": ["Legal Notices", "Tenders"],
    },
    SectionKind.ISSUE: {
        "issuer_tags": [],
        "tags": [],
    },
}

SECTION_DOCUMENT_TYPES = {
    SectionKind.TRADEMARKS: "Trademarks",
    SectionKind.LEGAL_NOTICES: "Legal Notices",
    SectionKind.ISSUE: "Gazette Section",
}

PDF_CONTENT_TYPE = "application/pdf"
