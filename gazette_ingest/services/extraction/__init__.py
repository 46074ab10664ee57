"""External extraction program adapters."""

from gazette_ingest.services.extraction.metadata import MetadataAdapter
from gazette_ingest.services.extraction.process_adapter import ExtractionProcessAdapter
from gazette_ingest.services.extraction.slicer import SlicerAdapter

__all__ = ["ExtractionProcessAdapter", "MetadataAdapter", "SlicerAdapter"]
