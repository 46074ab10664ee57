"""Adapter for the gazette metadata extractor program."""

from typing import Optional

from gazette_ingest.core.config import PipelineSettings, settings
from gazette_ingest.schemas.extraction import MetadataResult
from gazette_ingest.services.extraction.process_adapter import ExtractionProcessAdapter


class MetadataAdapter(ExtractionProcessAdapter[MetadataResult]):
    """Reads the gazette number and publication date off the PDF.

    Invocation: ``<python> <metadata_script> <pdf_path>``.
    """

    name = "gazette metadata extractor"
    payload_model = MetadataResult

    @classmethod
    def from_settings(cls, pipeline_settings: Optional[PipelineSettings] = None) -> "MetadataAdapter":
        config = pipeline_settings or settings.pipeline
        return cls(
            command=[config.python_executable, config.metadata_script],
            timeout=config.metadata_timeout,
        )

    async def extract(self, pdf_path: str) -> MetadataResult:
        return await self.invoke(pdf_path)
