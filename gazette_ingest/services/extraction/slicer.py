"""Adapter for the gazette slicer program."""

from typing import Optional

from gazette_ingest.core.config import PipelineSettings, settings
from gazette_ingest.schemas.extraction import SliceResult
from gazette_ingest.services.extraction.process_adapter import ExtractionProcessAdapter


class SlicerAdapter(ExtractionProcessAdapter[SliceResult]):
    """Cuts a gazette PDF into section files under ``<output_root>/<document_id>/``.

    Invocation: ``<python> <slicer_script> <pdf_path> <output_root> <document_id>``.
    """

    name = "gazette slicer"
    payload_model = SliceResult

    @classmethod
    def from_settings(cls, pipeline_settings: Optional[PipelineSettings] = None) -> "SlicerAdapter":
        config = pipeline_settings or settings.pipeline
        return cls(
            command=[config.python_executable, config.slicer_script],
            timeout=config.slicer_timeout,
        )

    async def slice(self, pdf_path: str, output_root: str, document_id: int) -> SliceResult:
        return await self.invoke(pdf_path, output_root, str(document_id))
