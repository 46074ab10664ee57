"""Gazette processing API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from gazette_ingest.core.database import get_async_session as get_session
from gazette_ingest.core.exceptions import AppError, DocumentNotFoundError, ValidationError
from gazette_ingest.schemas.api import ApiResponse
from gazette_ingest.schemas.gazette import (
    ProcessGazetteRequest,
    ProcessingJobListResponse,
    ProcessingJobResponse,
)
from gazette_ingest.services.gazette_service import GazetteService
from gazette_ingest.utils.logging import get_logger
from gazette_ingest.utils.responses import create_api_response, create_error_detail

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_gazette_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> GazetteService:
    return GazetteService(db_session)


def _http_error(request: Request, title: str, status_code: int, detail: str) -> HTTPException:
    error_detail = create_error_detail(title=title, status=status_code, detail=detail, request=request)
    return HTTPException(status_code=status_code, detail=error_detail.model_dump(mode="json"))


@router.post(
    "/{document_id}/process",
    response_model=ApiResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Process an uploaded gazette",
    operation_id="process_gazette",
)
async def process_gazette(
    request: Request,
    document_id: int,
    payload: ProcessGazetteRequest,
    gazette_service: Annotated[GazetteService, Depends(get_gazette_service)] = None,
) -> ApiResponse:
    """Enqueue slicing, metadata extraction and section creation for a gazette."""
    try:
        job = await gazette_service.enqueue(document_id, payload.pdf_path, payload.user_id)
    except DocumentNotFoundError as e:
        raise _http_error(request, "Document Not Found", status.HTTP_404_NOT_FOUND, e.message)
    except ValidationError as e:
        raise _http_error(request, "Invalid Request", status.HTTP_400_BAD_REQUEST, e.message)
    except AppError as e:
        LOGGER.error(f"Gazette enqueue failed: {e.message}", exc_info=True)
        raise _http_error(
            request, "Gazette Processing Failed", status.HTTP_503_SERVICE_UNAVAILABLE, e.message
        )

    return create_api_response(
        data=ProcessingJobResponse.model_validate(job),
        message="Gazette processing enqueued",
        request=request,
    )


@router.get(
    "/jobs/dead-letter",
    response_model=ApiResponse,
    summary="List jobs awaiting manual inspection",
    operation_id="list_dead_letter_gazette_jobs",
)
async def list_dead_letter_jobs(
    request: Request,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    gazette_service: Annotated[GazetteService, Depends(get_gazette_service)] = None,
) -> ApiResponse:
    jobs = await gazette_service.list_dead_letter(skip=skip, limit=limit)
    data = ProcessingJobListResponse(
        total=len(jobs),
        jobs=[ProcessingJobResponse.model_validate(job) for job in jobs],
    )
    return create_api_response(data=data, message="Dead-lettered jobs retrieved", request=request)


@router.get(
    "/jobs/{job_id}",
    response_model=ApiResponse,
    summary="Get a gazette processing job",
    operation_id="get_gazette_job",
)
async def get_job(
    request: Request,
    job_id: int,
    gazette_service: Annotated[GazetteService, Depends(get_gazette_service)] = None,
) -> ApiResponse:
    job = await gazette_service.get_job(job_id)
    if job is None:
        raise _http_error(request, "Job Not Found", status.HTTP_404_NOT_FOUND, f"Job {job_id} not found")
    return create_api_response(
        data=ProcessingJobResponse.model_validate(job),
        message="Job retrieved",
        request=request,
    )
