import time
import logging
from datetime import datetime, timezone
from typing import Any, Dict
from fastapi import APIRouter, UploadFile, File, Request, Body
from slowapi import Limiter
from slowapi.util import get_remote_address
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from app.core.config import get_settings
from app.core.errors import AppError, ErrorCodes
from app.core.sanitization import sanitize_filename, sanitize_for_logging
from app.core.schemas import ApiResponse, FileAnalysis, WorkflowAnalysis, WorkflowRequest
from app.core.storage import get_store
from app.services.analyzer import analyze_records, filter_result
from app.services.parser import parse_file, validate_file_extension

logger = logging.getLogger(__name__)

router = APIRouter()

# Shared with the app (app.state.limiter) so RateLimitExceeded is handled there
limiter = Limiter(key_func=get_remote_address)

SERVICE_VERSION = "1.0.0"


def _column_count(records) -> int:
    return len(records[0]) if records else 0


@router.get("/health")
async def health_check():
    return {
        "status": "success",
        "message": "Analysis service is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": SERVICE_VERSION,
    }


async def _read_upload(file: UploadFile) -> bytes:
    """Read an upload in chunks, stopping as soon as it exceeds the size limit."""
    limit = get_settings().max_file_size_bytes
    chunks = []
    size = 0
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > limit:
            raise AppError(
                ErrorCodes.FILE_TOO_LARGE,
                413,
                f"Maximum size is {get_settings().max_file_size_mb}MB."
            )
        chunks.append(chunk)
    return b"".join(chunks)


async def analyze_upload(file: UploadFile) -> Dict[str, Any]:
    """Validate, store, parse and analyze an uploaded file."""
    if file is None or not file.filename:
        raise AppError(ErrorCodes.FILE_MISSING, 400)

    safe_filename = sanitize_filename(file.filename)
    validate_file_extension(safe_filename)

    contents = await _read_upload(file)
    if not contents:
        raise AppError(ErrorCodes.FILE_EMPTY, 400)

    logger.info(f"Processing file: {sanitize_for_logging(safe_filename)}, size: {len(contents) / 1024:.2f}KB")

    store = get_store()
    await run_in_threadpool(store.save, safe_filename, contents)

    records = await run_in_threadpool(parse_file, contents, safe_filename)
    result = await run_in_threadpool(analyze_records, records)

    return FileAnalysis(
        file_name=safe_filename,
        row_count=len(records),
        column_count=_column_count(records),
        analysis=filter_result(result),
    ).model_dump()


def _upload_rate_limit() -> str:
    return f"{get_settings().rate_limit_per_minute}/minute"


@router.post("/analyze")
@limiter.limit(_upload_rate_limit)
async def upload_and_analyze(request: Request, file: UploadFile = File(None)):
    """
    Upload a CSV or Excel file and analyze it.

    Rate limited per client IP (RATE_LIMIT_PER_MINUTE).
    """
    data = await analyze_upload(file)
    return ApiResponse(message="Analysis complete", data=data)


@router.post("/workflow/analyze")
async def workflow_analyze(payload: Any = Body(None)):
    """
    Analyze rows posted as JSON.

    Body: {"data": [row, ...], "options": {"includeCharts": bool, "includeInsights": bool}}.
    Disabled sections are omitted from the analysis.
    """
    try:
        workflow = WorkflowRequest.model_validate(payload)
    except ValidationError as e:
        raise AppError(ErrorCodes.INVALID_PAYLOAD, 400, f"{e.error_count()} validation error(s).")

    result = await run_in_threadpool(analyze_records, workflow.data)

    data = WorkflowAnalysis(
        row_count=len(workflow.data),
        column_count=_column_count(workflow.data),
        analysis=filter_result(result, workflow.options),
        timestamp=datetime.now(timezone.utc).isoformat(),
        request_id=str(int(time.time() * 1000)),
    )
    return ApiResponse(message="Workflow analysis complete", data=data.model_dump())


@router.get("/history")
async def list_history():
    """List uploaded files with size and modification time."""
    files = await run_in_threadpool(get_store().list_files)
    return ApiResponse(data=[f.model_dump(mode="json") for f in files])


@router.delete("/file/{filename}")
async def delete_file(filename: str):
    deleted = await run_in_threadpool(get_store().delete, filename)
    if not deleted:
        raise AppError(ErrorCodes.FILE_NOT_FOUND, 404)
    return ApiResponse(message="File deleted")
