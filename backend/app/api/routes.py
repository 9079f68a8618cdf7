"""API routes for upload and conversion."""
import logging
import os
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse

from app.config import MAX_FILE_SIZE_BYTES, MAX_FILES_PER_BATCH
from app.conversion.errors import NoSuccessfulConversionsError, PackagingError, ValidationError
from app.conversion.formats import DEFAULT_REGISTRY
from app.conversion.models import ConversionRequest, InputFile
from app.conversion.service import ConversionService, get_conversion_service, remove_file
from app.packaging import discard_artifacts, package_artifacts

logger = logging.getLogger("converter.api")
router = APIRouter(prefix="/api", tags=["converter"])


def _to_input_file(upload: UploadFile) -> InputFile:
    size = upload.size
    if size is None:
        upload.file.seek(0, os.SEEK_END)
        size = upload.file.tell()
        upload.file.seek(0)
    return InputFile(
        filename=upload.filename,
        content_type=upload.content_type,
        size=size,
        stream=upload.file,
    )


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/limits")
def get_limits():
    """Return batch and per-file upload limits for the client."""
    return {
        "max_files_per_batch": MAX_FILES_PER_BATCH,
        "max_file_size_mb": MAX_FILE_SIZE_BYTES // (1024 * 1024),
        "max_file_size_bytes": MAX_FILE_SIZE_BYTES,
    }


@router.get("/formats")
def get_formats():
    return DEFAULT_REGISTRY.describe()


@router.post("/convert")
def convert_files(
    background_tasks: BackgroundTasks,
    target_format: str = Form("", alias="targetFormat"),
    files: Optional[list[UploadFile]] = File(None),
    svc: ConversionService = Depends(get_conversion_service),
):
    """Convert up to MAX_FILES_PER_BATCH files. One result comes back as-is, several as a zip."""
    request = ConversionRequest(target_format=target_format, files=[_to_input_file(f) for f in files or []])
    try:
        result = svc.run(request.target_format, request.files)
    except ValidationError as e:
        logger.info("Rejected batch: %s", e.reason)
        raise HTTPException(400, e.reason)
    except NoSuccessfulConversionsError as e:
        raise HTTPException(500, f"Server error: {e}")

    try:
        output = package_artifacts(result.artifacts, zip_dir=svc.temp_dir)
    except PackagingError as e:
        raise HTTPException(500, f"Server error: {e}")
    except OSError as e:
        logger.exception("Packaging failed: %s", e)
        discard_artifacts(result.artifacts)
        raise HTTPException(500, f"Server error: {e}")

    if not output.path.is_file() or not os.access(output.path, os.R_OK):
        remove_file(output.path, "download")
        raise HTTPException(500, f"Server error: cannot read converted file {output.filename}")

    background_tasks.add_task(remove_file, output.path, "download")
    return FileResponse(
        output.path,
        filename=output.filename,
        media_type=output.media_type,
        headers={"X-Skipped-Files": str(len(result.failures))},
    )
