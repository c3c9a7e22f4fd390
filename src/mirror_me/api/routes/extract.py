"""Archive upload endpoint."""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ...common import get_logger
from ...extraction.config import MirrorMeConfig
from ...extraction.errors import (
    EntryDecodeError,
    EntryParseError,
    InvalidArchiveFormat,
    UnknownProviderError,
)
from ...extraction.orchestrator import extract
from ...extraction.providers import Provider, get_rule_set
from ...extraction.records import record_to_dict
from ...extraction.summary import summarize
from ..dependencies import get_app_config

router = APIRouter()
logger = get_logger(__name__)

INVALID_FORMAT = "Invalid format"


@router.post("/extract/{provider}")
async def extract_archive(
    provider: str,
    files: List[UploadFile] = File(...),
    config: MirrorMeConfig = Depends(get_app_config),
):
    """Extract a normalized record from an uploaded archive (first file only)."""
    try:
        selected = Provider.parse(provider)
    except UnknownProviderError as e:
        raise HTTPException(status_code=404, detail=e.message)

    upload = files[0]
    if len(files) > 1:
        logger.info(f"Using {upload.filename}, ignoring {len(files) - 1} additional file(s)")

    limit = config.api.max_upload_size_mb * 1024 * 1024
    data = await upload.read(limit + 1)
    if len(data) > limit:
        raise HTTPException(
            status_code=413,
            detail=f"Upload exceeds {config.api.max_upload_size_mb} MB",
        )

    try:
        record = await extract(
            data,
            get_rule_set(selected, config.providers),
            supported_extensions=config.extraction.supported_extensions,
            skip_malformed_entries=config.extraction.skip_malformed_entries,
        )
    except (InvalidArchiveFormat, EntryDecodeError, EntryParseError) as e:
        logger.warning(
            f"Rejected upload {upload.filename}: {e.message}",
            extra={"extra_fields": {"provider": selected.value, **e.log_fields()}},
        )
        raise HTTPException(status_code=422, detail=INVALID_FORMAT)

    return {
        "provider": selected.value,
        "record": record_to_dict(record),
        "summary": summarize(record),
    }
