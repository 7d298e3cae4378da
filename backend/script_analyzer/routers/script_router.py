"""
Script Router

Handles script file uploads (.txt, .fdx) and returns their text for analysis.
"""

from fastapi import APIRouter, UploadFile, File, HTTPException, status
import logging

from script_analyzer.core.config import settings
from script_analyzer.core.errors import FileReadError
from script_analyzer.schemas.analysis import ScriptUploadResponse
from script_analyzer.services.script_file_reader import ScriptFileReader

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/scripts", tags=["Scripts"])


@router.post("/upload", response_model=ScriptUploadResponse)
async def upload_script_file(file: UploadFile = File(...)):
    """
    Read an uploaded script file and return its text content.
    """
    try:
        content = await ScriptFileReader.read_upload(file, settings.MAX_UPLOAD_BYTES)
        logger.info(f"Read script upload {file.filename}: {len(content)} chars")

        return ScriptUploadResponse(
            filename=file.filename or "",
            content=content,
            character_count=len(content)
        )

    except FileReadError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )
    finally:
        await file.close()
