"""
Bank Return API Endpoints

Provides endpoints for:
- Decoding an uploaded CNAB bank return file
- Listing the banks the decoder supports

Uploaded files are staged in UPLOAD_DIR only for the duration of the
request and are always removed afterwards.
"""
import logging
import uuid
from pathlib import Path
from typing import Annotated, List

import aiofiles
import aiofiles.os
from fastapi import APIRouter, File, HTTPException, UploadFile

from app.core.config import settings
from app.schemas.bank_return import BankLayoutResponse, BankReturnResponse
from app.services.bank.returns import (
    BankReturnParser,
    EmptyFileError,
    UnknownBankError,
    registered_layouts,
)

logger = logging.getLogger(__name__)

router = APIRouter()

parser = BankReturnParser()


def _staging_path(extension: str) -> Path:
    """Uniquely named file in the staging directory."""
    staging_dir = Path(settings.UPLOAD_DIR)
    staging_dir.mkdir(parents=True, exist_ok=True)
    return staging_dir / f"{uuid.uuid4()}{extension}"


async def _write_staged(staged_path: Path, content: bytes) -> None:
    async with aiofiles.open(staged_path, "wb") as f:
        await f.write(content)


async def _discard_staged(staged_path: Path) -> None:
    if await aiofiles.os.path.exists(staged_path):
        await aiofiles.os.remove(staged_path)


@router.post("/decode", response_model=BankReturnResponse)
async def decode_bank_return(
    file: Annotated[UploadFile, File(..., description="CNAB return file (.RET)")],
):
    """
    Decode a bank return file.

    The response carries the bank, account identity, generation timestamp,
    balances and itemized movements. Fields that could not be recovered are
    null and explained in `diagnostics`.
    """
    filename = file.filename or "retorno.ret"
    extension = Path(filename).suffix.lower()
    if extension not in settings.allowed_return_extensions_list:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Allowed: {', '.join(settings.allowed_return_extensions_list)}",
        )

    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {settings.MAX_UPLOAD_SIZE // (1024*1024)}MB",
        )

    staged_path = _staging_path(extension)
    try:
        await _write_staged(staged_path, content)
        async with aiofiles.open(staged_path, "rb") as f:
            staged_content = await f.read()
        statement = parser.parse(staged_content, filename=filename)
    except EmptyFileError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnknownBankError as e:
        raise HTTPException(status_code=422, detail=str(e))
    finally:
        await _discard_staged(staged_path)

    logger.info(
        "Decoded %s: bank=%s entries=%d diagnostics=%d",
        filename, statement.bank.code, len(statement.details), len(statement.diagnostics),
    )
    return BankReturnResponse.from_statement(statement, filename=filename)


@router.get("/banks", response_model=List[BankLayoutResponse])
async def list_supported_banks():
    """List the bank layouts the decoder recognizes, in detection order."""
    return [BankLayoutResponse.from_layout(layout) for layout in registered_layouts()]
