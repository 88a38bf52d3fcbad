from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from plagcheck.config import MIN_TEXT_LENGTH
from plagcheck.schemas.plagiarism_schemas import (
    CheckTextRequest, ErrorResponse, PlagiarismReport,
)
from plagcheck.utils.checker_utils import run_check
from plagcheck.utils.file_utils import TextExtractionError, extract_text_from_file
from ..logger import logger

router = APIRouter(
    prefix="/api",
    tags=["plagiarism-check"],
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("/plagiarism-check", response_model=PlagiarismReport)
async def check_text(payload: CheckTextRequest):
    logger.info(f"Starting plagiarism check for text length: {len(payload.text)}")
    # the pipeline blocks on network I/O; keep it off the event loop
    return await run_in_threadpool(run_check, payload.text)


@router.post("/plagiarism-check/file", response_model=PlagiarismReport)
async def check_file(file: UploadFile = File(...)):
    raw = await file.read()
    try:
        text = extract_text_from_file(raw, file.filename or "")
    except TextExtractionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if len(text) < MIN_TEXT_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Extracted text is shorter than {MIN_TEXT_LENGTH} characters",
        )

    logger.info(f"Starting plagiarism check for {file.filename} ({len(text)} chars)")
    return await run_in_threadpool(run_check, text)
