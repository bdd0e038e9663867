# api/main.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core import config
from core.analysis import AnalysisError, analyze_resume_complete
from core.memory import get_storage
from core.models import (
    AnalysisResponse,
    AnalyzeResumeRequest,
    ExtractedText,
    ResumeAnalysis,
)
from core.parsing import (
    extract_text_from_bytes,
    extract_text_from_pdf_bytes,
    looks_like_pdf,
)

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

TEXT_SUFFIXES = (".pdf", ".docx", ".txt")

# --------------------------------------------------
# APP
# --------------------------------------------------
app = FastAPI(
    title="Resume Insights API",
    description=(
        "Summarize, rate and match resumes against a job description, and "
        "draft cover letters, interview questions and LinkedIn summaries."
    ),
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": errors},
    )


# --------------------------------------------------
# HELPERS
# --------------------------------------------------
async def _read_upload(upload: UploadFile) -> bytes:
    data = await upload.read()
    if len(data) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large (limit {config.MAX_UPLOAD_BYTES // (1024 * 1024)}MB)",
        )
    return data


# --------------------------------------------------
# ROUTES
# --------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/debug/env")
def debug_env():
    """Which LLM keys are configured. Never returns the values."""
    return {
        "env": config.ENV,
        "apiKeys": config.api_key_status(),
        "llmBaseUrl": bool(config.LLM_BASE_URL),
        "storageBackend": config.STORAGE_BACKEND,
    }


@app.post("/api/extract-pdf", response_model=ExtractedText)
async def extract_pdf(pdf: Optional[UploadFile] = File(None)):
    if pdf is None:
        raise HTTPException(status_code=400, detail="No PDF file provided")

    is_pdf = pdf.content_type == "application/pdf" or (
        pdf.filename or ""
    ).lower().endswith(".pdf")
    if not is_pdf:
        raise HTTPException(status_code=400, detail="Only PDF files are allowed")

    data = await _read_upload(pdf)
    if not looks_like_pdf(data):
        raise HTTPException(status_code=400, detail="Only PDF files are allowed")

    text = extract_text_from_pdf_bytes(data).strip()
    if not text:
        raise HTTPException(
            status_code=400,
            detail=(
                "Could not extract text from PDF. "
                "Please ensure the PDF contains readable text."
            ),
        )
    return ExtractedText(text=text)


@app.post("/api/extract-text", response_model=ExtractedText)
async def extract_text(file: Optional[UploadFile] = File(None)):
    """Upload a pdf/docx/txt resume or job description and get its text."""
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in TEXT_SUFFIXES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type. Allowed: {', '.join(TEXT_SUFFIXES)}",
        )

    data = await _read_upload(file)
    text = extract_text_from_bytes(file.filename, data).strip()
    if not text:
        raise HTTPException(status_code=400, detail="Could not extract text from file.")
    return ExtractedText(text=text)


@app.post("/api/analyze-resume", response_model=AnalysisResponse)
def analyze_resume(req: AnalyzeResumeRequest):
    try:
        result = analyze_resume_complete(req.resume_text, req.job_description)
    except AnalysisError as e:
        raise HTTPException(status_code=500, detail=str(e))

    try:
        stored = get_storage().create_resume_analysis(
            resume_text=req.resume_text,
            job_description=req.job_description,
            result=result,
        )
    except Exception:
        logger.exception("Storing resume analysis failed")
        raise HTTPException(status_code=500, detail="Failed to store analysis")
    logger.info("Stored resume analysis %s", stored.id)

    return AnalysisResponse(id=stored.id, **result.model_dump())


@app.get("/api/analyses", response_model=List[ResumeAnalysis])
def list_analyses(limit: int = Query(50, ge=1, le=500)):
    """Most recent analyses first."""
    try:
        return get_storage().list_resume_analyses(limit=limit)
    except Exception:
        logger.exception("Listing resume analyses failed")
        raise HTTPException(status_code=500, detail="Failed to list analyses")


@app.get("/api/analysis/{analysis_id}", response_model=ResumeAnalysis)
def get_analysis(analysis_id: str):
    try:
        analysis = get_storage().get_resume_analysis(analysis_id)
    except Exception:
        logger.exception("Fetching resume analysis %s failed", analysis_id)
        raise HTTPException(status_code=500, detail="Failed to retrieve analysis")
    if analysis is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return analysis
