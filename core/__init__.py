# core/__init__.py

from .parsing import (
    extract_text_from_bytes,
    extract_text_from_pdf_bytes,
    extract_text_from_docx_bytes,
)

from .analysis import AnalysisError, analyze_resume_complete
from .memory import (
    DuplicateUserError,
    DuckDBStorage,
    MemStorage,
    Storage,
    get_storage,
)
from .models import AnalysisResult, AnalyzeResumeRequest, ResumeAnalysis
