# core/analysis.py
from __future__ import annotations

import copy
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional, Tuple

from . import config
from . import generation as gen
from .models import AnalysisResult

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = (
    "Failed to analyze resume. Please check your input and try again."
)


class AnalysisError(Exception):
    pass


def _tasks(
    resume_text: str, job_description: Optional[str]
) -> Dict[str, Tuple[Callable[[], Any], Any]]:
    """name -> (call, fallback). Job-specific tasks only run with a JD."""
    tasks: Dict[str, Tuple[Callable[[], Any], Any]] = {
        "summary": (
            lambda: gen.generate_professional_summary(resume_text),
            gen.SUMMARY_FALLBACK,
        ),
        "rating": (
            lambda: gen.rate_resume(resume_text),
            gen.RATING_FALLBACK,
        ),
        "skills": (
            lambda: gen.extract_skills_and_highlights(resume_text),
            gen.SKILLS_FALLBACK,
        ),
        "suggestions": (
            lambda: gen.generate_improvement_suggestions(resume_text, job_description),
            gen.SUGGESTIONS_FALLBACK,
        ),
        "interview_questions": (
            lambda: gen.generate_interview_questions(resume_text, job_description),
            gen.QUESTIONS_FALLBACK,
        ),
        "linkedin_summary": (
            lambda: gen.generate_linkedin_summary(resume_text),
            gen.LINKEDIN_FALLBACK,
        ),
    }
    if job_description:
        tasks["job_match"] = (
            lambda: gen.generate_job_match_score(resume_text, job_description),
            gen.JOB_MATCH_FALLBACK,
        )
        tasks["cover_letter"] = (
            lambda: gen.generate_cover_letter(resume_text, job_description),
            gen.COVER_LETTER_FALLBACK,
        )
    return tasks


def _resolve(name: str, future: Future, fallback: Any) -> Tuple[Any, bool]:
    """Future result, or (fallback, True) if the task raised."""
    try:
        return future.result(), False
    except Exception:
        logger.exception("Analysis task %s failed; using fallback", name)
        return copy.deepcopy(fallback), True


def analyze_resume_complete(
    resume_text: str, job_description: Optional[str] = None
) -> AnalysisResult:
    """
    Fan one submission out to every generator in parallel and merge the results.

    Each task is independent: a failing task contributes its fallback value
    instead of failing the submission. Without a job description the
    match score, missing keywords and cover letter stay None.
    """
    if job_description is not None and not job_description.strip():
        job_description = None

    started = time.monotonic()
    logger.debug("Resume analysis started: with_jd=%s", job_description is not None)
    try:
        tasks = _tasks(resume_text, job_description)
        results: Dict[str, Any] = {}
        fallbacks = 0

        workers = min(config.ANALYSIS_MAX_WORKERS, len(tasks))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                name: executor.submit(call) for name, (call, _) in tasks.items()
            }
            for name, future in futures.items():
                value, fell_back = _resolve(name, future, tasks[name][1])
                results[name] = value
                fallbacks += int(fell_back)

        rating = results["rating"]
        skills = results["skills"]
        job_match = results.get("job_match")

        result = AnalysisResult(
            summary=results["summary"],
            rating=rating["rating"],
            rating_explanation=rating["explanation"],
            skills=skills["skills"],
            highlights=skills["highlights"],
            match_score=job_match["match_score"] if job_match else None,
            missing_keywords=job_match["missing_keywords"] if job_match else None,
            suggestions=results["suggestions"],
            cover_letter=results.get("cover_letter"),
            interview_questions=results["interview_questions"],
            linkedin_summary=results["linkedin_summary"],
        )
    except Exception as e:
        logger.exception("Error in complete resume analysis")
        raise AnalysisError(ANALYSIS_FAILED_MESSAGE) from e

    logger.info(
        "Resume analysis finished: tasks=%d fallbacks=%d with_jd=%s elapsed=%.2fs",
        len(tasks),
        fallbacks,
        job_description is not None,
        time.monotonic() - started,
    )
    return result
