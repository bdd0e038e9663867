# core/generation.py
from __future__ import annotations

import copy
import logging
import re
from typing import Dict, Any, List, Optional

from . import config, llm

logger = logging.getLogger(__name__)

# ============================================================
# FALLBACKS (returned when a call fails)
# ============================================================

SUMMARY_FALLBACK = "Unable to generate summary"
RATING_FALLBACK: Dict[str, Any] = {
    "rating": 5,
    "explanation": "Unable to rate resume due to processing error",
}
RATING_EXPLANATION_MISSING = "Unable to provide rating explanation"
SKILLS_FALLBACK: Dict[str, List[str]] = {"skills": [], "highlights": []}
JOB_MATCH_FALLBACK: Dict[str, Any] = {"match_score": 0, "missing_keywords": []}
SUGGESTIONS_FALLBACK = ["Unable to generate improvement suggestions"]
COVER_LETTER_FALLBACK = "Unable to generate cover letter"
QUESTIONS_FALLBACK = ["Unable to generate interview questions"]
LINKEDIN_FALLBACK = "Unable to generate LinkedIn summary"

MAX_SUGGESTIONS = 5
MAX_QUESTIONS = 7

BULLET_RE = re.compile(r"^[-•*]\s*")
LIST_MARKER_RE = re.compile(r"^(?:[-•*]\s*|\d+[.)]\s+|\d+\s+[-:]\s+)")

# ============================================================
# HELPERS
# ============================================================


def _clamp(value: Any, low: int, high: int, default: int) -> int:
    """Numeric model output -> int within [low, high]; falsy means default."""
    number = float(value or default)
    return int(min(high, max(low, round(number))))


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    return [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]


def _split_lines(text: str, marker: re.Pattern) -> List[str]:
    out: List[str] = []
    for line in (text or "").splitlines():
        line = line.strip()
        if not line:
            continue
        line = marker.sub("", line).strip()
        if line:
            out.append(line)
    return out


def _job_description_block(job_description: Optional[str]) -> str:
    if not job_description:
        return ""
    return f"Job Description:\n{job_description}\n"


# ============================================================
# GENERATORS
# ============================================================


def generate_professional_summary(resume_text: str) -> str:
    prompt = (
        "Based on the following resume, write a concise 2-line professional "
        "summary that highlights the candidate's key strengths and experience:\n\n"
        f"Resume:\n{resume_text}\n\n"
        "Provide only the summary, no additional text."
    )
    try:
        text = llm.chat_text(prompt, config.LLM_FAST_MODEL)
    except Exception:
        logger.exception("Error generating professional summary")
        return SUMMARY_FALLBACK
    return text or SUMMARY_FALLBACK


def rate_resume(resume_text: str) -> Dict[str, Any]:
    """
    Rate the resume 1-10.
    Returns {"rating": int, "explanation": str}; a missing or zero rating
    becomes 5 and anything outside the range is clamped.
    """
    system = (
        "You are a professional resume expert. Rate the given resume on a "
        "scale of 1-10 and provide a brief explanation.\n"
        "Consider factors like: clarity, relevant experience, quantifiable "
        "achievements, formatting, keyword optimization, and overall impact.\n"
        "You must respond ONLY with a valid JSON object.\n"
        "Keys:\n"
        '  "rating": integer 1-10,\n'
        '  "explanation": string (brief explanation).\n'
    )
    try:
        data = llm.chat_json(system, resume_text, config.LLM_SMART_MODEL)
        return {
            "rating": _clamp(data.get("rating"), 1, 10, 5),
            "explanation": str(data.get("explanation") or "").strip()
            or RATING_EXPLANATION_MISSING,
        }
    except Exception:
        logger.exception("Error rating resume")
        return dict(RATING_FALLBACK)


def extract_skills_and_highlights(resume_text: str) -> Dict[str, List[str]]:
    system = (
        "Extract key skills and career highlights from the resume.\n"
        "Skills should be technical and professional competencies.\n"
        "Highlights should be specific achievements with quantifiable results "
        "when possible.\n"
        "You must respond ONLY with a valid JSON object.\n"
        "Keys:\n"
        '  "skills": array of short strings,\n'
        '  "highlights": array of short strings.\n'
    )
    try:
        data = llm.chat_json(system, resume_text, config.LLM_SMART_MODEL)
        return {
            "skills": _string_list(data.get("skills")),
            "highlights": _string_list(data.get("highlights")),
        }
    except Exception:
        logger.exception("Error extracting skills and highlights")
        return copy.deepcopy(SKILLS_FALLBACK)


def generate_job_match_score(resume_text: str, job_description: str) -> Dict[str, Any]:
    system = (
        "Compare the resume against the job description and provide:\n"
        "1. A match score from 0-100 based on skills, experience, and "
        "requirements alignment\n"
        "2. A list of important keywords/skills from the job description that "
        "are missing from the resume\n"
        "You must respond ONLY with a valid JSON object.\n"
        "Keys:\n"
        '  "matchScore": integer 0-100,\n'
        '  "missingKeywords": array of short strings.\n'
    )
    user = f"Resume:\n{resume_text}\n\nJob Description:\n{job_description}"
    try:
        data = llm.chat_json(system, user, config.LLM_SMART_MODEL)
        return {
            "match_score": _clamp(data.get("matchScore"), 0, 100, 0),
            "missing_keywords": _string_list(data.get("missingKeywords")),
        }
    except Exception:
        logger.exception("Error generating job match score")
        return copy.deepcopy(JOB_MATCH_FALLBACK)


def generate_improvement_suggestions(
    resume_text: str, job_description: Optional[str] = None
) -> List[str]:
    prompt = (
        f"Analyze the resume{' and job description' if job_description else ''} "
        "and provide 3-5 specific, actionable improvement suggestions.\n"
        "Focus on concrete steps the candidate can take to enhance their resume.\n\n"
        f"Resume:\n{resume_text}\n\n"
        f"{_job_description_block(job_description)}\n"
        "Provide suggestions as a simple list, one suggestion per line."
    )
    try:
        text = llm.chat_text(prompt, config.LLM_FAST_MODEL)
    except Exception:
        logger.exception("Error generating improvement suggestions")
        return list(SUGGESTIONS_FALLBACK)

    suggestions = _split_lines(text, BULLET_RE)[:MAX_SUGGESTIONS]
    return suggestions or list(SUGGESTIONS_FALLBACK)


def generate_cover_letter(resume_text: str, job_description: str) -> str:
    prompt = (
        "Write a professional, tailored cover letter based on the resume and "
        "job description.\n"
        "The cover letter should be personalized, highlight relevant "
        "experience, and demonstrate enthusiasm for the role.\n"
        "Keep it concise but impactful (3-4 paragraphs).\n\n"
        f"Resume:\n{resume_text}\n\n"
        f"Job Description:\n{job_description}\n\n"
        'Write a complete cover letter starting with "Dear Hiring Manager," '
        'and ending with "Sincerely,".'
    )
    try:
        text = llm.chat_text(prompt, config.LLM_SMART_MODEL)
    except Exception:
        logger.exception("Error generating cover letter")
        return COVER_LETTER_FALLBACK
    return text or COVER_LETTER_FALLBACK


def generate_interview_questions(
    resume_text: str, job_description: Optional[str] = None
) -> List[str]:
    prompt = (
        f"Based on the resume{' and job description' if job_description else ''}, "
        "generate 5-7 relevant interview questions that the candidate should "
        "prepare for.\n"
        "Include a mix of technical, behavioral, and role-specific questions.\n\n"
        f"Resume:\n{resume_text}\n\n"
        f"{_job_description_block(job_description)}\n"
        "Provide questions as a simple list, one per line."
    )
    try:
        text = llm.chat_text(prompt, config.LLM_FAST_MODEL)
    except Exception:
        logger.exception("Error generating interview questions")
        return list(QUESTIONS_FALLBACK)

    questions = [q for q in _split_lines(text, LIST_MARKER_RE) if "?" in q]
    return questions[:MAX_QUESTIONS] or list(QUESTIONS_FALLBACK)


def generate_linkedin_summary(resume_text: str) -> str:
    prompt = (
        "Create an engaging LinkedIn profile summary based on the resume.\n"
        "The summary should be professional yet personable, highlight key "
        "achievements, and include relevant emojis.\n"
        "Keep it concise but compelling (3-4 short paragraphs with line breaks).\n\n"
        f"Resume:\n{resume_text}\n\n"
        "Write a LinkedIn summary that starts with a strong opening line about "
        "the person's role/expertise."
    )
    try:
        text = llm.chat_text(prompt, config.LLM_FAST_MODEL)
    except Exception:
        logger.exception("Error generating LinkedIn summary")
        return LINKEDIN_FALLBACK
    return text or LINKEDIN_FALLBACK
