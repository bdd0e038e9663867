# core/memory.py
from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import duckdb

from . import config
from .models import AnalysisResult, ResumeAnalysis, User, UserCreate

logger = logging.getLogger(__name__)

LIST_FIELDS = (
    "skills",
    "highlights",
    "missing_keywords",
    "suggestions",
    "interview_questions",
)

ANALYSIS_COLUMNS = [
    "id",
    "resume_text",
    "job_description",
    "summary",
    "rating",
    "rating_explanation",
    "skills",
    "highlights",
    "match_score",
    "missing_keywords",
    "suggestions",
    "cover_letter",
    "interview_questions",
    "linkedin_summary",
    "created_at",
]


class DuplicateUserError(ValueError):
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _build_record(
    resume_text: str, job_description: Optional[str], result: AnalysisResult
) -> ResumeAnalysis:
    return ResumeAnalysis(
        id=_new_id(),
        resume_text=resume_text,
        job_description=job_description or None,
        created_at=_utcnow(),
        **result.model_dump(),
    )


class Storage:
    """Persistence interface for analyses and users."""

    def create_resume_analysis(
        self,
        resume_text: str,
        job_description: Optional[str],
        result: AnalysisResult,
    ) -> ResumeAnalysis:
        raise NotImplementedError

    def get_resume_analysis(self, analysis_id: str) -> Optional[ResumeAnalysis]:
        raise NotImplementedError

    def list_resume_analyses(self, limit: int = 50) -> List[ResumeAnalysis]:
        raise NotImplementedError

    def create_user(self, user: UserCreate) -> User:
        raise NotImplementedError

    def get_user(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_user_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError


# ============================================================
# IN-MEMORY (default, volatile)
# ============================================================


class MemStorage(Storage):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._analyses: Dict[str, ResumeAnalysis] = {}
        self._users: Dict[str, User] = {}

    def create_resume_analysis(self, resume_text, job_description, result):
        record = _build_record(resume_text, job_description, result)
        with self._lock:
            self._analyses[record.id] = record
        return record

    def get_resume_analysis(self, analysis_id):
        with self._lock:
            return self._analyses.get(analysis_id)

    def list_resume_analyses(self, limit=50):
        with self._lock:
            records = list(reversed(self._analyses.values()))
        return records[:limit]

    def create_user(self, user):
        with self._lock:
            if any(u.username == user.username for u in self._users.values()):
                raise DuplicateUserError(f"Username already exists: {user.username}")
            new_user = User(id=_new_id(), username=user.username, password=user.password)
            self._users[new_user.id] = new_user
        return new_user

    def get_user(self, user_id):
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username):
        with self._lock:
            for u in self._users.values():
                if u.username == username:
                    return u
        return None


# ============================================================
# DUCKDB (optional, file-backed)
# ============================================================


class DuckDBStorage(Storage):
    def __init__(self, db_path: str) -> None:
        self._lock = threading.Lock()
        self._conn = duckdb.connect(db_path)
        self._init_tables()

    def _init_tables(self) -> None:
        with self._lock:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS resume_analyses (
                    id TEXT PRIMARY KEY,
                    resume_text TEXT NOT NULL,
                    job_description TEXT,
                    summary TEXT,
                    rating INTEGER,
                    rating_explanation TEXT,
                    skills TEXT,
                    highlights TEXT,
                    match_score INTEGER,
                    missing_keywords TEXT,
                    suggestions TEXT,
                    cover_letter TEXT,
                    interview_questions TEXT,
                    linkedin_summary TEXT,
                    created_at TIMESTAMP
                )
            """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    username TEXT NOT NULL UNIQUE,
                    password TEXT NOT NULL
                )
            """)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @staticmethod
    def _row_to_analysis(row) -> ResumeAnalysis:
        data = dict(zip(ANALYSIS_COLUMNS, row))
        # stored as naive UTC
        if data["created_at"] is not None and data["created_at"].tzinfo is None:
            data["created_at"] = data["created_at"].replace(tzinfo=timezone.utc)
        for field in LIST_FIELDS:
            if data[field] is not None:
                data[field] = json.loads(data[field])
        return ResumeAnalysis(**data)

    def create_resume_analysis(self, resume_text, job_description, result):
        record = _build_record(resume_text, job_description, result)
        data = record.model_dump()
        values = []
        for col in ANALYSIS_COLUMNS:
            v = data[col]
            if col in LIST_FIELDS and v is not None:
                v = json.dumps(v, ensure_ascii=False)
            elif col == "created_at":
                v = v.astimezone(timezone.utc).replace(tzinfo=None)
            values.append(v)

        placeholders = ", ".join("?" for _ in ANALYSIS_COLUMNS)
        with self._lock:
            self._conn.execute(
                f"INSERT INTO resume_analyses ({', '.join(ANALYSIS_COLUMNS)}) "
                f"VALUES ({placeholders})",
                values,
            )
        return record

    def get_resume_analysis(self, analysis_id):
        with self._lock:
            row = self._conn.execute(
                f"SELECT {', '.join(ANALYSIS_COLUMNS)} FROM resume_analyses WHERE id = ?",
                [analysis_id],
            ).fetchone()
        return self._row_to_analysis(row) if row else None

    def list_resume_analyses(self, limit=50):
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {', '.join(ANALYSIS_COLUMNS)} FROM resume_analyses "
                "ORDER BY created_at DESC, rowid DESC LIMIT ?",
                [limit],
            ).fetchall()
        return [self._row_to_analysis(r) for r in rows]

    def create_user(self, user):
        new_user = User(id=_new_id(), username=user.username, password=user.password)
        with self._lock:
            exists = self._conn.execute(
                "SELECT 1 FROM users WHERE username = ?", [user.username]
            ).fetchone()
            if exists:
                raise DuplicateUserError(f"Username already exists: {user.username}")
            self._conn.execute(
                "INSERT INTO users VALUES (?, ?, ?)",
                [new_user.id, new_user.username, new_user.password],
            )
        return new_user

    def _fetch_user(self, where: str, value: str) -> Optional[User]:
        with self._lock:
            row = self._conn.execute(
                f"SELECT id, username, password FROM users WHERE {where} = ?",
                [value],
            ).fetchone()
        if not row:
            return None
        return User(id=row[0], username=row[1], password=row[2])

    def get_user(self, user_id):
        return self._fetch_user("id", user_id)

    def get_user_by_username(self, username):
        return self._fetch_user("username", username)


# ============================================================
# PROCESS-WIDE INSTANCE
# ============================================================

_storage: Storage | None = None
_storage_lock = threading.Lock()


def get_storage() -> Storage:
    global _storage
    with _storage_lock:
        if _storage is None:
            if config.STORAGE_BACKEND == "duckdb":
                logger.info("Using duckdb storage at %s", config.DUCKDB_PATH)
                _storage = DuckDBStorage(config.DUCKDB_PATH)
            else:
                if config.STORAGE_BACKEND != "memory":
                    logger.warning(
                        "Unknown STORAGE_BACKEND %r, falling back to memory",
                        config.STORAGE_BACKEND,
                    )
                _storage = MemStorage()
        return _storage


def reset_storage_for_test(storage: Storage | None = None) -> None:
    global _storage
    with _storage_lock:
        if isinstance(_storage, DuckDBStorage):
            _storage.close()
        _storage = storage
