"""
Bulk Import - create problem statements from an uploaded CSV file

Pipeline per upload:
    bytes -> parse_csv() -> [ImportRow] -> validate_row() per row
          -> ProblemService.create_problem() for valid rows -> ImportOutcome

Only an unreadable file fails the whole upload (CSVParseError). Everything
that goes wrong with a single row is collected as a RowError and the next
row is processed. Rows are committed one at a time, so rows imported before
a failing one stay imported.
"""

import csv
import io
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.problem import (
    ProblemDomain, ProblemCategory, ProblemDifficulty, ProblemStatus,
    DOMAIN_VALUES, CATEGORY_VALUES, DIFFICULTY_VALUES, STATUS_VALUES,
)
from app.services.problem_service import ProblemService
from app.core.exceptions import CSVParseError, ProblemStoreError
from app.core.logging_config import logger


# CSV header name -> ImportRow attribute
COLUMN_MAP = {
    "title": "title",
    "abstract": "abstract",
    "domain": "domain",
    "category": "category",
    "difficulty": "difficulty",
    "duration": "duration",
    "technologies": "technologies",
    "deliverables": "deliverables",
    "prerequisites": "prerequisites",
    "learningOutcomes": "learning_outcomes",
    "tags": "tags",
    "status": "status",
    "featured": "featured",
}

REQUIRED_COLUMNS = ["title", "abstract", "domain", "category", "difficulty", "duration"]
LIST_COLUMNS = ["technologies", "deliverables", "prerequisites", "learningOutcomes", "tags"]

# Storage bounds of the problem_statements columns
MAX_LENGTHS = {"title": 200, "abstract": 5000, "duration": 50}

ENUM_COLUMNS = {
    "domain": DOMAIN_VALUES,
    "category": CATEGORY_VALUES,
    "difficulty": DIFFICULTY_VALUES,
    "status": STATUS_VALUES,
}

LIST_SEPARATOR = ";"
FIRST_DATA_ROW = 2  # row 1 is the header


@dataclass(frozen=True)
class ImportRow:
    """One data row; columns missing from the file are empty strings"""
    title: str = ""
    abstract: str = ""
    domain: str = ""
    category: str = ""
    difficulty: str = ""
    duration: str = ""
    technologies: str = ""
    deliverables: str = ""
    prerequisites: str = ""
    learning_outcomes: str = ""
    tags: str = ""
    status: str = ""
    featured: str = ""

    @classmethod
    def from_record(cls, record: Dict[Optional[str], Any]) -> "ImportRow":
        values = {}
        for column, attr in COLUMN_MAP.items():
            value = record.get(column)
            values[attr] = value if isinstance(value, str) else ""
        return cls(**values)

    def column(self, name: str) -> str:
        """Value of a CSV column by its header name"""
        return getattr(self, COLUMN_MAP[name])


@dataclass
class RowError:
    row: int
    field: str
    message: str


@dataclass
class ImportOutcome:
    imported: int = 0
    failed: int = 0
    errors: List[RowError] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return self.imported + self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imported": self.imported,
            "failed": self.failed,
            "errors": [asdict(e) for e in self.errors],
        }


# ========== Parsing ==========

def parse_list_field(value: Optional[str]) -> List[str]:
    """'Python;TensorFlow; React ' -> ['Python', 'TensorFlow', 'React']"""
    if not value:
        return []
    return [item.strip() for item in value.split(LIST_SEPARATOR) if item.strip()]


def parse_featured(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def parse_csv(content: bytes) -> List[ImportRow]:
    """
    Decode and parse an uploaded CSV file into ImportRow records.

    Raises:
        CSVParseError: the bytes are not UTF-8 text, the CSV is malformed
            or the file is empty

    A header without some required column is still a readable file; the
    column reads as empty on every row and validate_row reports it.
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise CSVParseError("file is not valid UTF-8 text")

    if not text.strip():
        raise CSVParseError("file is empty")

    reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
    try:
        header = [name.strip() for name in (reader.fieldnames or [])]
        reader.fieldnames = header
        return [ImportRow.from_record(record) for record in reader]
    except csv.Error as e:
        raise CSVParseError(f"line {reader.line_num}: {e}")


# ========== Validation ==========

def validate_row(row: ImportRow) -> List[Dict[str, str]]:
    """
    All problems with a single row, as {field, message} dicts.

    Every check runs; a row with several problems reports each of them.
    """
    errors = []

    for column in REQUIRED_COLUMNS:
        if not row.column(column).strip():
            errors.append({"field": column, "message": f"{column.capitalize()} is required"})

    for column, allowed in ENUM_COLUMNS.items():
        value = row.column(column).strip()
        if value and value not in allowed:
            errors.append({
                "field": column,
                "message": f"Invalid {column}. Must be one of: {', '.join(allowed)}",
            })

    for column, max_length in MAX_LENGTHS.items():
        if len(row.column(column).strip()) > max_length:
            errors.append({
                "field": column,
                "message": f"{column.capitalize()} cannot exceed {max_length} characters",
            })

    return errors


def build_problem_data(row: ImportRow) -> Dict[str, Any]:
    """Field values for a new problem statement from a validated row"""
    return {
        "title": row.title.strip(),
        "abstract": row.abstract.strip(),
        "domain": ProblemDomain(row.domain.strip()),
        "category": ProblemCategory(row.category.strip()),
        "difficulty": ProblemDifficulty(row.difficulty.strip()),
        "duration": row.duration.strip(),
        "technologies": parse_list_field(row.technologies),
        "deliverables": parse_list_field(row.deliverables),
        "prerequisites": parse_list_field(row.prerequisites),
        "learning_outcomes": parse_list_field(row.learning_outcomes),
        "tags": parse_list_field(row.tags),
        "status": ProblemStatus(row.status.strip() or ProblemStatus.DRAFT.value),
        "featured": parse_featured(row.featured),
    }


# ========== Import ==========

class BulkImportService:
    """Runs a CSV upload through validation and the problem store"""

    def __init__(self, db: AsyncSession, problem_service: Optional[ProblemService] = None):
        self.db = db
        self.problems = problem_service or ProblemService(db)

    async def import_csv(self, content: bytes, user_id: str, filename: Optional[str] = None) -> ImportOutcome:
        started = time.perf_counter()
        rows = parse_csv(content)
        outcome = ImportOutcome()

        for index, row in enumerate(rows):
            row_number = index + FIRST_DATA_ROW

            problems = validate_row(row)
            if problems:
                outcome.errors.extend(RowError(row_number, p["field"], p["message"]) for p in problems)
                outcome.failed += 1
                continue

            try:
                await self.problems.create_problem(build_problem_data(row), created_by=user_id)
            except (ProblemStoreError, SQLAlchemyError) as e:
                await self.db.rollback()
                message = e.message if isinstance(e, ProblemStoreError) else str(e)
                logger.warning(f"Bulk import row {row_number} failed to persist: {message}")
                outcome.errors.append(RowError(row_number, "database", message or "Failed to create problem statement"))
                outcome.failed += 1
                continue

            outcome.imported += 1

        logger.log_import_event(
            imported=outcome.imported,
            failed=outcome.failed,
            total_rows=len(rows),
            duration_ms=(time.perf_counter() - started) * 1000,
            created_by=user_id,
            upload_filename=filename,
        )
        return outcome


async def import_problems(db: AsyncSession, content: bytes, user_id: str) -> ImportOutcome:
    """Shortcut for BulkImportService(db).import_csv(content, user_id)"""
    return await BulkImportService(db).import_csv(content, user_id)


__all__ = [
    "ImportRow",
    "RowError",
    "ImportOutcome",
    "parse_list_field",
    "parse_featured",
    "parse_csv",
    "validate_row",
    "build_problem_data",
    "BulkImportService",
    "import_problems",
]
