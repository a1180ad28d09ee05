"""
Unit Tests for Problem Schemas
Tests for: manual-create validation, camelCase input and output
"""
import pytest
from datetime import datetime
from types import SimpleNamespace
from pydantic import ValidationError

from app.models.problem import ProblemStatus, ProblemDomain
from app.schemas.common import serialize
from app.schemas.problem import (
    ProblemCreate,
    ProblemUpdate,
    ProblemResponse,
    ImportOutcomeResponse,
)
from app.services.bulk_import import ImportOutcome, RowError


def create_data(**overrides) -> dict:
    data = {
        "title": "Smart Parking Finder",
        "abstract": "Build a mobile application that shows free parking spots using roadside sensors.",
        "domain": "IoT & Embedded Systems",
        "category": "Minor",
        "difficulty": "Beginner",
        "duration": "6-8 weeks",
        "technologies": ["Flutter", "Firebase"],
        "deliverables": ["App", "Report"],
    }
    data.update(overrides)
    return data


class TestProblemCreate:
    """Test ProblemCreate schema"""

    def test_valid_problem(self):
        problem = ProblemCreate(**create_data())

        assert problem.domain == ProblemDomain.IOT
        assert problem.status == ProblemStatus.DRAFT
        assert problem.featured is False
        assert problem.custom_id is None

    def test_accepts_camel_case_keys(self):
        problem = ProblemCreate(**create_data(learningOutcomes=["Mobile UI"], customId="IOT900"))

        assert problem.learning_outcomes == ["Mobile UI"]
        assert problem.custom_id == "IOT900"

    def test_title_too_short_fails(self):
        with pytest.raises(ValidationError):
            ProblemCreate(**create_data(title="Bot"))

    def test_abstract_too_short_fails(self):
        with pytest.raises(ValidationError):
            ProblemCreate(**create_data(abstract="Too short to describe a project."))

    def test_invalid_domain_fails(self):
        with pytest.raises(ValidationError):
            ProblemCreate(**create_data(domain="Space Tech"))

    def test_technologies_required(self):
        with pytest.raises(ValidationError):
            ProblemCreate(**create_data(technologies=[]))

    def test_blank_list_items_dropped(self):
        """Test blank entries do not count towards required lists"""
        problem = ProblemCreate(**create_data(tags=[" parking ", "", "  "]))
        assert problem.tags == ["parking"]

        with pytest.raises(ValidationError):
            ProblemCreate(**create_data(deliverables=["  "]))

    def test_text_fields_stripped(self):
        problem = ProblemCreate(**create_data(title="  Smart Parking Finder  "))

        assert problem.title == "Smart Parking Finder"


class TestProblemUpdate:
    """Test ProblemUpdate schema"""

    def test_partial_update(self):
        update = ProblemUpdate(status="Archived")

        assert update.model_dump(exclude_unset=True) == {"status": ProblemStatus.ARCHIVED}

    def test_invalid_status_fails(self):
        with pytest.raises(ValidationError):
            ProblemUpdate(status="Published")


class TestProblemResponse:
    """Test response serialization"""

    def test_serializes_camel_case(self):
        creator = SimpleNamespace(id="u-1", name="Dr. Rao", email="rao@example.com")
        problem = SimpleNamespace(
            id="p-1", custom_id="IOT001", title="Smart Parking Finder", abstract="...",
            domain=ProblemDomain.IOT, category="Minor", difficulty="Beginner", duration="6 weeks",
            technologies=["Flutter"], deliverables=["App"], prerequisites=[], learning_outcomes=["UI"],
            tags=[], status=ProblemStatus.ACTIVE, featured=False, view_count=3, creator=creator,
            created_at=datetime(2024, 1, 1), updated_at=None,
        )

        data = serialize(ProblemResponse, problem)

        assert data["customId"] == "IOT001"
        assert data["learningOutcomes"] == ["UI"]
        assert data["viewCount"] == 3
        assert data["domain"] == "IoT & Embedded Systems"
        assert data["createdBy"] == {"id": "u-1", "name": "Dr. Rao", "email": "rao@example.com"}
        assert "custom_id" not in data

    def test_import_outcome_response(self):
        outcome = ImportOutcome(imported=2, failed=1, errors=[RowError(4, "title", "Title is required")])

        data = ImportOutcomeResponse.model_validate(outcome).model_dump(by_alias=True)

        assert data == {
            "imported": 2,
            "failed": 1,
            "errors": [{"row": 4, "field": "title", "message": "Title is required"}],
        }
