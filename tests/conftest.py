from datetime import datetime
from uuid import UUID

import pytest

from bindprobe.services.shapes import ChildRecord, RootRecord


@pytest.fixture
def sample_record():
    """A fully populated binding model with three children"""
    return RootRecord(
        id=UUID("3f2504e0-4f89-11d3-9a0c-0305e82c3301"),
        first_name="Ada",
        middle_name="King",
        last_name="Lovelace",
        birth_date=datetime(1815, 12, 10, 8, 30),
        status_code=418,
        children=(
            ChildRecord(name="Byron", age=20),
            ChildRecord(name="Anne", age=18),
            ChildRecord(name="Ralph", age=16),
        ),
    )


@pytest.fixture
def sample_payload():
    """Form pairs for the second shape version, every field populated"""
    return [
        ("Id", "3f2504e0-4f89-11d3-9a0c-0305e82c3301"),
        ("FirstName", "Ada"),
        ("MiddleName", "King"),
        ("LastName", "Lovelace"),
        ("BirthDate", "1815-12-10T08:30:00"),
        ("StatusCode", "418"),
        ("Children[0].Name", "Byron"),
        ("Children[0].Age", "20"),
        ("Children[1].Name", "Anne"),
        ("Children[1].Age", "18"),
        ("Children[2].Name", "Ralph"),
        ("Children[2].Age", "16"),
    ]
