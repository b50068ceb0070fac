import sys
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

from tobugo.models.preference import (
    PartialPreferences,
    TravelPreferences,
    coerce_budget,
    coerce_count,
    coerce_string_list,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (1500, 1500.0),
        ("$1,500", 1500.0),
        ("1500 USD", 1500.0),
        ("$1,000 - $2,000", 1000.0),
        ("around 750.50", 750.5),
        ("cheap", None),
        (None, None),
        (True, None),
        (-5, None),
        (10**400, None),
        (float("inf"), None),
        ("1" * 400, None),
    ],
)
def test_coerce_budget(value, expected):
    assert coerce_budget(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (2, 2),
        (2.9, 2),
        ("3 people", 3),
        ("0", None),
        (0, None),
        ("a couple", None),
        (None, None),
        (10**400, None),
        (float("inf"), None),
    ],
)
def test_coerce_count(value, expected):
    assert coerce_count(value) == expected


def test_coerce_string_list():
    assert coerce_string_list("museums") == ["museums"]
    assert coerce_string_list(["museums", " ", None, "food"]) == ["museums", "food"]
    assert coerce_string_list([]) is None
    assert coerce_string_list(42) is None


def test_camel_and_snake_case_both_accepted():
    camel = TravelPreferences.model_validate(
        {"destination": "Paris", "startDate": "2025-03-15", "accommodationType": "hostel"}
    )
    snake = TravelPreferences.model_validate(
        {"destination": "Paris", "start_date": "2025-03-15", "accommodation_type": "hostel"}
    )
    assert camel == snake
    assert camel.start_date == "2025-03-15"


def test_travelers_default_to_one():
    assert TravelPreferences(destination="Paris").travelers == 1
    assert TravelPreferences(destination="Paris", travelers="lots").travelers == 1
    assert TravelPreferences(destination="Paris", travelers="4").travelers == 4


def test_destination_required_for_synthesis():
    with pytest.raises(PydanticValidationError):
        TravelPreferences.model_validate({"budget": 100})
    with pytest.raises(PydanticValidationError):
        TravelPreferences.model_validate({"destination": "   "})


def test_duration_accepts_days_alias():
    assert PartialPreferences.model_validate({"days": "5 days"}).duration == 5


def test_to_wire_is_camel_case_without_empty_fields():
    prefs = PartialPreferences(destination="Rome", start_date="2025-04-01", travel_style="slow")
    assert prefs.to_wire() == {"destination": "Rome", "startDate": "2025-04-01", "travelStyle": "slow"}


def test_merged_prefers_new_non_empty_values():
    prior = PartialPreferences(destination="Rome", budget=1000, travelers=2)
    update = PartialPreferences(budget="$1,200", activities=["food"])
    merged = prior.merged(update)

    assert merged.destination == "Rome"
    assert merged.budget == 1200.0
    assert merged.travelers == 2
    assert merged.activities == ["food"]
    # Neither side is changed
    assert prior.budget == 1000.0
    assert update.destination is None


def test_merged_with_none():
    prior = PartialPreferences(destination="Rome")
    assert prior.merged(None) == prior
