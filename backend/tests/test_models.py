import subprocess
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

from tobugo.models.itinerary import Activity, Day, Itinerary
from tobugo.models.preference import TravelPreferences
from tobugo.models.review import Review, ReviewCreate

BACKEND_DIR = Path(__file__).parent.parent


def test_models_import_without_pydantic_deprecations():
    # Class-based Config warns at class creation, so import in a fresh interpreter
    code = (
        "import warnings\n"
        "from pydantic.warnings import PydanticDeprecatedSince20\n"
        "warnings.simplefilter('error', PydanticDeprecatedSince20)\n"
        "import tobugo.models, tobugo.models.common, tobugo.models.review\n"
    )
    result = subprocess.run([sys.executable, "-c", code], cwd=BACKEND_DIR, capture_output=True, text=True)
    assert result.returncode == 0, result.stderr


def test_model_config_settings():
    assert Activity.model_config["frozen"] is True
    assert Day.model_config["populate_by_name"] is True
    assert Itinerary.model_config["frozen"] is True
    assert TravelPreferences.model_config["populate_by_name"] is True
    assert "example" in TravelPreferences.model_config["json_schema_extra"]


def test_trip_review_targets_its_trip():
    body = ReviewCreate(trip_id="t1", rating=4)
    assert body.target_type == "trip"
    assert body.target_id == "t1"


def test_trip_review_needs_a_trip():
    with pytest.raises(PydanticValidationError):
        ReviewCreate(target_type="trip", target_id="t1", rating=4)


def test_activity_review_names_its_target():
    body = ReviewCreate(target_type="activity", target_id="Louvre", rating=5)
    assert body.trip_id is None
    with pytest.raises(PydanticValidationError):
        ReviewCreate(target_type="activity", rating=5)


@pytest.mark.parametrize("rating", [0, 6, "great"])
def test_rating_is_one_to_five(rating):
    with pytest.raises(PydanticValidationError):
        Review(user_id="u1", target_id="t1", rating=rating)
