import pytest
from pydantic import ValidationError

from feedback_engine.config import Settings


@pytest.mark.parametrize("hour", ["-1", "24", "99"])
def test_digest_hour_out_of_range_rejected(monkeypatch, hour):
    monkeypatch.setenv("DIGEST_HOUR_UTC", hour)
    with pytest.raises(ValidationError):
        Settings()


@pytest.mark.parametrize("hour", ["0", "23"])
def test_digest_hour_bounds_accepted(monkeypatch, hour):
    monkeypatch.setenv("DIGEST_HOUR_UTC", hour)
    assert Settings().digest_hour_utc == int(hour)
