import pytest

from shoe_dryer import analyzer as analyzer_mod
from shoe_dryer.errors import InvalidUpload


def test_static_prompt_demands_json_only():
    prompt = analyzer_mod.SHOE_PROFILE.build_prompt()

    assert '"shoe_type"' in prompt
    assert '"recommended_time_minutes"' in prompt
    assert "JSON object" in prompt
    assert "60" in prompt


def test_context_prompt_interpolates_readings_and_policy():
    readings = analyzer_mod.Readings(temperature=35, humidity=80)

    prompt = analyzer_mod.SHOE_CONTEXT_PROFILE.build_prompt(readings)

    assert "Temperature: 35" in prompt
    assert "humidity: 80" in prompt
    assert f"above {analyzer_mod.HUMIDITY_THRESHOLD_PERCENT} %" in prompt
    assert "$" not in prompt
    assert '{"shoe_type": "Sneaker, medium thickness", "recommended_time_minutes": 40}' in prompt


def test_context_prompt_without_readings_is_a_programming_error():
    with pytest.raises(ValueError):
        analyzer_mod.SHOE_CONTEXT_PROFILE.build_prompt()


def test_free_text_profile_is_unstructured():
    assert analyzer_mod.FREE_TEXT_PROFILE.structured is False
    assert "plain text" in analyzer_mod.FREE_TEXT_PROFILE.build_prompt()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("35", 35),
        (" 80 ", 80),
        ("-3", -3),
        ("27.5", 27.5),
        ("1e2", 100.0),
    ],
)
def test_parse_number_accepts_numbers(raw, expected):
    value = analyzer_mod.parse_number(raw)

    assert value == expected
    assert type(value) is type(expected)


@pytest.mark.parametrize("raw", [None, "", "   ", "warm", "nan", "inf", "35%"])
def test_parse_number_rejects_non_numbers(raw):
    assert analyzer_mod.parse_number(raw) is None


def test_parse_readings_requires_both():
    with pytest.raises(InvalidUpload) as exc_info:
        analyzer_mod.parse_readings("35", None)

    assert exc_info.value.status_code == 400
    assert "temperature" in exc_info.value.message
    assert "humidity" in exc_info.value.message
