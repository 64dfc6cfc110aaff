"""Tests for prompt construction."""
from app.services.prompt_builder import (
    SYSTEM_MESSAGE,
    build_prompt,
    build_response_format,
    format_distance,
)


def test_user_message_embeds_monthly_summary(make_stats):
    stats = make_stats(total_distance_meters=42_500.0, total_duration_seconds=19_800)
    prompt = build_prompt(stats)

    assert "March 2025" in prompt.user_message
    assert "Total activities: 6 (3 runs, 2 walks, 1 mixed)" in prompt.user_message
    assert "Total distance: 42.50 km" in prompt.user_message
    assert "Total time: 5h 30m" in prompt.user_message
    assert "Day 15 of 31 (16 days remaining)" in prompt.user_message


def test_distance_converted_to_miles(make_stats):
    prompt = build_prompt(make_stats(total_distance_meters=16_093.4, distance_unit="mi"))
    assert "Total distance: 10.00 mi" in prompt.user_message


def test_format_distance_rounds_to_two_decimals():
    assert format_distance(0, "km") == "0.00 km"
    assert format_distance(1237, "km") == "1.24 km"
    assert format_distance(5000, "mi") == "3.11 mi"


def test_seconds_only_shown_without_hours(make_stats):
    prompt = build_prompt(make_stats(total_duration_seconds=2_720))
    assert "Total time: 45m 20s" in prompt.user_message

    prompt = build_prompt(make_stats(total_duration_seconds=3_620))
    assert "Total time: 1h\n" in prompt.user_message


def test_system_message_defines_output_contract(make_stats):
    prompt = build_prompt(make_stats())
    assert prompt.system_message == SYSTEM_MESSAGE
    for tone in ("encouraging", "celebratory", "challenging"):
        assert tone in prompt.system_message
    assert "1-2 sentences" in prompt.system_message


def test_response_schema_is_strict():
    response_format = build_response_format()
    assert response_format["type"] == "json_schema"

    schema = response_format["json_schema"]["schema"]
    assert response_format["json_schema"]["strict"] is True
    assert schema["required"] == ["message", "tone"]
    assert schema["additionalProperties"] is False
    assert schema["properties"]["message"]["type"] == "string"
    assert schema["properties"]["tone"]["enum"] == ["encouraging", "celebratory", "challenging"]


def test_prompt_is_deterministic(make_stats):
    stats = make_stats()
    assert build_prompt(stats) == build_prompt(stats)


def test_total_time_comes_from_seconds(make_stats):
    stats = make_stats(total_duration_seconds=5_400)

    assert stats.total_duration == "PT1H30M"
    assert "Total time: 1h 30m" in build_prompt(stats).user_message


def test_duration_text_cannot_contradict_seconds(make_stats):
    stats = make_stats(total_duration="PT99H", total_duration_seconds=0)

    assert stats.total_duration == "PT0S"
    assert "Total time: 0m" in build_prompt(stats).user_message
    assert stats.model_dump()["total_duration"] == "PT0S"
