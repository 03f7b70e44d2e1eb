from unittest.mock import MagicMock, patch

import pytest
import requests

from services.weather import (
    WeatherResponseError,
    WeatherUpstreamError,
    c_to_f,
    fetch_current_weather,
    weather_code_to_summary,
)


def _response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def test_weather_code_mapping():
    assert weather_code_to_summary(0) == "Clear"
    assert weather_code_to_summary(2) == "Partly cloudy"
    assert weather_code_to_summary(48) == "Fog"
    assert weather_code_to_summary(63) == "Rain"
    assert weather_code_to_summary(81) == "Rain showers"
    assert weather_code_to_summary(99) == "Thunderstorm (hail)"
    assert weather_code_to_summary(42) == "Weather"


def test_c_to_f():
    assert c_to_f(0) == 32
    assert c_to_f(100) == 212


@patch("services.weather._session.get")
def test_fetch_current_weather_converts_and_rounds(mock_get):
    mock_get.return_value = _response({"current": {"temperature_2m": 21.5, "weather_code": 3}})

    now = fetch_current_weather(41.88, -87.63)

    assert now.temperature_f == 71  # 70.7
    assert now.summary == "Overcast"
    params = mock_get.call_args.kwargs["params"]
    assert params["current"] == "temperature_2m,weather_code"
    assert params["latitude"] == 41.88


@patch("services.weather._session.get")
def test_fetch_current_weather_rounds_halves_up(mock_get):
    # 2.5C = 36.5F
    mock_get.return_value = _response({"current": {"temperature_2m": 2.5, "weather_code": 0}})
    assert fetch_current_weather(0, 0).temperature_f == 37


@patch("services.weather._session.get")
def test_fetch_current_weather_unexpected_shape(mock_get):
    mock_get.return_value = _response({"current": {"temperature_2m": "warm"}})
    with pytest.raises(WeatherResponseError):
        fetch_current_weather(0, 0)


@patch("services.weather._session.get")
def test_fetch_current_weather_upstream_failure(mock_get):
    mock_get.side_effect = requests.ConnectionError("boom")
    with pytest.raises(WeatherUpstreamError):
        fetch_current_weather(0, 0)


def test_non_integer_weather_code_is_generic():
    assert weather_code_to_summary(2.5) == "Weather"
    assert weather_code_to_summary(2.0) == "Partly cloudy"


@patch("services.weather._session.get")
def test_fetch_current_weather_keeps_fractional_code(mock_get):
    mock_get.return_value = _response({"current": {"temperature_2m": 10.0, "weather_code": 2.5}})
    assert fetch_current_weather(0, 0).summary == "Weather"
