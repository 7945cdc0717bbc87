"""Weather Report — plain-text formatting of QWeather payloads.

Invariants:
    - Input dicts use QWeather field names (temp, feelsLike, textDay, tempMax, ...)
    - Missing fields render as "?" rather than raising
    - Report = header, current conditions, today, tomorrow (tomorrow omitted if absent)
"""

from dataclasses import dataclass
from typing import Any

COMPARISON_SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True)
class CityInfo:
    name: str
    id: str
    lat: str = ""
    lon: str = ""
    adm1: str = ""
    adm2: str = ""

    @classmethod
    def from_location(cls, loc: dict[str, Any]) -> "CityInfo":
        return cls(
            name=str(loc.get("name", "")),
            id=str(loc.get("id", "")),
            lat=str(loc.get("lat", "")),
            lon=str(loc.get("lon", "")),
            adm1=str(loc.get("adm1", "")),
            adm2=str(loc.get("adm2", "")),
        )


def _f(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return "?" if value in (None, "") else str(value)


def format_current(now: dict[str, Any]) -> str:
    return (
        f"Now: {_f(now, 'text')}, {_f(now, 'temp')}°C, feels like {_f(now, 'feelsLike')}°C\n"
        f"Humidity: {_f(now, 'humidity')}%, wind: {_f(now, 'windDir')} force {_f(now, 'windScale')}\n"
    )


def format_day(label: str, day: dict[str, Any]) -> str:
    return (
        f"{label}: {_f(day, 'textDay')} then {_f(day, 'textNight')}, "
        f"{_f(day, 'tempMin')}°C ~ {_f(day, 'tempMax')}°C\n"
        f"Wind: day {_f(day, 'windDirDay')} force {_f(day, 'windScaleDay')}, "
        f"night {_f(day, 'windDirNight')} force {_f(day, 'windScaleNight')}\n"
        f"Humidity: {_f(day, 'humidity')}%, precipitation: {_f(day, 'precip')}mm, "
        f"UV index: {_f(day, 'uvIndex')}\n"
    )


def format_weather_report(
    city: CityInfo, now: dict[str, Any], daily: list[dict[str, Any]],
) -> str:
    """Build the report for one city from current conditions and the daily forecast."""
    parts = [f"Weather report for {city.name}\n", format_current(now)]
    for label, day in zip(("Today", "Tomorrow"), daily):
        parts.append(format_day(label, day))
    return "\n".join(parts).rstrip("\n") + "\n"


def format_comparison(reports: list[str]) -> str:
    return "Weather comparison:\n\n" + COMPARISON_SEPARATOR.join(reports)


def unavailable_message(city: str) -> str:
    return f"Weather for {city} is unavailable."
