"""QWeather Client — async httpx wrapper for city lookup, current conditions and 7-day forecast.

Invariants:
    - Every response must carry code == "200"; anything else raises WeatherAPIError
    - Transport failures and non-2xx HTTP statuses raise WeatherAPIError (never httpx errors)
    - A missing API key fails fast before any request is made

Design Decisions:
    - One shared httpx.AsyncClient owned by the lifespan; tests inject a MockTransport-backed client
    - Current conditions and forecast fetched concurrently once the city id is known
"""

import asyncio
import logging
from typing import Any

import httpx

from chainlab.core.errors import WeatherAPIError
from chainlab.core.weather_report import (
    CityInfo, format_comparison, format_weather_report, unavailable_message,
)

logger = logging.getLogger(__name__)


class QWeatherClient:
    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        geo_url: str = "https://geoapi.qweather.com/v2/city/lookup",
        api_url: str = "https://devapi.qweather.com/v7",
    ):
        self.api_key = api_key
        self.http = http_client
        self.geo_url = geo_url
        self.api_url = api_url.rstrip("/")

    async def lookup_city(self, name: str) -> CityInfo:
        data = await self._get(self.geo_url, name)
        locations = data.get("location") or []
        if not locations:
            raise WeatherAPIError(f"City not found: {name}", data.get("code"))
        return CityInfo.from_location(locations[0])

    async def current(self, city_id: str) -> dict[str, Any]:
        data = await self._get(f"{self.api_url}/weather/now", city_id)
        if not data.get("now"):
            raise WeatherAPIError(f"No current conditions for {city_id}", data.get("code"))
        return data["now"]

    async def daily_forecast(self, city_id: str) -> list[dict[str, Any]]:
        data = await self._get(f"{self.api_url}/weather/7d", city_id)
        if not data.get("daily"):
            raise WeatherAPIError(f"No forecast for {city_id}", data.get("code"))
        return data["daily"]

    async def report(self, city_name: str) -> str:
        """Plain-text report for one city: current conditions, today, tomorrow."""
        city = await self.lookup_city(city_name)
        now, daily = await asyncio.gather(
            self.current(city.id), self.daily_forecast(city.id),
        )
        return format_weather_report(city, now, daily)

    async def compare(self, cities: list[str]) -> str:
        """Reports for several cities; a failing city gets a placeholder line."""
        results = await asyncio.gather(
            *(self.report(c) for c in cities), return_exceptions=True,
        )
        reports = []
        for city, result in zip(cities, results):
            if isinstance(result, WeatherAPIError):
                logger.warning(f"Weather comparison skipped {city}: {result.message}")
                reports.append(unavailable_message(city))
            elif isinstance(result, BaseException):
                raise result
            else:
                reports.append(result)
        return format_comparison(reports)

    async def _get(self, url: str, location: str) -> dict[str, Any]:
        if not self.api_key:
            raise WeatherAPIError("QWeather API key is not configured")
        try:
            response = await self.http.get(
                url, params={"location": location, "key": self.api_key},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise WeatherAPIError(f"HTTP {e.response.status_code} from {url}")
        except (httpx.HTTPError, ValueError) as e:
            raise WeatherAPIError(f"Request to {url} failed: {e}")
        code = str(data.get("code", ""))
        if code != "200":
            raise WeatherAPIError(f"Provider returned code {code} for '{location}'", code)
        return data
