"""Weather Routes — plain-text QWeather report for one city."""

from fastapi import APIRouter, Depends

from chainlab.api.dependencies import get_weather_client
from chainlab.core.errors import WeatherAPIError
from chainlab.infrastructure.weather_client import QWeatherClient
from chainlab.schemas.weather import WeatherResponse

router = APIRouter(prefix="/api/v1/weather", tags=["weather"])


@router.get("/{city}", response_model=WeatherResponse)
async def get_weather(city: str, weather: QWeatherClient | None = Depends(get_weather_client)):
    if weather is None:
        raise WeatherAPIError("Weather client is not configured")
    return WeatherResponse(city=city, report=await weather.report(city))
