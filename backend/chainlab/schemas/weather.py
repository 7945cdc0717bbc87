"""Weather Schemas."""

from pydantic import BaseModel


class WeatherResponse(BaseModel):
    city: str
    report: str
