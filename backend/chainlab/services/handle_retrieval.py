"""Retrieval and Weather Handlers — knowledge_base, get_weather, compare_weather.

Invariants:
    - knowledge_base searches the store bound to this request, never one named by the model
    - Weather handlers return the plain-text report under "report"
"""

import logging

from chainlab.core.errors import InvalidInputError
from chainlab.infrastructure.weather_client import QWeatherClient
from chainlab.services.rag_service import RagService

logger = logging.getLogger(__name__)


class KnowledgeHandlers:
    def __init__(self, rag: RagService, store_name: str | None, threshold: float):
        self.rag = rag
        self.store_name = store_name
        self.threshold = threshold

    async def knowledge_base(self, input_data: dict) -> dict:
        query = input_data.get("query")
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError("knowledge_base requires a non-empty 'query'", "query")
        text = self.rag.knowledge_search(query, self.store_name, self.threshold)
        return {"status": "ok", "results": text}


class WeatherHandlers:
    def __init__(self, weather: QWeatherClient):
        self.weather = weather

    async def get_weather(self, input_data: dict) -> dict:
        city = input_data.get("city")
        if not isinstance(city, str) or not city.strip():
            raise InvalidInputError("get_weather requires 'city'", "city")
        return {"status": "ok", "report": await self.weather.report(city.strip())}

    async def compare_weather(self, input_data: dict) -> dict:
        cities = input_data.get("cities")
        if not isinstance(cities, list):
            raise InvalidInputError("compare_weather requires a 'cities' array", "cities")
        names = [c.strip() for c in cities if isinstance(c, str) and c.strip()]
        if not names:
            raise InvalidInputError("compare_weather requires at least one city", "cities")
        return {"status": "ok", "report": await self.weather.compare(names)}
