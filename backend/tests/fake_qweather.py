"""Fake QWeather API — httpx.MockTransport handler serving canned city/now/7d payloads.

Known cities: Beijing, Shanghai. Anything else gets code "404" from the geo lookup.
"""

import httpx

GEO_URL = "https://geo.test/v2/city/lookup"
API_URL = "https://api.test/v7"

CITIES = {
    "Beijing": {"name": "Beijing", "id": "101010100", "lat": "39.90", "lon": "116.40",
                "adm1": "Beijing", "adm2": "Beijing"},
    "Shanghai": {"name": "Shanghai", "id": "101020100", "lat": "31.23", "lon": "121.47",
                 "adm1": "Shanghai", "adm2": "Shanghai"},
}

NOW = {
    "101010100": {"temp": "21", "feelsLike": "19", "text": "Sunny", "windDir": "N",
                  "windScale": "3", "humidity": "40"},
    "101020100": {"temp": "25", "feelsLike": "27", "text": "Cloudy", "windDir": "SE",
                  "windScale": "2", "humidity": "70"},
}


def _day(text_day, low, high):
    return {
        "textDay": text_day, "textNight": "Clear", "tempMin": low, "tempMax": high,
        "windDirDay": "N", "windScaleDay": "1-3", "windDirNight": "N",
        "windScaleNight": "1-3", "humidity": "45", "precip": "0.0", "uvIndex": "5",
    }


DAILY = [_day("Sunny", "12", "24"), _day("Overcast", "13", "22"), _day("Rain", "10", "18")]


def make_handler(calls: list | None = None):
    """Build a MockTransport handler; every request URL is appended to calls."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request.url)
        location = request.url.params.get("location", "")
        path = request.url.path
        if request.url.host == "geo.test":
            city = CITIES.get(location)
            if city is None:
                return httpx.Response(200, json={"code": "404"})
            return httpx.Response(200, json={"code": "200", "location": [city]})
        if path.endswith("/weather/now"):
            return httpx.Response(200, json={"code": "200", "now": NOW[location]})
        if path.endswith("/weather/7d"):
            return httpx.Response(200, json={"code": "200", "daily": DAILY})
        return httpx.Response(404)

    return handler


def make_http_client(calls: list | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(make_handler(calls)))
