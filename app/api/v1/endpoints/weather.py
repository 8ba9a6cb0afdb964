from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from app.api import deps
from app.services.weather import WeatherClient

# Repasse simples para a Weather API (erros viram 500 {"error"} no handler global)
router = APIRouter()

@router.get("/search/{query}")
def search_locations(query: str, weather: WeatherClient = Depends(deps.get_weather_client)) -> Any:
    return weather.search(query)

@router.get("/city")
def weather_by_city(
    name: str = Query(..., min_length=1),
    region: Optional[str] = None,
    country: Optional[str] = None,
    weather: WeatherClient = Depends(deps.get_weather_client),
) -> Any:
    return weather.forecast_by_city(name, region, country)

@router.get("/coords")
def weather_by_coords(
    lat: float,
    lon: float,
    weather: WeatherClient = Depends(deps.get_weather_client),
) -> Any:
    return weather.forecast_by_coords(lat, lon)
