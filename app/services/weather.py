import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as SchemaValidationError

from app.core.config import settings
from app.core.errors import ProviderError
from app.schemas.location import Location
from app.schemas.weather import WeatherSnapshot
from app.services.timing import resolve_timezone

logger = logging.getLogger(__name__)


def tag_hourly_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Marca cada hora da previsão com local_hour / local_time / formatted_time
    no fuso da cidade. Os horários crus da API não são comparáveis entre fusos sem isso.
    """
    tz_name = (data.get("location") or {}).get("tz_id")
    tz = resolve_timezone(tz_name)

    for day in (data.get("forecast") or {}).get("forecastday") or []:
        for hour in day.get("hour") or []:
            epoch = hour.get("time_epoch")
            if epoch is not None:
                local = datetime.fromtimestamp(int(epoch), tz=timezone.utc).astimezone(tz)
                local_hour, minute = local.hour, local.minute
            else:
                # Sem epoch: o campo "time" ("2024-05-01 14:00") já vem no horário local
                hh_mm = str(hour.get("time", "")).split(" ")[-1]
                local_hour, minute = int(hh_mm.split(":")[0]), int(hh_mm.split(":")[1])

            period = "AM" if local_hour < 12 else "PM"
            hour["local_hour"] = local_hour
            hour["local_time"] = f"{local_hour:02d}:{minute:02d}"
            hour["formatted_time"] = f"{local_hour % 12 or 12}:{minute:02d} {period}"
    return data


class WeatherClient:
    """Cliente da WeatherAPI.com (search / forecast por cidade ou coordenadas)."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.weatherapi.com/v1",
        timeout: float = 10.0,
        days: int = 3,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._days = days
        self._transport = transport

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        params = {"key": self._api_key, **params}
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                resp = client.get(f"{self._base_url}/{path}", params=params)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"❌ Weather API {path} respondeu {e.response.status_code}")
            raise ProviderError(f"Weather provider returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Weather API {path} falhou: {e}")
            raise ProviderError("Weather provider unavailable") from e
        except ValueError as e:
            raise ProviderError("Weather provider returned invalid JSON") from e

    def search(self, query: str) -> List[Dict[str, Any]]:
        data = self._get("search.json", {"q": query})
        if not isinstance(data, list):
            raise ProviderError("Unexpected search response")
        return data

    def _forecast(self, q: str) -> Dict[str, Any]:
        data = self._get(
            "forecast.json",
            {"q": q, "days": self._days, "aqi": "yes", "alerts": "yes"},
        )
        if not isinstance(data, dict):
            raise ProviderError("Unexpected forecast response")
        try:
            return tag_hourly_data(data)
        except (AttributeError, TypeError, ValueError, IndexError) as e:
            raise ProviderError("Malformed hourly forecast") from e

    def forecast_by_city(
        self, name: str, region: Optional[str] = None, country: Optional[str] = None
    ) -> Dict[str, Any]:
        if not name or not name.strip():
            raise ProviderError("City name is required")
        location = Location(
            city=name.strip(),
            region=(region or "").strip() or None,
            country=(country or "").strip() or None,
        )
        return self._forecast(location.query)

    def forecast_by_coords(self, lat: float, lon: float) -> Dict[str, Any]:
        return self._forecast(f"{lat},{lon}")

    def fetch_for_location(self, location: Location) -> WeatherSnapshot:
        data = self._forecast(location.query)
        try:
            return WeatherSnapshot.from_provider(data)
        except (SchemaValidationError, AttributeError, TypeError) as e:
            logger.error(f"❌ Resposta inválida da Weather API para {location}: {e}")
            raise ProviderError(f"Malformed weather data for {location.city}") from e


def get_weather_client() -> WeatherClient:
    return WeatherClient(
        api_key=settings.WEATHER_API_KEY,
        base_url=settings.WEATHER_API_URL,
        timeout=settings.WEATHER_API_TIMEOUT,
        days=settings.FORECAST_DAYS,
    )
