from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# Tipos explícitos para o JSON da Weather API. Campos extras são ignorados;
# formato inválido vira ProviderError logo na borda (ver services/weather.py).

class Condition(BaseModel):
    text: str
    icon: Optional[str] = None
    code: Optional[int] = None

class HourSlice(BaseModel):
    time: str
    time_epoch: Optional[int] = None
    local_hour: int = Field(..., ge=0, le=23)
    temp_c: float
    condition: Condition
    cloud: int = 0
    chance_of_rain: int = 0
    wind_kph: float = 0.0
    wind_dir: str = ""

class ForecastDay(BaseModel):
    date: str
    hour: List[HourSlice] = []

class CurrentConditions(BaseModel):
    temp_c: float
    condition: Condition
    cloud: Optional[int] = None
    wind_kph: Optional[float] = None
    wind_dir: Optional[str] = None

class WeatherAlert(BaseModel):
    headline: str = ""
    event: str = ""
    severity: str = ""
    effective: Optional[datetime] = None
    expires: Optional[datetime] = None
    desc: str = ""
    instruction: Optional[str] = None

    @field_validator("effective", "expires", mode="before")
    @classmethod
    def empty_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class ProviderLocation(BaseModel):
    name: str
    region: str = ""
    country: str = ""
    tz_id: str

class WeatherSnapshot(BaseModel):
    location: ProviderLocation
    current: CurrentConditions
    forecast_days: List[ForecastDay]
    alerts: List[WeatherAlert] = []

    @property
    def timezone(self) -> str:
        return self.location.tz_id

    @property
    def hourly(self) -> List[HourSlice]:
        """Horas do dia atual (já com local_hour no fuso da cidade)."""
        return self.hours_for_day(0)

    def hours_for_day(self, index: int) -> List[HourSlice]:
        # Dia ausente na resposta = lista vazia
        if index >= len(self.forecast_days):
            return []
        return self.forecast_days[index].hour

    @classmethod
    def from_provider(cls, data: dict) -> "WeatherSnapshot":
        forecast = data.get("forecast") or {}
        alerts = (data.get("alerts") or {}).get("alert") or []
        return cls(
            location=data.get("location"),
            current=data.get("current"),
            forecast_days=forecast.get("forecastday") or [],
            alerts=alerts,
        )
