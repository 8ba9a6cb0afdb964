from pydantic import BaseModel
from typing import Any, Dict, Optional
import enum

class NotificationKind(str, enum.Enum):
    CURRENT_WEATHER = "current_weather"
    FORECAST = "forecast"
    WEATHER_ALERT = "weather_alert"

class NotificationPayload(BaseModel):
    title: str
    body: str
    icon: Optional[str] = None
    # "type" (NotificationKind) + contexto para o service worker
    data: Dict[str, Any] = {}

    @property
    def kind(self) -> Optional[str]:
        return self.data.get("type")
