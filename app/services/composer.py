"""
Monta os payloads das notificações a partir dos dados da Weather API.
Funções puras: sem I/O e sem estado.
"""
from typing import Optional, Tuple

from app.core.errors import DataGapError
from app.schemas.location import Location
from app.schemas.notification import NotificationKind, NotificationPayload
from app.schemas.weather import HourSlice, WeatherAlert, WeatherSnapshot
from app.services.timing import format_alert_time, hour_label

ALERT_ICON = "/icons/alert.png"
ERROR_ICON = "/icons/error.png"


def find_hour(snapshot: WeatherSnapshot, local_hour: int, day: int = 0) -> Optional[HourSlice]:
    return next((h for h in snapshot.hours_for_day(day) if h.local_hour == local_hour), None)


def _conditions_body(hour: HourSlice, prefix: str = "") -> str:
    return (
        f"{prefix}{hour.temp_c:g}°C, {hour.condition.text}"
        f"\n☁️ Cloud: {hour.cloud}%"
        f"\n☔ Rain: {hour.chance_of_rain}%"
        f"\n🌬️ Wind: {hour.wind_kph:g} kph {hour.wind_dir}"
    )


def compose_current_and_forecast(
    snapshot: WeatherSnapshot, target_local_hour: int, location: Location
) -> Tuple[NotificationPayload, NotificationPayload]:
    """
    Retorna (agora, próxima hora) para a hora local informada.
    Lança DataGapError se a API não trouxe alguma das duas horas.
    """
    next_hour = (target_local_hour + 1) % 24
    current = find_hour(snapshot, target_local_hour)
    # Às 23h a próxima hora é a meia-noite do dia seguinte
    upcoming = find_hour(snapshot, next_hour, day=1 if next_hour == 0 else 0)

    if current is None or upcoming is None:
        raise DataGapError(f"Missing hourly data for hours {target_local_hour} and {next_hour}")

    current_label = hour_label(target_local_hour)
    next_label = hour_label(next_hour)
    city = location.city_name

    current_payload = NotificationPayload(
        title=f"⏱️ {current_label} Weather ({city})",
        body=_conditions_body(current),
        icon=current.condition.icon,
        data={
            "type": NotificationKind.CURRENT_WEATHER.value,
            "location": location.canonical,
            "time": current_label,
            "timezone": snapshot.timezone,
        },
    )
    forecast_payload = NotificationPayload(
        title=f"🔮 {next_label} Forecast ({city})",
        body=_conditions_body(upcoming, prefix="Expected: "),
        icon=upcoming.condition.icon,
        data={
            "type": NotificationKind.FORECAST.value,
            "location": location.canonical,
            "time": next_label,
            "timezone": snapshot.timezone,
        },
    )
    return current_payload, forecast_payload


def compose_alert(alert: WeatherAlert, location: Location) -> NotificationPayload:
    body = (
        f"{alert.headline}\n\n"
        f"Severity: {alert.severity}\n"
        f"Effective: {format_alert_time(alert.effective)}\n"
        f"Expires: {format_alert_time(alert.expires)}\n\n"
        f"{alert.desc}"
    )
    if alert.instruction:
        body += f"\n\n{alert.instruction}"

    return NotificationPayload(
        title=f"⚠️ {alert.event} - {location.city_name}",
        body=body,
        icon=ALERT_ICON,
        data={
            "type": NotificationKind.WEATHER_ALERT.value,
            "location": location.canonical,
            "event": alert.event,
            "severity": alert.severity,
        },
    )


def compose_failure_notice(location: Location) -> NotificationPayload:
    # Sem "type": o cliente mostra como aviso genérico
    return NotificationPayload(
        title="Weather Update Failed",
        body=f"Couldn't get weather for {location.city_name}",
        icon=ERROR_ICON,
        data={"location": location.canonical},
    )
