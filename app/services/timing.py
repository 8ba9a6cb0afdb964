from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import pytz

logger = logging.getLogger(__name__)


def resolve_timezone(tz_name: Optional[str]):
    """Retorna o fuso do pytz. Fuso vazio ou desconhecido cai para UTC."""
    if not tz_name:
        return pytz.utc
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Fuso desconhecido '{tz_name}', usando UTC")
        return pytz.utc


def ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local(now: datetime, tz_name: Optional[str]) -> datetime:
    tz = resolve_timezone(tz_name)
    return ensure_utc(now).astimezone(tz)


def local_hour_at(now: datetime, tz_name: Optional[str]) -> int:
    return to_local(now, tz_name).hour


def compute_next(now: datetime, tz_name: Optional[str]) -> datetime:
    """
    Próximo horário par (hora cheia) no fuso da localização, em UTC.
    Sempre estritamente no futuro: às 14:00 locais o próximo é 16:00, não 14:00.
    """
    tz = resolve_timezone(tz_name)
    local = ensure_utc(now).astimezone(tz)

    hours_ahead = 2 - (local.hour % 2)
    # Trabalha com a hora "de parede" e deixa o pytz resolver o offset (horário de verão)
    target = local.replace(minute=0, second=0, microsecond=0, tzinfo=None) + timedelta(hours=hours_ahead)
    localized = tz.normalize(tz.localize(target))
    return localized.astimezone(timezone.utc)


def minutes_until_next_slot(now: datetime, interval_hours: int = 2) -> int:
    """Minutos até a próxima fronteira de hora par no relógio do servidor."""
    window = interval_hours * 60
    return (window - ((now.hour % interval_hours) * 60 + now.minute)) % window


def hour_label(hour: int) -> str:
    # 0 -> "12 AM", 14 -> "2 PM"
    period = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12} {period}"


def format_local_time(instant: datetime, tz_name: Optional[str]) -> str:
    """Horário completo com minutos, ex: "2:05 PM"."""
    local = to_local(instant, tz_name)
    period = "AM" if local.hour < 12 else "PM"
    return f"{local.hour % 12 or 12}:{local.minute:02d} {period}"


def format_alert_time(dt: Optional[datetime]) -> str:
    """Data legível para alertas, no offset do próprio alerta: "Jan 5, 2021, 9:47 PM"."""
    if dt is None:
        return "Unknown"
    period = "AM" if dt.hour < 12 else "PM"
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}, {dt.hour % 12 or 12}:{dt.minute:02d} {period}"
