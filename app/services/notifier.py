import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from app.core.errors import ProviderError
from app.schemas.location import Location
from app.schemas.subscription import Subscription
from app.services import composer
from app.services.push import PushService
from app.services.subscription_store import SubscriptionStore
from app.services.timing import compute_next, local_hour_at
from app.services.weather import WeatherClient

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SubscriberOutcome:
    """Resultado do envio para um inscrito (sucesso ou falha, nunca exceção)."""
    endpoint: str
    attempted: int = 0
    delivered: int = 0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class WeatherNotifier:
    """
    Pipeline de um inscrito: busca o tempo -> monta os payloads -> envia -> atualiza horários.
    Usado tanto pelo scheduler quanto pelo envio imediato na inscrição.
    """

    def __init__(
        self,
        store: SubscriptionStore,
        weather_client: WeatherClient,
        push_service: PushService,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.weather = weather_client
        self.push = push_service
        self.clock = clock

    def notify(self, subscription: Subscription) -> SubscriberOutcome:
        outcome = SubscriberOutcome(endpoint=subscription.endpoint)
        location = Location.parse(subscription.location)
        now = self.clock()

        try:
            snapshot = self.weather.fetch_for_location(location)
            tz_name = snapshot.timezone
            current, forecast = composer.compose_current_and_forecast(
                snapshot, local_hour_at(now, tz_name), location
            )
        except Exception as e:
            # Qualquer falha na busca ou na montagem vira aviso de falha para o inscrito
            if isinstance(e, ProviderError):
                # DataGapError também cai aqui
                logger.warning(f"⚠️ Falha ao buscar tempo para {location} (...{subscription.endpoint[-16:]}): {e.message}")
            else:
                logger.error(f"❌ Erro inesperado montando o tempo para {location} (...{subscription.endpoint[-16:]}): {e}", exc_info=e)
            outcome.error = e
            outcome.attempted += 1
            if self.push.send(subscription, composer.compose_failure_notice(location)):
                outcome.delivered += 1
            self.store.stamp(
                subscription.endpoint,
                next_notification_time=compute_next(now, subscription.timezone),
            )
            return outcome

        payloads = [current, forecast]
        payloads += [composer.compose_alert(alert, location) for alert in snapshot.alerts]

        for payload in payloads:
            outcome.attempted += 1
            if self.push.send(subscription, payload):
                outcome.delivered += 1

        self.store.stamp(
            subscription.endpoint,
            next_notification_time=compute_next(now, tz_name),
            last_notified=now,
            timezone=tz_name,
        )
        return outcome
