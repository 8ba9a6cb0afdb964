import json
import logging
import requests
from pywebpush import webpush, WebPushException
from app.core.config import settings
from app.core.errors import DeliveryError, EndpointGoneError
from app.schemas.notification import NotificationPayload
from app.schemas.subscription import Subscription
from app.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

# Códigos que o protocolo de push reserva para endpoint que não existe mais
GONE_STATUS_CODES = (404, 410)

class PushService:

    def __init__(self, store: SubscriptionStore, vapid_private_key: str, vapid_claims_email: str):
        self.store = store
        self.vapid_private_key = vapid_private_key
        self.vapid_claims_email = vapid_claims_email

    def deliver(self, subscription: Subscription, payload: NotificationPayload):
        """Envia o push e traduz o erro do pywebpush para a nossa taxonomia."""
        try:
            webpush(
                subscription_info=subscription.subscription_info,
                data=json.dumps(payload.model_dump()),
                vapid_private_key=self.vapid_private_key,
                vapid_claims={"sub": self.vapid_claims_email}
            )
        except WebPushException as ex:
            status = getattr(ex.response, "status_code", None)
            if status in GONE_STATUS_CODES:
                raise EndpointGoneError(str(ex), status) from ex
            raise DeliveryError(str(ex), status) from ex
        except requests.RequestException as ex:
            # Timeout ou falha de rede: transitório
            raise DeliveryError(str(ex)) from ex
        except Exception as ex:
            # Chaves p256dh/auth inválidas estouram na criptografia, antes da rede
            raise DeliveryError(str(ex)) from ex

    def send(self, subscription: Subscription, payload: NotificationPayload) -> bool:
        """Envia um push para uma inscrição específica. Nunca tenta de novo aqui."""
        try:
            self.deliver(subscription, payload)
            return True
        except EndpointGoneError as ex:
            # Único caminho que remove inscrições mortas
            logger.info(f"🗑️ Endpoint expirado ({ex.push_status}), removendo inscrição ...{subscription.endpoint[-16:]}")
            self.store.delete(subscription.endpoint)
            return False
        except DeliveryError as ex:
            logger.warning(f"❌ Erro Push ({ex.push_status}): {ex.message}")
            return False

def get_push_service(store: SubscriptionStore) -> PushService:
    return PushService(
        store=store,
        vapid_private_key=settings.VAPID_PRIVATE_KEY,
        vapid_claims_email=settings.VAPID_CLAIMS_EMAIL,
    )
