from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Response, status

from app.api import deps
from app.core.errors import NotFoundError
from app.schemas.location import Location
from app.schemas.subscription import (
    CheckResponse,
    EndpointRequest,
    SubscribeRequest,
    SubscriptionRecord,
)
from app.services.notifier import WeatherNotifier
from app.services.subscription_store import SubscriptionStore
from app.services.timing import compute_next, format_local_time

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("", status_code=status.HTTP_201_CREATED)
def subscribe(
    sub_in: SubscribeRequest,
    store: SubscriptionStore = Depends(deps.get_store),
    notifier: WeatherNotifier = Depends(deps.get_notifier),
):
    """Cria ou substitui a inscrição do endpoint e já manda a primeira atualização."""
    location = Location.parse(sub_in.location)
    now = datetime.now(timezone.utc)

    # O fuso só é conhecido depois da primeira busca; até lá o próximo horário é calculado em UTC
    subscription = store.upsert(
        sub_in.subscription.endpoint,
        SubscriptionRecord(
            keys=sub_in.subscription.keys,
            location=location.canonical,
            user_id=sub_in.user_id,
            created_at=now,
            last_notified=None,
            next_notification_time=compute_next(now, None),
        ),
    )
    logger.info(f"🔔 Nova inscrição para {location.canonical}")

    # Só para esta inscrição, não para todas da mesma cidade
    notifier.notify(subscription)
    return {"success": True}

@router.delete("")
def unsubscribe(
    body: EndpointRequest,
    store: SubscriptionStore = Depends(deps.get_store),
):
    if not store.delete(body.endpoint):
        raise NotFoundError("Subscription not found")
    return {"success": True}

@router.post("/check", response_model=CheckResponse, responses={404: {"description": "Not subscribed"}})
def check_subscription(
    body: EndpointRequest,
    store: SubscriptionStore = Depends(deps.get_store),
):
    sub = store.find_by_endpoint(body.endpoint)
    if sub is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    next_update = None
    if sub.next_notification_time is not None:
        next_update = format_local_time(sub.next_notification_time, sub.timezone)

    return CheckResponse(
        subscribed=True,
        location=sub.location,
        next_notification_time=sub.next_notification_time,
        next_update=next_update,
    )
