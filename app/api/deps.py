from fastapi import Depends

from app.db.session import SessionLocal
from app.services.notifier import WeatherNotifier
from app.services.push import PushService, get_push_service as build_push_service
from app.services.subscription_store import SubscriptionStore
from app.services.weather import WeatherClient, get_weather_client as build_weather_client

def get_store() -> SubscriptionStore:
    return SubscriptionStore(SessionLocal)

def get_weather_client() -> WeatherClient:
    return build_weather_client()

def get_push_service(store: SubscriptionStore = Depends(get_store)) -> PushService:
    return build_push_service(store)

def get_notifier(
    store: SubscriptionStore = Depends(get_store),
    weather_client: WeatherClient = Depends(get_weather_client),
    push_service: PushService = Depends(get_push_service),
) -> WeatherNotifier:
    """
    Monta o pipeline de envio com as dependências da requisição.
    Nos testes basta sobrescrever get_store / get_weather_client / get_push_service.
    """
    return WeatherNotifier(store=store, weather_client=weather_client, push_service=push_service)
