from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

class PushSubscriptionCreate(BaseModel):
    endpoint: str = Field(..., min_length=1)
    # Material de criptografia do navegador (p256dh/auth). Não inspecionamos.
    keys: Dict[str, Any]

class SubscribeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subscription: PushSubscriptionCreate
    location: str = Field(..., min_length=1)
    user_id: Optional[str] = Field(None, alias="userId")

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, v):
        return str(v) if v is not None else None

class EndpointRequest(BaseModel):
    endpoint: str = Field(..., min_length=1)

class SubscriptionRecord(BaseModel):
    """Dados gravados num upsert (tudo menos o endpoint, que é a chave)."""
    keys: Dict[str, Any]
    location: str
    user_id: Optional[str] = None
    timezone: Optional[str] = None
    created_at: datetime
    last_notified: Optional[datetime] = None
    next_notification_time: Optional[datetime] = None

class Subscription(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    endpoint: str
    keys: Dict[str, Any]
    location: str
    user_id: Optional[str] = None
    timezone: Optional[str] = None
    created_at: Optional[datetime] = None
    last_notified: Optional[datetime] = None
    next_notification_time: Optional[datetime] = None

    @field_validator("created_at", "last_notified", "next_notification_time")
    @classmethod
    def assume_utc(cls, v):
        # SQLite devolve datas sem fuso; tudo no banco está em UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def subscription_info(self) -> Dict[str, Any]:
        return {"endpoint": self.endpoint, "keys": self.keys}

class CheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subscribed: bool
    location: str
    next_notification_time: Optional[datetime] = Field(None, alias="nextNotificationTime")
    next_update: Optional[str] = Field(None, alias="nextUpdate")
