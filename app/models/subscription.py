from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from app.db.base import Base

class PushSubscription(Base):
    __tablename__ = "push_subscriptions"

    id = Column(Integer, primary_key=True, index=True)

    # Dados técnicos que o navegador envia (as chaves vão direto pro pywebpush)
    endpoint = Column(String(500), unique=True, index=True, nullable=False)
    keys = Column(JSON, nullable=False)

    user_id = Column(String(255), nullable=True, index=True)

    # Sempre normalizado: "cidade,região,país"
    location = Column(String(255), nullable=False, index=True)

    # Último fuso informado pela Weather API (ex: "Europe/Paris")
    timezone = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_notified = Column(DateTime(timezone=True), nullable=True)
    next_notification_time = Column(DateTime(timezone=True), nullable=True)
