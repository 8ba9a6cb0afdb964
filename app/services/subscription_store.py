import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StoreError
from app.models.subscription import PushSubscription
from app.schemas.subscription import Subscription, SubscriptionRecord
from app.services.timing import ensure_utc

logger = logging.getLogger(__name__)


def _utc_or_none(dt: Optional[datetime]) -> Optional[datetime]:
    # Tudo vai para o banco em UTC
    return ensure_utc(dt) if dt is not None else None


class SubscriptionStore:
    """
    Guarda as inscrições de push, uma por endpoint.
    Cada operação abre e fecha a própria sessão: a atomicidade é por registro,
    o que basta para o scheduler (thread em background) e as rotas rodarem juntos.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def _apply(self, row: PushSubscription, record: SubscriptionRecord):
        row.keys = record.keys
        row.location = record.location
        row.user_id = record.user_id
        row.timezone = record.timezone
        row.created_at = ensure_utc(record.created_at)
        row.last_notified = _utc_or_none(record.last_notified)
        row.next_notification_time = _utc_or_none(record.next_notification_time)

    def upsert(self, endpoint: str, record: SubscriptionRecord) -> Subscription:
        db = self._session_factory()
        try:
            row = db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).first()
            if row is None:
                row = PushSubscription(endpoint=endpoint)
                db.add(row)
            self._apply(row, record)
            try:
                db.commit()
            except IntegrityError:
                # Outra requisição inseriu o mesmo endpoint no meio do caminho: vira update
                db.rollback()
                row = db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).one()
                self._apply(row, record)
                db.commit()
            db.refresh(row)
            return Subscription.model_validate(row)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Erro ao gravar inscrição: {e}")
            raise StoreError("Could not save subscription") from e
        finally:
            db.close()

    def delete(self, endpoint: str) -> bool:
        db = self._session_factory()
        try:
            deleted = db.query(PushSubscription).filter(
                PushSubscription.endpoint == endpoint
            ).delete(synchronize_session=False)
            db.commit()
            return deleted > 0
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Erro ao remover inscrição: {e}")
            raise StoreError("Could not delete subscription") from e
        finally:
            db.close()

    def find_by_endpoint(self, endpoint: str) -> Optional[Subscription]:
        rows = self._query(lambda q: q.filter(PushSubscription.endpoint == endpoint))
        return rows[0] if rows else None

    def find_by_location(self, location: str) -> List[Subscription]:
        return self._query(lambda q: q.filter(PushSubscription.location == location))

    def find_by_user(self, user_id: str) -> List[Subscription]:
        return self._query(lambda q: q.filter(PushSubscription.user_id == user_id))

    def list_all(self) -> List[Subscription]:
        return self._query(lambda q: q.order_by(PushSubscription.id))

    def stamp(
        self,
        endpoint: str,
        next_notification_time: datetime,
        last_notified: Optional[datetime] = None,
        timezone: Optional[str] = None,
    ) -> bool:
        """
        Atualiza os horários depois de um envio.
        Se a inscrição foi removida nesse meio tempo (endpoint morto), não recria.
        """
        db = self._session_factory()
        try:
            row = db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).first()
            if row is None:
                return False
            row.next_notification_time = ensure_utc(next_notification_time)
            if last_notified is not None:
                row.last_notified = ensure_utc(last_notified)
            if timezone:
                row.timezone = timezone
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Erro ao atualizar horários da inscrição: {e}")
            raise StoreError("Could not update subscription") from e
        finally:
            db.close()

    def _query(self, build) -> List[Subscription]:
        db = self._session_factory()
        try:
            rows = build(db.query(PushSubscription)).all()
            return [Subscription.model_validate(r) for r in rows]
        except SQLAlchemyError as e:
            logger.error(f"❌ Erro ao ler inscrições: {e}")
            raise StoreError("Could not read subscriptions") from e
        finally:
            db.close()
