"""
Delivery Log Service - at-most-once processing of GitHub deliveries.

GitHub delivers at least once. The insert into ``github_event_log`` is the
only gate: the row is committed before any task is touched, and a second
insert with the same ``delivery_id`` hits the primary key.
"""
from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hydianflow.core.clock import utcnow
from hydianflow.core.exceptions import PersistenceError
from hydianflow.core.logging import get_logger
from hydianflow.db.models.webhook_delivery import WebhookDelivery

logger = get_logger(__name__)


class DeliveryLogService:
    """Records deliveries and reports duplicates"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_delivery(
        self,
        delivery_id: str,
        event_type: str,
        raw_payload: bytes,
    ) -> bool:
        """
        Insert the delivery. Returns True when it is new, False when the
        ``delivery_id`` was already recorded.
        """
        stmt = insert(WebhookDelivery).values(
            delivery_id=delivery_id,
            event_type=event_type,
            raw_payload=raw_payload.decode("utf-8", errors="replace"),
            received_at=utcnow(),
        )
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not await self._is_recorded(delivery_id):
                # Some other constraint failed; the delivery is not logged
                raise PersistenceError(
                    "failed to log event",
                    operation="record_delivery",
                    details={"delivery_id": delivery_id},
                ) from e
            logger.info(
                "Duplicate GitHub delivery",
                extra_data={"delivery_id": delivery_id, "event": event_type},
            )
            return False
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(
                "failed to log event",
                operation="record_delivery",
                details={"delivery_id": delivery_id},
            ) from e

        return True

    async def _is_recorded(self, delivery_id: str) -> bool:
        result = await self.db.execute(
            select(WebhookDelivery.delivery_id).where(WebhookDelivery.delivery_id == delivery_id)
        )
        return result.scalar_one_or_none() is not None
