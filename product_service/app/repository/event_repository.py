"""Processed inbound event bookkeeping"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.processed_event import ProcessedEvent


class ProcessedEventRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def is_processed(self, event_id: str) -> bool:
        query = select(ProcessedEvent.id).where(ProcessedEvent.event_id == event_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def mark_processed(
        self, event_id: str, event_type: str, order_id: Optional[str] = None
    ) -> ProcessedEvent:
        record = ProcessedEvent(
            event_id=event_id, event_type=event_type, order_id=order_id
        )
        self.db.add(record)
        await self.db.flush()
        return record
