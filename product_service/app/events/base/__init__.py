"""
Product Service event envelope and event-bus interfaces.

Every message on the bus is a ``BaseEvent`` serialised with camelCase keys:
``{eventId, eventType, timestamp, source, version, data}``.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EVENT_SCHEMA_VERSION = "1.0"


class BaseEvent(BaseModel):
    """Envelope shared by all domain events"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    event_id: str = Field(default_factory=lambda: uuid.uuid4().hex, max_length=64)
    event_type: str = Field(max_length=64)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = EVENT_SCHEMA_VERSION
    source: str = "product-service"
    data: Dict[str, Any] = Field(default_factory=dict)

    def to_message(self) -> Dict[str, Any]:
        """JSON-ready wire representation"""
        return self.model_dump(mode="json", by_alias=True)


class EventHandler(ABC):
    """Abstract base class for event handlers"""

    @abstractmethod
    async def handle(self, event: BaseEvent) -> None:
        """Handle the event"""
        pass


class EventPublisher(ABC):
    """Abstract base class for event publishers"""

    @abstractmethod
    async def publish(
        self, topic: str, event: BaseEvent, key: Optional[str] = None
    ) -> None:
        """Publish an event to ``topic``, partitioned by ``key``"""
        pass


class EventSubscriber(ABC):
    """Abstract base class for event subscribers"""

    @abstractmethod
    async def subscribe(
        self,
        topic: str,
        group: str,
        handler: EventHandler,
        event_type: Optional[str] = None,
    ) -> None:
        """Deliver events from ``topic`` to ``handler`` as consumer group ``group``"""
        pass

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass
