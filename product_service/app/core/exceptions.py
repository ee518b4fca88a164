"""
Product Service domain exceptions.

``RetryableEventError`` marks failures the Kafka consume loop should answer
with redelivery of the same message rather than committing past it.
"""

from typing import Optional


class RetryableEventError(Exception):
    """Event processing failed in a way that redelivery can fix"""


class InventoryError(Exception):
    """Base class for inventory domain errors"""


class ProductNotFound(InventoryError):
    """No ledger row exists for the product id"""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"No inventory record for product {product_id}")


class AlertNotFound(InventoryError):
    def __init__(self, alert_id: int):
        self.alert_id = alert_id
        super().__init__(f"Inventory alert {alert_id} not found")


class DuplicateAdjustment(InventoryError):
    """The order line already has an applied adjustment"""

    def __init__(self, order_id: str, line_number: int):
        self.order_id = order_id
        self.line_number = line_number
        super().__init__(
            f"Adjustment for order {order_id} line {line_number} already applied"
        )


class PersistenceError(InventoryError, RetryableEventError):
    """Storage-layer failure while reading or writing inventory state"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class PublishError(InventoryError):
    """Outbound event could not be published"""

    def __init__(self, topic: str, event_type: str, cause: Optional[BaseException] = None):
        self.topic = topic
        self.event_type = event_type
        self.cause = cause
        super().__init__(f"Failed to publish {event_type} to {topic}: {cause}")
