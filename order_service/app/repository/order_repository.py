from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.order import Order, OrderItem, Status
from ..schemas.order import OrderItemCreate


class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_order(
        self,
        order_number: str,
        customer_id: str,
        items: List[OrderItemCreate],
        total_amount: Decimal,
        currency: str = "USD",
    ) -> Order:
        """Create a new order with items and commit it"""
        order = Order(
            order_number=order_number,
            customer_id=customer_id,
            status=Status.PENDING.value,
            total_amount=total_amount,
            currency=currency,
            items=[
                OrderItem(
                    line_number=line_number,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for line_number, item in enumerate(items)
            ],
        )

        self.session.add(order)
        await self.session.commit()
        return order

    async def get_order_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID with items"""
        query = (
            select(Order).options(selectinload(Order.items)).where(Order.id == order_id)
        )
        result = await self.session.execute(query)
        return result.scalars().first()
