"""Order repository: the read side the coupon engine needs."""

from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from couponengine.models.order import Order, OrderStatus


class OrderRepository:
    """Repository for Order model."""

    def __init__(self, db: Session):
        self.db = db

    def count_completed_by_user(self, user_id: str) -> int:
        """Count a user's completed orders."""
        return (
            self.db.query(func.count(Order.id))
            .filter(Order.user_id == user_id, Order.status == OrderStatus.COMPLETED.value)
            .scalar()
            or 0
        )

    def is_first_purchase(self, user_id: str) -> bool:
        """A user is a first-time buyer until they have a completed order."""
        return self.count_completed_by_user(user_id) == 0

    def create(
        self,
        user_id: str,
        total: Decimal,
        status: OrderStatus = OrderStatus.PENDING,
        store_id: str | None = None,
    ) -> Order:
        """Create an order."""
        order = Order(user_id=user_id, total=total, status=status.value, store_id=store_id)
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order
