from core.database import Base
from sqlalchemy import (Column, Integer, String, ForeignKey, Numeric)
from sqlalchemy.orm import relationship

class OrderItem(Base):
    """
    Point-in-time copy of one cart line, written when its order succeeds.

    product_id is deliberately not a foreign key: the snapshot outlives
    later price changes and product deletion.
    """
    __tablename__ = "order_items"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    order_id = Column(String(100), ForeignKey("orders.order_id"), nullable=False, index=True)

    #relationships
    order = relationship("Order", back_populates="items")

    product_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    price_per_unit = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
