from core.database import Base
from sqlalchemy import (Column, Integer, String, ForeignKey)
from sqlalchemy.orm import relationship

class ProductImage(Base):
    __tablename__ = "product_images"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    #relationships
    product = relationship("Product", back_populates="images")

    image_url = Column(String(1000), nullable=False)
