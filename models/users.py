from core.database import Base
from sqlalchemy import (Column, Integer, String, Enum)
from sqlalchemy.orm import relationship
from .enums import Role
from .mixins import CreatedAtMixin, UpdatedAtMixin

class User(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "users"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    orders = relationship("Order", back_populates="user")
    cart_items = relationship("CartItem", back_populates="user")
    tokens = relationship("SessionToken", back_populates="user")

    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(Role, name="user_role"), default=Role.CUSTOMER, nullable=False)
