# storefront/db/models.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, JSON
from storefront.db.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


# Модель товара
class Product(Base):
    __tablename__ = "products"

    # id назначается вручную как max(id) + 1
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    image = Column(String, nullable=False)
    category = Column(String, nullable=False)
    new_price = Column(Float, nullable=False)
    old_price = Column(Float, nullable=False)
    date = Column(DateTime(timezone=True), default=_utcnow)
    available = Column(Boolean, default=True)


# Модель пользователя
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    cart_data = Column(JSON, nullable=False, default=dict)  # {"0": 0, ..., "299": 0}
    date = Column(DateTime(timezone=True), default=_utcnow)
