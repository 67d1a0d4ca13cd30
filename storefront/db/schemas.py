# storefront/db/schemas.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# Схема для создания товара
class ProductBase(BaseModel):
    name: str
    image: str
    category: str
    new_price: float
    old_price: float


class Product(ProductBase):
    id: int
    date: Optional[datetime] = None
    available: bool = True

    model_config = ConfigDict(from_attributes=True)


class ProductRemove(BaseModel):
    id: int
    name: Optional[str] = None


class ImageUpload(BaseModel):
    image: str  # data-uri или base64


# Схемы пользователя
class SignupRequest(BaseModel):
    name: Optional[str] = None
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


# Схема элемента корзины, клиент шлёт itemId
class CartItemRequest(BaseModel):
    item_id: int = Field(alias="itemId")

    model_config = ConfigDict(populate_by_name=True)
