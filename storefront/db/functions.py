# storefront/db/functions.py
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from storefront.db.models import Product, User
from storefront.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

CART_SIZE = 300
ADD_PRODUCT_ATTEMPTS = 5


# ---------------------- Каталог ----------------------

async def get_all_products(db: AsyncSession):
    result = await db.execute(select(Product).order_by(Product.id))
    return result.scalars().all()


async def get_next_product_id(db: AsyncSession) -> int:
    result = await db.execute(select(func.max(Product.id)))
    max_id = result.scalar()
    return 1 if max_id is None else max_id + 1


# Создание нового товара: id = max(id) + 1, при гонке пересчитываем
async def create_product(db: AsyncSession, name: str, image: str, category: str, new_price: float, old_price: float):
    for attempt in range(1, ADD_PRODUCT_ATTEMPTS + 1):
        product = Product(
            id=await get_next_product_id(db),
            name=name,
            image=image,
            category=category,
            new_price=new_price,
            old_price=old_price,
        )
        db.add(product)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning("product id %s already taken, retrying (attempt %s)", product.id, attempt)
            continue
        await db.refresh(product)
        return product
    raise ConflictError("Could not allocate product id")


# Удаление товара, отсутствие записи не считается ошибкой
async def delete_product(db: AsyncSession, product_id: int):
    result = await db.execute(select(Product).filter(Product.id == product_id))
    product = result.scalars().first()
    if product is None:
        return None
    await db.delete(product)
    await db.commit()
    return product


# ---------------------- Пользователи ----------------------

def empty_cart() -> dict:
    return {str(index): 0 for index in range(CART_SIZE)}


async def get_user_by_id(db: AsyncSession, user_id: int):
    result = await db.execute(select(User).filter(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str):
    result = await db.execute(select(User).filter(User.email == email))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, name: str, email: str, hashed_password: str):
    if await get_user_by_email(db, email):
        raise ConflictError("Email already in use")

    db_user = User(
        name=name,
        email=email,
        hashed_password=hashed_password,
        cart_data=empty_cart(),
    )
    db.add(db_user)
    try:
        await db.commit()
    except IntegrityError:
        # Параллельная регистрация с тем же email
        await db.rollback()
        raise ConflictError("Email already in use")
    await db.refresh(db_user)
    return db_user


# ---------------------- Корзина ----------------------

async def get_user_or_404(db: AsyncSession, user_id: int):
    user = await get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def get_cart(db: AsyncSession, user_id: int) -> dict:
    user = await get_user_or_404(db, user_id)
    return user.cart_data


async def add_item_to_cart(db: AsyncSession, user_id: int, item_id: int) -> dict:
    """Увеличивает счётчик ``item_id``; неизвестный индекс начинается с нуля."""
    user = await get_user_or_404(db, user_id)
    cart = dict(user.cart_data)
    key = str(item_id)
    cart[key] = cart.get(key, 0) + 1
    # JSON-колонка не отслеживает мутации, присваиваем новый dict
    user.cart_data = cart
    await db.commit()
    return cart


async def remove_item_from_cart(db: AsyncSession, user_id: int, item_id: int) -> dict:
    """Уменьшает счётчик ``item_id``, но не ниже нуля."""
    user = await get_user_or_404(db, user_id)
    cart = dict(user.cart_data)
    key = str(item_id)
    if cart.get(key, 0) > 0:
        cart[key] -= 1
        user.cart_data = cart
        await db.commit()
    return cart
