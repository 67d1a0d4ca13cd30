# storefront/db/init_db.py
from sqlalchemy.ext.asyncio import AsyncEngine
from storefront.db.database import Base
from storefront.db import models  # noqa: F401  регистрирует таблицы в Base.metadata


async def init_db(engine: AsyncEngine):
    async with engine.begin() as conn:
        # Создание всех таблиц
        await conn.run_sync(Base.metadata.create_all)
