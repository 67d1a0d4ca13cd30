# storefront/db/database.py
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

# Базовый класс для моделей
Base = declarative_base()


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(database_url, echo=echo)


# Асинхронная фабрика сессий
def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


# Генератор сессий, фабрика живёт в app.state (создаётся в lifespan)
async def get_db(request: Request):
    async with request.app.state.sessionmaker() as session:
        yield session
