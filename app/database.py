# app/database.py
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from app.config import settings


def async_url(url: str) -> str:
    # Ensure aiomysql is used for plain MySQL URLs
    if url.startswith("mysql://"):
        return url.replace("mysql://", "mysql+aiomysql://", 1)
    return url


# Institute database: periods, careers, teachers, assignments, users
read_engine = create_async_engine(async_url(settings.READ_DATABASE_URL), echo=settings.SQL_ECHO, pool_pre_ping=True)
# Evaluation database: forms, questions, answers, evaluations, coordinators
write_engine = create_async_engine(async_url(settings.WRITE_DATABASE_URL), echo=settings.SQL_ECHO, pool_pre_ping=True)

ReadSessionLocal = async_sessionmaker(bind=read_engine, expire_on_commit=False, class_=AsyncSession)
WriteSessionLocal = async_sessionmaker(bind=write_engine, expire_on_commit=False, class_=AsyncSession)
Base = declarative_base()


async def get_read_db() -> AsyncGenerator[AsyncSession, None]:
    async with ReadSessionLocal() as session:
        yield session


async def get_write_db() -> AsyncGenerator[AsyncSession, None]:
    async with WriteSessionLocal() as session:
        yield session
