import os
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from models import Base

load_dotenv()

ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
DEBUG = ENVIRONMENT == "dev"
IS_PRODUCTION = ENVIRONMENT == "prod"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", 8000))

DATABASE_URL = os.getenv("DATABASE_URL")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# data.gov.in "Current daily price of various commodities from various markets (Mandi)"
MARKET_PRICE_API_URL = os.getenv(
    "MARKET_PRICE_API_URL",
    "https://api.data.gov.in/resource/9ef84268-d588-465a-a308-a864a43d0070",
)
MARKET_PRICE_API_KEY = os.getenv("MARKET_PRICE_API_KEY")
MARKET_PRICE_API_LIMIT = int(os.getenv("MARKET_PRICE_API_LIMIT", 1000))
MARKET_PRICE_API_TIMEOUT = float(os.getenv("MARKET_PRICE_API_TIMEOUT", 10))

CHAT_HISTORY_LIMIT = int(os.getenv("CHAT_HISTORY_LIMIT", 50))


sync_engine = None
async_engine = None
AsyncSessionLocal = None


def to_async_url(database_url: str) -> str:
    """Rewrite a plain database URL to the async driver SQLAlchemy should use"""
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        base_url = database_url.split("?")[0]
        return f"{base_url}?prepared_statement_cache_size=0"
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def to_sync_url(database_url: str) -> str:
    return (
        database_url
        .replace("postgresql+asyncpg://", "postgresql://")
        .replace("sqlite+aiosqlite://", "sqlite://")
    )


def configure_database(database_url: str):
    """(Re)build the engines and session factory for the given URL"""
    global sync_engine, async_engine, AsyncSessionLocal

    async_url = to_async_url(database_url)

    if async_url.startswith("sqlite"):
        # aiosqlite connections must not be shared across event loops
        async_engine = create_async_engine(async_url, echo=False, poolclass=NullPool)
    else:
        async_engine = create_async_engine(
            async_url,
            echo=False,
            pool_pre_ping=False,
            pool_size=5,
            max_overflow=0
        )

    sync_engine = create_engine(to_sync_url(async_url).split("?")[0])

    AsyncSessionLocal = sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


if DATABASE_URL:
    configure_database(DATABASE_URL)


async def get_db():
    if AsyncSessionLocal is None:
        raise Exception("Database not configured")
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def open_session():
    """Session for code paths outside FastAPI dependency injection (websockets)"""
    if AsyncSessionLocal is None:
        raise Exception("Database not configured")
    async with AsyncSessionLocal() as session:
        yield session


async def init_db():
    """Check connectivity and create any missing tables"""
    if async_engine is None:
        raise Exception("Database not configured")
    async with async_engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db():
    if async_engine is not None:
        await async_engine.dispose()


def get_sync_engine():
    if sync_engine is None:
        raise Exception("Database not configured")
    return sync_engine
