from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()

ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def async_database_url(url: str) -> str:
    """Rewrite a plain connection string to use an asyncio driver.

    ``postgres://user@host/db`` becomes ``postgresql+asyncpg://user@host/db``.
    URLs that already name a driver are returned unchanged.
    """
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    return f"{ASYNC_DRIVERS.get(scheme, scheme)}://{rest}"


def make_engine(url: str, echo: bool = False) -> AsyncEngine:
    url = async_database_url(url)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_async_engine(url, echo=echo, connect_args=connect_args)


async def init_db(engine: AsyncEngine):
    import models  # noqa: F401  registers the books table on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
