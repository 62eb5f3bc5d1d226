# crud/book.py — the only module that talks to the books table
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from database import init_db, make_engine
from exceptions import StoreError
from models import Book as BookRow
from schemas import Book, BookCreate

logger = logging.getLogger(__name__)


class BookStore:
    """Gateway over the ``books`` table.

    One instance is created at application startup and shared by every
    request. ``connect()`` creates the table if needed and ``close()``
    disposes of the engine's connections. Every statement is built with
    SQLAlchemy constructs, so values are always sent as bound parameters.

    Driver and connection failures surface as :class:`StoreError`. A missing
    id is not an error here: ``get_by_id`` returns ``None`` and ``update`` /
    ``delete`` return ``False``.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.engine: AsyncEngine = make_engine(database_url, echo=echo)
        self._sessions = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    async def connect(self):
        try:
            await init_db(self.engine)
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Could not initialise the database: {e}") from e
        logger.info("Connected to %s database", self.engine.dialect.name)

    async def close(self):
        await self.engine.dispose()
        logger.info("Database connections released")

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(str(e)) from e

    async def list_all(self) -> List[Book]:
        async with self._session() as db:
            result = await db.execute(select(BookRow).order_by(BookRow.id))
            return [Book.model_validate(row) for row in result.scalars().all()]

    async def get_by_id(self, book_id: int) -> Optional[Book]:
        async with self._session() as db:
            result = await db.execute(select(BookRow).where(BookRow.id == book_id))
            row = result.scalar_one_or_none()
            return Book.model_validate(row) if row is not None else None

    async def insert(self, book_data: BookCreate) -> int:
        async with self._session() as db:
            row = BookRow(**_values(book_data))
            db.add(row)
            await db.commit()
            await db.refresh(row)
            logger.info("Inserted book %s (%r)", row.id, row.title)
            return row.id

    async def update(self, book_id: int, book_data: BookCreate) -> bool:
        async with self._session() as db:
            result = await db.execute(
                update(BookRow)
                .where(BookRow.id == book_id)
                .values(**_values(book_data))
            )
            await db.commit()
        found = result.rowcount > 0
        logger.info("Updated book %s" if found else "No book %s to update", book_id)
        return found

    async def delete(self, book_id: int) -> bool:
        async with self._session() as db:
            result = await db.execute(delete(BookRow).where(BookRow.id == book_id))
            await db.commit()
        found = result.rowcount > 0
        logger.info("Deleted book %s" if found else "No book %s to delete", book_id)
        return found

    async def list_bookshelves(self) -> List[str]:
        async with self._session() as db:
            result = await db.execute(
                select(BookRow.bookshelf).distinct().order_by(BookRow.bookshelf)
            )
            return list(result.scalars().all())


def _values(book_data: BookCreate) -> dict:
    # all columns are rewritten together; bookshelf is stored lower-case
    values = book_data.model_dump()
    values["bookshelf"] = values["bookshelf"].lower()
    return values
