from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.errors import StoreError
from app.middleware import install_query_counter


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """
    Turn on ``PRAGMA foreign_keys`` for every new SQLite connection so the
    ``ON DELETE CASCADE`` from comments to posts is honoured.  No-op for
    other dialects, which enforce foreign keys unconditionally.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

install_query_counter(engine)
enable_sqlite_foreign_keys(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as exc:
            # Only the commit lands here; the Store wraps statement failures.
            await session.rollback()
            raise StoreError(f"commit failed: {exc.__class__.__name__}") from exc
        except Exception:
            await session.rollback()
            raise
