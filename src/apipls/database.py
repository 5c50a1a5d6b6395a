from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


async def init_db(database_url: str, pool_size: int = 10, max_overflow: int = 20) -> AsyncEngine:
    """Create and return an async SQLAlchemy engine."""
    options = {"pool_pre_ping": True, "echo": False}
    # SQLite connections are not pooled the same way; it rejects sizing options
    if not make_url(database_url).get_backend_name().startswith("sqlite"):
        options.update(pool_size=pool_size, max_overflow=max_overflow)
    return create_async_engine(database_url, **options)


async def close_db(engine: AsyncEngine) -> None:
    """Dispose of the async engine and release all connections."""
    await engine.dispose()
