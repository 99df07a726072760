from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from config.settings import settings


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async engine for the given URL"""
    return create_async_engine(
        database_url,
        echo=settings.log_level == "DEBUG",
        future=True
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to an engine; objects stay usable after commit"""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False
    )


# Create async engine
engine = create_engine(settings.database_url)

# Create async session factory
async_session_factory = create_session_factory(engine)


async def init_db(bind: AsyncEngine = None):
    """Initialize database tables"""
    # models must be imported so their tables are registered on Base.metadata
    import database.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
