from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.engine.url import make_url
from app.config import settings

# libpq-only options; asyncpg rejects them as server settings
LIBPQ_QUERY_KEYS = ("sslmode", "channel_binding")


def get_database_url() -> str:
    """Point DATABASE_URL at the asyncpg driver, keeping any async driver already named"""
    url = make_url(settings.DATABASE_URL)

    if url.drivername in ("postgres", "postgresql", "postgresql+psycopg2"):
        url = url.set(
            drivername="postgresql+asyncpg",
            query={k: v for k, v in url.query.items() if k not in LIBPQ_QUERY_KEYS},
        )

    # hide_password=False keeps special characters in the password intact
    return url.render_as_string(hide_password=False)


def get_connect_args() -> dict:
    """asyncpg takes ssl as a connect argument instead of ?sslmode="""
    url = make_url(settings.DATABASE_URL)
    if url.query.get("sslmode") in ("require", "verify-ca", "verify-full"):
        return {"ssl": "require"}
    return {}


engine = create_async_engine(
    get_database_url(),
    echo=settings.DEBUG,
    pool_pre_ping=True,
    pool_recycle=3600,
    connect_args=get_connect_args(),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def close_db():
    """Dispose of pooled connections on shutdown"""
    await engine.dispose()
