"""Database session configuration."""

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from pagemeter.core.config import settings

POOL_SIZE = settings.DB_POOL_SIZE
MAX_OVERFLOW = settings.DB_POOL_MAX_OVERFLOW

connect_args_config = {
    "server_settings": {
        # Kill idle transactions after 5 minutes
        "idle_in_transaction_session_timeout": "300000",
    },
    "command_timeout": 60,
}

if settings.POSTGRES_SSLMODE == "disable":
    connect_args_config["ssl"] = False

# READ COMMITTED is sufficient for charging: the ledger row is locked with
# SELECT ... FOR UPDATE inside each charge transaction.
async_engine = create_async_engine(
    settings.SQLALCHEMY_ASYNC_DATABASE_URI,
    pool_size=POOL_SIZE,
    max_overflow=MAX_OVERFLOW,
    pool_pre_ping=True,
    pool_recycle=300,
    pool_timeout=30,
    isolation_level="READ COMMITTED",
    connect_args=connect_args_config,
)

AsyncSessionLocal = async_sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=async_engine
)
