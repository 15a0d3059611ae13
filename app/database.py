"""
Connexion a la base de donnees / Database connection.
Supporte SQLite (dev) et PostgreSQL (prod) via SQLAlchemy 2.0 async.
"""

import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

logger = logging.getLogger(__name__)

# Option d'exécution : la transaction prend le verrou d'écriture dès BEGIN
# Execution option: the transaction takes the write lock at BEGIN
WRITE_LOCK_OPTION = "equiroute_write_lock"


def _install_sqlite_locking(new_engine: AsyncEngine) -> None:
    """
    pysqlite ne gère pas BEGIN lui-même : on émet BEGIN / BEGIN IMMEDIATE.
    pysqlite does not manage BEGIN properly: emit BEGIN / BEGIN IMMEDIATE ourselves.
    """

    @event.listens_for(new_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        # WAL : les lecteurs ne bloquent pas le commit de l'écrivain / readers never block the writer's commit
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(new_engine.sync_engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(WRITE_LOCK_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Créer le moteur async / Create the async engine."""
    if url.startswith("sqlite"):
        # SQLite : un seul écrivain, les autres attendent le verrou / SQLite: one writer, others wait for the lock
        new_engine = create_async_engine(
            url, echo=echo, connect_args={"timeout": settings.SQLITE_BUSY_TIMEOUT_SECONDS}
        )
        _install_sqlite_locking(new_engine)
        return new_engine

    # PostgreSQL : pool de connexions / PostgreSQL: connection pooling
    return create_async_engine(
        url,
        echo=echo,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=1800,
        pool_pre_ping=True,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """Dependance FastAPI pour obtenir une session DB / FastAPI dependency for DB session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Creer les tables au demarrage / Create tables on startup."""
    # Enregistrer tous les modeles sur la metadata / Register every model on the metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready (%s tables)", len(Base.metadata.sorted_tables))


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Fabrique de sessions du moteur de planification / Session factory for the scheduling engine."""
    return async_session
