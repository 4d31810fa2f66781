import logging
from typing import Callable

from bookshop.application.ports import UnitOfWork
from bookshop.adapters.db.memory.store import InMemoryStore
from bookshop.adapters.db.memory.uow import InMemoryUnitOfWork
from bookshop.adapters.db.sqlalchemy.session import build_session_factory
from bookshop.adapters.db.sqlalchemy.uow import SQLAlchemyUnitOfWork
from bookshop.adapters.security.hasher import SimplePasswordHasher
from bookshop.config import Settings
from bookshop.seed import seed_sample_data

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], UnitOfWork]


# 設定に応じてストレージを選び、unit of work を生成する関数を返す
def build_uow_factory(settings: Settings) -> UnitOfWorkFactory:
    if settings.uses_memory_store:
        logger.info("Using in-memory entity store")
        store = InMemoryStore()

        def uow_factory() -> UnitOfWork:
            return InMemoryUnitOfWork(store)
    else:
        session_factory = build_session_factory(settings.database_url, echo=settings.sql_echo)

        def uow_factory() -> UnitOfWork:
            return SQLAlchemyUnitOfWork(session_factory)
    if settings.seed_sample_data:
        seed_sample_data(uow_factory(), SimplePasswordHasher())
    return uow_factory
