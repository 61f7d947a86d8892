"""
Persistence port used by the lifecycle engine, the assignment coordinator
and the registry.

Every read-modify-write-log sequence runs inside ``AssetStore.transaction``:
the per-key locks are taken first, entity reads happen after that, and the
entity rows and the audit rows are committed (or rolled back) together.
"""

import asyncio
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Type, TypeVar

from sqlalchemy import select, func
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    DomainError,
    DuplicateValue,
    EntityNotFound,
    IntegrityViolation,
    StorageUnavailable,
)
from app.models import Device, SimCard, User, Term, DeviceStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_unique_violation(exc: IntegrityError) -> bool:
    # asyncpg reports SQLSTATE 23505; sqlite only has the message text
    code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if code:
        return code == "23505"
    text = str(exc.orig).lower()
    return "unique" in text or "duplicate" in text


class KeyedLock:
    """Process-local mutex per entity id"""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, *keys: str):
        # Sorted acquisition keeps two multi-key holders from deadlocking
        ordered = sorted({key for key in keys if key})
        registered, acquired = [], []
        try:
            for key in ordered:
                lock = self._locks.setdefault(key, asyncio.Lock())
                self._users[key] += 1
                registered.append(key)
                await lock.acquire()
                acquired.append(key)
            yield
        finally:
            for key in reversed(acquired):
                self._locks[key].release()
            for key in registered:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]


entity_locks = KeyedLock()


class AssetStore:
    """Repository over one AsyncSession"""

    def __init__(self, session: AsyncSession, locks: KeyedLock = entity_locks):
        self.session = session
        self.locks = locks

    # --- transactions -----------------------------------------------------

    @asynccontextmanager
    async def transaction(self, *keys: str):
        """Serialize on ``keys`` and commit everything written inside the block"""
        async with self.locks.hold(*keys):
            try:
                yield self
                await self.session.commit()
            except DomainError:
                await self.session.rollback()
                raise
            except IntegrityError as exc:
                await self.session.rollback()
                logger.warning("Integrity error rolled back: %s", exc.orig)
                if _is_unique_violation(exc):
                    raise DuplicateValue(f"Violação de unicidade: {exc.orig}") from exc
                raise IntegrityViolation(f"Restrição de integridade violada: {exc.orig}") from exc
            except (OperationalError, DBAPIError) as exc:
                await self.session.rollback()
                logger.error("Storage failure, transaction rolled back: %s", exc)
                raise StorageUnavailable() from exc
            except Exception:
                await self.session.rollback()
                raise

    def add(self, instance):
        self.session.add(instance)

    async def delete(self, instance):
        await self.session.delete(instance)

    async def flush(self):
        await self.session.flush()

    # --- reads ------------------------------------------------------------

    async def find(self, model: Type[T], entity_id: Optional[str]) -> Optional[T]:
        if not entity_id:
            return None
        result = await self.session.execute(
            select(model).where(model.id == entity_id)
        )
        return result.scalar_one_or_none()

    async def get(self, model: Type[T], entity_id: Optional[str], label: str = None) -> T:
        instance = await self.find(model, entity_id)
        if instance is None:
            raise EntityNotFound(f"{label or model.__name__} não encontrado: {entity_id}")
        return instance

    async def get_device(self, device_id: str) -> Device:
        return await self.get(Device, device_id, "Dispositivo")

    async def get_sim(self, sim_id: str) -> SimCard:
        return await self.get(SimCard, sim_id, "Chip")

    async def get_user(self, user_id: str) -> User:
        return await self.get(User, user_id, "Colaborador")

    async def get_term(self, term_id: str) -> Term:
        return await self.get(Term, term_id, "Termo")

    async def holder_of(self, model, entity_id: str) -> Optional[str]:
        """Current holder id, read without loading the entity"""
        result = await self.session.execute(
            select(model.current_user_id).where(model.id == entity_id)
        )
        return result.scalar_one_or_none()

    async def linked_sim_of(self, device_id: str) -> Optional[str]:
        result = await self.session.execute(
            select(Device.linked_sim_id).where(Device.id == device_id)
        )
        return result.scalar_one_or_none()

    async def device_linked_to(self, sim_id: str) -> Optional[Device]:
        result = await self.session.execute(
            select(Device).where(Device.linked_sim_id == sim_id)
        )
        return result.scalar_one_or_none()

    async def devices_held_by(self, user_id: str) -> List[Device]:
        result = await self.session.execute(
            select(Device).where(
                Device.current_user_id == user_id,
                Device.status == DeviceStatus.IN_USE.value,
            )
        )
        return list(result.scalars().all())

    async def sims_held_by(self, user_id: str) -> List[SimCard]:
        result = await self.session.execute(
            select(SimCard).where(
                SimCard.current_user_id == user_id,
                SimCard.status == DeviceStatus.IN_USE.value,
            )
        )
        return list(result.scalars().all())

    async def count_holdings(self, user_id: str) -> int:
        # Pending holder changes of the current transaction must be visible
        await self.session.flush()
        devices = await self.session.execute(
            select(func.count(Device.id)).where(Device.current_user_id == user_id)
        )
        sims = await self.session.execute(
            select(func.count(SimCard.id)).where(SimCard.current_user_id == user_id)
        )
        return (devices.scalar() or 0) + (sims.scalar() or 0)

    async def exists_with(self, model, column, value, exclude_id: str = None) -> bool:
        if value in (None, ""):
            return False
        query = select(model.id).where(column == value)
        if exclude_id:
            query = query.where(model.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None
