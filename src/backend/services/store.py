"""
store.py: Persistence collaborator for the treasury engine.

Wraps one AsyncSession. Every SQLAlchemy failure is translated to
StorageFailure at this boundary; nothing above it sees SQLAlchemy exceptions.

Same caller-manages-session pattern as the rest of services/: load/save/set_role
only stage changes. commit() and rollback() are called by the engine once per
operation, so a failed operation never leaves a partial write behind.

Bot roles are read from the table on every call (no in-process cache).
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from errors import ConfigNotFound, StorageFailure
from models import AuditLog, BotRole, TreasuryConfig
from services.state import TreasuryState

logger = logging.getLogger("store")


class TreasuryStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _config_row(self, *, lock: bool = False) -> Optional[TreasuryConfig]:
        stmt = (
            select(TreasuryConfig)
            .where(TreasuryConfig.id == TreasuryConfig.SINGLETON_ID)
            .execution_options(populate_existing=True)
        )
        if lock:
            # Serializes mutating calls on the singleton row (no-op on SQLite).
            stmt = stmt.with_for_update()
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("Config load failed: %s", exc)
            raise StorageFailure(f"Could not load treasury config: {exc}") from exc
        return result.scalar_one_or_none()

    async def exists(self) -> bool:
        return await self._config_row() is not None

    async def load(self, *, lock: bool = False) -> TreasuryState:
        """Return a detached working copy of the treasury config."""
        row = await self._config_row(lock=lock)
        if row is None:
            raise ConfigNotFound("Treasury has not been instantiated")
        return TreasuryState(owner=row.owner, pending_platform_fee=row.pending_platform_fee)

    async def create(self, state: TreasuryState) -> None:
        self.session.add(
            TreasuryConfig(
                id=TreasuryConfig.SINGLETON_ID,
                owner=state.owner,
                pending_platform_fee=state.pending_platform_fee,
            )
        )
        await self._flush("create config")

    async def save(self, state: TreasuryState) -> None:
        row = await self._config_row()
        if row is None:
            raise ConfigNotFound("Treasury has not been instantiated")
        row.owner = state.owner
        row.pending_platform_fee = state.pending_platform_fee
        await self._flush("save config")

    async def get_role(self, address: str) -> Optional[bool]:
        """None when the address was never granted a role."""
        try:
            row = await self.session.get(BotRole, address, populate_existing=True)
        except SQLAlchemyError as exc:
            logger.error("Role lookup failed for %s: %s", address, exc)
            raise StorageFailure(f"Could not load bot role: {exc}") from exc
        return None if row is None else row.enabled

    async def set_role(self, address: str, enabled: bool) -> None:
        try:
            row = await self.session.get(BotRole, address)
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Could not load bot role: {exc}") from exc
        if row is None:
            self.session.add(BotRole(address=address, enabled=enabled))
        else:
            row.enabled = enabled
        await self._flush("set role")

    async def list_roles(self) -> list[tuple[str, bool]]:
        try:
            result = await self.session.execute(select(BotRole).order_by(BotRole.address))
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Could not list bot roles: {exc}") from exc
        return [(r.address, r.enabled) for r in result.scalars().all()]

    def record_audit(self, caller: str, action: str, metadata: dict[str, Any]) -> None:
        self.session.add(
            AuditLog(caller=caller, action=action, metadata_json=json.dumps(metadata))
        )

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            logger.error("Commit failed: %s", exc)
            await self.session.rollback()
            raise StorageFailure(f"Could not persist treasury state: {exc}") from exc

    async def rollback(self) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Rollback failed: {exc}") from exc

    async def _flush(self, what: str) -> None:
        try:
            await self.session.flush()
        except (SQLAlchemyError, ValueError) as exc:
            logger.error("Flush failed (%s): %s", what, exc)
            raise StorageFailure(f"Could not {what}: {exc}") from exc
