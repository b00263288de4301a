"""
models.py: Single Source of Truth for ALL SQLAlchemy table definitions.

This file contains ONLY:
  1. SQLAlchemy ORM models (DeclarativeBase subclasses)
  2. Pydantic request/response schemas

It does NOT contain:
  - Engine creation, session factories, or connection logic (see database.py)
  - Business logic or service functions (see services/)

Money columns use Uint128Column: unsigned 128-bit integers stored as decimal
strings so no backend (SQLite REAL included) can round them.
"""

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    model_validator,
)
from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator

from services.uint import UINT64_MAX, UINT128_MAX


# ============================================================================
# BASE
# ============================================================================

class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""
    pass


class Uint128Column(TypeDecorator):
    """Unsigned 128-bit integer persisted as a decimal string."""

    impl = String(39)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value < 0 or value > UINT128_MAX:
            raise ValueError(f"Value out of Uint128 range: {value}")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


# ============================================================================
# CORE TABLES
# ============================================================================

class TreasuryConfig(Base):
    """
    Singleton treasury state (one row, id == 1).

      - owner: the only address allowed to run admin operations
      - pending_platform_fee: fees accrued by buy_token and not yet withdrawn;
        never negative (Uint128Column rejects it at bind time as a last line)
    """
    __tablename__ = "treasury_config"

    SINGLETON_ID = 1

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner: Mapped[str] = mapped_column(String(128))
    pending_platform_fee: Mapped[int] = mapped_column(Uint128Column, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=func.now()
    )


class BotRole(Base):
    """Bot permission table. No row means never granted; enabled=False means revoked."""
    __tablename__ = "bot_roles"

    address: Mapped[str] = mapped_column(String(128), primary_key=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class AuditLog(Base):
    """Immutable audit trail for all mutating actions."""
    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    caller: Mapped[str] = mapped_column(String(128), index=True)
    action: Mapped[str] = mapped_column(String(50))
    metadata_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


# ============================================================================
# PYDANTIC SCHEMAS: wire types
# ============================================================================

def _parse_uint(value: Any) -> Any:
    # Uint128/Uint64 travel as decimal strings; plain ints are accepted too.
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return value


Uint128 = Annotated[int, BeforeValidator(_parse_uint), Field(ge=0, le=UINT128_MAX)]
Uint64 = Annotated[int, BeforeValidator(_parse_uint), Field(ge=0, le=UINT64_MAX)]
Address = Annotated[str, Field(min_length=1, max_length=128)]


class SetAdmin(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid")
    new_owner: Address = Field(validation_alias=AliasChoices("new_owner", "new_admin"))


class SetBotRole(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid")
    bot: Address = Field(validation_alias=AliasChoices("bot", "new_bot"))
    enabled: bool


class WithdrawFee(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid")
    to: Address
    amount: Uint128


class BuyToken(BaseModel):
    """Parameters of one buy_token call. Bounds beyond the integer ranges are
    checked by the engine guards so the caller sees the first violated one."""
    model_config = ConfigDict(strict=True, extra="forbid")

    juno_amount: Uint128
    token_amount_per_native: Uint128
    slippage_bips: Uint128
    recipient: Address = Field(validation_alias=AliasChoices("recipient", "to"))
    pool_address: Address = Field(validation_alias=AliasChoices("pool_address", "router"))
    platform_fee_bips: Uint128
    gas_estimate: Uint128
    deadline: Uint64
    # Output token; recorded for reconciliation, the pool decides what is bought.
    token: Optional[Address] = None


class ExecuteMsg(BaseModel):
    """Externally tagged operation envelope: exactly one key is set.

    Example: {"set_bot_role": {"bot": "juno1...", "enabled": true}}
    """
    model_config = ConfigDict(extra="forbid")

    set_admin: Optional[SetAdmin] = None
    set_bot_role: Optional[SetBotRole] = None
    withdraw_fee: Optional[WithdrawFee] = None
    buy_token: Optional[BuyToken] = None

    @model_validator(mode="after")
    def exactly_one_operation(self) -> "ExecuteMsg":
        present = [name for name in type(self).model_fields if getattr(self, name) is not None]
        if len(present) != 1:
            raise ValueError(
                f"Exactly one operation must be given, got {len(present)}: {present}"
            )
        return self

    @property
    def operation(self) -> str:
        return next(name for name in type(self).model_fields if getattr(self, name) is not None)

    @property
    def payload(self) -> BaseModel:
        return getattr(self, self.operation)


class AttributeResponse(BaseModel):
    key: str
    value: str


class ExecuteResponse(BaseModel):
    operation: str
    messages: list[dict[str, Any]]
    attributes: list[AttributeResponse]


class StateResponse(BaseModel):
    owner: str
    pending_platform_fee: str
    current_time: int


class BotRoleResponse(BaseModel):
    address: str
    enabled: Optional[bool]


class TokenRequest(BaseModel):
    address: Address


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
