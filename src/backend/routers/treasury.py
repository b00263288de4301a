"""
treasury.py: HTTP transport for the treasury engine.

Endpoints:
  POST /execute         : run one ExecuteMsg as the bearer-token caller
  GET  /state           : owner, pending fee, current chain time
  GET  /bots/{address}  : bot role lookup (enabled: true | false | null)

Chain time is the server clock in whole seconds, read once per request.
Messages are published to the outbox only after the engine committed.
"""

import logging
import time
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_session
from errors import TreasuryError
from models import (
    AttributeResponse,
    BotRoleResponse,
    ExecuteMsg,
    ExecuteResponse,
    StateResponse,
)
from services.engine import ExecutionEngine
from services.outbox import OutboxError, get_outbox_redis, publish_messages
from services.state import BlockEnv
from services.store import TreasuryStore
from utils.jwt import get_caller

router = APIRouter()
logger = logging.getLogger("treasury_router")


def current_env() -> BlockEnv:
    return BlockEnv(time=int(time.time()))


def get_engine(session: AsyncSession = Depends(get_session)) -> ExecutionEngine:
    return ExecutionEngine(TreasuryStore(session))


def _raise_http(exc: TreasuryError) -> NoReturn:
    raise HTTPException(status_code=exc.status_code, detail=exc.to_dict()) from exc


@router.post("/execute", response_model=ExecuteResponse)
async def execute(
    msg: ExecuteMsg,
    caller: str = Depends(get_caller),
    env: BlockEnv = Depends(current_env),
    engine: ExecutionEngine = Depends(get_engine),
    redis=Depends(get_outbox_redis),
) -> ExecuteResponse:
    try:
        response = await engine.execute(caller, env, msg)
    except TreasuryError as exc:
        _raise_http(exc)

    try:
        await publish_messages(redis, msg.operation, caller, response)
    except OutboxError as exc:
        # State is committed; the dispatcher must reconcile from the audit log.
        raise HTTPException(
            status_code=502,
            detail={"code": "OUTBOX_UNAVAILABLE", "message": str(exc)},
        ) from exc

    return ExecuteResponse(
        operation=msg.operation,
        messages=response.wire_messages(),
        attributes=[AttributeResponse(key=k, value=v) for k, v in response.attributes],
    )


@router.get("/state", response_model=StateResponse)
async def get_state(
    env: BlockEnv = Depends(current_env),
    engine: ExecutionEngine = Depends(get_engine),
) -> StateResponse:
    try:
        snapshot = await engine.query_state(env)
    except TreasuryError as exc:
        _raise_http(exc)
    return StateResponse(
        owner=snapshot["owner"],
        pending_platform_fee=str(snapshot["pending_platform_fee"]),
        current_time=snapshot["current_time"],
    )


@router.get("/bots/{address}", response_model=BotRoleResponse)
async def get_bot_role(
    address: str,
    engine: ExecutionEngine = Depends(get_engine),
) -> BotRoleResponse:
    try:
        enabled = await engine.query_bot_role(address)
    except TreasuryError as exc:
        _raise_http(exc)
    return BotRoleResponse(address=address, enabled=enabled)
