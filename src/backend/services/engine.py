"""
engine.py: Authorization-gated execution engine for the treasury.

Four state-changing operations plus instantiate and two read-only queries:

  set_admin(caller, new_owner)            owner only
  set_bot_role(caller, bot, enabled)      owner only
  withdraw_fee(caller, to, amount)        owner only, amount <= pending fee
  buy_token(caller, env, order)           active bot only, guarded

Every operation is one unit of work on the store:
  load config (row-locked) -> validate -> compute -> mutate working copy
  -> save -> commit -> return Response
Any exception rolls the session back and propagates; no messages are
returned and nothing is persisted on a failure path. Messages in a returned
Response are requests only; the engine never waits for their execution.
"""

import logging
import os
from typing import Awaitable, Callable, Optional

from errors import AlreadyInstantiated, TreasuryError
from models import ExecuteMsg
from services.auth import require_active_bot, require_owner
from services.fee_math import quote_buy
from services.guards import check_buy_order
from services.messages import NativeTransfer, Response, SwapInstruction
from services.state import BlockEnv, BuyOrder, TreasuryState, require_address
from services.store import TreasuryStore
from services.uint import uint128
from treasuryx import MetricsCollector, get_current_collector, observe

logger = logging.getLogger("engine")

NATIVE_DENOM = os.environ.get("NATIVE_DENOM", "ujuno")

Apply = Callable[[TreasuryState], Awaitable[Response]]


class ExecutionEngine:
    def __init__(self, store: TreasuryStore, native_denom: str = NATIVE_DENOM) -> None:
        self.store = store
        self.native_denom = native_denom

    # ------------------------------------------------------------------
    # Deployment
    # ------------------------------------------------------------------

    @observe("instantiate")
    async def instantiate(self, deployer: str) -> Response:
        """Create the singleton config: owner = deployer, no pending fee."""
        _metrics().set_caller(deployer)
        try:
            require_address(deployer, "deployer")
            if await self.store.exists():
                raise AlreadyInstantiated("Treasury config already exists")
            state = TreasuryState(owner=deployer, pending_platform_fee=0)
            await self.store.create(state)
            self.store.record_audit(deployer, "INSTANTIATE", {"owner": deployer})
            await self.store.commit()
        except Exception:
            await self.store.rollback()
            raise
        logger.info("Treasury instantiated: owner=%s", deployer)
        return Response().add_attribute("action", "instantiate").add_attribute("owner", deployer)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def execute(self, caller: str, env: BlockEnv, msg: ExecuteMsg) -> Response:
        """Route one decoded ExecuteMsg to its operation."""
        if msg.set_admin is not None:
            return await self.set_admin(caller, msg.set_admin.new_owner)
        if msg.set_bot_role is not None:
            p = msg.set_bot_role
            return await self.set_bot_role(caller, p.bot, p.enabled)
        if msg.withdraw_fee is not None:
            p = msg.withdraw_fee
            return await self.withdraw_fee(caller, p.to, p.amount)
        if msg.buy_token is not None:
            return await self.buy_token(caller, env, BuyOrder(**msg.buy_token.model_dump()))
        raise ValueError("ExecuteMsg carries no operation")

    # ------------------------------------------------------------------
    # Admin operations
    # ------------------------------------------------------------------

    @observe("set_admin")
    async def set_admin(self, caller: str, new_owner: str) -> Response:
        async def apply(state: TreasuryState) -> Response:
            require_owner(state, caller)
            previous = state.owner
            state.transfer_ownership(new_owner)
            await self.store.save(state)
            self.store.record_audit(
                caller, "SET_ADMIN", {"previous_owner": previous, "new_owner": new_owner}
            )
            return (
                Response()
                .add_attribute("action", "set_admin")
                .add_attribute("new_owner", new_owner)
            )

        return await self._transact(caller, apply)

    @observe("set_bot_role")
    async def set_bot_role(self, caller: str, bot: str, enabled: bool) -> Response:
        async def apply(state: TreasuryState) -> Response:
            require_owner(state, caller)
            require_address(bot, "bot")
            await self.store.set_role(bot, enabled)
            self.store.record_audit(caller, "SET_BOT_ROLE", {"bot": bot, "enabled": enabled})
            return (
                Response()
                .add_attribute("action", "set_bot_role")
                .add_attribute("bot", bot)
                .add_attribute("enabled", str(enabled).lower())
            )

        return await self._transact(caller, apply)

    @observe("withdraw_fee")
    async def withdraw_fee(self, caller: str, to: str, amount: int) -> Response:
        async def apply(state: TreasuryState) -> Response:
            require_owner(state, caller)
            require_address(to, "to")
            uint128(amount, name="amount")
            state.release_fee(amount)
            await self.store.save(state)
            self.store.record_audit(
                caller, "WITHDRAW_FEE", {"to": to, "amount": str(amount)}
            )
            _metrics().set_withdrawal(amount).set_pending_fee(state.pending_platform_fee)
            return (
                Response()
                .add_message(NativeTransfer(to_address=to, denom=self.native_denom, amount=amount))
                .add_attribute("action", "withdraw_fee")
                .add_attribute("to", to)
                .add_attribute("amount", amount)
            )

        return await self._transact(caller, apply)

    # ------------------------------------------------------------------
    # Swap
    # ------------------------------------------------------------------

    @observe("buy_token")
    async def buy_token(self, caller: str, env: BlockEnv, order: BuyOrder) -> Response:
        """Take the platform fee and request a bounded swap on the pool.

        Guards run in order (role, deadline, slippage, gas); the first one
        violated is the error the caller sees.
        """
        async def apply(state: TreasuryState) -> Response:
            require_active_bot(await self.store.get_role(caller), caller)
            require_address(order.recipient, "recipient")
            require_address(order.pool_address, "pool_address")
            check_buy_order(env, order)

            quote = quote_buy(order, state.pending_platform_fee)
            state.accrue_fee(quote.platform_fee)
            await self.store.save(state)
            self.store.record_audit(
                caller,
                "BUY_TOKEN",
                {
                    "pool": order.pool_address,
                    "token": order.token,
                    "recipient": order.recipient,
                    "juno_amount": str(order.juno_amount),
                    "platform_fee": str(quote.platform_fee),
                    "spendable_amount": str(quote.spendable_amount),
                    "minimum_output": str(quote.minimum_output),
                },
            )
            _metrics().set_swap(
                order.juno_amount,
                quote.platform_fee,
                quote.spendable_amount,
                quote.minimum_output,
            ).set_pending_fee(state.pending_platform_fee)

            swap = SwapInstruction(
                pool_address=order.pool_address,
                input_denom=self.native_denom,
                input_amount=quote.spendable_amount,
                minimum_output=quote.minimum_output,
                recipient=order.recipient,
            )
            return (
                Response()
                .add_message(swap)
                .add_attribute("action", "buy_token")
                .add_attribute("platform_fee", quote.platform_fee)
                .add_attribute("spendable_amount", quote.spendable_amount)
                .add_attribute("minimum_output", quote.minimum_output)
            )

        return await self._transact(caller, apply)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def query_state(self, env: BlockEnv) -> dict:
        state = await self.store.load()
        return {
            "owner": state.owner,
            "pending_platform_fee": state.pending_platform_fee,
            "current_time": env.time,
        }

    async def query_bot_role(self, address: str) -> Optional[bool]:
        return await self.store.get_role(address)

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    async def _transact(self, caller: str, apply: Apply) -> Response:
        collector = _metrics().set_caller(caller)
        try:
            state = await self.store.load(lock=True)
            response = await apply(state)
            await self.store.commit()
        except TreasuryError as exc:
            logger.warning(
                "Rejected op=%s caller=%s code=%s: %s",
                collector.snapshot().operation, caller, exc.code, exc,
            )
            await self.store.rollback()
            raise
        except Exception:
            logger.exception("Unexpected failure op=%s caller=%s",
                             collector.snapshot().operation, caller)
            await self.store.rollback()
            raise

        collector.set_messages(len(response.messages))
        logger.info(
            "Committed op=%s caller=%s messages=%d",
            collector.snapshot().operation, caller, len(response.messages),
        )
        return response


def _metrics() -> MetricsCollector:
    collector = get_current_collector()
    if collector is None:
        raise RuntimeError("Engine operations must run under @observe")
    return collector
