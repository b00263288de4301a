"""
auth.py: Authorization predicates.

is_owner / is_active_bot are pure and total. The require_* variants raise the
matching error kind and are what the engine calls.
"""

from typing import Optional

from errors import Unauthorized, UnauthorizedRole
from services.state import TreasuryState


def is_owner(state: TreasuryState, caller: str) -> bool:
    return caller == state.owner


def is_active_bot(role: Optional[bool]) -> bool:
    """``role`` is the bot_roles lookup result: None (no entry), True or False."""
    return role is True


def require_owner(state: TreasuryState, caller: str) -> None:
    if not is_owner(state, caller):
        raise Unauthorized(f"{caller} is not the treasury owner")


def require_active_bot(role: Optional[bool], caller: str) -> None:
    if role is None:
        raise Unauthorized(f"{caller} has no bot role")
    if not is_active_bot(role):
        raise UnauthorizedRole(f"{caller} bot role is disabled")
