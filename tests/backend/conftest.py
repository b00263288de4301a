import os
import sys
from typing import AsyncGenerator

# 1. SETUP ENVIRONMENT FIRST (Before any app/database imports)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test_secret")
os.environ.setdefault("NATIVE_DENOM", "ujuno")

# 2. Add backend and repo root to path
_here = os.path.dirname(__file__)
for _p in ("../../src/backend", "../.."):
    _abs = os.path.abspath(os.path.join(_here, _p))
    if _abs not in sys.path:
        sys.path.insert(0, _abs)

# 3. NOW IMPORT LOCAL MODULES
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from models import Base
from services.engine import ExecutionEngine
from services.state import BlockEnv, BuyOrder
from services.store import TreasuryStore

OWNER = "juno1owner"
BOT = "juno1bot"
RECIPIENT = "juno1recipient"
POOL = "juno1pool"
NOW = 1_700_000_000


class FakeRedis:
    """Records RPUSH calls; optionally fails like an unreachable server."""

    def __init__(self, fail: bool = False) -> None:
        self.lists: dict[str, list[str]] = {}
        self.fail = fail

    async def rpush(self, key: str, *values: str) -> int:
        if self.fail:
            from redis.exceptions import ConnectionError as RedisConnectionError
            raise RedisConnectionError("connection refused")
        self.lists.setdefault(key, []).extend(values)
        return len(self.lists[key])


def make_order(**overrides) -> BuyOrder:
    """The reference buy: 1_000_000 in, rate 2, 1% slippage, 0.5% fee, 10_000 gas."""
    params = dict(
        juno_amount=1_000_000,
        token_amount_per_native=2,
        slippage_bips=100,
        recipient=RECIPIENT,
        pool_address=POOL,
        platform_fee_bips=50,
        gas_estimate=10_000,
        deadline=NOW + 100,
    )
    params.update(overrides)
    return BuyOrder(**params)


@pytest_asyncio.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    """Isolated in-memory SQLite database per test."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    Session = async_sessionmaker(engine, expire_on_commit=False)
    async with Session() as s:
        yield s

    await engine.dispose()


@pytest.fixture
def store(session: AsyncSession) -> TreasuryStore:
    return TreasuryStore(session)


@pytest.fixture
def env() -> BlockEnv:
    return BlockEnv(time=NOW)


@pytest_asyncio.fixture
async def treasury(store: TreasuryStore) -> ExecutionEngine:
    """Engine over a freshly deployed treasury owned by OWNER."""
    engine = ExecutionEngine(store, native_denom="ujuno")
    await engine.instantiate(OWNER)
    return engine


@pytest_asyncio.fixture
async def treasury_with_bot(treasury: ExecutionEngine) -> ExecutionEngine:
    await treasury.set_bot_role(OWNER, BOT, True)
    return treasury


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest_asyncio.fixture
async def client(session: AsyncSession, fake_redis: FakeRedis) -> AsyncGenerator[AsyncClient, None]:
    """Wired httpx client using the test session and the fake outbox."""
    from app import app
    from database import get_session
    from services.outbox import get_outbox_redis

    async def _get_session_override():
        yield session

    async def _get_redis_override():
        return fake_redis

    app.dependency_overrides[get_session] = _get_session_override
    app.dependency_overrides[get_outbox_redis] = _get_redis_override
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(address: str) -> dict[str, str]:
    from utils.jwt import create_access_token
    return {"Authorization": f"Bearer {create_access_token(address)}"}
