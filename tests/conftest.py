from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from mantra.infrastructure.database import build_session_maker, create_tables
from mantra.sla.application import IRulesProvider
from mantra.sla.domain import HelpdeskRules
from mantra.tickets.domain import TicketSnapshot, UserSession


class StaticRulesProvider(IRulesProvider):
    def __init__(self, rules: HelpdeskRules | None = None):
        self.rules = rules or HelpdeskRules()

    def get_rules(self) -> HelpdeskRules:
        return self.rules


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_ticket(**overrides) -> TicketSnapshot:
    values = dict(
        id="t-1",
        display_id="IT-0001",
        title="VPN drops",
        description="VPN disconnects every hour",
        status="in_progress",
        created_at=utc(2024, 1, 1, 0, 0),
        resolved_at=None,
        sla_deadline=utc(2024, 1, 1, 4, 0),
        is_l3=False,
        created_by="u-creator",
        assigned_to="u-agent",
        category_id=1,
        urgency_id=1,
        creator_name="Carol",
        assignee_name="Arjun",
        category_name="Network",
        urgency_label="Critical",
        urgency_sla_hours=4,
    )
    values.update(overrides)
    return TicketSnapshot(**values)


def session_for(user_id: str, role: str = "agent") -> UserSession:
    return UserSession.from_identity(user_id, role)


@pytest.fixture
def rules_provider():
    return StaticRulesProvider()


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    session_maker = build_session_maker(engine)
    async with session_maker() as session:
        yield session
    await engine.dispose()
