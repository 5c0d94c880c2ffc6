from datetime import datetime, timezone

import pytest

from creator_score.cache import TTLCache
from creator_score.decisions import DecisionStore
from creator_score.exceptions import TalentAPIError
from creator_score.leaderboard_service import LeaderboardService
from creator_score.schemas import RewardPool, ScoredEntry
from creator_score.snapshots import SnapshotStore
from creator_score.talent_client import BoostedProfiles


class FakeResponse:
    def __init__(self, data: list[dict], count: int | None = None) -> None:
        self.data = data
        self.count = count


class FakeQuery:
    """Just enough of the postgrest query builder for the stores under test."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table = table
        self.op = "select"
        self.filters: list = []
        self.payload = None
        self.on_conflict = ""
        self.count: str | None = None
        self.order_by: tuple[str, bool] | None = None
        self.max_rows: int | None = None

    def select(self, columns: str = "*", count: str | None = None) -> "FakeQuery":
        self.op = "select"
        self.count = count
        return self

    def eq(self, column: str, value: object) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column: str, values: list) -> "FakeQuery":
        allowed = list(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, n: int) -> "FakeQuery":
        self.max_rows = n
        return self

    def insert(self, rows) -> "FakeQuery":
        self.op = "insert"
        self.payload = rows if isinstance(rows, list) else [rows]
        return self

    def upsert(self, row: dict, on_conflict: str = "") -> "FakeQuery":
        self.op = "upsert"
        self.payload = row
        self.on_conflict = on_conflict
        return self

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table, self.op))
        rows = self.db.tables.setdefault(self.table, [])
        if self.op in ("insert", "upsert") and self.db.fail_writes:
            return FakeResponse([])
        if self.op == "insert":
            created = [{"created_at": self.db.created_at, **r} for r in self.payload]
            rows.extend(created)
            return FakeResponse([dict(r) for r in created])
        if self.op == "upsert":
            key = self.on_conflict
            for row in rows:
                if row.get(key) == self.payload.get(key):
                    row.update(self.payload)
                    return FakeResponse([dict(row)])
            rows.append(dict(self.payload))
            return FakeResponse([dict(self.payload)])

        matched = [r for r in rows if all(f(r) for f in self.filters)]
        total = len(matched) if self.count else None
        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda r: r.get(column) or 0, reverse=desc)
        if self.max_rows is not None:
            matched = matched[: self.max_rows]
        return FakeResponse([dict(r) for r in matched], total)


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_writes = False
        self.created_at = "2025-09-16T00:00:00+00:00"

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


class FakeTalentClient:
    def __init__(self, entries: list[ScoredEntry], boosted: set[str] | None = None) -> None:
        self.entries = entries
        self.boosted = BoostedProfiles(ids=frozenset(boosted or ()), complete=True)
        self.fail_scores = False
        self.fail_boosted = False
        self.score_calls = 0
        self.boosted_calls = 0

    async def fetch_top_scored_entries(self, limit: int = 200) -> list[ScoredEntry]:
        self.score_calls += 1
        if self.fail_scores:
            raise TalentAPIError("upstream down", status_code=503)
        return self.entries[:limit]

    async def fetch_boosted_ids(self, threshold: int) -> BoostedProfiles:
        self.boosted_calls += 1
        if self.fail_boosted:
            raise TalentAPIError("All boosted profile searches failed")
        return self.boosted


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def entry(entry_id: str, score: int, name: str | None = None) -> ScoredEntry:
    return ScoredEntry(id=entry_id, display_name=name or entry_id, score=score)


FIXED_NOW = datetime(2025, 9, 1, 12, 0, tzinfo=timezone.utc)

CREATOR_A = "11111111-1111-4111-8111-111111111111"
CREATOR_B = "22222222-2222-4222-8222-222222222222"
CREATOR_C = "33333333-3333-4333-8333-333333333333"


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def small_pool() -> RewardPool:
    return RewardPool(total_pool_amount=800, boost_multiplier=0.10, eligible_rank_cutoff=3)


@pytest.fixture
def fake_talent() -> FakeTalentClient:
    return FakeTalentClient(
        [entry(CREATOR_A, 300), entry(CREATOR_B, 100), entry(CREATOR_C, 100)],
    )


@pytest.fixture
def service(fake_talent, fake_db, small_pool) -> LeaderboardService:
    return LeaderboardService(
        talent=fake_talent,
        decisions=DecisionStore(fake_db),
        pool=small_pool,
        cache=TTLCache(clock=FakeClock()),
        now=lambda: FIXED_NOW,
    )


@pytest.fixture
def decision_store(fake_db) -> DecisionStore:
    return DecisionStore(fake_db)


@pytest.fixture
def snapshot_store(fake_db) -> SnapshotStore:
    return SnapshotStore(fake_db)
