"""Tests for swipe recording and race-safe match resolution."""
import asyncio
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app import repo
from app.database import create_schema
from app.errors import StorageError
from app.models.match import Match, Swipe
from app.models.user import User
from app.services.swipe_service import (
    MatchResolution,
    MatchResolver,
    SwipeRecorder,
    SwipeService,
    canonical_pair,
)


async def _match_count(db_session) -> int:
    return (await db_session.execute(select(func.count(Match.id)))).scalar_one()


@pytest.fixture
def swipe_service():
    return SwipeService()


@pytest.fixture
def users(make_user):
    async def _build(n: int):
        return [await make_user(f"user{i}") for i in range(n)]

    return _build


class TestCanonicalPair:

    def test_orders_low_high(self):
        assert canonical_pair(5, 2) == (2, 5)
        assert canonical_pair(2, 5) == (2, 5)
        assert canonical_pair(3, 3) == (3, 3)


class TestSwipeRecorder:

    @pytest.mark.asyncio
    async def test_appends_rows_including_duplicates(self, db_session, users):
        a, b = await users(2)
        recorder = SwipeRecorder()

        await recorder.record_swipe(db_session, a.id, b.id, True)
        await recorder.record_swipe(db_session, a.id, b.id, False)
        await recorder.record_swipe(db_session, a.id, a.id, True)

        rows = (await db_session.execute(select(Swipe).order_by(Swipe.id))).scalars().all()
        assert [(r.swiper_id, r.target_id, r.liked) for r in rows] == [
            (a.id, b.id, True),
            (a.id, b.id, False),
            (a.id, a.id, True),
        ]

    @pytest.mark.asyncio
    async def test_storage_failure_surfaces(self, db_session):
        failing = AsyncMock(side_effect=StorageError("insert_swipe failed"))
        with patch("app.services.swipe_service.repo.insert_swipe", failing):
            with pytest.raises(StorageError):
                await SwipeRecorder().record_swipe(db_session, 1, 2, True)


class TestSwipeFlow:

    @pytest.mark.asyncio
    async def test_mutual_like_matches_on_second_swipe(self, db_session, make_user, swipe_service):
        users = [await make_user(f"user{i}") for i in range(1, 6)]
        user3, user4, user5 = users[2], users[3], users[4]

        first = await swipe_service.swipe(db_session, user4.id, user3.id, True)
        second = await swipe_service.swipe(db_session, user3.id, user4.id, True)
        unrelated = await swipe_service.swipe(db_session, user4.id, user5.id, True)

        assert first == MatchResolution(matched=False)
        assert second.matched is True
        assert second.match_id is not None
        assert unrelated == MatchResolution(matched=False)
        assert await _match_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_one_sided_pass_and_like(self, db_session, users, swipe_service):
        a, b = await users(2)
        await swipe_service.swipe(db_session, a.id, b.id, True)
        result = await swipe_service.swipe(db_session, b.id, a.id, False)

        assert result == MatchResolution(matched=False)
        assert await _match_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_canonical_storage(self, db_session, make_user, swipe_service):
        created = [await make_user(f"user{i}") for i in range(1, 6)]
        user2, user5 = created[1], created[4]
        assert (user2.id, user5.id) == (2, 5)

        await swipe_service.swipe(db_session, 5, 2, True)
        result = await swipe_service.swipe(db_session, 2, 5, True)

        match = (await db_session.execute(select(Match))).scalar_one()
        assert (match.user_low, match.user_high) == (2, 5)
        assert result.match_id == match.id

    @pytest.mark.asyncio
    async def test_repeat_swipes_are_idempotent(self, db_session, users, swipe_service):
        a, b = await users(2)
        await swipe_service.swipe(db_session, a.id, b.id, True)
        first = await swipe_service.swipe(db_session, b.id, a.id, True)
        again = await swipe_service.swipe(db_session, a.id, b.id, True)
        passed = await swipe_service.swipe(db_session, b.id, a.id, False)

        assert first.matched and again.matched and passed.matched
        assert first.match_id == again.match_id == passed.match_id
        assert await _match_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_order_of_swipes_does_not_matter(self, db_session, users, swipe_service):
        a, b, c, d = await users(4)
        await swipe_service.swipe(db_session, a.id, b.id, True)
        r1 = await swipe_service.swipe(db_session, b.id, a.id, True)
        await swipe_service.swipe(db_session, d.id, c.id, True)
        r2 = await swipe_service.swipe(db_session, c.id, d.id, True)

        assert r1.matched and r2.matched
        assert r1.match_id != r2.match_id
        assert await _match_count(db_session) == 2

    @pytest.mark.asyncio
    async def test_self_swipe_never_matches(self, db_session, users, swipe_service):
        (a,) = await users(1)
        result = await swipe_service.swipe(db_session, a.id, a.id, True)
        assert result == MatchResolution(matched=False)


class TestMatchRace:
    """Both requests see "no match yet" and both try to create it."""

    @pytest.mark.asyncio
    async def test_losing_writer_returns_winners_id(self, db_session, users, make_swipe):
        a, b = await users(2)
        await make_swipe(a.id, b.id, True)
        await make_swipe(b.id, a.id, True)
        resolver = MatchResolver()

        winner = await resolver.resolve_match(db_session, a.id, b.id)

        # The loser read before the winner committed.
        stale_read = AsyncMock(return_value=None)
        with patch("app.services.swipe_service.repo.find_canonical_match", stale_read):
            loser = await resolver.resolve_match(db_session, b.id, a.id)

        assert stale_read.await_count == 1
        assert loser == winner
        assert await _match_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_insert_if_absent_is_idempotent(self, db_session, users):
        a, b = await users(2)
        a_id, b_id = a.id, b.id
        first_id = (await repo.insert_match_if_absent(db_session, a_id, b_id)).id
        second = await repo.insert_match_if_absent(db_session, a_id, b_id)

        assert second.id == first_id
        assert await _match_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_session_usable_after_conflict(self, db_session, users):
        a_id, b_id, c_id = [u.id for u in await users(3)]
        await repo.insert_match_if_absent(db_session, a_id, b_id)
        await repo.insert_match_if_absent(db_session, a_id, b_id)

        other = await repo.insert_match_if_absent(db_session, a_id, c_id)

        assert (other.user_low, other.user_high) == (a_id, c_id)
        assert await _match_count(db_session) == 2


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """Sessions on separate connections to one on-disk database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    await create_schema(engine)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


class TestConcurrentMutualLikes:

    @pytest.mark.asyncio
    async def test_simultaneous_likes_share_one_match(self, file_session_factory, password_hash):
        async with file_session_factory() as setup:
            pair = [
                User(email=f"racer{i}@example.com", password_hash=password_hash,
                     name=f"Racer {i}", gender="other", dob=date(1990, 1, 1))
                for i in (1, 2)
            ]
            setup.add_all(pair)
            await setup.commit()
            a_id, b_id = pair[0].id, pair[1].id

        service = SwipeService()
        async with file_session_factory() as s1, file_session_factory() as s2:
            first, second = await asyncio.gather(
                service.swipe(s1, a_id, b_id, True),
                service.swipe(s2, b_id, a_id, True),
            )

        # Whichever request commits last sees the other's like and creates the match.
        assert first.matched or second.matched
        match_ids = {r.match_id for r in (first, second) if r.matched}
        assert len(match_ids) == 1

        async with file_session_factory() as check:
            rows = (await check.execute(select(Match))).scalars().all()
        assert [(m.user_low, m.user_high) for m in rows] == [(a_id, b_id)]
        assert rows[0].id in match_ids
