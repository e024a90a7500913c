"""Quota enforcer tests — concurrent creates and the scan counter.

Learn: The API tests exercise quotas one request at a time. These drive
MapService directly with one session per task so two creates for the
same Starter user really overlap; the guard must let exactly one through.
"""

import asyncio

import pytest
from sqlalchemy import func, select

from pathix.db.models import Map, Theme, User
from pathix.errors import QuotaExceeded
from pathix.services.account_service import AccountService
from pathix.services.map_service import MapService
from pathix.services.quota import PLAN_SCAN_ALLOWANCE, QuotaEnforcer


@pytest.fixture()
def quota(app):
    return app.state.quota


async def _make_user(app, email: str, plan: str = "Starter") -> User:
    async with app.state.session_factory() as db:
        svc = AccountService(db, bcrypt_rounds=4)
        user = await svc.signup(email, "secret123")
        if plan != "Starter":
            user = await svc.set_plan(email, plan)
        return user


async def _make_theme(app) -> Theme:
    async with app.state.session_factory() as db:
        theme = Theme(name="Plain", assets=[], fonts=[], road_style={}, animations={})
        db.add(theme)
        await db.commit()
        return theme


async def _create(app, quota: QuotaEnforcer, user_id, theme_id, name: str):
    async with app.state.session_factory() as db:
        svc = MapService(db, quota, "https://maps.example.com")
        return await svc.create_map(
            user_id, name=name, gps_path=[[0, 0], [1, 1]], theme=str(theme_id)
        )


async def _count_maps(app, user_id) -> int:
    async with app.state.session_factory() as db:
        return await db.scalar(
            select(func.count()).select_from(Map).where(Map.user_id == user_id)
        )


@pytest.mark.asyncio
async def test_concurrent_creates_for_starter_admit_exactly_one(app, quota):
    user = await _make_user(app, "racer@example.com")
    theme = await _make_theme(app)

    results = await asyncio.gather(
        *(_create(app, quota, user.id, theme.id, f"map {i}") for i in range(5)),
        return_exceptions=True,
    )

    created = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, QuotaExceeded)]
    assert len(created) == 1
    assert len(rejected) == 4
    assert await _count_maps(app, user.id) == 1


@pytest.mark.asyncio
async def test_concurrent_creates_for_pro_all_succeed(app, quota):
    user = await _make_user(app, "fast@example.com", plan="Pro")
    theme = await _make_theme(app)

    results = await asyncio.gather(
        *(_create(app, quota, user.id, theme.id, f"map {i}") for i in range(4))
    )
    assert len(results) == 4
    assert await _count_maps(app, user.id) == 4


@pytest.mark.asyncio
async def test_record_scan_saturates_at_zero(app, quota):
    user = await _make_user(app, "viewer@example.com")

    async with app.state.session_factory() as db:
        for _ in range(PLAN_SCAN_ALLOWANCE["Starter"] + 5):
            await quota.record_scan(db, user.id)

    async with app.state.session_factory() as db:
        assert await db.scalar(select(User.scan_left).where(User.id == user.id)) == 0


@pytest.mark.asyncio
async def test_set_plan_resets_scan_allowance(app):
    await _make_user(app, "upgrader@example.com")
    async with app.state.session_factory() as db:
        user = await AccountService(db).set_plan("upgrader@example.com", "Pro")
    assert user.account_type == "Pro"
    assert user.scan_left == PLAN_SCAN_ALLOWANCE["Pro"]
