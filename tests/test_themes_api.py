"""Theme API tests."""

import uuid

import pytest


@pytest.mark.asyncio
async def test_create_theme(client, theme):
    assert theme["name"] == "Night Trail"
    assert theme["assets"] == [{"name": "camp", "icon": "⛺"}]
    assert theme["roadStyle"]["color"] == "#ff00aa"
    assert theme["roadStyle"]["lineCap"] == "round"
    assert theme["animations"] == {"glowingRoad": True, "pulsingIcons": False}
    assert "createdAt" in theme


@pytest.mark.asyncio
async def test_create_theme_keeps_extra_animation_toggles(client):
    r = await client.post(
        "/api/themes",
        json={"name": "Sparkle", "animations": {"pulsingIcons": True, "sparkles": True}},
    )
    assert r.status_code == 201
    animations = r.json()["animations"]
    assert animations["pulsingIcons"] is True
    assert animations["sparkles"] is True


@pytest.mark.asyncio
async def test_create_theme_requires_name(client):
    r = await client.post("/api/themes", json={"assets": []})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_create_theme_rejects_incomplete_asset(client):
    r = await client.post("/api/themes", json={"name": "Broken", "assets": [{"name": "x"}]})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_list_themes(client, theme):
    await client.post("/api/themes", json={"name": "Second"})
    r = await client.get("/api/themes")
    assert r.status_code == 200
    assert [t["name"] for t in r.json()] == ["Night Trail", "Second"]


@pytest.mark.asyncio
async def test_get_theme(client, theme):
    r = await client.get(f"/api/themes/{theme['id']}")
    assert r.status_code == 200
    assert r.json()["id"] == theme["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize("theme_id", [str(uuid.uuid4()), "nope"])
async def test_get_unknown_theme(client, theme_id):
    r = await client.get(f"/api/themes/{theme_id}")
    assert r.status_code == 404
    assert r.json()["message"] == "Theme not found"
