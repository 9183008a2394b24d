"""
API tests — build endpoints, character submission and roster, dice rolls and history.
"""
import os
import tempfile
import uuid
import pytest
import pytest_asyncio
import httpx
from httpx import ASGITransport

# ─── Setup ────────────────────────────────────────────────────────────────────

_tmp_db = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp_db.close()
os.environ["DB_PATH"] = _tmp_db.name

from isekai_rpg.main import app
from isekai_rpg import config
from isekai_rpg.api.dependencies import get_random_source
from isekai_rpg.managers import history_manager
from isekai_rpg.managers.state_manager import init_db
from isekai_rpg.services.dice_roller import FixedSequenceSource


@pytest_asyncio.fixture
async def client():
    # Fresh DB file per test
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    config.settings.DB_PATH = tmp.name
    await init_db()
    async with httpx.AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as c:
        yield c
    app.dependency_overrides.clear()
    os.unlink(tmp.name)


def fixed_dice(*values):
    app.dependency_overrides[get_random_source] = lambda: FixedSequenceSource(values)


CHARACTER_PAYLOAD = {
    "name": "Aria",
    "race": "elf",
    "character_class": "mage",
    "background": "Summoned from another world.",
    "attribute_points": {
        "strength": 8,
        "dexterity": 8,
        "constitution": 8,
        "intelligence": 3,
        "wisdom": 0,
        "charisma": 0,
    },
    "advantages": ["keen_senses"],
    "disadvantages": ["phobia"],
}


# ─── Reference data ───────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_reference_data(client):
    res = await client.get("/api/characters/reference-data")
    assert res.status_code == 200
    data = res.json()
    assert data["races"]["elf"]["bonuses"]["dexterity"] == 2
    assert "mage" in data["classes"]
    assert any(a["id"] == "keen_senses" for a in data["advantages"])
    assert any(d["id"] == "phobia" for d in data["disadvantages"])

@pytest.mark.asyncio
async def test_health(client):
    res = await client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


# ─── Build session endpoints ──────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_start_build(client):
    res = await client.post("/api/characters/build")
    assert res.status_code == 200
    data = res.json()
    assert data["report"]["state"] == "draft"
    assert data["report"]["remaining_points"] == 27
    assert data["report"]["attributes"]["strength"] == 10
    assert data["session"]["advantages"] == []

@pytest.mark.asyncio
async def test_build_flow_reaches_valid(client):
    session = (await client.post("/api/characters/build")).json()["session"]

    res = await client.post("/api/characters/build/details", json={
        "session": session, "name": "Aria", "race": "elf", "character_class": "mage",
    })
    session = res.json()["session"]
    assert res.json()["report"]["attributes"]["dexterity"] == 12

    for attribute, points in (("strength", 8), ("dexterity", 8), ("constitution", 8), ("intelligence", 3)):
        for _ in range(points):
            res = await client.post("/api/characters/build/attributes", json={
                "session": session, "attribute": attribute, "delta": 1,
            })
            assert res.json()["rejected"] is False
            session = res.json()["session"]

    res = await client.post("/api/characters/build/evaluate", json={"session": session})
    report = res.json()["report"]
    assert report["state"] == "valid"
    assert report["remaining_points"] == 0
    assert report["violations"] == []

@pytest.mark.asyncio
async def test_attribute_change_rejected_at_cap(client):
    session = (await client.post("/api/characters/build")).json()["session"]
    session["attribute_points"]["charisma"] = 8
    res = await client.post("/api/characters/build/attributes", json={
        "session": session, "attribute": "charisma", "delta": 1,
    })
    assert res.status_code == 200
    data = res.json()
    assert data["rejected"] is True
    assert data["session"]["attribute_points"]["charisma"] == 8
    assert data["report"]["remaining_points"] == 19

@pytest.mark.asyncio
async def test_attribute_change_unknown_attribute(client):
    session = (await client.post("/api/characters/build")).json()["session"]
    res = await client.post("/api/characters/build/attributes", json={
        "session": session, "attribute": "luck", "delta": 1,
    })
    assert res.status_code == 422

@pytest.mark.asyncio
async def test_toggle_traits_update_balance(client):
    session = (await client.post("/api/characters/build")).json()["session"]
    res = await client.post("/api/characters/build/advantages/toggle", json={
        "session": session, "trait_id": "fast_learner",
    })
    data = res.json()
    assert data["session"]["advantages"] == ["fast_learner"]
    assert data["report"]["balance"] == -2
    assert "negative_balance" in data["report"]["violations"]

    res = await client.post("/api/characters/build/disadvantages/toggle", json={
        "session": data["session"], "trait_id": "code_of_honor",
    })
    data = res.json()
    assert data["report"]["balance"] == 0
    assert "negative_balance" not in data["report"]["violations"]

@pytest.mark.asyncio
async def test_submitted_session_cannot_change(client):
    session = (await client.post("/api/characters/build")).json()["session"]
    session["submitted"] = True
    res = await client.post("/api/characters/build/advantages/toggle", json={
        "session": session, "trait_id": "fast_learner",
    })
    assert res.status_code == 409


# ─── Character submission and roster ──────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_character(client):
    res = await client.post("/api/characters/", json=CHARACTER_PAYLOAD)
    assert res.status_code == 200, res.text
    data = res.json()
    assert data["name"] == "Aria"
    assert data["race"] == "elf"
    assert data["character_class"] == "mage"
    # elf: +2 dexterity, -1 constitution
    assert data["attributes"]["dexterity"] == 20
    assert data["attributes"]["constitution"] == 17
    assert "id" in data

@pytest.mark.asyncio
async def test_create_character_reports_every_violation(client):
    payload = {
        **CHARACTER_PAYLOAD,
        "name": "",
        "race": None,
        "attribute_points": {"strength": 8, "dexterity": 8, "constitution": 8},
        "advantages": ["otherworldly_blessing"],
        "disadvantages": [],
    }
    res = await client.post("/api/characters/", json=payload)
    assert res.status_code == 422
    assert res.json()["detail"]["violations"] == [
        "unallocated_points", "negative_balance", "missing_name", "missing_race",
    ]

@pytest.mark.asyncio
async def test_create_character_over_budget_is_malformed(client):
    payload = {**CHARACTER_PAYLOAD, "name": "", "attribute_points": {
        "strength": 8, "dexterity": 8, "constitution": 8, "intelligence": 8,
    }}
    res = await client.post("/api/characters/", json=payload)
    assert res.status_code == 422
    assert res.json()["detail"]["violations"] == ["over_budget", "missing_name"]

@pytest.mark.asyncio
async def test_create_character_out_of_range_attribute(client):
    payload = {**CHARACTER_PAYLOAD, "race": None, "attribute_points": {
        "strength": 12, "dexterity": 8, "constitution": 7,
    }}
    res = await client.post("/api/characters/", json=payload)
    assert res.status_code == 422
    assert res.json()["detail"]["violations"] == ["attribute_out_of_range", "missing_race"]

@pytest.mark.asyncio
async def test_create_character_unknown_race(client):
    res = await client.post("/api/characters/", json={**CHARACTER_PAYLOAD, "race": "dragon"})
    assert res.status_code == 422
    assert res.json()["detail"]["violations"] == ["unknown_race"]
    res = await client.get("/api/characters/")
    assert res.json() == []

@pytest.mark.asyncio
async def test_build_evaluate_flags_unknown_class(client):
    session = (await client.post("/api/characters/build")).json()["session"]
    res = await client.post("/api/characters/build/details", json={
        "session": session, "character_class": "necromancer",
    })
    assert "unknown_class" in res.json()["report"]["violations"]

@pytest.mark.asyncio
async def test_roster(client):
    ids = []
    for i in range(3):
        res = await client.post("/api/characters/", json={**CHARACTER_PAYLOAD, "name": f"Hero{i}"})
        assert res.status_code == 200, res.text
        ids.append(res.json()["id"])

    res = await client.get("/api/characters/")
    assert res.status_code == 200
    assert sorted(c["id"] for c in res.json()) == sorted(ids)

    res = await client.get(f"/api/characters/{ids[0]}")
    assert res.status_code == 200
    assert res.json()["name"] == "Hero0"

@pytest.mark.asyncio
async def test_delete_character(client):
    char_id = (await client.post("/api/characters/", json=CHARACTER_PAYLOAD)).json()["id"]
    res = await client.delete(f"/api/characters/{char_id}")
    assert res.status_code == 200
    res = await client.get(f"/api/characters/{char_id}")
    assert res.status_code == 404
    res = await client.delete(f"/api/characters/{char_id}")
    assert res.status_code == 404


# ─── Dice endpoints ───────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_dice_roll(client):
    fixed_dice(4, 5)
    res = await client.post("/api/dice/roll", json={"notation": "2d6+3", "description": "Sword"})
    assert res.status_code == 200
    data = res.json()
    assert data["notation"] == "2d6+3"
    assert data["description"] == "Sword"
    assert data["total"] == 12
    assert data["modifier"] == 3
    assert data["details"] == [
        {"value": 4, "sides": 6, "rating": "normal"},
        {"value": 5, "sides": 6, "rating": "good"},
    ]

@pytest.mark.asyncio
async def test_dice_roll_random_source(client):
    res = await client.post("/api/dice/roll", json={"notation": "3d8"})
    assert res.status_code == 200
    data = res.json()
    assert len(data["details"]) == 3
    assert all(1 <= d["value"] <= 8 for d in data["details"])
    assert data["total"] == sum(d["value"] for d in data["details"])

@pytest.mark.asyncio
async def test_dice_roll_invalid_notation(client):
    res = await client.post("/api/dice/roll", json={"notation": "2d"})
    assert res.status_code == 400
    assert "2d" in res.json()["detail"]

@pytest.mark.asyncio
async def test_dice_roll_oversized_number(client):
    res = await client.post("/api/dice/roll", json={"notation": "1d" + "9" * 5000})
    assert res.status_code == 400
    assert "digits" in res.json()["detail"]

@pytest.mark.asyncio
async def test_dice_roll_too_many_dice(client):
    res = await client.post("/api/dice/roll", json={"notation": "100000d6"})
    assert res.status_code == 400

@pytest.mark.asyncio
async def test_dice_presets(client):
    res = await client.get("/api/dice/presets")
    assert res.status_code == 200
    presets = res.json()["presets"]
    assert presets["attack"]["notation"] == "1d20"

@pytest.mark.asyncio
async def test_dice_history(client):
    roller_id = str(uuid.uuid4())
    for value in range(1, 12):
        fixed_dice(value)
        res = await client.post("/api/dice/roll", json={"notation": "d20", "roller_id": roller_id})
        assert res.json()["history_id"] == value

    res = await client.get(f"/api/dice/history/{roller_id}")
    entries = res.json()["entries"]
    assert len(entries) == 10
    assert [e["total"] for e in entries] == list(range(11, 1, -1))

    res = await client.delete(f"/api/dice/history/{roller_id}")
    assert res.status_code == 200
    res = await client.get(f"/api/dice/history/{roller_id}")
    assert res.json()["entries"] == []

@pytest.mark.asyncio
async def test_dice_history_is_per_roller(client):
    first, second = str(uuid.uuid4()), str(uuid.uuid4())
    await client.post("/api/dice/roll", json={"notation": "d6", "roller_id": first})
    res = await client.get(f"/api/dice/history/{second}")
    assert res.json()["entries"] == []
    res = await client.get(f"/api/dice/history/{first}")
    assert len(res.json()["entries"]) == 1

@pytest.mark.asyncio
async def test_reading_unknown_history_does_not_register_roller(client):
    before = history_manager.roller_count()
    for i in range(50):
        res = await client.get(f"/api/dice/history/unknown-{uuid.uuid4()}-{i}")
        assert res.status_code == 200
        assert res.json() == {"capacity": 10, "entries": []}
    assert history_manager.roller_count() == before

@pytest.mark.asyncio
async def test_clearing_history_forgets_roller(client):
    roller_id = str(uuid.uuid4())
    await client.post("/api/dice/roll", json={"notation": "d6", "roller_id": roller_id})
    assert history_manager.find_history(roller_id) is not None
    await client.delete(f"/api/dice/history/{roller_id}")
    assert history_manager.find_history(roller_id) is None


def test_history_registry_evicts_least_recent_roller(monkeypatch):
    monkeypatch.setattr(config.settings, "HISTORY_MAX_ROLLERS", 3)
    monkeypatch.setattr(history_manager, "_histories", type(history_manager._histories)())
    for name in ("a", "b", "c"):
        history_manager.get_history(name)
    history_manager.get_history("a")
    history_manager.get_history("d")
    assert history_manager.roller_count() == 3
    assert history_manager.find_history("b") is None
    assert all(history_manager.find_history(n) is not None for n in ("a", "c", "d"))
