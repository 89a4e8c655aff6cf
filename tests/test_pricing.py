from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from storefront.models.product import ScheduledPrice
from storefront.services import pricing
from storefront.utils.dates import utc_now

NOW = datetime(2024, 6, 15, 12, 0, 0)


def _entry(price, start, end=None, is_active=True, entry_id=None):
    return {
        "id": entry_id or f"s{price}",
        "price": price,
        "start_date": start,
        "end_date": end,
        "is_active": is_active,
    }


def test_no_schedules_resolves_to_nothing():
    resolution = pricing.resolve_scheduled_price({"base_price": 100.0}, NOW)
    assert resolution.price is None
    assert resolution.deactivated == 0


def test_open_window_applies():
    product = {"scheduled_prices": [_entry(80.0, NOW - timedelta(days=1), NOW + timedelta(days=1))]}
    resolution = pricing.resolve_scheduled_price(product, NOW)
    assert resolution.price == 80.0
    assert resolution.schedule_id == "s80.0"


def test_window_not_started_is_ignored():
    product = {"scheduled_prices": [_entry(80.0, NOW + timedelta(hours=1))]}
    assert pricing.resolve_scheduled_price(product, NOW).price is None


def test_start_is_inclusive_and_end_is_exclusive():
    starts_now = {"scheduled_prices": [_entry(70.0, NOW)]}
    assert pricing.resolve_scheduled_price(starts_now, NOW).price == 70.0

    ends_now = {"scheduled_prices": [_entry(70.0, NOW - timedelta(days=2), NOW)]}
    resolution = pricing.resolve_scheduled_price(ends_now, NOW)
    assert resolution.price is None
    assert resolution.deactivated == 1
    assert resolution.scheduled_prices[0]["is_active"] is False


def test_resolution_does_not_mutate_product():
    product = {"scheduled_prices": [_entry(70.0, NOW - timedelta(days=2), NOW - timedelta(days=1))]}
    pricing.resolve_scheduled_price(product, NOW)
    assert product["scheduled_prices"][0]["is_active"] is True


def test_latest_start_wins_when_windows_overlap():
    product = {"scheduled_prices": [
        _entry(90.0, NOW - timedelta(days=1)),
        _entry(60.0, NOW - timedelta(days=5)),
    ]}
    assert pricing.resolve_scheduled_price(product, NOW).price == 90.0


def test_equal_starts_pick_the_later_entry():
    start = NOW - timedelta(days=1)
    product = {"scheduled_prices": [_entry(90.0, start), _entry(85.0, start)]}
    assert pricing.resolve_scheduled_price(product, NOW).price == 85.0


def test_cancelled_entries_are_skipped():
    product = {"scheduled_prices": [_entry(50.0, NOW - timedelta(days=1), is_active=False)]}
    resolution = pricing.resolve_scheduled_price(product, NOW)
    assert resolution.price is None
    assert resolution.deactivated == 0


def test_format_price():
    assert pricing.format_price(120.0) == "120"
    assert pricing.format_price(99.5) == "99.5"
    assert pricing.format_price(10.25) == "10.25"


async def test_job_applies_override_and_audits(db, product):
    await db.products.update_one(
        {"_id": product["_id"]},
        {"$set": {"scheduled_prices": [_entry(99.0, NOW - timedelta(days=1), NOW + timedelta(days=1))]}},
    )

    result = await pricing.apply_scheduled_prices(db, NOW)
    assert result == {"updated_count": 1, "reverted_count": 0}

    updated = await db.products.find_one({"_id": product["_id"]})
    assert updated["base_price"] == 99.0
    assert updated["regular_price"] == 120.0

    audit = await db.audit_logs.find_one({"action": "apply_scheduled_price"})
    assert audit["performed_by"] == "system"
    assert audit["details"] == "Price automatically updated from ₹120 to ₹99"


async def test_job_is_idempotent(db, product):
    await db.products.update_one(
        {"_id": product["_id"]},
        {"$set": {"scheduled_prices": [_entry(99.0, NOW - timedelta(days=1))]}},
    )
    await pricing.apply_scheduled_prices(db, NOW)
    second = await pricing.apply_scheduled_prices(db, NOW)

    assert second["updated_count"] == 0
    assert await db.audit_logs.count_documents({"action": "apply_scheduled_price"}) == 1


async def test_job_restores_regular_price_after_window(db, product):
    await db.products.update_one(
        {"_id": product["_id"]},
        {"$set": {"scheduled_prices": [_entry(99.0, NOW - timedelta(days=1), NOW + timedelta(days=1))]}},
    )
    await pricing.apply_scheduled_prices(db, NOW)

    result = await pricing.apply_scheduled_prices(db, NOW + timedelta(days=2))
    assert result == {"updated_count": 0, "reverted_count": 1}

    restored = await db.products.find_one({"_id": product["_id"]})
    assert restored["base_price"] == 120.0
    assert "regular_price" not in restored
    assert restored["scheduled_prices"][0]["is_active"] is False


async def test_job_writes_deactivation_without_price_change(db, product):
    await db.products.update_one(
        {"_id": product["_id"]},
        {"$set": {"scheduled_prices": [_entry(99.0, NOW - timedelta(days=3), NOW - timedelta(days=2))]}},
    )
    result = await pricing.apply_scheduled_prices(db, NOW)
    assert result == {"updated_count": 0, "reverted_count": 0}

    stored = await db.products.find_one({"_id": product["_id"]})
    assert stored["base_price"] == 120.0
    assert stored["scheduled_prices"][0]["is_active"] is False


async def test_add_scheduled_price_applies_open_window(db, product):
    entry = ScheduledPrice(price=75.0, start_date=utc_now() - timedelta(hours=1))
    updated = await pricing.add_scheduled_price(db, str(product["_id"]), entry, "admin")

    assert updated["base_price"] == 75.0
    assert updated["regular_price"] == 120.0
    assert await db.audit_logs.count_documents({"action": "schedule_price"}) == 1


async def test_cancel_restores_regular_price(db, product):
    entry = ScheduledPrice(price=75.0, start_date=utc_now() - timedelta(hours=1))
    await pricing.add_scheduled_price(db, str(product["_id"]), entry, "admin")

    restored = await pricing.cancel_scheduled_price(db, str(product["_id"]), entry.id, "admin")
    assert restored["base_price"] == 120.0
    assert restored["scheduled_prices"][0]["is_active"] is False

    with pytest.raises(HTTPException) as exc:
        await pricing.cancel_scheduled_price(db, str(product["_id"]), entry.id, "admin")
    assert exc.value.status_code == 409


async def test_cancel_unknown_schedule(db, product):
    with pytest.raises(HTTPException) as exc:
        await pricing.cancel_scheduled_price(db, str(product["_id"]), "missing", "admin")
    assert exc.value.status_code == 404


def test_schedule_endpoint_rejects_inverted_window(client, db):
    created = client.post("/products", json={
        "name": "Belladonna", "description": "Fever", "potencies": ["30C"], "forms": ["Dilution"], "base_price": 90
    })
    assert created.status_code == 201, created.text
    product_id = created.json()["_id"]

    res = client.post(f"/products/{product_id}/scheduled-prices", json={
        "price": 80, "start_date": "2024-06-10T00:00:00Z", "end_date": "2024-06-01T00:00:00Z"
    })
    assert res.status_code == 422
    assert res.json()["error"] == "validation_error"


def test_schedule_endpoint_and_manual_run(client):
    created = client.post("/products", json={
        "name": "Belladonna", "description": "Fever", "potencies": ["30C"], "forms": ["Dilution"], "base_price": 90
    })
    product_id = created.json()["_id"]

    future = (utc_now() + timedelta(days=1)).isoformat()
    res = client.post(f"/products/{product_id}/scheduled-prices", json={"price": 70, "start_date": future})
    assert res.status_code == 201, res.text
    assert res.json()["base_price"] == 90

    listed = client.get(f"/products/{product_id}/scheduled-prices")
    assert listed.status_code == 200
    assert [entry["price"] for entry in listed.json()] == [70]

    run = client.post("/admin/scheduled-prices/apply")
    assert run.status_code == 200
    assert run.json() == {"updated_count": 0, "reverted_count": 0}
