from datetime import datetime, timedelta

from storefront.services import funnels

T0 = datetime(2024, 5, 1, 10, 0, 0)

FUNNEL = {
    "steps": [
        {"name": "Cart", "event_type": "add_to_cart", "order": 1},
        {"name": "View", "event_type": "product_view", "order": 0},
        {"name": "Purchase", "event_type": "purchase", "order": 2},
    ]
}


def _event(session_id, step_index, seconds, user_id=None):
    return {
        "session_id": session_id,
        "step_index": step_index,
        "timestamp": T0 + timedelta(seconds=seconds),
        "user_id": user_id,
    }


EVENTS = [
    _event("s1", 0, 0, "u1"), _event("s1", 1, 30, "u1"), _event("s1", 2, 90, "u1"),
    _event("s2", 0, 0), _event("s2", 1, 10),
    _event("s3", 0, 0),
    _event("s4", 0, 0, "u4"), _event("s4", 0, 5, "u4"), _event("s4", 1, 60, "u4"), _event("s4", 2, 300, "u4"),
]


def test_funnel_counts_dropoff_and_conversion():
    data = funnels.compute_funnel_data(FUNNEL, EVENTS)

    assert [step["step_name"] for step in data["steps"]] == ["View", "Cart", "Purchase"]
    assert [step["count"] for step in data["steps"]] == [4, 3, 2]
    assert [step["dropoff"] for step in data["steps"]] == [1, 1, 0]
    assert data["steps"][0]["dropoff_rate"] == 25.0
    assert data["steps"][1]["dropoff_rate"] == 33.3
    assert data["steps"][2]["conversion_rate"] == 50.0
    assert data["total_sessions"] == 4
    assert data["completed_sessions"] == 2
    assert data["conversion_rate"] == 50.0


def test_funnel_without_events():
    data = funnels.compute_funnel_data(FUNNEL, [])
    assert data["total_sessions"] == 0
    assert data["conversion_rate"] == 0.0
    assert all(step["count"] == 0 for step in data["steps"])


def test_conversions_need_every_step():
    skipped_cart = [_event("s9", 0, 0), _event("s9", 2, 20)]
    conversions = funnels.compute_conversions(FUNNEL, EVENTS + skipped_cart)

    assert [c["session_id"] for c in conversions] == ["s4", "s1"]
    assert conversions[0]["time_to_convert"] == 300.0
    assert conversions[1]["user_id"] == "u1"


def test_time_to_convert_summary():
    extra = [_event("s5", 0, 0), _event("s5", 1, 100), _event("s5", 2, 120)]
    summary = funnels.compute_time_to_convert(FUNNEL, EVENTS + extra)

    assert summary["count"] == 3
    assert summary["min_time"] == 90.0
    assert summary["max_time"] == 300.0
    assert summary["median_time"] == 120.0
    assert summary["avg_time"] == 170.0


def test_time_to_convert_median_of_even_count():
    summary = funnels.compute_time_to_convert(FUNNEL, EVENTS)
    assert summary["median_time"] == 195.0


def test_time_to_convert_without_conversions():
    summary = funnels.compute_time_to_convert(FUNNEL, [])
    assert summary == {"avg_time": 0.0, "median_time": 0.0, "min_time": 0.0, "max_time": 0.0, "count": 0}


def test_funnel_endpoints(client):
    created = client.post("/funnels", json={
        "name": "Purchase funnel",
        "steps": [
            {"name": "View", "event_type": "product_view", "order": 0},
            {"name": "Purchase", "event_type": "purchase", "order": 1},
        ],
        "created_by": "admin",
    })
    assert created.status_code == 201, created.text
    funnel_id = created.json()["_id"]

    for session_id, steps in [("a", [0, 1]), ("b", [0])]:
        for step_index in steps:
            res = client.post(f"/funnels/{funnel_id}/events", json={
                "session_id": session_id, "step_index": step_index, "step_name": f"step {step_index}"
            })
            assert res.status_code == 201, res.text

    unknown = client.post(f"/funnels/{funnel_id}/events", json={
        "session_id": "a", "step_index": 7, "step_name": "nope"
    })
    assert unknown.status_code == 400

    data = client.get(f"/funnels/{funnel_id}/data").json()
    assert data["funnel"]["_id"] == funnel_id
    assert data["total_sessions"] == 2
    assert data["conversion_rate"] == 50.0

    conversions = client.get(f"/funnels/{funnel_id}/conversions").json()
    assert [c["session_id"] for c in conversions] == ["a"]

    assert client.get(f"/funnels/{funnel_id}/time-to-convert").json()["count"] == 1

    updated = client.put(f"/funnels/{funnel_id}", json={"is_active": False})
    assert updated.json()["is_active"] is False
    assert client.get("/funnels", params={"active_only": True}).json() == []

    assert client.delete(f"/funnels/{funnel_id}").status_code == 204
    assert client.get(f"/funnels/{funnel_id}").status_code == 404


def test_duplicate_step_orders_are_rejected(client):
    res = client.post("/funnels", json={
        "name": "Broken",
        "steps": [
            {"name": "A", "event_type": "a", "order": 0},
            {"name": "B", "event_type": "b", "order": 0},
        ],
        "created_by": "admin",
    })
    assert res.status_code == 422
