import httpx
import pytest

from storefront.services import delivery
from storefront.utils.dependencies import get_http_client
from storefront.main import app


def _postal_response(district, state):
    return [{"Status": "Success", "PostOffice": [{"District": district, "State": state}]}]


def _mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _replying(payload, status_code=200):
    def handler(request):
        return httpx.Response(status_code, json=payload)
    return handler


def test_weight_surcharge():
    assert delivery.weight_surcharge(0.5) == 0.0
    assert delivery.weight_surcharge(0.2) == 0.0
    assert delivery.weight_surcharge(0.6) == 20.0
    assert delivery.weight_surcharge(1.5) == 40.0


def test_metro_detection():
    assert delivery.is_metro("Mumbai Suburban", "Maharashtra")
    assert delivery.is_metro("Central", "Delhi")
    assert not delivery.is_metro("Nashik", "Maharashtra")


async def test_metro_pincode():
    async with _mock_client(_replying(_postal_response("Mumbai", "Maharashtra"))) as client:
        result = await delivery.check_availability(client, "400001")

    assert result["available"] is True
    assert result["location"] == "Mumbai, Maharashtra"
    assert result["days"] == 3
    assert result["shipping_charge"] == 40.0
    assert result["is_cod_available"] is True
    assert [option["rate"] for option in result["courier_options"]] == [40.0, 80.0]


async def test_non_metro_pincode_with_weight():
    async with _mock_client(_replying(_postal_response("Jaipur", "Rajasthan"))) as client:
        result = await delivery.check_availability(client, "302001", weight=1.2)

    assert result["days"] == 5
    assert result["shipping_charge"] == 60.0 + 40.0
    assert result["is_cod_available"] is False
    assert result["courier_options"][1]["delivery_days"] == 3


async def test_cod_states_outside_metros():
    async with _mock_client(_replying(_postal_response("Mysuru", "Karnataka"))) as client:
        result = await delivery.check_availability(client, "570001")
    assert result["is_cod_available"] is True


async def test_free_shipping_above_threshold():
    async with _mock_client(_replying(_postal_response("Jaipur", "Rajasthan"))) as client:
        result = await delivery.check_availability(client, "302001", order_value=1500)
    assert result["shipping_charge"] == 0.0


async def test_requests_the_pincode_url():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, json=_postal_response("Pune", "Maharashtra"))

    async with _mock_client(handler) as client:
        await delivery.check_availability(client, "411001")
    assert seen == ["https://api.postalpincode.in/pincode/411001"]


@pytest.mark.parametrize("pincode", ["12345", "1234567", "41100a"])
async def test_malformed_pincode_skips_lookup(pincode):
    def handler(request):
        raise AssertionError("lookup should not happen")

    async with _mock_client(handler) as client:
        result = await delivery.check_availability(client, pincode)
    assert result == {"available": False, "error": "Invalid pincode format"}


async def test_unknown_pincode():
    async with _mock_client(_replying([{"Status": "Error", "PostOffice": None}])) as client:
        result = await delivery.check_availability(client, "999999")
    assert result["available"] is False
    assert result["error"] == "Pincode not found or not serviceable"


async def test_lookup_failure():
    async with _mock_client(_replying({"message": "down"}, status_code=503)) as client:
        result = await delivery.check_availability(client, "411001")
    assert result == {"available": False, "error": "Failed to verify pincode"}


def test_delivery_endpoint_uses_site_threshold(client):
    async def _http_client():
        async with _mock_client(_replying(_postal_response("Jaipur", "Rajasthan"))) as http_client:
            yield http_client

    app.dependency_overrides[get_http_client] = _http_client

    res = client.get("/delivery/check", params={"pincode": "302001", "order_value": 1500})
    assert res.status_code == 200, res.text
    assert res.json()["shipping_charge"] == 0.0

    client.put("/settings", json={"free_shipping_threshold": 2000})
    res = client.get("/delivery/check", params={"pincode": "302001", "order_value": 1500})
    assert res.json()["shipping_charge"] == 60.0
