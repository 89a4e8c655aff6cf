"""
Delivery availability by pincode.

Location comes from the public India Post pincode API; courier options and
charges are derived from whether the destination is a metro.
"""
import logging
import math
import re
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..config.settings import get_settings
from ..utils.dates import utc_now

logger = logging.getLogger(__name__)
settings = get_settings()

PINCODE_PATTERN = re.compile(r"^\d{6}$")
METRO_CITIES = ["Delhi", "Mumbai", "Bangalore", "Chennai", "Kolkata", "Hyderabad", "Pune", "Ahmedabad"]
COD_STATES = {"Maharashtra", "Karnataka"}

BASE_WEIGHT_KG = 0.5
WEIGHT_STEP_KG = 0.5
WEIGHT_STEP_CHARGE = 20


async def lookup_pincode(client: httpx.AsyncClient, pincode: str) -> Optional[Tuple[str, str]]:
    """(district, state) for a pincode, or None when the API does not know it."""
    response = await client.get(f"{settings.pincode_api_url.rstrip('/')}/{pincode}")
    response.raise_for_status()
    data = response.json()

    if not data or data[0].get("Status") != "Success" or not data[0].get("PostOffice"):
        return None
    office = data[0]["PostOffice"][0]
    return office["District"], office["State"]


def is_metro(district: str, state: str) -> bool:
    return any(city in district or city in state for city in METRO_CITIES)


def courier_options(metro: bool) -> List[Dict[str, Any]]:
    now = utc_now()
    standard_days = 3 if metro else 5
    express_days = 1 if metro else 3
    return [
        {
            "courier_name": "Standard Delivery (DTDC/Delhivery)",
            "rate": 40.0 if metro else 60.0,
            "delivery_days": standard_days,
            "rating": 4.2,
            "etd": now + timedelta(days=standard_days),
        },
        {
            "courier_name": "Express (BlueDart/FedEx)",
            "rate": 80.0 if metro else 120.0,
            "delivery_days": express_days,
            "rating": 4.8,
            "etd": now + timedelta(days=express_days),
        },
    ]


def weight_surcharge(weight: float) -> float:
    steps = max(0, math.ceil((weight - BASE_WEIGHT_KG) / WEIGHT_STEP_KG))
    return float(steps * WEIGHT_STEP_CHARGE)


async def check_availability(
    client: httpx.AsyncClient,
    pincode: str,
    weight: float = 0.5,
    order_value: float = 0.0,
    free_shipping_threshold: Optional[float] = None,
) -> Dict[str, Any]:
    if not PINCODE_PATTERN.match(pincode):
        return {"available": False, "error": "Invalid pincode format"}

    try:
        location = await lookup_pincode(client, pincode)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"⚠️  Pincode lookup failed for {pincode}: {e}")
        return {"available": False, "error": "Failed to verify pincode"}

    if location is None:
        return {"available": False, "error": "Pincode not found or not serviceable"}

    district, state = location
    metro = is_metro(district, state)
    options = courier_options(metro)
    best = min(options, key=lambda option: option["rate"])

    threshold = settings.free_shipping_threshold if free_shipping_threshold is None else free_shipping_threshold
    charge = best["rate"] + weight_surcharge(weight)
    if order_value > threshold:
        charge = 0.0

    return {
        "available": True,
        "location": f"{district}, {state}",
        "days": best["delivery_days"],
        "estimated_date": best["etd"],
        "courier": best["courier_name"],
        "shipping_charge": charge,
        "is_cod_available": metro or state in COD_STATES,
        "courier_options": options,
    }
