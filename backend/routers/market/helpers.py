import httpx
from config import MARKET_PRICE_API_URL, MARKET_PRICE_API_KEY, MARKET_PRICE_API_LIMIT
from utils.errors import UpstreamError
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

# Mandi prices are quoted per quintal (100 kg)
PRICE_UNIT = "Rs./Quintal"


def _normalize(value: Any) -> str:
    return str(value or "").strip().lower()


def to_number(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


async def fetch_market_records(client: httpx.AsyncClient) -> List[Dict[str, Any]]:
    """Raw records from the upstream commodity price API"""
    params = {"format": "json", "limit": MARKET_PRICE_API_LIMIT}
    if MARKET_PRICE_API_KEY:
        params["api-key"] = MARKET_PRICE_API_KEY
    else:
        logger.warning("MARKET_PRICE_API_KEY is not set; upstream will likely reject the request")

    try:
        response = await client.get(MARKET_PRICE_API_URL, params=params)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as e:
        logger.error(f"Market price API request failed: {str(e)}")
        raise UpstreamError("Failed to fetch market prices", detail=str(e))
    except ValueError as e:
        logger.error(f"Market price API returned invalid JSON: {str(e)}")
        raise UpstreamError("Failed to fetch market prices", detail="Invalid JSON from market price API")

    records = data.get("records") if isinstance(data, dict) else None
    if not isinstance(records, list):
        raise UpstreamError("Failed to fetch market prices", detail="Unexpected response from market price API")
    return records


def filter_records(records: List[Dict[str, Any]], state: str, city: str, commodity: str) -> List[Dict[str, Any]]:
    """Exact, case-insensitive match on state, district and commodity"""
    state, city, commodity = _normalize(state), _normalize(city), _normalize(commodity)
    return [
        record for record in records
        if isinstance(record, dict)
        and _normalize(record.get("state")) == state
        and _normalize(record.get("district")) == city
        and _normalize(record.get("commodity")) == commodity
    ]


def transform_record(record: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "commodity": str(record.get("commodity") or "").strip(),
        "market": str(record.get("market") or "").strip(),
        "min_price": to_number(record.get("min_price")),
        "max_price": to_number(record.get("max_price")),
        "modal_price": to_number(record.get("modal_price")),
        "unit": PRICE_UNIT
    }
