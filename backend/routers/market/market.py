from fastapi import APIRouter, Depends, Query
import httpx
from config import MARKET_PRICE_API_TIMEOUT
from utils.errors import ValidationError, NotFound
from utils.response_helpers import safe_model_validate_list
from .schemas import MarketPriceResponse
from .helpers import fetch_market_records, filter_records, transform_record
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Market Prices"])


async def get_http_client():
    async with httpx.AsyncClient(timeout=MARKET_PRICE_API_TIMEOUT) as client:
        yield client


@router.get("/market-prices", response_model=List[MarketPriceResponse])
async def get_market_prices(
    state: Optional[str] = Query(None, description="State name, e.g. Maharashtra"),
    city: Optional[str] = Query(None, description="District name, e.g. Pune"),
    commodity: Optional[str] = Query(None, description="Commodity name, e.g. Onion"),
    client: httpx.AsyncClient = Depends(get_http_client)
):
    """Today's mandi prices for a commodity in one district"""
    if not (state or "").strip() or not (city or "").strip() or not (commodity or "").strip():
        raise ValidationError("State, city, and commodity are required.")

    records = await fetch_market_records(client)
    matches = filter_records(records, state, city, commodity)

    if not matches:
        raise NotFound(f"No market prices found for {commodity} in {city}, {state}.")

    logger.info(f"Market prices: {len(matches)} records for {commodity} in {city}, {state}")
    return safe_model_validate_list(MarketPriceResponse, [transform_record(r) for r in matches])
