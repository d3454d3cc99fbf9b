from typing import Optional
from utils.response_helpers import CamelModel


class MarketPriceResponse(CamelModel):
    commodity: str
    market: str
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    modal_price: Optional[float] = None
    unit: str = "Rs./Quintal"
