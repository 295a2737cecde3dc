# trading_dashboard/routes/market_data.py

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, Request

from logger import logger
from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.deps import get_manager, get_store
from trading_dashboard.errors import ApiError, InternalError, NotFoundError
from trading_dashboard.events import BandDataUpdated, QuoteUpdated
from trading_dashboard.models import BandData
from trading_dashboard.payloads import parse_body
from trading_dashboard.schemas import BandDataCreate, QuoteDataCreate
from trading_dashboard.store import TradingStore

router = APIRouter(
    prefix="/api",
    tags=["market-data"]
)

DEFAULT_HISTORY_LIMIT = 100

# Optional indicator columns are reported as 0 when the feed did not provide them
OPTIONAL_BAND_FIELDS = ("m1Close", "bollingerUpperBand", "bollingerLowerBand")


def band_to_wire(band: BandData) -> Dict[str, Any]:
    data = band.to_wire()
    for field in OPTIONAL_BAND_FIELDS:
        if data.get(field) is None:
            data[field] = 0
    return data


@router.get("/band-data")
async def get_band_data(store: TradingStore = Depends(get_store)):
    """
    Returns the latest band row, or null before the first one arrives.
    """
    try:
        band = store.get_current_band_data()
        return band_to_wire(band) if band is not None else None
    except Exception as e:
        logger.error(f"Error retrieving band data: {e}", exc_info=True)
        raise InternalError("Failed to retrieve band data")


@router.get("/band-data/history")
async def get_band_data_history(
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1),
    store: TradingStore = Depends(get_store),
):
    """
    Returns the `limit` most recent band rows, oldest first.
    """
    try:
        return [band_to_wire(band) for band in store.get_band_data_history(limit)]
    except Exception as e:
        logger.error(f"Error retrieving band data history: {e}", exc_info=True)
        raise InternalError("Failed to retrieve band data history")


@router.post("/band-data", status_code=201)
async def add_band_data(
    request: Request,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
):
    """
    Accepts a band row computed by the external signal engine and passes it through to viewers.
    """
    try:
        band = await parse_body(request, BandDataCreate, "Invalid band data")
        new_band = store.append_band_data(band)
        await manager.broadcast(BandDataUpdated(data=new_band))
        return new_band.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error processing band data: {e}", exc_info=True)
        raise InternalError("Failed to add band data")


@router.get("/quote/{symbol}")
async def get_quote(symbol: str, store: TradingStore = Depends(get_store)):
    try:
        quote = store.get_current_quote(symbol)
        if quote is None:
            raise NotFoundError("Quote not found")
        return quote.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving quote for {symbol}: {e}", exc_info=True)
        raise InternalError("Failed to retrieve quote")


@router.get("/quote/{symbol}/history")
async def get_quote_history(
    symbol: str,
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1),
    store: TradingStore = Depends(get_store),
):
    try:
        return [quote.to_wire() for quote in store.get_quote_history(symbol, limit)]
    except Exception as e:
        logger.error(f"Error retrieving quote history for {symbol}: {e}", exc_info=True)
        raise InternalError("Failed to retrieve quote history")


@router.post("/quote", status_code=201)
async def add_quote(
    request: Request,
    store: TradingStore = Depends(get_store),
    manager: ConnectionManager = Depends(get_manager),
):
    try:
        quote = await parse_body(request, QuoteDataCreate, "Invalid quote data")
        new_quote = store.append_quote(quote)
        await manager.broadcast(QuoteUpdated(data=new_quote))
        return new_quote.to_wire()
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error processing quote data: {e}", exc_info=True)
        raise InternalError("Failed to add quote")
