# trading_dashboard/main.py

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from logger import logger
from trading_dashboard.broadcaster import ConnectionManager
from trading_dashboard.config import Settings
from trading_dashboard.errors import ApiError, ValidationError, api_error_handler
from trading_dashboard.persistence import SnapshotWriter, load_snapshots
from trading_dashboard.routes import (
    accounts,
    inputs,
    logs,
    market_data,
    orders,
    positions,
    program_state,
    service_status,
    settings as settings_routes,
)
from trading_dashboard.routes.channel import trading_channel
from trading_dashboard.simulator import MarketSimulator
from trading_dashboard.store import TradingStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    state = app.state
    state.snapshots.start()
    if state.settings.simulate_updates:
        state.simulator.start()
    yield
    await state.simulator.stop()
    await state.snapshots.stop()


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError("Invalid request parameters", [
        {"loc": [str(part) for part in err["loc"]], "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ])
    return await api_error_handler(request, error)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(settings: Optional[Settings] = None, store: Optional[TradingStore] = None) -> FastAPI:
    """
    Builds the dashboard API with its own store, channel manager, snapshot writer and simulator.

    Args:
        settings (Settings): Runtime configuration; read from the environment when omitted.
        store (TradingStore): Pre-built store. A fresh one seeded from the snapshot folder when omitted.

    Returns:
        FastAPI: The configured application.
    """
    settings = settings or Settings.from_env()
    os.makedirs(settings.config_folder, exist_ok=True)

    if store is None:
        store = TradingStore(history_limit=settings.history_limit)
        accounts_restored = load_snapshots(store, settings.config_folder)
        store.seed_demo_data(include_accounts=not accounts_restored, quote_symbol=settings.default_quote_symbol)

    manager = ConnectionManager()

    app = FastAPI(
        title="Trading Dashboard API",
        description="Accounts, manual orders, positions, logs and premium/band data for the trading dashboard, with live updates over a WebSocket channel.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.manager = manager
    app.state.snapshots = SnapshotWriter(
        settings.config_folder,
        max_size=settings.snapshot_queue_size,
        max_retries=settings.snapshot_max_retries,
    )
    app.state.simulator = MarketSimulator(
        store,
        manager,
        quote_symbol=settings.default_quote_symbol,
        band_interval=settings.band_interval,
        quote_interval=settings.quote_interval,
        log_interval=settings.log_interval,
        seed=settings.simulator_seed,
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include API routers
    app.include_router(accounts.router)
    app.include_router(orders.router)
    app.include_router(positions.router)
    app.include_router(logs.router)
    app.include_router(settings_routes.router)
    app.include_router(service_status.router)
    app.include_router(program_state.router)
    app.include_router(market_data.router)
    app.include_router(inputs.router)
    app.add_api_websocket_route(settings.ws_path, trading_channel)

    # Root endpoint
    @app.get("/", response_model=dict)
    async def root():
        return {"message": "Trading dashboard API is running"}

    # Health check endpoint
    @app.get("/health", response_model=dict)
    def health_check():
        return {"status": "healthy", "channels": len(manager.active_connections)}

    logger.info(f"Trading dashboard configured (snapshots in {settings.config_folder}, channel at {settings.ws_path}).")
    return app
