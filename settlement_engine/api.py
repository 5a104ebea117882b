"""
Thin REST surface over SettlementEngine using FastAPI. No auth; the caller
supplies the wallet address. Fee tiers are always read server-side.
"""
from __future__ import annotations

import logging
import threading
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from . import __version__
from .core.errors import FeeUnavailableError, PriceUnavailableError, UnsupportedChainError

logger = logging.getLogger(__name__)

try:
    from fastapi import FastAPI, HTTPException
    from pydantic import BaseModel
except ImportError:  # pragma: no cover
    FastAPI = None  # type: ignore[assignment,misc]


if FastAPI is not None:

    class PriceRequest(BaseModel):
        symbol: Optional[str] = None
        coingecko_id: Optional[str] = None

    class FeeRequest(BaseModel):
        amount: Decimal
        chain_id: int
        user_address: str

    class ValidateFeeRequest(FeeRequest):
        client_fee: Decimal

    class ConvertPriceRequest(BaseModel):
        usd_amount: Decimal
        chain_id: int

    class EscrowAmountsRequest(BaseModel):
        amount: Decimal
        chain_id: int
        fee_percentage: Optional[Decimal] = None
        user_address: Optional[str] = None


def create_app(engine: Optional[Any] = None, engine_factory: Optional[Callable[[], Any]] = None) -> Any:
    """Build the app. The engine is created on first request unless one is passed in."""
    if FastAPI is None:  # pragma: no cover
        raise RuntimeError("fastapi not installed. Install with: pip install 'settlement-engine[api]'")

    app = FastAPI(title="Settlement Engine API", version=__version__)
    lock = threading.Lock()
    holder: Dict[str, Any] = {"engine": engine}

    def _engine() -> Any:
        with lock:
            if holder["engine"] is None:
                if engine_factory is not None:
                    holder["engine"] = engine_factory()
                else:
                    from .engine import SettlementEngine

                    holder["engine"] = SettlementEngine()
            return holder["engine"]

    def _fee_errors(exc: Exception) -> HTTPException:
        if isinstance(exc, FeeUnavailableError):
            return HTTPException(
                503,
                detail=f"{exc}. Unable to fetch fee tier from blockchain; ensure contracts are deployed on the selected network.",
            )
        return HTTPException(400, detail=str(exc))

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "version": __version__, "providers": _engine().provider_health()}

    @app.post("/prices")
    def prices(req: PriceRequest) -> Dict[str, Any]:
        if not req.symbol and not req.coingecko_id:
            raise HTTPException(400, detail="Symbol or CoinGecko ID required")
        key = req.coingecko_id or req.symbol
        result = _engine().get_cached_price(key, symbol=req.symbol, coingecko_id=req.coingecko_id)
        if result is None:
            raise HTTPException(404, detail="Unable to fetch price")
        return result.to_dict()

    @app.post("/trades/calculate-fee")
    def calculate_fee(req: FeeRequest) -> Dict[str, Any]:
        try:
            fee = _engine().calculate_user_fee(req.user_address, req.amount, req.chain_id)
        except (FeeUnavailableError, UnsupportedChainError, ValueError) as exc:
            raise _fee_errors(exc)
        return {**fee.to_dict(), "chain_id": req.chain_id, "user_address": req.user_address}

    @app.get("/trades/calculate-fee")
    def fee_info(user_address: str, chain_id: int) -> Dict[str, Any]:
        try:
            return _engine().get_fee_info(user_address, chain_id).to_dict()
        except (FeeUnavailableError, UnsupportedChainError, ValueError) as exc:
            raise _fee_errors(exc)

    @app.post("/trades/validate-fee")
    def validate_fee(req: ValidateFeeRequest) -> Dict[str, Any]:
        try:
            result = _engine().validate_client_fee(req.user_address, req.amount, req.chain_id, req.client_fee)
        except (FeeUnavailableError, UnsupportedChainError, ValueError) as exc:
            raise _fee_errors(exc)
        if not result:
            return {**result.to_dict(), "error": "Invalid fee amount"}
        return {"is_valid": True, "message": "Fee validation successful"}

    @app.post("/trades/convert-price")
    def convert_price(req: ConvertPriceRequest) -> Dict[str, Any]:
        if req.usd_amount <= 0:
            raise HTTPException(400, detail="usd_amount must be positive")
        try:
            conversion = _engine().convert_usd_to_native(req.usd_amount, req.chain_id)
        except UnsupportedChainError as exc:
            raise HTTPException(400, detail=str(exc))
        except PriceUnavailableError as exc:
            raise HTTPException(503, detail=str(exc))
        return conversion.to_dict()

    @app.post("/trades/escrow-amounts")
    def escrow_amounts(req: EscrowAmountsRequest) -> Dict[str, Any]:
        eng = _engine()
        try:
            if req.fee_percentage is not None:
                breakdown = eng.compute_escrow_amounts(req.amount, req.fee_percentage, req.chain_id)
            elif req.user_address:
                breakdown = eng.compute_user_escrow_amounts(req.user_address, req.amount, req.chain_id)
            else:
                raise HTTPException(400, detail="fee_percentage or user_address required")
        except (FeeUnavailableError, UnsupportedChainError, ValueError) as exc:
            raise _fee_errors(exc)
        return {**breakdown.to_dict(), "chain_id": req.chain_id}

    return app


app = create_app() if FastAPI is not None else None
