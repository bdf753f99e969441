"""
Shared FastAPI dependencies.

Routers import long-lived objects from here instead of reaching into
module globals; everything is created once in the lifespan and stored on
``app.state``. Tests replace these with ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import TypedDict

from fastapi import Query, Request

from domain.constants import DEFAULT_EVENT_LIMIT
from services.payment_service import PaymentOrchestrator
from sui_client import SuiClient


class EventQuery(TypedDict):
    limit: int


def event_query_params(
    limit: int = Query(DEFAULT_EVENT_LIMIT, description="Maximum number of events to return"),
) -> EventQuery:
    # Range is checked by the service so a non-positive limit reports invalid_argument
    return {"limit": limit}


def get_sui_client(request: Request) -> SuiClient:
    return request.app.state.sui_client


def get_orchestrator(request: Request) -> PaymentOrchestrator:
    return request.app.state.orchestrator
