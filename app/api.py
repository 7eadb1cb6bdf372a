"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, status

from app.schemas import (
    DailyStatsOut,
    DailyStatsRequest,
    DashboardRequest,
    DashboardResponse,
    DiagnosticOut,
)
from services.dashboard import DashboardService, build_default_dashboard
from services.diagnostics import classify_reading
from services.readings import reading_from_payload, readings_from_payloads

router = APIRouter()


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


@router.post(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Build the live dashboard for one device from a history batch.",
)
async def dashboard(
    request: DashboardRequest,
    service: DashboardService = Depends(get_dashboard),
) -> DashboardResponse:
    readings = readings_from_payloads(request.readings)
    view = service.build(readings, device_id=request.device_id, now=request.now)
    return DashboardResponse.from_domain(view)


@router.post(
    "/metrics/daily",
    response_model=DailyStatsOut,
    summary="Compute per-day compliance metrics and today's compliance card.",
)
async def daily_metrics(
    request: DailyStatsRequest,
    service: DashboardService = Depends(get_dashboard),
) -> DailyStatsOut:
    readings = readings_from_payloads(request.readings)
    stats = service.engine.process_daily_stats(readings, now=request.now)
    return DailyStatsOut.from_domain(stats)


@router.post(
    "/diagnostics",
    response_model=DiagnosticOut,
    summary="Classify a single reading's live condition.",
)
async def diagnostics(
    payload: Dict[str, Any] = Body(..., description="One history entry."),
    service: DashboardService = Depends(get_dashboard),
) -> DiagnosticOut:
    reading = reading_from_payload(payload)
    diagnostic = classify_reading(reading, service.engine.low_flow_threshold)
    return DiagnosticOut.from_domain(diagnostic)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
