from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
import asyncio
import logging

from backend.utils import is_private_ip, parse_ipv4
from core.models import (
    AssessRequest, DecisionResponse, EvaluationResponse,
    EvaluationResult, GenericResponse, InterfaceSignal
)

logger = logging.getLogger("egresscheck.api")
router = APIRouter(prefix="/api/v1/egress", tags=["Egress Evaluation"])


def to_response(result: EvaluationResult) -> EvaluationResponse:
    a, d = result.assessment, result.decision
    return EvaluationResponse(
        status="success",
        ip=result.geo.ip,
        domestic_ip=result.domestic_ip,
        location=result.location_label,
        isp=result.geo.isp,
        risk_score=a.risk_score,
        risk_level=a.risk_level,
        broadband_label=a.broadband_label,
        nativity_label=a.nativity_label,
        vpn_status_label=a.vpn_status_label,
        tunnel_interface=result.interface.interface_name if result.interface else None,
        decision=DecisionResponse(
            is_vpn=d.is_vpn,
            is_proxy=d.is_proxy,
            proxy_kind=d.proxy_kind.value,
            confidence=d.confidence,
            signals=list(d.signals),
            method_trace=d.method_trace,
        ),
    )


@router.get("/evaluate", response_model=EvaluationResponse, responses={503: {"model": GenericResponse}})
async def evaluate(request: Request):
    agent = request.app.state.agent
    # Probing is blocking I/O
    result = await asyncio.to_thread(agent.evaluate)
    if result.status != "ok":
        logger.warning("Evaluation returned no geolocation data")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "message": "Geolocation data unavailable"}
        )
    return to_response(result)


@router.post("/assess", response_model=EvaluationResponse)
async def assess(req: AssessRequest, request: Request):
    if req.domestic_ip and (parse_ipv4(req.domestic_ip) is None or is_private_ip(req.domestic_ip)):
        raise HTTPException(
            status_code=422,
            detail="domestic_ip must be a public IPv4 address"
        )
    agent = request.app.state.agent
    interface = InterfaceSignal(has_tunnel_interface=bool(req.has_tunnel_interface))
    result = agent.assess(req.geo, req.domestic_ip, interface)
    return to_response(result)
