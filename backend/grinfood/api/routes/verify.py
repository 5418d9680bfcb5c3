"""SMS one-time code routes."""

from fastapi import APIRouter, Request

from grinfood.api.deps import ServicesDep
from grinfood.core.rate_limit import limiter
from grinfood.schemas.payment import SendOtpRequest, VerifyOtpRequest

router = APIRouter()


@router.post("/send-otp")
@limiter.limit("5/minute")
async def send_otp(request: Request, body: SendOtpRequest, services: ServicesDep):
    verification_status = await services.sms.send_code(body.phone)
    return {"success": True, "status": verification_status}


@router.post("/verify-otp")
@limiter.limit("10/minute")
async def verify_otp(request: Request, body: VerifyOtpRequest, services: ServicesDep):
    approved, verification_status = await services.sms.check_code(body.phone, body.code)
    return {"success": approved, "status": verification_status}
