"""Payment gateway endpoints: order creation, verification and callbacks."""

import json
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.engine import Engine

from car_rental.dependencies import get_db_engine
from car_rental.network.gateway import GatewayError
from car_rental.routes._helpers import client_info, not_found
from car_rental.schemas.payments import (
    CallbackPayload,
    CreateOrderPayload,
    UpdateStatusPayload,
    VerifyPaymentPayload,
)
from car_rental.security import SIGNATURE_HEADER, require_admin, verify_signature
from car_rental.services.booking_status import InvalidStatusTransitionError
from car_rental.services.payments import (
    BookingNotFoundError,
    PaymentConflictError,
    admin_update_status,
    create_order,
    handle_callback,
    verify_payment,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


def conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def gateway_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY, detail="Payment gateway unavailable"
    )


@router.post("/payment/create-order")
def create_order_endpoint(
    payload: CreateOrderPayload,
    request: Request,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Register a gateway order for a pending booking and return the payment page URL.

    Returns:
        dict: success flag, payment_url and order_id

    Raises:
        HTTPException: 404 unknown booking, 400 already paid, 409 booking not
        pending, 502 gateway failure
    """
    try:
        result = create_order(
            engine,
            booking_id=payload.booking_id,
            amount=payload.amount,
            currency=payload.currency.upper(),
            client=client_info(request),
        )
        if not result["success"]:
            raise gateway_unavailable()
        return result

    except HTTPException:
        raise
    except BookingNotFoundError:
        raise not_found("Booking not found")
    except PaymentConflictError as e:
        if "already paid" in str(e):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        raise conflict(str(e))
    except GatewayError as e:
        logger.error("create_order_gateway_error", booking_id=payload.booking_id, error=str(e))
        raise gateway_unavailable()
    except Exception as e:
        logger.exception("create_order_failed", booking_id=payload.booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/payment/verify")
def verify_payment_endpoint(
    payload: VerifyPaymentPayload,
    request: Request,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Check an order with the gateway and update the booking accordingly.

    Gateway state 2 (paid) or 1 (authorised) confirms the booking and assigns
    an invoice number; anything else marks it failed.
    """
    try:
        return verify_payment(
            engine,
            order_id=payload.order_id,
            booking_id=payload.booking_id,
            client=client_info(request),
        )

    except BookingNotFoundError:
        raise not_found("Booking not found")
    except InvalidStatusTransitionError as e:
        raise conflict(str(e))
    except GatewayError as e:
        logger.error("verify_gateway_error", booking_id=payload.booking_id, error=str(e))
        raise gateway_unavailable()
    except Exception as e:
        logger.exception("verify_payment_failed", booking_id=payload.booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/payment/verify")
def verify_payment_ping() -> dict[str, str]:
    """Acknowledge GET probes of the verify URL; verification itself is POST only."""
    return {"message": "Payment verification endpoint. Use POST with orderId and bookingId."}


@router.post("/payment/callback")
async def payment_callback(
    request: Request,
    engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """
    Receive a gateway notification.

    The raw body must be signed with HMAC-SHA256 in the X-Signature header.
    A notification whose idempotency key was already processed is
    acknowledged with status ``duplicate`` and changes nothing.

    Returns:
        JSONResponse: 200 processed/duplicate, 401 bad signature, 400 bad body,
        404 unknown booking, 409 transition not allowed
    """
    body = await request.body()

    if not verify_signature(body, request.headers.get(SIGNATURE_HEADER)):
        logger.warning("payment_callback_bad_signature", client=client_info(request)["ip_address"])
        return JSONResponse(status_code=401, content={"error": "Invalid signature"})

    try:
        payload = CallbackPayload.model_validate(json.loads(body))
    except (ValueError, ValidationError) as e:
        logger.warning("payment_callback_invalid_body", error=str(e))
        return JSONResponse(status_code=400, content={"error": "Invalid callback payload"})

    try:
        result = handle_callback(
            engine,
            payload.model_dump(),
            client=client_info(request),
        )
        return JSONResponse(status_code=200, content=result)

    except BookingNotFoundError:
        return JSONResponse(status_code=404, content={"error": "Booking not found"})
    except InvalidStatusTransitionError as e:
        logger.warning("payment_callback_rejected", booking_id=payload.booking_id, error=str(e))
        return JSONResponse(status_code=409, content={"error": str(e)})
    except Exception as e:
        logger.exception("payment_callback_failed", booking_id=payload.booking_id, error=str(e))
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


@router.post("/payment/update-status", dependencies=[Depends(require_admin)])
def update_status_endpoint(
    payload: UpdateStatusPayload,
    request: Request,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Change a booking's status and payment status from the back-office.

    The change must be allowed by the booking state machine.
    """
    try:
        outcome = admin_update_status(
            engine,
            booking_id=payload.booking_id,
            status=payload.status,
            payment_status=payload.payment_status,
            client=client_info(request),
        )
        return {"success": True, **outcome}

    except BookingNotFoundError:
        raise not_found("Booking not found")
    except InvalidStatusTransitionError as e:
        raise conflict(str(e))
    except Exception as e:
        logger.exception("update_status_failed", booking_id=payload.booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
