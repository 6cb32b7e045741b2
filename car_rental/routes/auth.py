"""Customer authentication and profile endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from car_rental.db.readers.customers import get_customer_by_email
from car_rental.db.writers.rows import insert_row, update_row
from car_rental.dependencies import get_db_engine
from car_rental.models.customers import Customer
from car_rental.routes._helpers import get_customer_or_404, not_found, public_customer
from car_rental.schemas.auth import (
    FindCustomerPayload,
    LoginPayload,
    RegisterPayload,
    SetPasswordPayload,
    UpdateCustomerPayload,
)
from car_rental.security import hash_password, verify_password

logger = structlog.get_logger(__name__)
router = APIRouter()


def find_conflicts(existing: dict[str, Any], payload: RegisterPayload) -> list[dict[str, Any]]:
    """
    Compare registration details with the customer already holding the email.

    Names are compared case-insensitively; phone and date of birth only when
    both sides have a value.

    Returns:
        list: One entry per differing field (field, existing, new)
    """
    conflicts = []
    for field in ("first_name", "last_name"):
        new_value = getattr(payload, field)
        if existing[field].lower() != new_value.lower():
            conflicts.append({"field": field, "existing": existing[field], "new": new_value})

    for field in ("phone", "date_of_birth"):
        new_value = getattr(payload, field)
        if new_value and existing.get(field) and existing[field] != new_value:
            conflicts.append({"field": field, "existing": existing[field], "new": new_value})

    return conflicts


@router.post("/auth/login")
def login(payload: LoginPayload, engine: Engine = Depends(get_db_engine)) -> Any:
    """
    Log a customer in with email and password.

    Guests without a password get a 401 with type ``NO_PASSWORD`` so the
    storefront can offer to set one.

    Returns:
        dict: success flag and the customer profile
    """
    try:
        with engine.connect() as conn:
            customer = get_customer_by_email(conn, payload.email)

        if customer is None:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"success": False, "message": "Invalid email or password"},
            )

        if not customer["password_hash"]:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={
                    "success": False,
                    "type": "NO_PASSWORD",
                    "message": "This account has no password yet",
                },
            )

        if not verify_password(payload.password, customer["password_hash"]):
            logger.info("login_failed", customer_id=customer["id"])
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"success": False, "message": "Invalid email or password"},
            )

        logger.info("login_succeeded", customer_id=customer["id"])
        return {"success": True, "customer": public_customer(customer)}

    except Exception as e:
        logger.exception("login_error", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/auth/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterPayload, engine: Engine = Depends(get_db_engine)) -> Any:
    """
    Register a customer, or reuse the matching guest account.

    Returns:
        201 with the new customer; 200 when an existing guest was reused or
        upgraded; 409 when the email belongs to someone with different details
        or to an account that already has a password
    """
    try:
        with engine.begin() as conn:
            existing = get_customer_by_email(conn, payload.email)

            if existing is None:
                customer_id = insert_row(
                    conn,
                    Customer,
                    {
                        "first_name": payload.first_name,
                        "last_name": payload.last_name,
                        "email": payload.email.lower(),
                        "phone": payload.phone,
                        "password_hash": (
                            hash_password(payload.password) if payload.password else None
                        ),
                        "date_of_birth": payload.date_of_birth,
                        "address": payload.address,
                        "verified": bool(payload.password),
                    },
                )
                customer = get_customer_or_404(conn, customer_id)
                logger.info(
                    "customer_registered", customer_id=customer_id, guest=not payload.password
                )
                return {"success": True, "type": "CREATED", "customer": public_customer(customer)}

            conflicts = find_conflicts(existing, payload)
            if conflicts:
                return JSONResponse(
                    status_code=status.HTTP_409_CONFLICT,
                    content={
                        "success": False,
                        "type": "DATA_CONFLICT",
                        "message": "Email already exists with different information",
                        "conflicts": jsonable_encoder(conflicts),
                    },
                )

            if payload.password and existing["password_hash"]:
                return JSONResponse(
                    status_code=status.HTTP_409_CONFLICT,
                    content={
                        "success": False,
                        "type": "ACCOUNT_EXISTS",
                        "message": "An account with this email already exists",
                    },
                )

            if payload.password:
                update_row(
                    conn,
                    Customer,
                    existing["id"],
                    {"password_hash": hash_password(payload.password), "verified": True},
                )
                customer = get_customer_or_404(conn, existing["id"])
                logger.info("guest_upgraded", customer_id=existing["id"])
                return JSONResponse(
                    status_code=status.HTTP_200_OK,
                    content={
                        "success": True,
                        "type": "UPGRADED",
                        "customer": jsonable_encoder(public_customer(customer)),
                    },
                )

        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={
                "success": True,
                "type": "EXISTING",
                "customer": jsonable_encoder(public_customer(existing)),
            },
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("registration_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/auth/find-customer")
def find_customer(payload: FindCustomerPayload, engine: Engine = Depends(get_db_engine)) -> Any:
    """Look a customer up by email (used by checkout to prefill details)."""
    try:
        with engine.connect() as conn:
            customer = get_customer_by_email(conn, payload.email)
        if customer is None:
            raise not_found("Customer not found")
        return {"success": True, "customer": public_customer(customer)}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("find_customer_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/auth/update-customer")
def update_customer(
    payload: UpdateCustomerPayload, engine: Engine = Depends(get_db_engine)
) -> Any:
    """Apply a partial profile update; only fields present in the body change."""
    try:
        update_data = payload.model_dump(exclude_unset=True, exclude={"customer_id"})

        with engine.begin() as conn:
            get_customer_or_404(conn, payload.customer_id)
            if update_data:
                update_row(conn, Customer, payload.customer_id, update_data)
            customer = get_customer_or_404(conn, payload.customer_id)

        logger.info(
            "customer_updated", customer_id=payload.customer_id, fields=sorted(update_data)
        )
        return {"success": True, "customer": public_customer(customer)}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("customer_update_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/auth/set-password")
def set_password(payload: SetPasswordPayload, engine: Engine = Depends(get_db_engine)) -> Any:
    """
    Give a guest account a password and mark it verified.

    Returns:
        404 if no customer has the email, 409 if a password is already set
    """
    try:
        with engine.begin() as conn:
            customer = get_customer_by_email(conn, payload.email)
            if customer is None:
                raise not_found("Customer not found")
            if customer["password_hash"]:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Password already set for this account",
                )
            update_row(
                conn,
                Customer,
                customer["id"],
                {"password_hash": hash_password(payload.password), "verified": True},
            )
            customer = get_customer_or_404(conn, customer["id"])

        logger.info("customer_password_set", customer_id=customer["id"])
        return {"success": True, "customer": public_customer(customer)}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("set_password_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
