"""
Client for the JCC card payment gateway REST API.

Two calls are used: ``register.do`` creates an order and returns the hosted
payment page URL, ``getOrderStatusExtended.do`` reports what happened to it.
Credentials and mode are read from the environment on every call so they can
be rotated without a restart.
"""

import json
import os
import time
from typing import Any, Dict, Optional, cast

import requests
import structlog

from car_rental.metrics import gateway_latency, gateway_requests

logger = structlog.get_logger(__name__)

TEST_API_URL = "https://gateway-test.jcc.com.cy"
PROD_API_URL = "https://gateway.jcc.com.cy"
REGISTER_PATH = "/payment/rest/register.do"
STATUS_PATH = "/payment/rest/getOrderStatusExtended.do"

# ISO 4217 numeric codes expected by the gateway
CURRENCY_CODES = {"EUR": "978", "USD": "840", "GBP": "826"}

REQUEST_TIMEOUT = 15
RETRY_DELAY = 1.0
MAX_RETRIES = 2


class GatewayError(RuntimeError):
    """Raised when the gateway is unreachable, misconfigured or answers garbage."""


def get_gateway_config() -> dict[str, Any]:
    """
    Read gateway mode and credentials from the environment.

    Returns:
        dict: test_mode, api_url, login and password

    Raises:
        GatewayError: If credentials for the active mode are not set
    """
    test_mode = os.getenv("JCC_TEST_MODE", "true").lower() == "true"
    prefix = "JCC_TEST" if test_mode else "JCC_PROD"
    login = os.getenv(f"{prefix}_LOGIN")
    password = os.getenv(f"{prefix}_PASSWORD")

    if not login or not password:
        raise GatewayError(
            f"Payment gateway credentials not configured. "
            f"Set {prefix}_LOGIN and {prefix}_PASSWORD."
        )

    return {
        "test_mode": test_mode,
        "api_url": TEST_API_URL if test_mode else PROD_API_URL,
        "login": login,
        "password": password,
    }


def should_retry(res: Optional[requests.Response], err: Optional[Exception]) -> bool:
    """
    Determine whether the request should be retried based on response or error.

    Args:
        res (Optional[requests.Response]): Response object if available.
        err (Optional[Exception]): Exception raised by the request, if any.

    Returns:
        bool: True if the request should be retried, False otherwise.
    """
    if isinstance(err, (requests.Timeout, requests.ConnectionError)):
        return True
    if res is not None and 500 <= res.status_code < 600:
        return True
    return False


def post_form(path: str, data: Dict[str, str]) -> Dict[str, Any]:
    """
    POST a form-encoded request to the gateway and decode its JSON answer.

    Args:
        path (str): API path, e.g. REGISTER_PATH.
        data (Dict[str, str]): Form fields; credentials are added here.

    Returns:
        Dict[str, Any]: Decoded JSON body.

    Raises:
        GatewayError: If the gateway cannot be reached after all retries or
            does not answer with JSON.
    """
    config = get_gateway_config()
    url = f"{config['api_url']}{path}"
    endpoint = path.rsplit("/", 1)[-1]
    payload = {"userName": config["login"], "password": config["password"], **data}

    retries = 0
    while True:
        res: Optional[requests.Response] = None
        try:
            start_time = time.time()
            res = requests.post(url, data=payload, timeout=REQUEST_TIMEOUT)
            latency = time.time() - start_time

            gateway_requests.labels(endpoint=endpoint, status_code=str(res.status_code)).inc()
            gateway_latency.labels(endpoint=endpoint).observe(latency)

            res.raise_for_status()
            return cast(Dict[str, Any], res.json())

        except ValueError as err:
            body = res.text[:200] if res is not None else ""
            logger.error("gateway_non_json_response", endpoint=endpoint, body=body)
            raise GatewayError(f"Gateway returned a non-JSON response from {endpoint}") from err

        except requests.RequestException as err:
            retries += 1
            logger.warning(
                "gateway_request_failed", endpoint=endpoint, attempt=retries, error=str(err)
            )
            if retries > MAX_RETRIES or not should_retry(res, err):
                raise GatewayError(f"Gateway request to {endpoint} failed: {err}") from err
            time.sleep(RETRY_DELAY * retries)


def register_order(
    order_number: str,
    amount_cents: int,
    currency: str,
    description: str,
    return_url: str,
    fail_url: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    json_params: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Register a payment order and obtain the hosted payment page.

    Args:
        order_number (str): Merchant order number, unique per attempt.
        amount_cents (int): Amount in minor units.
        currency (str): ISO currency code (EUR, USD, GBP).
        description (str): Order description shown to the payer.
        return_url (str): Where the payer lands after a successful payment.
        fail_url (str): Where the payer lands after a failed payment.
        email (Optional[str]): Payer email.
        phone (Optional[str]): Payer phone.
        json_params (Optional[Dict[str, Any]]): Extra merchant parameters.

    Returns:
        Dict[str, Any]: ``success`` plus orderId/formUrl on success or
        errorCode/errorMessage on failure, and the raw gateway response.

    Raises:
        GatewayError: If the gateway cannot be reached.
    """
    data = {
        "amount": str(amount_cents),
        "currency": CURRENCY_CODES.get(currency.upper(), currency),
        "orderNumber": order_number,
        "description": description,
        "returnUrl": return_url,
        "failUrl": fail_url,
        "jsonParams": json.dumps(json_params or {}),
    }
    if email:
        data["email"] = email
    if phone:
        data["phone"] = phone

    result = post_form(REGISTER_PATH, data)

    if result.get("orderId") and result.get("formUrl"):
        logger.info(
            "gateway_order_registered", order_number=order_number, order_id=result["orderId"]
        )
        return {
            "success": True,
            "order_id": result["orderId"],
            "form_url": result["formUrl"],
            "raw": result,
        }

    logger.warning(
        "gateway_order_rejected",
        order_number=order_number,
        error_code=result.get("errorCode"),
        error_message=result.get("errorMessage"),
    )
    return {
        "success": False,
        "error_code": str(result.get("errorCode", "")),
        "error_message": result.get("errorMessage") or "Failed to create payment order",
        "raw": result,
    }


def get_order_status(order_id: str) -> Dict[str, Any]:
    """
    Ask the gateway what happened to an order.

    Args:
        order_id (str): Gateway order ID returned by register_order.

    Returns:
        Dict[str, Any]: order_status (int or None), amount, currency, error
        fields and the raw gateway response.

    Raises:
        GatewayError: If the gateway cannot be reached.
    """
    result = post_form(STATUS_PATH, {"orderId": order_id})

    order_status = result.get("orderStatus")
    return {
        "order_status": int(order_status) if order_status is not None else None,
        "amount": result.get("amount"),
        "currency": result.get("currency"),
        "error_code": str(result.get("errorCode", "")),
        "error_message": result.get("errorMessage"),
        "raw": result,
    }
