"""
Prometheus metrics for bookings, pricing, payments and uploads.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Metric Types:
    - Counter: Cumulative metrics that only increase (e.g., bookings created)
    - Histogram: Observations bucketed by value (e.g., gateway latency)

Example:
    >>> from car_rental.metrics import bookings_created
    >>> bookings_created.labels(payment_type="online").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Booking Metrics
# =============================================================================

bookings_created = Counter(
    "car_rental_bookings_created_total",
    "Total number of bookings created",
    ["payment_type"],
)
"""
Counter for created bookings.

Labels:
    payment_type: online or arrival
"""

booking_transitions = Counter(
    "car_rental_booking_transitions_total",
    "Booking status changes applied or rejected",
    ["source", "result"],
)
"""
Counter for booking status transitions.

Labels:
    source: callback, verify or admin
    result: applied, unchanged or rejected
"""

# =============================================================================
# Pricing Metrics
# =============================================================================

price_quotes = Counter(
    "car_rental_price_quotes_total",
    "Price resolutions performed",
    ["status"],
)
"""
Counter for price resolutions.

Labels:
    status: success or not_configured
"""

repricing_operations = Counter(
    "car_rental_repricing_operations_total",
    "Bulk seasonal repricing operations",
    ["operation"],
)
"""
Counter for bulk repricing.

Labels:
    operation: percent, reset_to_base, snapshot_base or grid
"""

repriced_rows = Counter(
    "car_rental_repriced_rows_total",
    "Seasonal pricing rows changed by bulk operations",
    ["operation"],
)

# =============================================================================
# Payment Metrics
# =============================================================================

payment_events = Counter(
    "car_rental_payment_events_total",
    "Payment flow events (orders, verifications, callbacks)",
    ["event", "status"],
)
"""
Counter for payment events.

Labels:
    event: create_order, verify_payment, callback or admin_update
    status: success, failed or duplicate
"""

gateway_requests = Counter(
    "car_rental_gateway_requests_total",
    "Total payment gateway HTTP requests made",
    ["endpoint", "status_code"],
)

gateway_latency = Histogram(
    "car_rental_gateway_latency_seconds",
    "Payment gateway request latency in seconds",
    ["endpoint"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf")),
)
"""
Histogram for payment gateway latency.

Labels:
    endpoint: register.do or getOrderStatusExtended.do

Buckets: 0.1s, 0.25s, 0.5s, 1s, 2.5s, 5s, 10s, +Inf
"""

# =============================================================================
# Upload Metrics
# =============================================================================

uploads_total = Counter(
    "car_rental_uploads_total",
    "Image uploads handled",
    ["kind", "status"],
)
"""
Counter for image uploads.

Labels:
    kind: vehicle, rental_option or content
    status: success or rejected
"""
