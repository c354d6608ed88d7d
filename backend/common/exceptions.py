# backend/common/exceptions.py
from __future__ import annotations

import logging

from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


# -----------------------------
# Error taxonomy
# -----------------------------
class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"


class InvalidInput(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"


# -----------------------------
# Order workflow errors
# -----------------------------
class ProductNotFound(NotFound):
    default_code = "product_not_found"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found or not published")


class ProductNotPublished(NotFound):
    default_code = "product_not_published"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found or not published")


class InsufficientStock(InvalidInput):
    default_code = "insufficient_stock"

    def __init__(self, product_name: str, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_name}. "
            f"Available: {available}, requested: {requested}"
        )


class InvalidDiscount(InvalidInput):
    default_detail = "Invalid or expired discount code"
    default_code = "invalid_discount"


class InvalidTransition(InvalidInput):
    default_code = "invalid_transition"

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change order status from {current} to {target}")


# -----------------------------
# DRF hook
# -----------------------------
def api_exception_handler(exc, context):
    """
    Delegates to DRF's handler, then covers what it leaves alone:
    stray IntegrityErrors become 409 and anything else a generic 500.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error in %s: %s", view.__class__.__name__ if view else "?", exc)
        return Response({"detail": "Resource conflicts with existing data"}, status=status.HTTP_409_CONFLICT)

    logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "?")
    return Response({"detail": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
