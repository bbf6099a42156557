# backend/exceptions.py

"""
API EXCEPTION HANDLER

Translates service-layer failures into JSON responses:
- InventoryServiceError subclasses -> their own status_code
- Django ValidationError (model clean / immutability guards) -> 400
- ProtectedError (row still referenced by orders or ledger entries) -> 400
- IntegrityError (unique number taken by a concurrent write) -> 400
- everything else -> DRF default handler (401/403/404/405/...)

Anything DRF does not handle is left to Django, which answers 500;
those are logged here with the traceback first.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from products.services.exceptions import InventoryServiceError

logger = logging.getLogger("inventory.api")


def _django_validation_detail(exc: DjangoValidationError):
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    return exc.messages


def api_exception_handler(exc, context):
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else None

    if isinstance(exc, InventoryServiceError):
        logger.info(
            "Domain error returned to client",
            extra={"view": view_name, "error": exc.__class__.__name__},
        )
        return Response({"detail": exc.message}, status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        return Response(
            {"detail": _django_validation_detail(exc)},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, ProtectedError):
        return Response(
            {"detail": "Record is referenced by existing orders or stock history and cannot be deleted."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, IntegrityError):
        logger.warning("Write conflict returned to client", extra={"view": view_name})
        return Response(
            {"detail": "The record conflicts with a concurrent change. Retry the request."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is None:
        logger.exception("Unhandled API error", extra={"view": view_name})
    return response
