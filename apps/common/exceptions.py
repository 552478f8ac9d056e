import logging

from django.db import InterfaceError, OperationalError
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ValidationError(exceptions.ValidationError):
    """Malformed or inconsistent input. ``detail`` maps field name -> reason."""


class NotFoundError(exceptions.NotFound):
    default_detail = "Registro nao encontrado."


class StorageUnavailableError(exceptions.APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Banco de dados indisponivel."
    default_code = "storage_unavailable"


STORAGE_ERRORS = (OperationalError, InterfaceError)


def api_exception_handler(exc, context):
    if isinstance(exc, STORAGE_ERRORS):
        view = context.get("view")
        logger.error("Storage unavailable in %s: %s", view.__class__.__name__ if view else "view", exc)
        exc = StorageUnavailableError()

    response = exception_handler(exc, context)
    if response is None:
        return response

    if isinstance(response.data, dict):
        detail = response.data.get("detail", "Request failed")
        fields = {k: v for k, v in response.data.items() if k != "detail"}
    else:
        detail = "Request failed"
        fields = {}

    response.data = {
        "code": getattr(exc, "default_code", "error"),
        "detail": detail,
        "fields": fields,
    }
    return response
