from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DataError, IntegrityError
from django.http import Http404
from pydantic import ValidationError as PydanticValidationError
from rest_framework.exceptions import MethodNotAllowed, ParseError

from modules.core.exceptions import (
    ApiError,
    ConflictError,
    InternalError,
    NotFoundError,
    RequestValidationError,
    error_payload,
    join_messages,
    normalize_exception,
)
from modules.products.dtos import CreateProductDTO

pytestmark = pytest.mark.unit


def _pydantic_error() -> PydanticValidationError:
    with pytest.raises(PydanticValidationError) as exc_info:
        CreateProductDTO(
            name="ab",
            description="short",
            price=Decimal("10"),
            category="toys",
        )
    return exc_info.value


class TestTaxonomy:
    def test_status_codes(self):
        assert RequestValidationError.status_code == 400
        assert NotFoundError.status_code == 404
        assert ConflictError.status_code == 409
        assert InternalError.status_code == 500

    def test_default_message(self):
        assert NotFoundError().message == "Resource not found"
        assert NotFoundError("Gone").message == "Gone"


class TestNormalizeException:
    def test_api_error_passes_through(self):
        error = ConflictError("taken")
        assert normalize_exception(error) is error

    def test_pydantic_error_joins_every_violation(self):
        error = normalize_exception(_pydantic_error())
        assert isinstance(error, RequestValidationError)
        assert "Name must be between 3 and 100 characters." in error.message
        assert "Description must be between 10 and 500 characters." in error.message
        assert "Invalid category." in error.message
        assert error.message.count("; ") == 2

    def test_django_validation_error(self):
        exc = DjangoValidationError({"price": ["Ensure this value is valid."]})
        error = normalize_exception(exc)
        assert error.status_code == 400
        assert error.message == "price: Ensure this value is valid."

    def test_unique_integrity_error_is_conflict(self):
        exc = IntegrityError("UNIQUE constraint failed: products.name")
        assert normalize_exception(exc).status_code == 409

    def test_other_integrity_error_is_bad_request(self):
        exc = IntegrityError("CHECK constraint failed: products_price_non_negative")
        assert normalize_exception(exc).status_code == 400

    def test_data_error_is_bad_request(self):
        assert normalize_exception(DataError("value too long")).status_code == 400

    def test_overflow_error_is_bad_request(self):
        error = normalize_exception(OverflowError("Python int too large"))
        assert error.status_code == 400
        assert error.message == "Numeric value out of range"

    def test_http404_is_not_found(self):
        assert normalize_exception(Http404()).status_code == 404

    def test_drf_exception_keeps_status(self):
        error = normalize_exception(MethodNotAllowed("POST"))
        assert error.status_code == 405
        assert "POST" in error.message

    def test_parse_error_is_bad_request(self):
        assert normalize_exception(ParseError()).status_code == 400

    def test_unknown_exception_is_internal(self):
        error = normalize_exception(RuntimeError("boom"))
        assert isinstance(error, InternalError)
        assert error.message == "Internal server error"


class TestErrorPayload:
    def test_no_stack_outside_debug(self, settings):
        settings.DEBUG = False
        payload = error_payload(NotFoundError(), NotFoundError())
        assert payload == {"success": False, "message": "Resource not found"}

    def test_stack_in_debug(self, settings):
        settings.DEBUG = True
        try:
            raise RuntimeError("boom")
        except RuntimeError as exc:
            payload = error_payload(InternalError(), exc)
        assert payload["success"] is False
        assert "RuntimeError: boom" in payload["stack"]


def test_join_messages_skips_empty():
    assert join_messages(["a", "", "b"]) == "a; b"


def test_api_error_is_exception():
    assert issubclass(ApiError, Exception)
