# backend/utils/errors.py
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session


class InventoryError(Exception):
    """Base class for failures reported to the client as ``{"error": message}``."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError):
    """Missing or invalid required input."""

    status_code = 400


class NotFoundError(InventoryError):
    """The requested id does not resolve."""

    status_code = 404


class InsufficientStockError(InventoryError):
    """An exit asks for more than the product has on hand."""

    status_code = 400


class StorageError(InventoryError):
    """Database or blob store failure."""

    status_code = 500


@contextmanager
def storage_guard(db: Session):
    """Roll back and re-raise database failures as StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        detail = getattr(exc, "orig", None) or exc
        raise StorageError(str(detail)) from exc
