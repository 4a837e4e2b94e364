"""Domain errors raised by the crud layer.

Each carries the HTTP status it maps to so ``main.py`` can translate it with a
single exception handler.
"""


class LabError(Exception):
    status_code = 400

    def __init__(self, detail: str, status_code: int = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(LabError):
    status_code = 400


class InsufficientStock(LabError):
    status_code = 400

    def __init__(self, item_id: int, requested: int, available: int, detail: str = None):
        super().__init__(
            detail or f"Insufficient stock for item {item_id}: requested {requested}, available {available}"
        )
        self.item_id = item_id
        self.requested = requested
        self.available = available


class InvalidState(LabError):
    status_code = 409


class AlreadyReturned(InvalidState):
    pass


class NotFound(LabError):
    status_code = 404


class Forbidden(LabError):
    status_code = 403


class DuplicateError(LabError):
    status_code = 400
