from .errors import LabError, ValidationError, InsufficientStock, InvalidState, AlreadyReturned, NotFound, Forbidden, DuplicateError
from .ledger import allocate, deallocate, issue_borrowing, return_borrowing, issue_item, return_item
from .history import record, list_history
