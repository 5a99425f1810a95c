"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidTransactionBatchError(DomainException, TypeError):
    """Transaction batch is not a collection of records"""

    pass


class SheetAPIError(DomainException):
    """Spreadsheet store returned an error or is unavailable"""

    pass
