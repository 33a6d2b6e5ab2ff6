"""Errors raised while dispatching push notifications."""


class PushDispatchError(Exception):
    """Base class for every push pipeline failure."""


class ValidationError(PushDispatchError, ValueError):
    """The send request is missing required fields or has malformed values."""


class AuthError(PushDispatchError):
    """The caller did not present the expected shared secret."""


class PersistenceError(PushDispatchError):
    """A notification record could not be written to the database."""


class InvalidTokenError(PushDispatchError, ValueError):
    """The recipient's device token is not a well-formed push token."""


class GatewayError(PushDispatchError):
    """The push gateway rejected or failed a batch after every attempt."""


class ReceiptReconciliationError(PushDispatchError):
    """Receipts could not be fetched from the push gateway."""


__all__ = [
    "AuthError",
    "GatewayError",
    "InvalidTokenError",
    "PersistenceError",
    "PushDispatchError",
    "ReceiptReconciliationError",
    "ValidationError",
]
