"""
Exception hierarchy shared across TripleORM packages.
"""

from __future__ import annotations


class PersistenceError(RuntimeError):
    """Base error for persistence failures raised by a Session."""


class IllegalStateError(PersistenceError):
    """Raised when an operation is attempted on a closed session."""


class TransactionError(IllegalStateError):
    """Raised on invalid transaction state transitions."""


class ValidationError(PersistenceError, ValueError):
    """Base error for entities rejected before any store mutation."""


class NullEntityError(ValidationError):
    pass


class NotPersistableError(ValidationError):
    pass


class MissingRdfClassError(ValidationError):
    pass


class MissingIdentityError(ValidationError):
    pass


class IdentityConflictError(PersistenceError):
    """Raised when persisting an identity that already exists in the store."""


class NotFoundError(PersistenceError):
    pass


class EntityNotFoundError(NotFoundError):
    pass


class NamedQueryNotFoundError(NotFoundError):
    pass


class NonUniqueResultError(PersistenceError):
    pass


class MappingError(PersistenceError):
    """Raised when an object cannot be converted to or from graph data."""


class StoreError(PersistenceError):
    """Base error for graph store failures."""


class StoreConfigurationError(StoreError):
    """Raised when store configuration is invalid."""


class StoreConnectionError(StoreError):
    """Raised when establishing or using a store connection fails."""


class StoreExecutionError(StoreError):
    """Raised when reading or writing statements fails."""


class StoreTransactionError(StoreError):
    """Raised when native store transaction operations fail."""


class WriteVerificationError(PersistenceError):
    """Raised when a written entity cannot be found immediately afterwards."""


class DeleteVerificationError(PersistenceError):
    """Raised when a deleted entity can still be found immediately afterwards."""


class UnsupportedOperationError(PersistenceError, NotImplementedError):
    pass


class UnsupportedConfigurationError(PersistenceError, ValueError):
    pass


class QuerySyntaxError(ValueError):
    """Raised when query text cannot be parsed."""


class ModelConfigurationError(Exception):
    """Raised when an entity class is misconfigured."""


__all__ = [
    "PersistenceError",
    "IllegalStateError",
    "TransactionError",
    "ValidationError",
    "NullEntityError",
    "NotPersistableError",
    "MissingRdfClassError",
    "MissingIdentityError",
    "IdentityConflictError",
    "NotFoundError",
    "EntityNotFoundError",
    "NamedQueryNotFoundError",
    "NonUniqueResultError",
    "MappingError",
    "StoreError",
    "StoreConfigurationError",
    "StoreConnectionError",
    "StoreExecutionError",
    "StoreTransactionError",
    "WriteVerificationError",
    "DeleteVerificationError",
    "UnsupportedOperationError",
    "UnsupportedConfigurationError",
    "QuerySyntaxError",
    "ModelConfigurationError",
]
