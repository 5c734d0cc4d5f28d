"""
Custom exceptions for the storage layer.

These exceptions provide clear error categories for store operations:
- DatabaseError: Base exception for all storage errors
- ConnectionError: Connection or subscription failures
- ConfigurationError: Missing or invalid configuration
- SchemaError: Missing tables or schema initialization issues
- QueryError: Read or upsert failures
"""


class DatabaseError(Exception):
    """Base exception for all storage errors."""
    pass


class ConnectionError(DatabaseError):
    """Failed to connect to or subscribe on the store."""
    pass


class ConfigurationError(DatabaseError):
    """Missing or invalid store configuration."""
    pass


class SchemaError(DatabaseError):
    """Error initializing or verifying schema."""
    pass


class QueryError(DatabaseError):
    """Error executing a query."""
    pass
