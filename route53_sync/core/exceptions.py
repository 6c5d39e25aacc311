"""
Exceptions raised by the synchronization core.

Lock and remote failures surface as Route53ClientError, bad input
(unknown modes, unusable credentials) as ConfigurationError.
"""


class Route53ClientError(RuntimeError):
    """Raised when a synchronization operation cannot proceed."""

    @classmethod
    def lock_acquisition_failed(cls, operation: str) -> "Route53ClientError":
        return cls(f"Cannot acquire lock for {operation} synchronization")

    @classmethod
    def sync_operation_failed(cls, operation: str, reason: str) -> "Route53ClientError":
        return cls(f"Route53 {operation} operation failed: {reason}")


class ConfigurationError(ValueError):
    """Raised when configuration is missing, unsupported or invalid."""

    @classmethod
    def unsupported_credentials_type(cls, credentials_type: str) -> "ConfigurationError":
        return cls(f"Unsupported credentials type: {credentials_type}")

    @classmethod
    def unsupported_synchronization_mode(cls, mode: str) -> "ConfigurationError":
        return cls(f"Unsupported synchronization mode: {mode}")

    @classmethod
    def invalid_configuration(cls, parameter: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration for '{parameter}': {reason}")
