"""
Error definitions for Camp Ecosystem.

This module defines the exception hierarchy shared by clients, services
and the HTTP layer. Every error carries a machine readable code and the
HTTP status it maps to.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for the Camp Ecosystem API."""

    # General errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Solana RPC errors
    RPC_ERROR = "RPC_ERROR"
    RPC_TIMEOUT = "RPC_TIMEOUT"
    RPC_CONNECTION_ERROR = "RPC_CONNECTION_ERROR"

    # Upstream capability errors
    CAPABILITY_NOT_SUPPORTED = "CAPABILITY_NOT_SUPPORTED"
    NO_CAPABLE_ENDPOINT = "NO_CAPABLE_ENDPOINT"
    UPSTREAM_UNREACHABLE = "UPSTREAM_UNREACHABLE"

    # Data errors
    INVALID_ACCOUNT = "INVALID_ACCOUNT"


class CampEcosystemError(Exception):
    """Base exception for all Camp Ecosystem errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new Camp Ecosystem error.

        Args:
            message: Error message
            code: Error code
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details
        }


class ValidationError(CampEcosystemError):
    """Exception for validation errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class InvalidPublicKeyError(ValidationError):
    """Exception raised when an invalid public key is provided."""

    def __init__(self, pubkey: Any):
        super().__init__(
            f"Invalid public key: {pubkey}",
            details={"pubkey": str(pubkey)}
        )
        self.code = ErrorCode.INVALID_ACCOUNT
        self.pubkey = pubkey


class ConfigurationError(CampEcosystemError):
    """Exception for configuration errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR,
            status_code=500,
            details=details
        )


class UnauthorizedError(CampEcosystemError):
    """Exception for requests without valid credentials."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            code=ErrorCode.UNAUTHORIZED,
            status_code=401
        )


class RpcError(CampEcosystemError):
    """Exception for Solana RPC errors."""

    def __init__(
        self,
        message: str,
        error_data: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.RPC_ERROR,
        status_code: int = 502
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            details={"error_data": error_data} if error_data else None
        )
        self.error_data = error_data or {}


class SolanaRpcError(RpcError):
    """Exception raised when a Solana RPC request returns an error payload."""

    @property
    def rpc_code(self) -> Optional[int]:
        """JSON-RPC error code, if the node supplied one."""
        return self.error_data.get("code")


class RpcTimeoutError(RpcError):
    """Exception raised when an RPC call exceeds its deadline."""

    def __init__(self, message: str, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            error_data=error_data,
            code=ErrorCode.RPC_TIMEOUT,
            status_code=504
        )


class RpcConnectionError(RpcError):
    """Exception raised when the RPC endpoint cannot be reached."""

    def __init__(self, message: str, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            error_data=error_data,
            code=ErrorCode.RPC_CONNECTION_ERROR,
            status_code=503
        )


class CapabilityNotSupportedError(RpcError):
    """Exception raised when an endpoint does not support a query type."""

    def __init__(self, endpoint: str, capability: str):
        super().__init__(
            f"Endpoint {endpoint} does not support {capability}",
            error_data={"endpoint": endpoint, "capability": capability},
            code=ErrorCode.CAPABILITY_NOT_SUPPORTED
        )
        self.endpoint = endpoint
        self.capability = capability


class NoCapableEndpointError(CampEcosystemError):
    """Exception raised when no candidate endpoint supports a capability."""

    def __init__(self, candidates: Any):
        super().__init__(
            "No endpoint supports the required query",
            code=ErrorCode.NO_CAPABLE_ENDPOINT,
            status_code=503,
            details={"candidates": list(candidates)}
        )


class UpstreamUnreachableError(CampEcosystemError):
    """Exception raised when every upstream endpoint is unreachable."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.UPSTREAM_UNREACHABLE,
            status_code=503,
            details=details
        )
