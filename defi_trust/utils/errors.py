"""
Error handling utilities for the DeFi trust engine.

This module defines the exception hierarchy shared by the engine, the
providers and the API layer. Every error carries a machine-readable code
and the HTTP status the API layer should answer with.
"""

from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes for the trust engine API."""

    # General errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # External collaborators
    PROVIDER_ERROR = "PROVIDER_ERROR"
    DATA_PARSING_ERROR = "DATA_PARSING_ERROR"
    QUOTE_ERROR = "QUOTE_ERROR"

    # Trust gating
    UNSAFE_CONTRACT = "UNSAFE_CONTRACT"
    UNSAFE_TRANSACTION = "UNSAFE_TRANSACTION"


class ErrorResponse(BaseModel):
    """Standard error response model."""

    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class TrustEngineError(Exception):
    """Base exception for all trust engine errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new trust engine error.

        Args:
            message: Error message
            code: Error code
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.code = code
        self.status_code = int(status_code)
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        return ErrorResponse(
            code=self.code.value,
            message=self.message,
            details=self.details
        ).model_dump()


class ValidationError(TrustEngineError):
    """Malformed address or empty input supplied by a caller."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=HTTPStatus.BAD_REQUEST,
            details=details
        )


class ResourceNotFoundError(TrustEngineError):
    """Exception for resource not found errors."""

    def __init__(
        self,
        message: str,
        resource_type: str,
        resource_id: str
    ):
        super().__init__(
            message=message,
            code=ErrorCode.RESOURCE_NOT_FOUND,
            status_code=HTTPStatus.NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ConfigurationError(TrustEngineError):
    """Exception for invalid configuration values."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR,
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            details=details
        )


class ProviderError(TrustEngineError):
    """A signal or activity provider failed to produce data for an address."""

    def __init__(
        self,
        message: str,
        provider: str,
        address: Optional[str] = None,
        code: ErrorCode = ErrorCode.PROVIDER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        error_details["provider"] = provider
        if address is not None:
            error_details["address"] = address

        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.BAD_GATEWAY,
            details=error_details
        )
        self.provider = provider
        self.address = address


class DataParsingError(ProviderError):
    """A provider answered with a payload that does not fit the model."""

    def __init__(
        self,
        message: str,
        provider: str,
        address: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            provider=provider,
            address=address,
            code=ErrorCode.DATA_PARSING_ERROR,
            details=details
        )


class QuoteError(TrustEngineError):
    """The DEX quote aggregator could not be queried."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.QUOTE_ERROR,
            status_code=HTTPStatus.BAD_GATEWAY,
            details=details
        )


class UnsafeInteractionError(TrustEngineError):
    """A swap was refused because one of its tokens is flagged."""

    def __init__(
        self,
        message: str,
        address: str,
        reason: str
    ):
        super().__init__(
            message=message,
            code=ErrorCode.UNSAFE_CONTRACT,
            status_code=HTTPStatus.FORBIDDEN,
            details={"address": address, "reason": reason}
        )


class UnsafeTransactionError(TrustEngineError):
    """A quote failed transaction safety verification."""

    def __init__(
        self,
        message: str,
        warnings: list
    ):
        super().__init__(
            message=message,
            code=ErrorCode.UNSAFE_TRANSACTION,
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            details={"warnings": list(warnings)}
        )
