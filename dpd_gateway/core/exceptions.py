"""
Centralized error handling for the DPD gateway
"""
from abc import ABC
from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(Enum):
    """Standardized error codes"""
    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UNKNOWN_SERVICE = "UNKNOWN_SERVICE"
    UNKNOWN_LABEL_TYPE = "UNKNOWN_LABEL_TYPE"
    UNSUPPORTED_ACTION = "UNSUPPORTED_ACTION"

    # Precondition errors
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    UNSUPPORTED_SHIPMENT = "UNSUPPORTED_SHIPMENT"
    TRACKING_NUMBER_MISSING = "TRACKING_NUMBER_MISSING"
    VALORIZATION_MISSING = "VALORIZATION_MISSING"
    RELAY_POINT_MISSING = "RELAY_POINT_MISSING"
    MOBILE_MISSING = "MOBILE_MISSING"

    # Consistency errors
    CONSISTENCY_ERROR = "CONSISTENCY_ERROR"
    PARCEL_COUNT_MISMATCH = "PARCEL_COUNT_MISMATCH"

    # Workflow errors
    LABEL_UNAVAILABLE = "LABEL_UNAVAILABLE"

    # Infrastructure errors
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


class BaseApplicationException(Exception, ABC):
    """Base exception for the gateway"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400
    ):
        self.message = message
        self.error_code = error_code.value
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Converts the exception to a dict (API / log friendly)"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "status_code": self.status_code
        }


class ConfigurationException(BaseApplicationException):
    """Bad or missing static configuration. Fatal, never retried."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 500)


class UnsupportedActionException(ConfigurationException):
    """An action the gateway does not declare has been invoked"""

    def __init__(self, action: str, gateway: str, details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        error_details["action"] = action
        error_details["gateway"] = gateway

        super().__init__(
            f"Gateway '{gateway}' does not support the '{action}' action",
            ErrorCode.UNSUPPORTED_ACTION,
            error_details
        )


class PreconditionException(BaseApplicationException):
    """Wrong shipment shape or missing data for the requested operation"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.PRECONDITION_FAILED,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 400)


class UnsupportedShipmentException(PreconditionException):
    """The shipment is not supported by the gateway's service"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.UNSUPPORTED_SHIPMENT, details)


class ConsistencyException(BaseApplicationException):
    """Carrier reply and local shipment state have diverged"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONSISTENCY_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 500)


class LabelUnavailableException(BaseApplicationException):
    """No label could be retrieved for a shipment that requested them"""

    def __init__(
        self,
        message: str = "Failed to retrieve shipment label.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.LABEL_UNAVAILABLE, details, 502)


class ShipmentGatewayException(BaseApplicationException):
    """Remote carrier call failure, wrapping the transport error"""

    def __init__(
        self,
        message: str,
        code: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        error_details["carrier_message"] = message
        if code is not None:
            error_details["carrier_code"] = code
        self.code = code

        super().__init__(
            message,
            ErrorCode.EXTERNAL_SERVICE_ERROR,
            error_details,
            502
        )


class ExceptionFactory:
    """Factory for the gateway's recurring exceptions"""

    @staticmethod
    def unknown_service(service: Any) -> ConfigurationException:
        return ConfigurationException(
            f"Unexpected service '{service}'",
            ErrorCode.UNKNOWN_SERVICE,
            {"service": str(service)}
        )

    @staticmethod
    def unknown_label_type(label_type: Any) -> ConfigurationException:
        return ConfigurationException(
            f"Unexpected label type '{label_type}'",
            ErrorCode.UNKNOWN_LABEL_TYPE,
            {"label_type": str(label_type)}
        )

    @staticmethod
    def tracking_number_missing(number: Optional[str]) -> PreconditionException:
        return PreconditionException(
            "Shipment (or parcel) must have its tracking number.",
            ErrorCode.TRACKING_NUMBER_MISSING,
            {"number": number}
        )

    @staticmethod
    def valorization_missing(number: Optional[str]) -> PreconditionException:
        return PreconditionException(
            "Parcel's valorization must be set.",
            ErrorCode.VALORIZATION_MISSING,
            {"number": number}
        )

    @staticmethod
    def parcel_count_mismatch(expected: int, received: int) -> ConsistencyException:
        return ConsistencyException(
            "Inconsistency between response's slaves and shipment's parcels.",
            ErrorCode.PARCEL_COUNT_MISMATCH,
            {"parcels": expected, "slaves": received}
        )
