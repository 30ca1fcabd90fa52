import httpx
import json
from typing import Any, Dict, Optional, Type, TypeVar
import logging

from pydantic import BaseModel, ValidationError

from dpd_gateway.core.settings import DpdSettings, get_dpd_settings
from dpd_gateway.schemas.dpd_configuration_schema import GatewayConfig
from dpd_gateway.schemas.dpd_relay_schema import (
    GetPudoDetailsRequest,
    GetPudoDetailsResponse,
    GetPudoListRequest,
    GetPudoListResponse,
)
from dpd_gateway.schemas.dpd_shipment_schema import (
    CollectionRequest,
    CollectionRequestResult,
    LabelResult,
    MultiShipmentRequest,
    MultiShipmentResult,
    ReceiveLabelRequest,
    ReverseShipmentLabelRequest,
    ReverseShipmentResult,
    ShipmentWithLabelsResult,
    StdShipmentLabelRequest,
    TerminateCollectionRequest,
)
from dpd_gateway.services.interfaces.eprint_transport_interface import IEPrintTransport
from dpd_gateway.services.interfaces.pudo_transport_interface import IPudoTransport

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


class DpdApiError(Exception):
    """Failure of a DPD web service call"""

    def __init__(self, message: str, code: Optional[Any] = None):
        self.message = message
        self.code = code
        super().__init__(message)


class _DpdHttpClient:
    """Shared HTTP plumbing of the DPD web services (one POST per operation, no retry)"""

    SERVICE = "DPD"

    def __init__(self, base_url: str, http_client: httpx.Client, debug: bool = False):
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client
        self.debug = debug

    def close(self) -> None:
        self.http_client.close()

    def _call(
        self,
        operation: str,
        payload: Dict[str, Any],
        result_model: Optional[Type[ResultT]] = None,
        result_key: Optional[str] = None
    ) -> Optional[ResultT]:
        """
        Execute a remote operation

        Args:
            operation: Remote procedure name (appended to the base URL)
            payload: Request body
            result_model: Model of the reply (None for operations without result)
            result_key: Envelope key holding the result, if any

        Returns:
            Parsed result model

        Raises:
            DpdApiError: On transport, HTTP or carrier error
        """
        url = f"{self.base_url}/{operation}"

        logger.info(f"{self.SERVICE} {operation} Request URL: {url}")
        logger.debug(f"{self.SERVICE} {operation} Request Payload: {json.dumps(payload, indent=2, ensure_ascii=False, default=str)}")

        try:
            response = self.http_client.post(url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"{self.SERVICE} {operation} request timeout: {e}")
            raise DpdApiError(f"{self.SERVICE} {operation} request timeout", "TIMEOUT") from e
        except httpx.RequestError as e:
            logger.error(f"{self.SERVICE} {operation} request error: {e}")
            raise DpdApiError(f"{self.SERVICE} {operation} request error: {e}", "REQUEST_ERROR") from e

        logger.info(f"{self.SERVICE} {operation} Response Status: {response.status_code}")

        response_data = self._parse_json(operation, response)

        if self.debug:
            logger.info(f"{self.SERVICE} {operation} Response JSON: {json.dumps(response_data, indent=2, ensure_ascii=False)}")

        # Check for HTTP errors
        if response.status_code >= 400:
            error_message = self._extract_error_message(response_data)
            logger.error(f"{self.SERVICE} {operation} failed ({response.status_code}): {error_message}")
            raise DpdApiError(error_message, response.status_code)

        # Check for carrier errors in response (even if HTTP status is 200)
        self._check_response_errors(operation, response_data)

        if result_model is None:
            return None

        if result_key and isinstance(response_data, dict) and result_key in response_data:
            response_data = response_data[result_key]

        try:
            return result_model.model_validate(response_data or {})
        except ValidationError as e:
            logger.error(f"{self.SERVICE} {operation} returned an unexpected response: {e}")
            raise DpdApiError(f"{self.SERVICE} {operation} returned an unexpected response", "INVALID_RESPONSE") from e

    def _parse_json(self, operation: str, response: httpx.Response) -> Any:
        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{self.SERVICE} {operation} Response is not valid JSON: {e}")
            raise DpdApiError(
                f"{self.SERVICE} API returned invalid JSON response ({response.status_code})",
                response.status_code
            ) from e

    def _check_response_errors(self, operation: str, response_data: Any) -> None:
        """
        Check for faults in a successful HTTP reply

        Raises:
            DpdApiError: If the service returned a fault / error envelope
        """
        if not isinstance(response_data, dict):
            return

        fault = response_data.get("Fault") or response_data.get("error")
        if not fault:
            return

        if isinstance(fault, dict):
            message = fault.get("faultstring") or fault.get("message") or "Unknown DPD error"
            code = fault.get("faultcode") or fault.get("code")
        else:
            message = str(fault)
            code = None

        logger.error(f"{self.SERVICE} {operation} returned error (Code: {code}): {message}")
        raise DpdApiError(message, code)

    def _extract_error_message(self, response_data: Any) -> str:
        """Extract error message from a DPD response"""
        if isinstance(response_data, dict):
            # Try common error paths
            error_paths = [
                ["Fault", "faultstring"],
                ["error", "message"],
                ["message"],
                ["detail"],
            ]

            for path in error_paths:
                value = response_data
                try:
                    for key in path:
                        value = value[key]
                    if isinstance(value, str) and value:
                        return value
                except (KeyError, TypeError):
                    continue

        return "Unknown error"


class EPrintClient(_DpdHttpClient, IEPrintTransport):
    """DPD EPrint web service HTTP client (Basic Auth)"""

    SERVICE = "DPD EPrint"

    def __init__(
        self,
        config: GatewayConfig,
        settings: Optional[DpdSettings] = None,
        http_client: Optional[httpx.Client] = None
    ):
        settings = settings or get_dpd_settings()
        base_url = settings.dpd_eprint_base_url_test if config.test else settings.dpd_eprint_base_url_prod

        if http_client is None:
            http_client = httpx.Client(
                auth=httpx.BasicAuth(config.eprint.login, config.eprint.password),
                headers=self._get_headers(),
                verify=config.ssl_check,
                timeout=settings.dpd_timeout,
            )

        super().__init__(base_url, http_client, config.debug)

    @staticmethod
    def _get_headers() -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json"
        }

    @staticmethod
    def _payload(request: BaseModel) -> Dict[str, Any]:
        return request.model_dump(mode="json", by_alias=True, exclude_none=True)

    def create_shipment_with_labels(self, request: StdShipmentLabelRequest) -> ShipmentWithLabelsResult:
        return self._call(
            "CreateShipmentWithLabelsBc", self._payload(request),
            ShipmentWithLabelsResult, "CreateShipmentWithLabelsBcResult"
        )

    def create_multi_shipment(self, request: MultiShipmentRequest) -> MultiShipmentResult:
        return self._call(
            "CreateMultiShipmentBc", self._payload(request),
            MultiShipmentResult, "CreateMultiShipmentBcResult"
        )

    def get_label(self, request: ReceiveLabelRequest) -> LabelResult:
        return self._call(
            "GetLabelBc", self._payload(request),
            LabelResult, "GetLabelBcResult"
        )

    def create_collection_request(self, request: CollectionRequest) -> CollectionRequestResult:
        return self._call(
            "CreateCollectionRequestBc", self._payload(request),
            CollectionRequestResult, "CreateCollectionRequestBcResult"
        )

    def terminate_collection_request(self, request: TerminateCollectionRequest) -> None:
        self._call("TerminateCollectionRequestBc", self._payload(request))

    def create_reverse_shipment_with_labels(self, request: ReverseShipmentLabelRequest) -> ReverseShipmentResult:
        return self._call(
            "CreateReverseInverseShipmentWithLabels", self._payload(request),
            ReverseShipmentResult, "CreateReverseInverseShipmentWithLabelsResult"
        )


class PudoClient(_DpdHttpClient, IPudoTransport):
    """DPD PUDO (relay points) web service HTTP client"""

    SERVICE = "DPD PUDO"

    def __init__(
        self,
        config: GatewayConfig,
        settings: Optional[DpdSettings] = None,
        http_client: Optional[httpx.Client] = None
    ):
        settings = settings or get_dpd_settings()
        self.carrier = config.pudo.carrier
        self.key = config.pudo.key

        if http_client is None:
            http_client = httpx.Client(
                headers={"Accept": "application/json"},
                verify=config.ssl_check,
                timeout=settings.dpd_timeout,
            )

        super().__init__(settings.dpd_pudo_base_url, http_client, config.debug)

    def _payload(self, request: BaseModel) -> Dict[str, Any]:
        # PUDO authenticates each call with the carrier id and key
        payload = {"carrier": self.carrier, "key": self.key}
        payload.update(request.model_dump(mode="json", by_alias=True, exclude_none=True))
        return payload

    def get_pudo_list(self, request: GetPudoListRequest) -> GetPudoListResponse:
        return self._call(
            "GetPudoList", self._payload(request),
            GetPudoListResponse, "GetPudoListResult"
        )

    def get_pudo_details(self, request: GetPudoDetailsRequest) -> GetPudoDetailsResponse:
        return self._call(
            "GetPudoDetails", self._payload(request),
            GetPudoDetailsResponse, "GetPudoDetailsResult"
        )
