"""
Factory for creating DPD gateways based on the configured service code
"""
from typing import Any, Dict, Optional
import logging

from pydantic import ValidationError

from dpd_gateway.core.exceptions import ConfigurationException, ErrorCode
from dpd_gateway.core.settings import DpdSettings, get_dpd_settings
from dpd_gateway.schemas.dpd_configuration_schema import PLATFORM_NAME, DpdService, GatewayConfig, LabelTypeCode
from dpd_gateway.services.interfaces.address_resolver_interface import IAddressResolver
from dpd_gateway.services.interfaces.eprint_transport_interface import IEPrintTransport
from dpd_gateway.services.interfaces.pudo_transport_interface import IPudoTransport
from dpd_gateway.services.interfaces.shipment_calculator_interface import IShipmentCalculator
from dpd_gateway.services.interfaces.shipment_persister_interface import IShipmentPersister
from dpd_gateway.services.shipments.dpd_gateway import DpdGateway

logger = logging.getLogger(__name__)


class DpdPlatform:
    """DPD shipment platform: builds one gateway per configured service"""

    NAME = PLATFORM_NAME

    DEFAULTS: Dict[str, Any] = {
        "label_type": LabelTypeCode.PNG,
    }

    NESTED_KEYS = ("eprint", "pudo")

    def __init__(self, settings: Optional[DpdSettings] = None, config: Optional[Dict[str, Any]] = None):
        self.settings = settings or get_dpd_settings()
        # Platform level config, overridden by each gateway config
        self.config = config if config is not None else self.settings.to_platform_config()

    def get_name(self) -> str:
        return self.NAME

    def build_config(self, config: Dict[str, Any]) -> GatewayConfig:
        """
        Merge defaults, platform and gateway config and validate the result

        Raises:
            ConfigurationException: If the service is unknown or a field is missing / invalid
        """
        merged = dict(self.DEFAULTS)
        merged.update(self.config)
        for key, value in config.items():
            # Credential blocks are merged key by key over the platform ones
            if key in self.NESTED_KEYS and isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value

        DpdService.is_valid(merged.get("service"))

        try:
            return GatewayConfig.model_validate(merged)
        except ValidationError as e:
            errors = [
                {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"]}
                for error in e.errors()
            ]
            logger.error(f"Invalid DPD gateway config: {errors}")
            raise ConfigurationException(
                "Invalid DPD gateway configuration",
                ErrorCode.CONFIGURATION_ERROR,
                {"errors": errors}
            ) from e

    def create_gateway(
        self,
        name: str,
        config: Dict[str, Any],
        address_resolver: IAddressResolver,
        persister: IShipmentPersister,
        calculator: IShipmentCalculator,
        eprint: Optional[IEPrintTransport] = None,
        pudo: Optional[IPudoTransport] = None
    ) -> DpdGateway:
        """
        Create the gateway of the configured service

        Args:
            name: Gateway name
            config: Gateway config (customer_number, center_number, country_code, service, ...)
            address_resolver: Receiver / sender addresses resolution
            persister: Shipment persistence
            calculator: Shipment weight and goods value
            eprint: EPrint transport (an HTTP client is built when omitted)
            pudo: PUDO transport (an HTTP client is built for relay services when omitted)

        Returns:
            DpdGateway bound to the service variant
        """
        gateway_config = self.build_config(config)

        logger.info(f"Creating DPD gateway '{name}' ({gateway_config.service.value})")

        return DpdGateway(
            name,
            gateway_config,
            address_resolver,
            persister,
            calculator,
            eprint=eprint,
            pudo=pudo,
            settings=self.settings,
        )
