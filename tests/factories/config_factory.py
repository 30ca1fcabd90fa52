"""
Factory per creare configurazioni dei gateway DPD
"""
from typing import Any, Dict

from dpd_gateway.schemas.dpd_configuration_schema import GatewayConfig


def create_gateway_config_data(
    service: str = "Classic",
    customer_number: str = "1234",
    center_number: str = "077",
    country_code: str = "250",
    **kwargs
) -> Dict[str, Any]:
    """
    Crea dati di configurazione per un gateway.

    Args:
        service: Codice servizio DPD
        **kwargs: Campi aggiuntivi (label_type, admin_email, ...)
    """
    return {
        "customer_number": customer_number,
        "center_number": center_number,
        "country_code": country_code,
        "service": service,
        "eprint": {"login": "eprint-user", "password": "eprint-secret"},
        **kwargs
    }


def create_gateway_config(**kwargs) -> GatewayConfig:
    """Crea un GatewayConfig"""
    data = create_gateway_config_data(**kwargs)
    return GatewayConfig.model_validate(data)
