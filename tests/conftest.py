"""
Fixture principali per i test del gateway DPD
"""
from decimal import Decimal
from typing import Any, Callable, List, Optional
from unittest.mock import MagicMock

import pytest

from dpd_gateway.core.settings import DpdSettings
from dpd_gateway.factories.dpd_platform import DpdPlatform
from dpd_gateway.models.address import Address
from dpd_gateway.models.shipment import ShipmentRecord
from dpd_gateway.services.interfaces.address_resolver_interface import IAddressResolver
from dpd_gateway.services.interfaces.eprint_transport_interface import IEPrintTransport
from dpd_gateway.services.interfaces.pudo_transport_interface import IPudoTransport
from dpd_gateway.services.interfaces.shipment_calculator_interface import IShipmentCalculator
from dpd_gateway.services.interfaces.shipment_persister_interface import IShipmentPersister
from dpd_gateway.services.shipments.dpd_gateway import DpdGateway
from tests.factories.address_factory import create_address, create_sender_address
from tests.factories.config_factory import create_gateway_config_data


# ============================================================================
# Collaborator fakes
# ============================================================================

class InMemoryAddressResolver(IAddressResolver):
    """
    Resolver in memoria.

    Non strict: restituisce il relay point della spedizione se presente.
    """

    def __init__(self, receiver: Address, sender: Address):
        self.receiver = receiver
        self.sender = sender
        self.calls: List[tuple] = []

    def resolve_receiver_address(self, shipment: ShipmentRecord, strict: bool = False) -> Address:
        self.calls.append(("receiver", shipment.number, strict))
        relay_point = shipment.get_owner().relay_point
        if not strict and relay_point is not None:
            return relay_point
        return self.receiver

    def resolve_sender_address(self, shipment: ShipmentRecord, strict: bool = False) -> Address:
        self.calls.append(("sender", shipment.number, strict))
        return self.sender


class PersisterSpy(IShipmentPersister):
    """Registra le spedizioni salvate"""

    def __init__(self):
        self.persisted: List[ShipmentRecord] = []

    def persist(self, shipment: ShipmentRecord) -> None:
        self.persisted.append(shipment)

    def clear(self):
        self.persisted.clear()


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def settings() -> DpdSettings:
    """Settings isolati dal file .env"""
    return DpdSettings(
        _env_file=None,
        dpd_admin_email="admin@example.org",
        dpd_eprint_base_url_prod="https://eprint.example.test/prod",
        dpd_eprint_base_url_test="https://eprint.example.test/test",
        dpd_pudo_base_url="https://pudo.example.test",
    )


@pytest.fixture
def receiver_address() -> Address:
    return create_address(mobile="0612345678")


@pytest.fixture
def sender_address() -> Address:
    return create_sender_address()


@pytest.fixture
def address_resolver(receiver_address, sender_address) -> InMemoryAddressResolver:
    return InMemoryAddressResolver(receiver_address, sender_address)


@pytest.fixture
def persister() -> PersisterSpy:
    return PersisterSpy()


@pytest.fixture
def calculator() -> MagicMock:
    calculator = MagicMock(spec=IShipmentCalculator)
    calculator.calculate_weight.return_value = Decimal("3.75")
    calculator.calculate_goods_value.return_value = Decimal("149.9")
    return calculator


@pytest.fixture
def eprint() -> MagicMock:
    """Trasporto EPrint finto (nessuna chiamata HTTP)"""
    return MagicMock(spec=IEPrintTransport)


@pytest.fixture
def pudo() -> MagicMock:
    """Trasporto PUDO finto (nessuna chiamata HTTP)"""
    return MagicMock(spec=IPudoTransport)


@pytest.fixture
def platform(settings) -> DpdPlatform:
    return DpdPlatform(settings=settings)


@pytest.fixture
def make_gateway(
    platform, address_resolver, persister, calculator, eprint, pudo
) -> Callable[..., DpdGateway]:
    """
    Factory di gateway DPD collegati ai fake.

    Usage: make_gateway("Relay", label_type="PDF")
    """
    def _factory(service: str = "Classic", **config: Any) -> DpdGateway:
        data = create_gateway_config_data(service=service, **config)
        return platform.create_gateway(
            f"dpd_{service.lower()}",
            data,
            address_resolver,
            persister,
            calculator,
            eprint=eprint,
            pudo=pudo,
        )

    return _factory
