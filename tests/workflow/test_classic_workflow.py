"""
Test del flusso completo per il servizio DPD Classic.

I trasporti EPrint sono MagicMock: nessuna chiamata HTTP.
"""
from decimal import Decimal

import pytest

from dpd_gateway.core.exceptions import (
    ConsistencyException,
    ErrorCode,
    LabelUnavailableException,
    PreconditionException,
    ShipmentGatewayException,
    UnsupportedActionException,
    UnsupportedShipmentException,
)
from dpd_gateway.models.gateway import Capability, GatewayAction, Requirement
from dpd_gateway.models.shipment import LabelFormat, LabelSize, LabelType, ShipmentState
from dpd_gateway.schemas.dpd_shipment_schema import InsuranceType, ShipmentWithLabelsResult
from dpd_gateway.services.shipments.dpd_client import DpdApiError
from tests.factories.address_factory import create_address
from tests.factories.shipment_factory import (
    create_carrier_label,
    create_label_result,
    create_multi_parcel_shipment,
    create_multi_shipment_result,
    create_shipment,
    create_shipment_with_labels_result,
)
from tests.helpers.asserts import assert_error, assert_label_types, assert_no_remote_call


@pytest.fixture
def gateway(make_gateway):
    return make_gateway("Classic")


@pytest.mark.integration
class TestDeclarations:

    def test_declarations(self, gateway):
        assert gateway.get_capabilities() == Capability.SHIPMENT | Capability.PARCEL
        assert gateway.get_requirements() == Requirement.NONE
        assert gateway.get_max_weight() == Decimal(30)
        assert gateway.get_default_label_types() == [LabelType.SHIPMENT]
        assert gateway.supports_action(GatewayAction.PROVE) is True
        assert gateway.supports_action(GatewayAction.COMPLETE) is False


@pytest.mark.integration
class TestSingleShipment:

    def test_ship(self, gateway, eprint, persister):
        eprint.create_shipment_with_labels.return_value = create_shipment_with_labels_result(["250012345678"])
        shipment = create_shipment()

        assert gateway.ship(shipment) is True

        assert shipment.tracking_number == "250012345678"
        assert shipment.state == ShipmentState.SHIPPED
        assert_label_types(shipment, [LabelType.SHIPMENT])
        label = shipment.get_label(LabelType.SHIPMENT)
        assert label.content == b"shipment-label"
        assert (label.format, label.size) == (LabelFormat.PNG, LabelSize.A5)
        assert persister.persisted == [shipment]

    def test_ship_is_idempotent(self, gateway, eprint):
        eprint.create_shipment_with_labels.return_value = create_shipment_with_labels_result()
        shipment = create_shipment()
        gateway.ship(shipment)

        assert gateway.ship(shipment) is False

        eprint.create_shipment_with_labels.assert_called_once()

    def test_request_sent(self, gateway, eprint):
        eprint.create_shipment_with_labels.return_value = create_shipment_with_labels_result()
        shipment = create_shipment(valorization=Decimal("80"), gateway_data={"insurance": True})

        gateway.ship(shipment)

        request = eprint.create_shipment_with_labels.call_args[0][0]
        assert request.weight == "2.50"
        assert request.referencenumber == "SH-2001"
        assert request.services.extra_insurance.type == InsuranceType.BY_SHIPMENTS
        assert request.services.extra_insurance.value == "80.00"

    def test_nothing_created(self, gateway, eprint, persister):
        eprint.create_shipment_with_labels.return_value = ShipmentWithLabelsResult()
        shipment = create_shipment()

        assert gateway.ship(shipment) is False

        assert shipment.tracking_number is None
        assert shipment.state == ShipmentState.NEW
        assert persister.persisted == []

    def test_carrier_error_is_wrapped(self, gateway, eprint):
        eprint.create_shipment_with_labels.side_effect = DpdApiError("Invalid customer number", "CUSTOMER")
        shipment = create_shipment()

        with pytest.raises(ShipmentGatewayException) as exc_info:
            gateway.ship(shipment)

        assert_error(exc_info.value, ErrorCode.EXTERNAL_SERVICE_ERROR.value, 502, "invalid customer")
        assert exc_info.value.details["carrier_code"] == "CUSTOMER"
        assert isinstance(exc_info.value.__cause__, DpdApiError)
        assert shipment.state == ShipmentState.NEW

    def test_return_shipment_is_rejected(self, gateway, eprint):
        with pytest.raises(UnsupportedShipmentException):
            gateway.ship(create_shipment(is_return=True))

        assert_no_remote_call(eprint)

    def test_parcel_is_rejected(self, gateway, eprint):
        shipment = create_multi_parcel_shipment(2)

        with pytest.raises(PreconditionException):
            gateway.ship(shipment.parcels[0])

        assert_no_remote_call(eprint)


@pytest.mark.integration
class TestMultiParcelShipment:

    def test_ship(self, gateway, eprint, persister):
        shipment = create_multi_parcel_shipment(3)
        eprint.create_multi_shipment.return_value = create_multi_shipment_result(
            ["250000000001", "250000000002", "250000000003"]
        )
        eprint.get_label.side_effect = [
            create_label_result([create_carrier_label("EPRINT", f"label-{index}".encode())])
            for index in range(1, 4)
        ]

        assert gateway.ship(shipment) is True

        assert [parcel.tracking_number for parcel in shipment.parcels] == [
            "250000000001", "250000000002", "250000000003"
        ]
        assert [call[0][0].shipment_number for call in eprint.get_label.call_args_list] == [
            "250000000001", "250000000002", "250000000003"
        ]
        assert [parcel.get_label(LabelType.SHIPMENT).content for parcel in shipment.parcels] == [
            b"label-1", b"label-2", b"label-3"
        ]
        assert shipment.state == ShipmentState.SHIPPED
        assert persister.persisted[-1] is shipment

    def test_slave_count_mismatch(self, gateway, eprint):
        shipment = create_multi_parcel_shipment(3)
        eprint.create_multi_shipment.return_value = create_multi_shipment_result(["250000000001", "250000000002"])

        with pytest.raises(ConsistencyException) as exc_info:
            gateway.ship(shipment)

        assert_error(exc_info.value, ErrorCode.PARCEL_COUNT_MISMATCH.value, 500)
        assert all(parcel.tracking_number is None for parcel in shipment.parcels)
        eprint.get_label.assert_not_called()

    def test_more_slaves_than_parcels(self, gateway, eprint, persister):
        shipment = create_multi_parcel_shipment(2)
        eprint.create_multi_shipment.return_value = create_multi_shipment_result(
            ["250000000001", "250000000002", "250000000003"]
        )

        with pytest.raises(ConsistencyException) as exc_info:
            gateway.ship(shipment)

        assert_error(exc_info.value, ErrorCode.PARCEL_COUNT_MISMATCH.value, 500)
        assert exc_info.value.details == {"parcels": 2, "slaves": 3}
        assert all(parcel.tracking_number is None for parcel in shipment.parcels)
        assert shipment.state == ShipmentState.NEW
        assert persister.persisted == []
        eprint.get_label.assert_not_called()

    def test_label_failure_keeps_tracking_numbers(self, gateway, eprint, persister):
        shipment = create_multi_parcel_shipment(2)
        eprint.create_multi_shipment.return_value = create_multi_shipment_result(["250000000001", "250000000002"])
        eprint.get_label.return_value = create_label_result([])

        with pytest.raises(LabelUnavailableException):
            gateway.ship(shipment)

        assert shipment.has_tracking_number() is True
        assert persister.persisted == [shipment]
        assert shipment.state == ShipmentState.SHIPPED

    def test_recovery_after_label_failure(self, gateway, eprint):
        shipment = create_multi_parcel_shipment(2)
        eprint.create_multi_shipment.return_value = create_multi_shipment_result(["250000000001", "250000000002"])
        eprint.get_label.side_effect = [
            create_label_result([create_carrier_label("EPRINT", b"first")]),
            create_label_result([]),
        ]

        with pytest.raises(LabelUnavailableException):
            gateway.ship(shipment)

        eprint.get_label.side_effect = None
        eprint.get_label.return_value = create_label_result([create_carrier_label("EPRINT", b"second")])

        labels = gateway.print_label(shipment)

        assert [label.content for label in labels] == [b"first", b"second"]
        assert gateway.ship(shipment) is False
        assert shipment.state == ShipmentState.SHIPPED
        # Created on the carrier side: no local cancellation
        assert gateway.cancel(shipment) is False
        assert shipment.state == ShipmentState.SHIPPED
        eprint.create_multi_shipment.assert_called_once()

    def test_tracked_record_left_new_is_moved_to_shipped(self, gateway, eprint, persister):
        shipment = create_multi_parcel_shipment(2)
        for index, parcel in enumerate(shipment.parcels, start=1):
            parcel.assign_tracking_number(f"25000000000{index}")

        assert gateway.cancel(shipment) is False
        assert shipment.state == ShipmentState.NEW

        assert gateway.ship(shipment) is False

        assert shipment.state == ShipmentState.SHIPPED
        assert persister.persisted == [shipment]
        assert_no_remote_call(eprint)

    def test_slave_weights(self, gateway, eprint):
        shipment = create_multi_parcel_shipment(2)
        eprint.create_multi_shipment.return_value = create_multi_shipment_result(["250000000001", "250000000002"])
        eprint.get_label.return_value = create_label_result()

        gateway.ship(shipment)

        request = eprint.create_multi_shipment.call_args[0][0]
        assert [slave.weight for slave in request.slaves] == ["1.20", "1.20"]


@pytest.mark.integration
class TestPrintLabel:

    def test_ships_first(self, gateway, eprint):
        eprint.create_shipment_with_labels.return_value = create_shipment_with_labels_result()
        shipment = create_shipment()

        labels = gateway.print_label(shipment)

        assert [label.type for label in labels] == [LabelType.SHIPMENT]
        eprint.create_shipment_with_labels.assert_called_once()
        eprint.get_label.assert_not_called()

    def test_filters_types(self, gateway, eprint):
        eprint.create_shipment_with_labels.return_value = create_shipment_with_labels_result(labels=[
            create_carrier_label("EPRINT", b"A"),
            create_carrier_label("EPRINTATTACHMENT", b"B"),
        ])
        shipment = create_shipment()

        labels = gateway.print_label(shipment, [LabelType.SUMMARY])

        assert [(label.type, label.content) for label in labels] == [(LabelType.SUMMARY, b"B")]
        assert gateway.print_label(shipment, [LabelType.PROOF]) == []

    def test_fetches_missing_labels(self, gateway, eprint, persister):
        eprint.create_shipment_with_labels.return_value = create_shipment_with_labels_result(labels=[])
        eprint.get_label.return_value = create_label_result()
        shipment = create_shipment()

        labels = gateway.print_label(shipment)

        assert [label.content for label in labels] == [b"parcel-label"]
        assert eprint.get_label.call_args[0][0].shipment_number == "250012345678"
        assert persister.persisted[-1] is shipment

    def test_label_unavailable(self, gateway, eprint):
        eprint.create_shipment_with_labels.return_value = create_shipment_with_labels_result(labels=[])
        eprint.get_label.return_value = create_label_result([])

        with pytest.raises(LabelUnavailableException):
            gateway.print_label(create_shipment())

    def test_nothing_created(self, gateway, eprint):
        eprint.create_shipment_with_labels.return_value = ShipmentWithLabelsResult()
        shipment = create_shipment()

        with pytest.raises(LabelUnavailableException) as exc_info:
            gateway.print_label(shipment)

        assert_error(exc_info.value, ErrorCode.LABEL_UNAVAILABLE.value, 502)
        eprint.get_label.assert_not_called()

    def test_parcel_labels(self, gateway, eprint):
        shipment = create_multi_parcel_shipment(2)
        eprint.create_multi_shipment.return_value = create_multi_shipment_result(["250000000001", "250000000002"])
        eprint.get_label.side_effect = [
            create_label_result([create_carrier_label("EPRINT", b"first")]),
            create_label_result([create_carrier_label("EPRINT", b"second")]),
        ]

        labels = gateway.print_label(shipment.parcels[1])

        assert [label.content for label in labels] == [b"second"]
        assert [label.content for label in gateway.print_label(shipment)] == [b"first", b"second"]
        eprint.create_multi_shipment.assert_called_once()


@pytest.mark.integration
class TestTrackingAndState:

    def test_track_and_prove(self, gateway):
        shipment = create_shipment(tracking_number="077123456789")

        assert gateway.track(shipment) == "https://trace.dpd.fr/fr/trace/250077123456789"
        assert gateway.prove(shipment) == "https://trace.dpd.fr/preuvelivraison_250077123456789"

    def test_no_tracking_number(self, gateway):
        assert gateway.track(create_shipment()) is None
        assert gateway.prove(create_shipment()) is None

    def test_cancel_new_shipment(self, gateway, eprint, persister):
        shipment = create_shipment()

        assert gateway.cancel(shipment) is True

        assert shipment.state == ShipmentState.CANCELED
        assert persister.persisted == [shipment]
        assert_no_remote_call(eprint)

    def test_cancel_shipped_shipment(self, gateway):
        shipment = create_shipment(tracking_number="250012345678", state=ShipmentState.SHIPPED)

        assert gateway.cancel(shipment) is False
        assert shipment.state == ShipmentState.SHIPPED

    def test_undeclared_actions(self, gateway):
        with pytest.raises(UnsupportedActionException) as exc_info:
            gateway.complete(create_shipment())

        assert_error(exc_info.value, ErrorCode.UNSUPPORTED_ACTION.value, 500)

        with pytest.raises(UnsupportedActionException):
            gateway.list_relay_points(create_address(), Decimal("1"))

        with pytest.raises(UnsupportedActionException):
            gateway.get_relay_point("P22895")
