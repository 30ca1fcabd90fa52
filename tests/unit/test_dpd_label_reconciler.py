"""
Test per la riconciliazione delle etichette
"""
import pytest

from dpd_gateway.models.shipment import Label, LabelFormat, LabelSize, LabelType
from dpd_gateway.services.shipments.dpd_label_reconciler import DpdLabelReconciler, convert_label_type
from tests.factories.shipment_factory import create_carrier_label, create_shipment
from tests.helpers.asserts import assert_label_types


@pytest.fixture
def reconciler() -> DpdLabelReconciler:
    return DpdLabelReconciler()


def _merge(reconciler, record, labels):
    return reconciler.merge(record, labels, LabelFormat.PNG, LabelSize.A5)


@pytest.mark.unit
class TestConvertLabelType:

    @pytest.mark.parametrize("carrier_type, expected", [
        ("REVERSE", LabelType.RETURN),
        ("REVERSEBIC3", LabelType.RETURN),
        ("PROOF", LabelType.PROOF),
        ("PROOFBIC3", LabelType.PROOF),
        ("EPRINTATTACHMENT", LabelType.SUMMARY),
        ("EPRINT", LabelType.SHIPMENT),
        ("BIC3", LabelType.SHIPMENT),
        ("SOMETHING_NEW", LabelType.SHIPMENT),
    ])
    def test_conversion(self, carrier_type, expected):
        assert convert_label_type(carrier_type) == expected


@pytest.mark.unit
class TestMerge:

    def test_appends_new_labels(self, reconciler):
        record = create_shipment()

        assert _merge(reconciler, record, [
            create_carrier_label("EPRINT", b"A"),
            create_carrier_label("PROOF", b"B"),
        ]) is True

        assert_label_types(record, [LabelType.SHIPMENT, LabelType.PROOF])
        assert record.get_label(LabelType.SHIPMENT).format == LabelFormat.PNG
        assert record.get_label(LabelType.PROOF).content == b"B"

    def test_merge_is_idempotent(self, reconciler):
        record = create_shipment()
        fetched = [create_carrier_label("EPRINT", b"A")]

        _merge(reconciler, record, fetched)
        first = [(label.type, label.content) for label in record.labels]
        _merge(reconciler, record, fetched)

        assert [(label.type, label.content) for label in record.labels] == first

    def test_updates_changed_content(self, reconciler):
        record = create_shipment()
        record.add_label(Label(LabelType.SHIPMENT, LabelFormat.PDF, LabelSize.A4, b"old"))

        _merge(reconciler, record, [create_carrier_label("EPRINT", b"new")])

        assert len(record.labels) == 1
        label = record.get_label(LabelType.SHIPMENT)
        assert label.content == b"new"
        # Format and size of the stored label are kept
        assert label.format == LabelFormat.PDF

    def test_never_removes_labels(self, reconciler):
        record = create_shipment()
        record.add_label(Label(LabelType.SUMMARY, LabelFormat.PNG, LabelSize.A5, b"summary"))

        _merge(reconciler, record, [create_carrier_label("REVERSE", b"return")])

        assert_label_types(record, [LabelType.SUMMARY, LabelType.RETURN])

    def test_nothing_fetched(self, reconciler):
        record = create_shipment()

        assert _merge(reconciler, record, []) is False
        assert record.labels == []
