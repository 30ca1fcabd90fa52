from typing import Iterable
import logging

from dpd_gateway.models.shipment import Label, LabelFormat, LabelSize, LabelType, ShipmentRecord
from dpd_gateway.schemas.dpd_shipment_schema import CarrierLabel, CarrierLabelType

logger = logging.getLogger(__name__)


# EPrint label kind -> stored label type (anything else is a shipment label)
CARRIER_TO_LABEL_TYPE = {
    CarrierLabelType.REVERSE.value: LabelType.RETURN,
    CarrierLabelType.REVERSEBIC3.value: LabelType.RETURN,
    CarrierLabelType.PROOF.value: LabelType.PROOF,
    CarrierLabelType.PROOFBIC3.value: LabelType.PROOF,
    CarrierLabelType.EPRINT_ATTACHMENT.value: LabelType.SUMMARY,
}


def convert_label_type(carrier_type: str) -> LabelType:
    return CARRIER_TO_LABEL_TYPE.get(carrier_type, LabelType.SHIPMENT)


class DpdLabelReconciler:
    """Merges the labels returned by EPrint into a record's stored labels"""

    def merge(
        self,
        record: ShipmentRecord,
        fetched: Iterable[CarrierLabel],
        label_format: LabelFormat,
        label_size: LabelSize
    ) -> bool:
        """
        Add or update the record labels (keyed by type). Stored labels are never removed.

        Args:
            record: Shipment or parcel owning the labels
            fetched: Labels returned by the carrier
            label_format: Format of the configured label type
            label_size: Size of the configured label type

        Returns:
            False when the carrier returned no label at all
        """
        merged = False

        for carrier_label in fetched:
            label_type = convert_label_type(carrier_label.type)
            merged = True

            existing = record.get_label(label_type)
            if existing is not None:
                if existing.content != carrier_label.label:
                    logger.info(f"Updating '{label_type.value}' label of {record.number}")
                    existing.content = carrier_label.label
                continue

            record.add_label(Label(
                type=label_type,
                format=label_format,
                size=label_size,
                content=carrier_label.label,
            ))

        if not merged:
            logger.warning(f"No label returned by DPD for {record.number}")

        return merged
