from abc import ABC, abstractmethod

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


class IEPrintTransport(ABC):
    """DPD EPrint web service (shipments, collections and labels)

    Every operation raises DpdApiError when the remote call fails.
    """

    @abstractmethod
    def create_shipment_with_labels(self, request: StdShipmentLabelRequest) -> ShipmentWithLabelsResult:
        """CreateShipmentWithLabelsBc: single shipment, labels included in the reply"""
        pass

    @abstractmethod
    def create_multi_shipment(self, request: MultiShipmentRequest) -> MultiShipmentResult:
        """CreateMultiShipmentBc: one shipment per slave, no labels"""
        pass

    @abstractmethod
    def get_label(self, request: ReceiveLabelRequest) -> LabelResult:
        """GetLabelBc: labels of an existing shipment"""
        pass

    @abstractmethod
    def create_collection_request(self, request: CollectionRequest) -> CollectionRequestResult:
        """CreateCollectionRequestBc: schedules a pickup"""
        pass

    @abstractmethod
    def terminate_collection_request(self, request: TerminateCollectionRequest) -> None:
        """TerminateCollectionRequestBc: cancels a pending pickup"""
        pass

    @abstractmethod
    def create_reverse_shipment_with_labels(self, request: ReverseShipmentLabelRequest) -> ReverseShipmentResult:
        """CreateReverseInverseShipmentWithLabels: relay return shipment"""
        pass
