from abc import ABC, abstractmethod

from dpd_gateway.schemas.dpd_relay_schema import (
    GetPudoDetailsRequest,
    GetPudoDetailsResponse,
    GetPudoListRequest,
    GetPudoListResponse,
)


class IPudoTransport(ABC):
    """DPD PUDO web service (relay points lookup)"""

    @abstractmethod
    def get_pudo_list(self, request: GetPudoListRequest) -> GetPudoListResponse:
        pass

    @abstractmethod
    def get_pudo_details(self, request: GetPudoDetailsRequest) -> GetPudoDetailsResponse:
        pass
