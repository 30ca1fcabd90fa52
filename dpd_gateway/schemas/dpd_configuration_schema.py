from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dpd_gateway.core.exceptions import ExceptionFactory


PLATFORM_NAME = "DPD"


class DpdService(str, Enum):
    CLASSIC = "Classic"
    PREDICT = "Predict"
    RELAY = "Relay"
    RETURN = "Return"
    RELAY_RETURN = "RelayReturn"

    @classmethod
    def get_codes(cls) -> List[str]:
        return [service.value for service in cls]

    @classmethod
    def is_valid(cls, code: str, throw: bool = True) -> bool:
        if code in cls.get_codes():
            return True

        if throw:
            raise ExceptionFactory.unknown_service(code)

        return False

    @classmethod
    def get_label(cls, code: str) -> str:
        cls.is_valid(code)

        return SERVICE_LABELS[cls(code)]

    @classmethod
    def get_choices(cls) -> Dict[str, str]:
        return {cls.get_label(code): code for code in cls.get_codes()}


SERVICE_LABELS: Dict[DpdService, str] = {
    DpdService.CLASSIC: "DPD Classic",
    DpdService.PREDICT: "DPD Predict",
    DpdService.RELAY: "DPD Relais",
    DpdService.RETURN: "DPD Retour",
    DpdService.RELAY_RETURN: "DPD Retour par relais",
}


class LabelTypeCode(str, Enum):
    """EPrint label type codes"""
    PNG = "Default"
    PDF = "PDF"
    PDF_A6 = "PDF_A6"
    ZPL = "ZPL"
    ZPL300 = "ZPL300"
    ZPL_A6 = "ZPL_A6"
    ZPL300_A6 = "ZPL300_A6"
    EPL = "EPL"


class EPrintCredentials(BaseModel):
    login: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)


class PudoCredentials(BaseModel):
    carrier: str = Field(default="EXA", min_length=1)
    key: str = Field(default="deecd7bc81b71fcc0e292b53e826c48f", min_length=1)
    # Country of the relay points returned by PUDO
    country_code: str = Field(default="FR", min_length=2, max_length=2)

    model_config = ConfigDict(frozen=True)


class GatewayConfig(BaseModel):
    """Immutable gateway configuration, built once by the platform"""
    customer_number: str = Field(..., min_length=1, description="Numéro client")
    center_number: str = Field(..., min_length=1, description="Code dépôt")
    country_code: str = Field(..., min_length=1, description="Code pays")
    service: DpdService
    label_type: LabelTypeCode = LabelTypeCode.PNG

    eprint: EPrintCredentials
    pudo: PudoCredentials = Field(default_factory=PudoCredentials)

    cache: bool = True
    debug: bool = False
    test: bool = False
    ssl_check: bool = True

    # Contact e-mail of collection requests
    admin_email: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    @field_validator("label_type", mode="before")
    @classmethod
    def _label_type_by_name(cls, value):
        # Accepts the choice names ('PNG') as well as the carrier values ('Default')
        if isinstance(value, str) and value in LabelTypeCode.__members__:
            return LabelTypeCode[value]
        return value
