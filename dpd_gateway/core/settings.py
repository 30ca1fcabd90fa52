"""
DPD integration configuration settings
"""

from typing import Any, Dict, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class DpdSettings(BaseSettings):
    """Platform level DPD configuration, read from the environment"""

    # EPrint (shipments / labels) endpoints
    dpd_eprint_base_url_prod: str = Field(default="https://e-station.cargonet.software/dpd-eprintwebservice/eprintwebservice.asmx")
    dpd_eprint_base_url_test: str = Field(default="https://e-station-testenv.cargonet.software/eprintwebservice/eprintwebservice.asmx")

    # PUDO (relay points) endpoint
    dpd_pudo_base_url: str = Field(default="https://mypudo.pickup-services.com/mypudo/mypudo.asmx")

    # EPrint credentials
    dpd_eprint_login: Optional[str] = Field(default=None)
    dpd_eprint_password: Optional[str] = Field(default=None)

    # PUDO credentials
    dpd_pudo_carrier: str = Field(default="EXA")
    dpd_pudo_key: str = Field(default="deecd7bc81b71fcc0e292b53e826c48f")
    dpd_pudo_country_code: str = Field(default="FR")

    # Transport flags
    dpd_cache: bool = Field(default=True)
    dpd_debug: bool = Field(default=False)
    dpd_test: bool = Field(default=False)
    dpd_ssl_check: bool = Field(default=True)
    dpd_timeout: float = Field(default=30.0)

    # Collection requests contact
    dpd_admin_email: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Ignore extra environment variables
    )

    def to_platform_config(self) -> Dict[str, Any]:
        """Platform level gateway config (overridden by each gateway's own config)"""
        config: Dict[str, Any] = {
            "pudo": {
                "carrier": self.dpd_pudo_carrier,
                "key": self.dpd_pudo_key,
                "country_code": self.dpd_pudo_country_code,
            },
            "cache": self.dpd_cache,
            "debug": self.dpd_debug,
            "test": self.dpd_test,
            "ssl_check": self.dpd_ssl_check,
        }

        if self.dpd_eprint_login is not None or self.dpd_eprint_password is not None:
            config["eprint"] = {
                "login": self.dpd_eprint_login,
                "password": self.dpd_eprint_password,
            }

        if self.dpd_admin_email:
            config["admin_email"] = self.dpd_admin_email

        return config


@lru_cache()
def get_dpd_settings() -> DpdSettings:
    """Get cached DPD settings instance"""
    return DpdSettings()
