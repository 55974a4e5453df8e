"""Pydantic models: certificate request."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


# -------------------- ISSUANCE REQUEST -------------------- #

class CertRequest(BaseModel):
    common_name: str = Field(default="", alias="commonName")
    names: List[str] = Field(default_factory=list)    # DNS subject alternative names
    ips: List[str] = Field(default_factory=list)      # IP literals, v4 or v6

    model_config = ConfigDict(populate_by_name=True)

    # JSON null reads as the empty value
    @field_validator("common_name", mode="before")
    @classmethod
    def null_name(cls, v):
        return "" if v is None else v

    @field_validator("names", "ips", mode="before")
    @classmethod
    def null_list(cls, v):
        return [] if v is None else v
