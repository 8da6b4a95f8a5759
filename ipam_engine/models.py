"""
Pydantic models for pool configuration documents.

The controller configuration document lists each pool as an array of
``{"start": ..., "end": ...}`` objects under a dashed key, e.g.::

    {"pod-ip-pool": [{"start": "10.2.0.2", "end": "10.2.255.254"}]}

Keys not describing an address pool are ignored.
"""

import ipaddress
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class PoolRangeModel(BaseModel):
    """One inclusive address range of a pool."""

    start: str = Field(..., description="First address of the range")
    end: str = Field(..., description="Last address of the range")

    @field_validator("start", "end")
    def validate_address(cls, v: str) -> str:
        try:
            ipaddress.ip_address(v.strip())
        except ValueError as e:
            raise ValueError(f"Invalid IP address: {e}")
        return v.strip()

    @model_validator(mode="after")
    def validate_order(self) -> "PoolRangeModel":
        start = ipaddress.ip_address(self.start)
        end = ipaddress.ip_address(self.end)
        if start.version != end.version:
            raise ValueError(f"Range {self.start}-{self.end} mixes IPv{start.version} and IPv{end.version}")
        if start > end:
            raise ValueError(f"Start IP {self.start} must be less than or equal to end IP {self.end}")
        return self


class PoolDocument(BaseModel):
    """Address pools of a controller configuration document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    pod_ip_pool: List[PoolRangeModel] = Field(default_factory=list, alias="pod-ip-pool")
    service_ip_pool: List[PoolRangeModel] = Field(default_factory=list, alias="service-ip-pool")
    static_service_ip_pool: List[PoolRangeModel] = Field(default_factory=list, alias="static-service-ip-pool")
    node_service_ip_pool: List[PoolRangeModel] = Field(default_factory=list, alias="node-service-ip-pool")
