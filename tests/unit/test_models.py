"""
Unit tests for pool document models.
"""

import pytest
from pydantic import ValidationError

from ipam_engine.models import PoolDocument, PoolRangeModel


@pytest.mark.unit
class TestPoolRangeModel:
    def test_valid(self):
        r = PoolRangeModel(start=" 10.3.0.2", end="10.3.0.254 ")
        assert r.start == "10.3.0.2"
        assert r.end == "10.3.0.254"

    def test_invalid_address(self):
        with pytest.raises(ValidationError, match="Invalid IP address"):
            PoolRangeModel(start="10.3.0.300", end="10.3.0.254")

    def test_reversed(self):
        with pytest.raises(ValidationError, match="must be less than or equal"):
            PoolRangeModel(start="10.3.0.254", end="10.3.0.2")

    def test_mixed_family(self):
        with pytest.raises(ValidationError, match="mixes IPv4 and IPv6"):
            PoolRangeModel(start="10.3.0.2", end="fd00::1")


@pytest.mark.unit
class TestPoolDocument:
    def test_aliases_and_extra_keys(self):
        doc = PoolDocument.model_validate(
            {
                "log-level": "info",
                "aci-prefix": "mykube",
                "service-ip-pool": [{"start": "10.3.0.2", "end": "10.3.0.254"}],
                "pod-ip-pool": [{"start": "10.2.0.2", "end": "10.2.255.254"}],
                "node-service-subnets": ["10.5.0.1/24"],
            }
        )
        assert doc.pod_ip_pool[0].end == "10.2.255.254"
        assert doc.service_ip_pool[0].start == "10.3.0.2"
        assert doc.static_service_ip_pool == []
        assert doc.node_service_ip_pool == []

    def test_populate_by_name(self):
        doc = PoolDocument(static_service_ip_pool=[PoolRangeModel(start="10.4.0.2", end="10.4.0.254")])
        assert len(doc.static_service_ip_pool) == 1
