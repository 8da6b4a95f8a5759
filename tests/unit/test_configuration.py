"""
Unit tests for oslo.config option registration.
"""

import pytest
from oslo_config import cfg

from ipam_engine.configuration import CONF_GROUP, list_opts, register_opts


@pytest.mark.unit
class TestConfiguration:
    def test_defaults(self):
        conf = cfg.ConfigOpts()
        register_opts(conf)
        conf(args=[], default_config_files=[])
        assert conf.ipam.pod_ip_pool == []
        assert conf.ipam.service_ip_pool == []
        assert conf.ipam.pool_document is None

    def test_reads_config_file(self, temp_dir):
        path = temp_dir / "ipam-engine.conf"
        path.write_text(
            "\n".join(
                [
                    "[ipam]",
                    "pod_ip_pool = 10.2.0.2-10.2.255.254,fd00::2-fd00::ffff",
                    "service_ip_pool = 10.3.0.2-10.3.0.254",
                    "",
                ]
            ),
            encoding="utf-8",
        )
        conf = cfg.ConfigOpts()
        register_opts(conf)
        conf(args=[], default_config_files=[str(path)])
        assert conf.ipam.pod_ip_pool == ["10.2.0.2-10.2.255.254", "fd00::2-fd00::ffff"]
        assert conf.ipam.service_ip_pool == ["10.3.0.2-10.3.0.254"]

    def test_custom_group(self):
        conf = cfg.ConfigOpts()
        register_opts(conf, group="other")
        conf(args=[], default_config_files=[])
        assert conf.other.node_service_ip_pool == []

    def test_list_opts(self):
        groups = list_opts()
        assert len(groups) == 1
        group, opts = groups[0]
        assert group == CONF_GROUP
        assert {o.name for o in opts} == {
            "pod_ip_pool",
            "service_ip_pool",
            "static_service_ip_pool",
            "node_service_ip_pool",
            "pool_document",
        }
