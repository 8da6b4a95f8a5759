"""Configuration options for the IPAM engine."""

from oslo_config import cfg

# Configuration group name
CONF_GROUP = "ipam"

_RANGE_HELP = (
    "Comma separated list of inclusive address ranges in the form "
    "'<start_ip>-<end_ip>' (e.g., 10.2.0.2-10.2.255.254). "
    "IPv4 and IPv6 ranges may be mixed."
)

ipam_opts = [
    cfg.ListOpt(
        "pod_ip_pool",
        default=[],
        help="Addresses assigned to pods. " + _RANGE_HELP,
    ),
    cfg.ListOpt(
        "service_ip_pool",
        default=[],
        help="Addresses assigned to load-balanced services. " + _RANGE_HELP,
    ),
    cfg.ListOpt(
        "static_service_ip_pool",
        default=[],
        help=(
            "Addresses that services may request explicitly. "
            "These are never handed out automatically. " + _RANGE_HELP
        ),
    ),
    cfg.ListOpt(
        "node_service_ip_pool",
        default=[],
        help="Addresses assigned to per-node service endpoints. " + _RANGE_HELP,
    ),
    cfg.StrOpt(
        "pool_document",
        default=None,
        help=(
            "Path to a JSON controller configuration document with "
            "'pod-ip-pool', 'service-ip-pool', 'static-service-ip-pool' and "
            "'node-service-ip-pool' entries. Ranges from the document are "
            "added to those configured in this file."
        ),
    ),
]


def register_opts(conf, group=None):
    """Register IPAM options.

    Args:
        conf: oslo_config ConfigOpts instance
        group: Configuration group name (default: CONF_GROUP)
    """
    if group is None:
        group = CONF_GROUP
    conf.register_opts(ipam_opts, group=group)


def list_opts():
    """Return a list of IPAM options for oslo-config-generator.

    Returns:
        List of (group_name, options) tuples
    """
    return [
        (CONF_GROUP, ipam_opts),
    ]
