"""
factory.py

Provides a factory function for constructing the transport from
configuration.
"""

import logging
from typing import Any, Mapping

from barometer_service.exceptions import InvalidConfigValueError
from barometer_service.outputs.transport.base import BaseTransport
from barometer_service.outputs.transport.socket_transport import FAMILIES, SocketTransport

ACCEPTED_KWARGS = [
    "family",
    "adapter_address",
    "channel",
    "host",
    "port",
    "accept_poll_s",
    "write_timeout_s",
]


def build_transport(
    transport_config: Mapping[str, Any],
    logger: logging.Logger,
) -> BaseTransport:
    """
    Build the transport described by transport_config.

    Unknown keys are ignored with a warning so one config file can carry
    settings for both families.

    Args:
        transport_config: Transport configuration mapping.
        logger: Logger instance.

    Returns:
        BaseTransport: The configured transport.

    Raises:
        InvalidConfigValueError: If the family is unknown or a value is invalid.
    """
    family = transport_config.get("family")
    if family not in FAMILIES:
        raise InvalidConfigValueError(
            f"Unknown transport family '{family}'. Known families: {', '.join(FAMILIES)}"
        )

    kwargs: dict[str, Any] = {}
    for key, value in transport_config.items():
        if key in ACCEPTED_KWARGS:
            kwargs[key] = value
        else:
            logger.warning("Ignoring unknown transport setting '%s'", key)

    try:
        transport = SocketTransport(**kwargs)
    except (TypeError, ValueError) as e:
        raise InvalidConfigValueError(f"Invalid transport configuration: {e}") from e

    logger.info("Initialised transport %r", transport)
    return transport
