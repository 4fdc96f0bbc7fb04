"""Transports to the SDK build service."""

from sdk_build_action.gateway.base import Gateway, GatewayProtocol
from sdk_build_action.gateway.http import HttpGateway
from sdk_build_action.gateway.mock import MockGateway

__all__ = ["Gateway", "GatewayProtocol", "HttpGateway", "MockGateway"]
