# src/lora_channel_manager/client.py
from __future__ import annotations

from typing import Optional, Protocol
import logging

import requests

from .errors import FetchError
from .models import GatewayConfiguration, configuration_from_dict
from .settings import Settings

logger = logging.getLogger(__name__)


class GatewayClient(Protocol):
    """Source of the channel configuration for a gateway."""

    def get_configuration(self, gateway_mac: str) -> GatewayConfiguration:
        ...


def parse_configuration_response(raw) -> GatewayConfiguration:
    """
    Turn a decoded GetConfiguration response into a GatewayConfiguration.

    Raises FetchError when the response does not have the expected shape.
    """
    try:
        return configuration_from_dict(raw)
    except (ValueError, TypeError) as err:
        raise FetchError(f"malformed configuration response: {err}") from err


class HttpGatewayClient:
    """
    GetConfiguration over HTTP/JSON.

    The JWT token, when set, is sent verbatim in the authorization header.
    A client certificate is used only when both cert and key are given.
    """

    def __init__(
        self,
        server: str,
        jwt_token: Optional[str] = None,
        ca_cert: Optional[str] = None,
        tls_cert: Optional[str] = None,
        tls_key: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.server = server.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if jwt_token:
            self.session.headers["authorization"] = jwt_token
        if tls_cert and tls_key:
            self.session.cert = (tls_cert, tls_key)
        if ca_cert:
            self.session.verify = ca_cert

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpGatewayClient":
        return cls(
            server=settings.gw_server,
            jwt_token=settings.gw_client_jwt_token,
            ca_cert=settings.gw_client_ca_cert,
            tls_cert=settings.gw_client_tls_cert,
            tls_key=settings.gw_client_tls_key,
        )

    def configuration_url(self, gateway_mac: str) -> str:
        return f"{self.server}/api/gateways/{gateway_mac}/configuration"

    def get_configuration(self, gateway_mac: str) -> GatewayConfiguration:
        url = self.configuration_url(gateway_mac)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            raw = resp.json()
        except requests.RequestException as err:
            raise FetchError(f"get configuration error: {err}") from err
        except ValueError as err:
            raise FetchError(f"get configuration error: invalid JSON: {err}") from err
        return parse_configuration_response(raw)
