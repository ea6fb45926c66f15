"""Network operations exposed by the agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol

from yadoma.rpc import RpcError, StatusCode

_ZERO_TIME = "0001-01-01T00:00:00Z"


class _NetworkLayer(Protocol):
    def get_networks(self, options: Mapping[str, Any]) -> List[Mapping[str, Any]]: ...

    def get_network_details(self, network_id: str, options: Mapping[str, Any]) -> Mapping[str, Any]: ...

    def create_network(self, name: str, options: Mapping[str, Any]) -> Mapping[str, Any]: ...

    def remove_network(self, network_id: str) -> None: ...

    def connect_network(self, network_id: str, container_id: str, config: Mapping[str, Any]) -> None: ...

    def disconnect_network(self, network_id: str, container_id: str, force: bool) -> None: ...

    def prune_networks(self, filters: Mapping[str, List[str]]) -> Mapping[str, Any]: ...


@dataclass
class CreateNetworkRequest:
    """Settings for a new network."""

    name: str = ""
    driver: str = ""
    internal: bool = False
    attachable: bool = False
    ingress: bool = False
    subnet: str = ""
    gateway: str = ""
    labels: Optional[Dict[str, str]] = None


@dataclass
class EndpointSettings:
    """Settings for a container's endpoint on a network."""

    ip_address: str = ""
    mac_address: str = ""
    aliases: Optional[List[str]] = field(default=None)


def map_create_options(request: CreateNetworkRequest) -> Dict[str, Any]:
    """Build the engine create options for a network request."""
    return {
        "Driver": request.driver,
        "Internal": request.internal,
        "Attachable": request.attachable,
        "Ingress": request.ingress,
        "Labels": None if request.labels is None else dict(request.labels),
        "IPAM": {
            "Driver": "default",
            "Config": [{"Subnet": request.subnet, "Gateway": request.gateway}],
        },
    }


def map_endpoint_settings(settings: Optional[EndpointSettings]) -> Dict[str, Any]:
    """Build engine endpoint settings; absent settings give empty values."""
    settings = settings or EndpointSettings()
    return {
        "IPAddress": settings.ip_address,
        "MacAddress": settings.mac_address,
        "Aliases": None if settings.aliases is None else list(settings.aliases),
    }


def _format_created(value: Any) -> str:
    if value is None or value == "":
        return _ZERO_TIME
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        offset = value.utcoffset()
        stamp = value.strftime("%Y-%m-%dT%H:%M:%S")
        if not offset:
            return stamp + "Z"
        minutes = int(offset.total_seconds()) // 60
        sign = "+" if minutes >= 0 else "-"
        minutes = abs(minutes)
        return f"{stamp}{sign}{minutes // 60:02d}:{minutes % 60:02d}"
    return str(value)


def _internal(action: str, error: Exception) -> RpcError:
    return RpcError(StatusCode.INTERNAL, f"{action}: {error}")


def _require(value: str, what: str) -> None:
    if not value:
        raise RpcError(StatusCode.INVALID_ARGUMENT, f"{what} is required")


class NetworkService:
    """Lists, inspects, creates, removes, connects and prunes networks through a docker layer.

    The layer returns engine-API shaped mappings; results are plain dicts.
    """

    SERVICE_NAME = "network.v1.NetworkService"

    def __init__(self, layer: _NetworkLayer):
        self.layer = layer

    def get_networks(self) -> Dict[str, Any]:
        try:
            networks = self.layer.get_networks({})
        except Exception as err:
            raise _internal("cannot list networks", err) from err
        return {
            "networks": [
                {
                    "id": n.get("Id", ""),
                    "name": n.get("Name", ""),
                    "driver": n.get("Driver", ""),
                    "scope": n.get("Scope", ""),
                }
                for n in networks or []
            ]
        }

    def get_network_details(self, network_id: str) -> Dict[str, Any]:
        _require(network_id, "network ID")
        try:
            details = self.layer.get_network_details(network_id, {})
        except Exception as err:
            raise _internal("cannot get network details", err) from err
        return {
            "id": details.get("Id", ""),
            "name": details.get("Name", ""),
            "created": _format_created(details.get("Created")),
            "scope": details.get("Scope", ""),
            "driver": details.get("Driver", ""),
            "internal": bool(details.get("Internal", False)),
            "attachable": bool(details.get("Attachable", False)),
            "ingress": bool(details.get("Ingress", False)),
            "labels": dict(details.get("Labels") or {}),
        }

    def create_network(self, request: CreateNetworkRequest) -> Dict[str, str]:
        _require(request.name, "network name")
        try:
            created = self.layer.create_network(request.name, map_create_options(request))
        except Exception as err:
            raise _internal("cannot create network", err) from err
        return {"id": created.get("Id", "")}

    def remove_network(self, network_id: str) -> Dict[str, Any]:
        _require(network_id, "network ID")
        try:
            self.layer.remove_network(network_id)
        except Exception as err:
            raise _internal("cannot remove network", err) from err
        return {}

    def connect_network(
        self, network_id: str, container_id: str, settings: Optional[EndpointSettings] = None
    ) -> Dict[str, Any]:
        _require(network_id, "network ID")
        _require(container_id, "container ID")
        try:
            self.layer.connect_network(network_id, container_id, map_endpoint_settings(settings))
        except Exception as err:
            raise _internal("cannot connect network", err) from err
        return {}

    def disconnect_network(self, network_id: str, container_id: str, force: bool = False) -> Dict[str, Any]:
        _require(network_id, "network ID")
        _require(container_id, "container ID")
        try:
            self.layer.disconnect_network(network_id, container_id, force)
        except Exception as err:
            raise _internal("cannot disconnect network", err) from err
        return {}

    def prune_networks(self, all_networks: str = "") -> Dict[str, Any]:
        try:
            report = self.layer.prune_networks({"All": [all_networks]})
        except Exception as err:
            raise _internal("cannot prune network", err) from err
        return {"networks_deleted": list(report.get("NetworksDeleted") or [])}