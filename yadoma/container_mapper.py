"""Conversions between engine-API container data and the agent's messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional


@dataclass
class MountPoint:
    """A mount as reported for a running container."""

    source: str = ""
    destination: str = ""
    rw: bool = False


@dataclass
class NetworkSettings:
    """A container's attachment to one network."""

    ip_address: str = ""
    gateway: str = ""
    network_id: str = ""


@dataclass
class ContainerStats:
    """One resource usage sample of a container."""

    id: str = ""
    cpu_usage: int = 0
    mem_usage: int = 0
    mem_limit: int = 0
    net_input: int = 0
    net_output: int = 0


@dataclass
class PortMapping:
    """A requested binding of a container port to a host address and port."""

    container_port: int = 0
    host_port: int = 0
    host_ip: str = ""


@dataclass
class Mount:
    """A requested bind mount."""

    source: str = ""
    target: str = ""
    read_only: bool = False


@dataclass
class RestartPolicy:
    """A requested restart policy."""

    name: str = ""
    maximum_retry_count: int = 0


@dataclass
class HostConfig:
    """Host-side settings requested for a new container.

    ``port_bindings`` maps an arbitrary key to the host port mappings it groups;
    the key itself is not used, each mapping names its own container port.
    """

    port_bindings: Dict[str, List[PortMapping]] = field(default_factory=dict)
    mounts: List[Mount] = field(default_factory=list)
    auto_remove: bool = False
    restart_policy: Optional[RestartPolicy] = None


def extract_status(state: Optional[Mapping[str, Any]]) -> str:
    """Return the status string of a container state, or "" when there is none."""
    if state is None:
        return ""
    return state.get("Status", "")


def map_mounts(mounts: Iterable[Mapping[str, Any]]) -> List[MountPoint]:
    """Convert engine mount points into :class:`MountPoint` values, keeping order."""
    return [
        MountPoint(
            source=m.get("Source", ""),
            destination=m.get("Destination", ""),
            rw=bool(m.get("RW", False)),
        )
        for m in mounts or []
    ]


def map_networks(nets: Optional[Mapping[str, Optional[Mapping[str, Any]]]]) -> Dict[str, NetworkSettings]:
    """Convert engine endpoint settings by network name, skipping empty entries."""
    return {
        name: NetworkSettings(
            ip_address=endpoint.get("IPAddress", ""),
            gateway=endpoint.get("Gateway", ""),
            network_id=endpoint.get("NetworkID", ""),
        )
        for name, endpoint in (nets or {}).items()
        if endpoint is not None
    }


def map_stats(stats: Mapping[str, Any]) -> ContainerStats:
    """Summarise a decoded stats sample, totalling traffic over all interfaces."""
    networks = (stats.get("networks") or {}).values()
    cpu = (stats.get("cpu_stats") or {}).get("cpu_usage") or {}
    memory = stats.get("memory_stats") or {}
    return ContainerStats(
        id=stats.get("id", ""),
        cpu_usage=cpu.get("total_usage", 0),
        mem_usage=memory.get("usage", 0),
        mem_limit=memory.get("limit", 0),
        net_input=sum(n.get("rx_bytes", 0) for n in networks),
        net_output=sum(n.get("tx_bytes", 0) for n in networks),
    )


def map_config(image: str, cmd: Optional[Iterable[str]] = None, env: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """Build the engine container config for an image, command and environment."""
    return {
        "Image": image,
        "Cmd": None if cmd is None else list(cmd),
        "Env": None if env is None else list(env),
    }


def map_host_config(host_config: Optional[HostConfig]) -> Dict[str, Any]:
    """Build the engine host config; an absent request yields an empty config."""
    if host_config is None:
        return {}

    port_bindings: Dict[str, List[Dict[str, str]]] = {}
    for mappings in host_config.port_bindings.values():
        for m in mappings:
            port_bindings.setdefault(f"{m.container_port}/tcp", []).append(
                {"HostIp": m.host_ip, "HostPort": str(int(m.host_port))}
            )

    policy = host_config.restart_policy or RestartPolicy()
    return {
        "PortBindings": port_bindings,
        "AutoRemove": host_config.auto_remove,
        "RestartPolicy": {
            "Name": policy.name,
            "MaximumRetryCount": int(policy.maximum_retry_count),
        },
        "Mounts": [
            {"Type": "bind", "Source": m.source, "Target": m.target, "ReadOnly": m.read_only}
            for m in host_config.mounts
        ],
    }


def map_networking(networks: Optional[Iterable[str]]) -> Optional[Dict[str, Any]]:
    """Build the engine networking config attaching to each named network, or None."""
    names = list(networks or [])
    if not names:
        return None
    return {"EndpointsConfig": {name: {} for name in names}}


def map_ports(ports: Iterable[Mapping[str, Any]]) -> List[str]:
    """Render published ports as ``[ip:]public->private/type`` strings."""
    result = []
    for port in ports or []:
        text = f"{port.get('PrivatePort', 0)}/{port.get('Type', '')}"
        public = port.get("PublicPort", 0)
        if public > 0:
            ip = port.get("IP", "")
            text = f"{ip}:{public}->{text}" if ip else f"{public}->{text}"
        result.append(text)
    return result