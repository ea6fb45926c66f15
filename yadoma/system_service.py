"""System information operations exposed by the agent."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from yadoma.rpc import RpcError, StatusCode


class _SystemLayer(Protocol):
    def get_system_info(self) -> Mapping[str, Any]: ...

    def get_disk_usage(self, options: Mapping[str, Any]) -> Mapping[str, Any]: ...


def _int32(value: Any) -> int:
    """Truncate to a signed 32-bit integer, wrapping on overflow."""
    number = int(value or 0) & 0xFFFFFFFF
    return number - 0x100000000 if number >= 0x80000000 else number


def map_disk_usage_image(images: Optional[Iterable[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """Summarise the disk usage of images, keeping order."""
    return [
        {
            "containers": img.get("Containers", 0),
            "size": img.get("Size", 0),
            "id": img.get("Id", ""),
            "repo_tags": list(img.get("RepoTags") or []),
        }
        for img in images or []
    ]


def map_disk_usage_container(containers: Optional[Iterable[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """Summarise the disk usage of containers, keeping order."""
    return [
        {
            "id": c.get("Id", ""),
            "image": c.get("Image", ""),
            "size_rw": c.get("SizeRw", 0),
            "state": c.get("State", ""),
            "status": c.get("Status", ""),
        }
        for c in containers or []
    ]


def map_disk_usage_volume(volumes: Optional[Iterable[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """Summarise the disk usage of volumes; a volume without usage data has size 0."""
    return [
        {
            "name": vol.get("Name", ""),
            "size": (vol.get("UsageData") or {}).get("Size", 0),
            "mountpoint": vol.get("Mountpoint", ""),
        }
        for vol in volumes or []
    ]


def _internal(action: str, error: Exception) -> RpcError:
    return RpcError(StatusCode.INTERNAL, f"{action}: {error}")


class SystemService:
    """Reports daemon information and disk usage through a docker layer."""

    SERVICE_NAME = "system.v1.SystemService"

    def __init__(self, layer: _SystemLayer):
        self.layer = layer

    def get_system_info(self) -> Dict[str, Any]:
        try:
            info = self.layer.get_system_info()
        except Exception as err:
            raise _internal("cannot get system info", err) from err
        return {
            "id": info.get("ID", ""),
            "name": info.get("Name", ""),
            "kernel_version": info.get("KernelVersion", ""),
            "n_cpu": _int32(info.get("NCPU")),
            "containers": _int32(info.get("Containers")),
            "containers_running": _int32(info.get("ContainersRunning")),
            "containers_paused": _int32(info.get("ContainersPaused")),
            "containers_stopped": _int32(info.get("ContainersStopped")),
            "images": _int32(info.get("Images")),
            "server_version": info.get("ServerVersion", ""),
            "operating_system": info.get("OperatingSystem", ""),
            "architecture": info.get("Architecture", ""),
            "mem_total": info.get("MemTotal", 0),
            "driver": info.get("Driver", ""),
            "labels": list(info.get("Labels") or []),
        }

    def get_disk_usage(self) -> Dict[str, Any]:
        try:
            usage = self.layer.get_disk_usage({})
        except Exception as err:
            raise _internal("cannot get disk usage info", err) from err
        return {
            "layers_size": usage.get("LayersSize", 0),
            "images": map_disk_usage_image(usage.get("Images")),
            "containers": map_disk_usage_container(usage.get("Containers")),
            "volumes": map_disk_usage_volume(usage.get("Volumes")),
        }