"""Container operations exposed by the agent."""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Callable, Dict, Iterable, List, Mapping, Optional, Protocol

from yadoma.container_mapper import (
    ContainerStats,
    HostConfig,
    extract_status,
    map_config,
    map_host_config,
    map_mounts,
    map_networking,
    map_networks,
    map_ports,
    map_stats,
)
from yadoma.rpc import RpcError, StatusCode
from yadoma.stream import stream_decoder, stream_reader

_log = logging.getLogger("yadoma")


class _ContainerLayer(Protocol):
    def get_containers(self, options: Mapping[str, Any]) -> List[Mapping[str, Any]]: ...

    def get_container_details(self, container_id: str) -> Mapping[str, Any]: ...

    def get_container_logs(self, container_id: str, options: Mapping[str, Any]) -> BinaryIO: ...

    def get_container_stats(self, container_id: str, stream: bool) -> BinaryIO: ...

    def create_container(
        self,
        config: Mapping[str, Any],
        host_config: Mapping[str, Any],
        networking_config: Optional[Mapping[str, Any]],
        platform: Mapping[str, Any],
        name: str,
    ) -> Mapping[str, Any]: ...

    def remove_container(self, container_id: str, options: Mapping[str, Any]) -> None: ...

    def start_container(self, container_id: str, options: Mapping[str, Any]) -> None: ...

    def stop_container(self, container_id: str, options: Mapping[str, Any]) -> None: ...

    def restart_container(self, container_id: str, options: Mapping[str, Any]) -> None: ...

    def pause_container(self, container_id: str) -> None: ...

    def unpause_container(self, container_id: str) -> None: ...

    def kill_container(self, container_id: str, signal: str) -> None: ...

    def rename_container(self, container_id: str, name: str) -> None: ...


def _internal(action: str, error: Exception) -> RpcError:
    return RpcError(StatusCode.INTERNAL, f"{action}: {error}")


def _require_id(container_id: str) -> None:
    if not container_id:
        raise RpcError(StatusCode.INVALID_ARGUMENT, "container ID is required")


def _close(reader: Any, what: str) -> None:
    close = getattr(reader, "close", None)
    if close is None:
        return
    try:
        close()
    except Exception:
        _log.exception("error closing %s reader", what)


class ContainerService:
    """Lists, inspects, creates and controls containers through a docker layer.

    The layer returns engine-API shaped mappings and readers; results are plain
    dicts. Streaming operations pass each item to ``send``.
    """

    SERVICE_NAME = "container.v1.ContainerService"

    def __init__(self, layer: _ContainerLayer):
        self.layer = layer

    def get_containers(self, all_containers: bool = False, limit: int = 0) -> Dict[str, Any]:
        try:
            containers = self.layer.get_containers({"All": all_containers, "Limit": int(limit)})
        except Exception as err:
            raise _internal("cannot list containers", err) from err
        return {
            "containers": [
                {
                    "id": c.get("Id", ""),
                    "names": list(c.get("Names") or []),
                    "image": c.get("Image", ""),
                    "state": c.get("State", ""),
                    "status": c.get("Status", ""),
                    "ports": map_ports(c.get("Ports") or []),
                }
                for c in containers or []
            ]
        }

    def get_container_details(self, container_id: str) -> Dict[str, Any]:
        _require_id(container_id)
        try:
            details = self.layer.get_container_details(container_id)
        except Exception as err:
            raise _internal("cannot get container details", err) from err
        settings = details.get("NetworkSettings") or {}
        return {
            "id": details.get("Id", ""),
            "image": details.get("Image", ""),
            "name": details.get("Name", ""),
            "status": extract_status(details.get("State")),
            "created": details.get("Created", ""),
            "mounts": map_mounts(details.get("Mounts") or []),
            "networks": map_networks(settings.get("Networks")),
        }

    def create_container(
        self,
        image: str,
        name: str = "",
        cmd: Optional[Iterable[str]] = None,
        env: Optional[Iterable[str]] = None,
        host_config: Optional[HostConfig] = None,
        networks: Optional[Iterable[str]] = None,
    ) -> Dict[str, str]:
        if not image:
            raise RpcError(StatusCode.INVALID_ARGUMENT, "image is required")
        config = map_config(image, cmd, env)
        host = map_host_config(host_config)
        networking = map_networking(networks)
        try:
            created = self.layer.create_container(config, host, networking, {}, name)
        except Exception as err:
            raise _internal("cannot create container", err) from err
        return {"id": created.get("Id", "")}

    def start_container(self, container_id: str) -> Dict[str, bool]:
        _require_id(container_id)
        try:
            self.layer.start_container(container_id, {})
        except Exception as err:
            raise _internal("cannot start container", err) from err
        return {"success": True}

    def stop_container(self, container_id: str) -> Dict[str, bool]:
        _require_id(container_id)
        try:
            self.layer.stop_container(container_id, {})
        except Exception as err:
            raise _internal("cannot stop container", err) from err
        return {"success": True}

    def restart_container(self, container_id: str) -> Dict[str, bool]:
        _require_id(container_id)
        try:
            self.layer.restart_container(container_id, {})
        except Exception as err:
            raise _internal("failed to restart container", err) from err
        return {"success": True}

    def pause_container(self, container_id: str) -> Dict[str, bool]:
        _require_id(container_id)
        try:
            self.layer.pause_container(container_id)
        except Exception as err:
            raise _internal("cannot pause container", err) from err
        return {"success": True}

    def unpause_container(self, container_id: str) -> Dict[str, bool]:
        _require_id(container_id)
        try:
            self.layer.unpause_container(container_id)
        except Exception as err:
            raise _internal("cannot unpause container", err) from err
        return {"success": True}

    def kill_container(self, container_id: str, signal: str = "") -> Dict[str, bool]:
        _require_id(container_id)
        try:
            self.layer.kill_container(container_id, signal)
        except Exception as err:
            raise _internal("cannot kill container", err) from err
        return {"success": True}

    def rename_container(self, container_id: str, name: str = "") -> Dict[str, bool]:
        _require_id(container_id)
        try:
            self.layer.rename_container(container_id, name)
        except Exception as err:
            raise _internal("cannot rename container", err) from err
        return {"success": True}

    def remove_container(
        self, container_id: str, force: bool = False, remove_volumes: bool = False
    ) -> Dict[str, bool]:
        _require_id(container_id)
        try:
            self.layer.remove_container(container_id, {"Force": force, "RemoveVolumes": remove_volumes})
        except Exception as err:
            raise _internal("cannot remove container", err) from err
        return {"success": True}

    def get_container_logs(
        self, container_id: str, send: Callable[[bytes], Any], follow: bool = False
    ) -> None:
        _require_id(container_id)
        try:
            reader = self.layer.get_container_logs(container_id, {"Follow": follow})
        except Exception as err:
            raise _internal("cannot get container logs", err) from err
        try:
            stream_reader(reader, send)
        finally:
            _close(reader, "logs")

    def get_container_stats(
        self, container_id: str, send: Callable[[ContainerStats], Any], stream: bool = False
    ) -> None:
        _require_id(container_id)
        try:
            body = self.layer.get_container_stats(container_id, stream)
        except Exception as err:
            raise _internal("cannot get container stats", err) from err
        try:
            stream_decoder(body, lambda sample: send(map_stats(sample)))
        finally:
            _close(body, "stats")