"""Volume operations exposed by the agent."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol

from yadoma.rpc import RpcError, StatusCode


class _VolumeLayer(Protocol):
    def get_volumes(self) -> Mapping[str, Any]: ...

    def get_volume_details(self, volume_id: str) -> Mapping[str, Any]: ...

    def create_volume(self, options: Mapping[str, Any]) -> Mapping[str, Any]: ...

    def remove_volume(self, volume_id: str, force: bool) -> None: ...

    def prune_volumes(self, filters: Mapping[str, List[str]]) -> Mapping[str, Any]: ...


def _internal(action: str, error: Exception) -> RpcError:
    return RpcError(StatusCode.INTERNAL, f"{action}: {error}")


def _volume_view(volume: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "name": volume.get("Name", ""),
        "driver": volume.get("Driver", ""),
        "mountpoint": volume.get("Mountpoint", ""),
        "labels": dict(volume.get("Labels") or {}),
        "created_at": volume.get("CreatedAt", ""),
        "scope": volume.get("Scope", ""),
    }


class VolumeService:
    """Lists, inspects, creates, removes and prunes volumes through a docker layer.

    The layer returns engine-API shaped mappings; results are plain dicts.
    """

    SERVICE_NAME = "volume.v1.VolumeService"

    def __init__(self, layer: _VolumeLayer):
        self.layer = layer

    def get_volumes(self) -> Dict[str, Any]:
        try:
            listing = self.layer.get_volumes()
        except Exception as err:
            raise _internal("cannot list volumes", err) from err

        return {
            "volumes": [
                {
                    "name": vol.get("Name", ""),
                    "driver": vol.get("Driver", ""),
                    "mountpoint": vol.get("Mountpoint", ""),
                    "labels": dict(vol.get("Labels") or {}),
                }
                for vol in listing.get("Volumes") or []
            ],
            "warnings": list(listing.get("Warnings") or []),
        }

    def get_volume_details(self, volume_id: str) -> Dict[str, Any]:
        if not volume_id:
            raise RpcError(StatusCode.INVALID_ARGUMENT, "volume ID is required")
        try:
            details = self.layer.get_volume_details(volume_id)
        except Exception as err:
            raise _internal("cannot get volume details", err) from err
        return _volume_view(details)

    def create_volume(
        self,
        name: str,
        driver: str = "",
        driver_opts: Optional[Mapping[str, str]] = None,
        labels: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, Any]:
        if not name:
            raise RpcError(StatusCode.INVALID_ARGUMENT, "volume name is required")
        options = {
            "Name": name,
            "Driver": driver,
            "DriverOpts": dict(driver_opts or {}),
            "Labels": dict(labels or {}),
        }
        try:
            volume = self.layer.create_volume(options)
        except Exception as err:
            raise _internal("cannot create volume", err) from err
        return _volume_view(volume)

    def remove_volume(self, volume_id: str, force: bool = False) -> Dict[str, bool]:
        if not volume_id:
            raise RpcError(StatusCode.INVALID_ARGUMENT, "volume ID is required")
        try:
            self.layer.remove_volume(volume_id, force)
        except Exception as err:
            raise _internal("cannot remove volume", err) from err
        return {"success": True}

    def prune_volumes(self, all_volumes: str = "") -> Dict[str, Any]:
        try:
            report = self.layer.prune_volumes({"All": [all_volumes]})
        except Exception as err:
            raise _internal("cannot prune volume", err) from err
        return {
            "volumes_deleted": list(report.get("VolumesDeleted") or []),
            "space_reclaimed": report.get("SpaceReclaimed", 0),
        }