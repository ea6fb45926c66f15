"""Image operations exposed by the agent."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Dict, List, Mapping, Protocol, Tuple

from yadoma.rpc import RpcError, StatusCode
from yadoma.stream import stream_reader

BUILD_TIMEOUT = 30.0

_log = logging.getLogger("yadoma")


class _ImageLayer(Protocol):
    def get_images(self, options: Mapping[str, Any]) -> List[Mapping[str, Any]]: ...

    def get_image_details(self, image_id: str) -> Mapping[str, Any]: ...

    def pull_image(self, image_name: str, options: Mapping[str, Any]) -> BinaryIO: ...

    def remove_image(self, image_id: str, options: Mapping[str, Any]) -> List[Mapping[str, Any]]: ...

    def prune_image(self, filters: Mapping[str, List[str]]) -> Mapping[str, Any]: ...

    def build_image(self, build_context: BinaryIO, options: Mapping[str, Any], timeout: float) -> BinaryIO: ...


@dataclass
class BuildImageRequest:
    """What to build: the Dockerfile name, the context archive and build settings."""

    dockerfile: str = ""
    tags: List[str] = field(default_factory=list)
    no_cache: bool = False
    build_context: bytes = b""
    build_args: Dict[str, str] = field(default_factory=dict)
    labels: Dict[str, str] = field(default_factory=dict)


def map_build_options(request: BuildImageRequest) -> Tuple[Dict[str, Any], io.BytesIO]:
    """Return the engine build options and a reader over the build context."""
    options = {
        "Tags": list(request.tags),
        "NoCache": request.no_cache,
        "Dockerfile": request.dockerfile,
        "BuildArgs": dict(request.build_args),
        "Labels": dict(request.labels),
        "Remove": True,
        "ForceRemove": True,
    }
    return options, io.BytesIO(request.build_context)


def _internal(action: str, error: Exception) -> RpcError:
    return RpcError(StatusCode.INTERNAL, f"{action}: {error}")


def _close(reader: Any, what: str) -> None:
    close = getattr(reader, "close", None)
    if close is None:
        return
    try:
        close()
    except Exception:
        _log.exception("error closing %s reader", what)


def _deleted_view(entries) -> List[Dict[str, str]]:
    return [
        {"deleted": e.get("Deleted", ""), "untagged": e.get("Untagged", "")}
        for e in entries or []
    ]


class ImageService:
    """Lists, inspects, pulls, removes, prunes and builds images through a docker layer.

    The layer returns engine-API shaped mappings and readers; results are plain dicts.
    Streaming operations pass each raw chunk to ``send``.
    """

    SERVICE_NAME = "image.v1.ImageService"

    def __init__(self, layer: _ImageLayer):
        self.layer = layer

    def get_images(self, all_images: bool = False) -> Dict[str, Any]:
        try:
            images = self.layer.get_images({"All": all_images})
        except Exception as err:
            raise _internal("cannot list images", err) from err
        return {
            "images": [
                {
                    "id": img.get("Id", ""),
                    "repo_tags": list(img.get("RepoTags") or []),
                    "created": img.get("Created", 0),
                    "size": img.get("Size", 0),
                    "containers": img.get("Containers", 0),
                }
                for img in images or []
            ]
        }

    def get_image_details(self, image_id: str) -> Dict[str, Any]:
        if not image_id:
            raise RpcError(StatusCode.INVALID_ARGUMENT, "image ID is required")
        try:
            details = self.layer.get_image_details(image_id)
        except Exception as err:
            raise _internal("cannot get image details", err) from err
        return {
            "id": details.get("Id", ""),
            "repo_tags": list(details.get("RepoTags") or []),
            "created": details.get("Created", ""),
            "size": details.get("Size", 0),
            "author": details.get("Author", ""),
            "architecture": details.get("Architecture", ""),
            "os": details.get("Os", ""),
        }

    def pull_image(self, link: str, send: Callable[[bytes], Any], registry_auth: str = "") -> None:
        if not link:
            raise RpcError(StatusCode.INVALID_ARGUMENT, "image ID is required")
        try:
            reader = self.layer.pull_image(link, {"RegistryAuth": registry_auth})
        except Exception as err:
            raise _internal("cannot pull image", err) from err
        try:
            stream_reader(reader, send)
        finally:
            _close(reader, "pull")

    def remove_image(self, image_id: str, force: bool = False, prune_children: bool = False) -> Dict[str, Any]:
        if not image_id:
            raise RpcError(StatusCode.INVALID_ARGUMENT, "image ID is required")
        try:
            removed = self.layer.remove_image(image_id, {"Force": force, "PruneChildren": prune_children})
        except Exception as err:
            raise _internal("cannot remove image", err) from err
        return {"results": _deleted_view(removed)}

    def prune_images(self, all_images: str = "") -> Dict[str, Any]:
        try:
            report = self.layer.prune_image({"All": [all_images]})
        except Exception as err:
            raise _internal("cannot prune image", err) from err
        return {
            "images_deleted": _deleted_view(report.get("ImagesDeleted")),
            "space_reclaimed": report.get("SpaceReclaimed", 0),
        }

    def build_image(self, request: BuildImageRequest, send: Callable[[bytes], Any]) -> None:
        if not request.dockerfile:
            raise RpcError(StatusCode.INVALID_ARGUMENT, "dockerfile is required")
        options, build_context = map_build_options(request)
        try:
            body = self.layer.build_image(build_context, options, timeout=BUILD_TIMEOUT)
        except Exception as err:
            raise RpcError(StatusCode.INTERNAL, str(err)) from err
        try:
            stream_reader(body, send)
        finally:
            _close(body, "build")