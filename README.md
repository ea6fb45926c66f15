# yadoma

`yadoma` is the service layer of a Docker management agent. It takes
requests for containers, images, networks, volumes and host information,
checks them, turns them into the options a Docker engine client expects,
hands them to a *layer* object that talks to the engine, and maps the
answers into plain Python results.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Services

| Module                     | Class              | Covers                                                  |
|----------------------------|--------------------|---------------------------------------------------------|
| `yadoma.container_service` | `ContainerService` | list, inspect, create, start/stop/restart, pause/unpause, kill, rename, remove, logs, stats |
| `yadoma.image_service`     | `ImageService`     | list, inspect, pull, build, remove, prune               |
| `yadoma.network_service`   | `NetworkService`   | list, inspect, create, remove, connect, disconnect, prune |
| `yadoma.volume_service`    | `VolumeService`    | list, inspect, create, remove, prune                    |
| `yadoma.system_service`    | `SystemService`    | engine information and disk usage                       |

Each service is built from a layer and has a `SERVICE_NAME` class attribute
(for example `"volume.v1.VolumeService"`):

```python
from yadoma.volume_service import VolumeService

service = VolumeService(layer)
volumes = service.get_volumes()
```

Results are plain dicts with snake_case keys, except where noted:
`ContainerService.get_container_details` returns `MountPoint` and
`NetworkSettings` values from `yadoma.container_mapper`, and the stats stream
delivers `ContainerStats` values.

### The layer

The layer is any object with the methods a service calls. It receives
engine-API shaped options and returns engine-API shaped mappings (keys such
as `"Id"`, `"Name"`, `"RepoTags"`) or binary readers for streamed output.

- `ContainerService`: `get_containers(options)`,
  `get_container_details(container_id)`,
  `get_container_logs(container_id, options)`,
  `get_container_stats(container_id, stream)`,
  `create_container(config, host_config, networking_config, platform, name)`,
  `start_container(container_id, options)`, `stop_container(...)`,
  `restart_container(...)`, `remove_container(container_id, options)`,
  `pause_container(container_id)`, `unpause_container(container_id)`,
  `kill_container(container_id, signal)`, `rename_container(container_id, name)`.
- `ImageService`: `get_images(options)`, `get_image_details(image_id)`,
  `pull_image(image_name, options)`, `remove_image(image_id, options)`,
  `prune_image(filters)`, `build_image(build_context, options, timeout)`
  (called with `timeout=30.0`).
- `NetworkService`: `get_networks(options)`,
  `get_network_details(network_id, options)`, `create_network(name, options)`,
  `remove_network(network_id)`,
  `connect_network(network_id, container_id, config)`,
  `disconnect_network(network_id, container_id, force)`,
  `prune_networks(filters)`.
- `VolumeService`: `get_volumes()`, `get_volume_details(volume_id)`,
  `create_volume(options)`, `remove_volume(volume_id, force)`,
  `prune_volumes(filters)`.
- `SystemService`: `get_system_info()`, `get_disk_usage(options)`.

Prune filters are passed as `{"All": [value]}`.

### Errors

Every failure a service reports is raised as `yadoma.rpc.RpcError`, carrying
a `yadoma.rpc.StatusCode` in `code` and a text in `message`. A missing
required argument (an empty container, image, network or volume id, an empty
image for a new container, an empty Dockerfile for a build, an empty network
or volume name) gives `INVALID_ARGUMENT` and the layer is never called. An
error raised by the layer gives `INTERNAL`, with the layer's message
included.

```python
from yadoma.rpc import RpcError

try:
    service.get_volume_details("")
except RpcError as err:
    print(err.code, err.message)
```

### Streaming calls

`ContainerService.get_container_logs`, `ContainerService.get_container_stats`,
`ImageService.pull_image` and `ImageService.build_image` stream their output.
They take a `send` callable that receives each piece as it arrives:

```python
from yadoma.container_service import ContainerService

chunks = []
ContainerService(layer).get_container_logs("c1", chunks.append, True)
```

Raw output is passed on in chunks of up to 1024 bytes; stats are decoded from
a stream of JSON documents and each is mapped to a `ContainerStats`. The
reader returned by the layer is closed afterwards. An error raised by `send`,
or malformed JSON in the stats stream, stops the stream and is raised to the
caller unchanged.

## Stream helpers

`yadoma.stream` holds the building blocks the streaming calls use:

- `stream_reader(reader, send, chunk_size=1024)` reads a binary file-like
  object to its end and passes each non-empty chunk to `send`.
- `stream_decoder(reader, send)` decodes consecutive JSON values, with or
  without whitespace between them, and passes each to `send`. An empty
  stream sends nothing; malformed or truncated input raises
  `json.JSONDecodeError`.
- `StreamWriter(send)` is a writable object whose `write` forwards data to
  `send` and returns its length.

```python
import io
from yadoma.stream import stream_decoder

items = []
stream_decoder(io.BytesIO(b'{"name":"a","value":1}{"name":"b","value":2}'), items.append)
```

## Mappers

The mapping functions can be used on their own:

- `yadoma.container_mapper`: `extract_status`, `map_mounts`, `map_networks`,
  `map_stats`, `map_config`, `map_host_config`, `map_networking` and
  `map_ports` (which renders ports as `[ip:]public->private/type`), with the
  request dataclasses `HostConfig`, `PortMapping`, `Mount` and
  `RestartPolicy`.
- `yadoma.image_service`: `map_build_options` and `BuildImageRequest`.
- `yadoma.network_service`: `map_create_options`, `map_endpoint_settings`,
  `CreateNetworkRequest` and `EndpointSettings`.
- `yadoma.system_service`: `map_disk_usage_image`, `map_disk_usage_container`
  and `map_disk_usage_volume`.

## Logging

`yadoma.logger.configure_logging(environ=None, stream=None)` sets up the
`yadoma` logger with coloured console output on `stream` (standard output by
default) and returns it. The level comes from `LOG_LEVEL` in `environ`
(the process environment by default): `debug`, `info`, `warn` or `error`, in
any case; anything else, or no value, means `debug`. `level_from_name` does
this mapping on its own, and `get_env(key, default)` reads a variable with a
default for unset or empty values.

Lines are rendered by `ConsoleFormatter` as
`time | LEVEL | ***message*** name:VALUE`; extra fields are taken from a
`fields` mapping passed through `extra`. A failed write is reported on
standard error.

## What the package does not do

- It has no layer that talks to a Docker engine; you supply one.
- It runs no RPC server and defines no wire protocol; the services are plain
  Python objects to be called directly.
- It provides no command-line program.