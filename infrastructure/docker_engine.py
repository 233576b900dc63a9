# ============================================================================
# DOCKER ENGINE CLIENT
# ============================================================================
# STATUS: Infrastructure - Container lifecycle over the Docker Engine API
# PURPOSE: Pull image, create/start/stop/delete the disposable database
# CREATED: 18 OCT 2026
# ============================================================================
"""
Docker Engine Client

Sync httpx client for the Docker Engine HTTP API, reached through the
host-local socket. Only the handful of endpoints the pipeline needs:

    POST   /images/create?fromImage=&tag=    pull (streams JSON progress)
    POST   /containers/create?name=          create
    POST   /containers/{id}/start            start
    POST   /containers/{id}/stop             stop
    DELETE /containers/{id}?force=true       delete

Every failure raises a typed ContainerError. No retries at this layer; the
coordinator decides what a failure means for the run.

Endpoint resolution:
    1. Explicit ``docker_host`` argument
    2. DOCKER_HOST environment variable (unix:// or tcp://)
    3. unix:///var/run/docker.sock (tcp://localhost:2375 on Windows)
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx

from core.config.defaults import ContainerDefaults, DatabaseDefaults, default_docker_host
from core.errors import (
    ConfigurationError,
    ContainerCreateError,
    ContainerLifecycleError,
    ImagePullError,
)

logger = logging.getLogger(__name__)

# Host part is ignored for unix sockets but httpx needs a valid URL
_SOCKET_BASE_URL = "http://docker"


# ============================================================================
# CONTAINER SPEC & HANDLE
# ============================================================================

@dataclass
class ContainerSpec:
    """What to create: image, name, environment and one port binding."""
    image: str
    name: str
    env: List[str] = field(default_factory=list)
    container_port: int = 5432
    host_port: int = 45432

    @classmethod
    def for_postgres(cls, container: ContainerDefaults, database: DatabaseDefaults) -> "ContainerSpec":
        """Spec for the disposable postgres container."""
        return cls(
            image=container.image_ref,
            name=container.container_name,
            env=database.container_env(),
            container_port=container.container_port,
            host_port=container.host_port,
        )

    def to_engine_config(self) -> Dict[str, Any]:
        """Request body for POST /containers/create."""
        port_key = f"{self.container_port}/tcp"
        return {
            "Image": self.image,
            "Env": list(self.env),
            "ExposedPorts": {port_key: {}},
            "HostConfig": {
                "PortBindings": {port_key: [{"HostPort": str(self.host_port)}]},
            },
        }


@dataclass(frozen=True)
class ContainerHandle:
    """Opaque reference to a created container."""
    id: str
    name: str

    @property
    def short_id(self) -> str:
        return self.id[:12]


# ============================================================================
# CLIENT
# ============================================================================

def _resolve_endpoint(docker_host: str) -> Tuple[str, Optional[httpx.HTTPTransport]]:
    """Map a DOCKER_HOST style URL to (base_url, transport)."""
    if docker_host.startswith("unix://"):
        return _SOCKET_BASE_URL, httpx.HTTPTransport(uds=docker_host[len("unix://"):])
    if docker_host.startswith("tcp://"):
        return f"http://{docker_host[len('tcp://'):]}", None
    if docker_host.startswith(("http://", "https://")):
        return docker_host, None
    raise ConfigurationError(f"Unsupported DOCKER_HOST: {docker_host}")


def _error_detail(resp: httpx.Response) -> str:
    """Extract the engine's error message from a response."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text.strip() or f"HTTP {resp.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return str(body)


class DockerEngineClient:
    """
    Sync client for the Docker Engine API.

    Usage:
        with DockerEngineClient() as docker:
            docker.pull_image("postgres", "12.4-alpine")
            handle = docker.create_container(spec)
            docker.start(handle)
            ...
            docker.stop(handle)
            docker.delete(handle)
    """

    def __init__(
        self,
        docker_host: Optional[str] = None,
        timeout: float = 30.0,
        pull_timeout: float = 600.0,
        stop_timeout: int = 10,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            docker_host: Engine endpoint (unix://, tcp://, http://)
            timeout: Per-request timeout in seconds
            pull_timeout: Read timeout while streaming an image pull
            stop_timeout: Seconds the engine waits before killing on stop
            transport: Optional httpx transport (tests inject MockTransport)
        """
        if transport is not None:
            base_url = _SOCKET_BASE_URL
        else:
            host = docker_host or os.environ.get("DOCKER_HOST") or default_docker_host()
            base_url, transport = _resolve_endpoint(host)
            logger.debug(f"Docker Engine endpoint: {host}")

        self.timeout = timeout
        self.pull_timeout = pull_timeout
        self.stop_timeout = stop_timeout
        self._client = httpx.Client(base_url=base_url, transport=transport, timeout=timeout)

    @classmethod
    def from_defaults(cls, defaults: ContainerDefaults) -> "DockerEngineClient":
        return cls(
            docker_host=defaults.docker_host,
            timeout=defaults.api_timeout,
            pull_timeout=defaults.pull_timeout,
            stop_timeout=defaults.stop_timeout,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "DockerEngineClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # IMAGES
    # ------------------------------------------------------------------

    def pull_image(self, image: str, tag: str) -> None:
        """
        Pull ``image:tag`` and block until the engine reports completion.

        The engine answers 200 and streams newline-delimited JSON progress;
        registry failures arrive as an ``error`` entry inside that stream.

        Raises:
            ImagePullError: Non-200 status, stream error, or transport failure
        """
        ref = f"{image}:{tag}"
        logger.info(f"Pulling image {ref}...")

        try:
            with self._client.stream(
                "POST",
                "/images/create",
                params={"fromImage": image, "tag": tag},
                timeout=httpx.Timeout(self.timeout, read=self.pull_timeout),
            ) as resp:
                if resp.status_code != 200:
                    resp.read()
                    raise ImagePullError(
                        f"Pull of {ref} failed ({resp.status_code}): {_error_detail(resp)}",
                        image=ref,
                    )
                for line in resp.iter_lines():
                    if not line.strip():
                        continue
                    try:
                        event = json.loads(line)
                    except ValueError:
                        continue
                    if event.get("error"):
                        raise ImagePullError(f"Pull of {ref} failed: {event['error']}", image=ref)
                    if event.get("status"):
                        logger.debug(f"   {event.get('id', ref)}: {event['status']}")
        except httpx.HTTPError as e:
            raise ImagePullError(f"Pull of {ref} failed: {e}", image=ref) from e

        logger.debug(f"Image {ref} pulled")

    # ------------------------------------------------------------------
    # CONTAINERS
    # ------------------------------------------------------------------

    def create_container(self, spec: ContainerSpec) -> ContainerHandle:
        """
        Create (but do not start) a container.

        Raises:
            ContainerCreateError: Name already in use (409), unknown image,
                or transport failure
        """
        logger.info(f"Creating container {spec.name} ({spec.image}, host port {spec.host_port})...")

        try:
            resp = self._client.post(
                "/containers/create",
                params={"name": spec.name},
                json=spec.to_engine_config(),
            )
        except httpx.HTTPError as e:
            raise ContainerCreateError(f"Cannot create container {spec.name}: {e}", name=spec.name) from e

        if resp.status_code == 409:
            raise ContainerCreateError(
                f"Container name {spec.name} already in use: {_error_detail(resp)}",
                name=spec.name,
                status_code=409,
            )
        if resp.status_code != 201:
            raise ContainerCreateError(
                f"Cannot create container {spec.name} ({resp.status_code}): {_error_detail(resp)}",
                name=spec.name,
                status_code=resp.status_code,
            )

        body = resp.json()
        for warning in body.get("Warnings") or []:
            logger.warning(f"Engine warning: {warning}")

        handle = ContainerHandle(id=body["Id"], name=spec.name)
        logger.debug(f"Container {handle.name} created as {handle.short_id}")
        return handle

    def start(self, handle: ContainerHandle) -> None:
        """Start a created container. Already running counts as success."""
        logger.info(f"Starting container {handle.name}...")
        self._lifecycle("start", handle, "POST", f"/containers/{handle.id}/start")

    def stop(self, handle: ContainerHandle) -> None:
        """Stop a running container. Already stopped counts as success."""
        logger.info(f"Stopping container {handle.name}...")
        self._lifecycle(
            "stop",
            handle,
            "POST",
            f"/containers/{handle.id}/stop",
            params={"t": self.stop_timeout},
            timeout=self.timeout + self.stop_timeout,
        )

    def delete(self, handle: ContainerHandle, force: bool = True) -> None:
        """Remove a container (killing it first when ``force``)."""
        logger.info(f"Deleting container {handle.name}...")
        self._lifecycle(
            "delete",
            handle,
            "DELETE",
            f"/containers/{handle.id}",
            params={"force": "true" if force else "false"},
        )

    def _lifecycle(
        self,
        transition: str,
        handle: ContainerHandle,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Issue one lifecycle request; 204 and 304 are success."""
        try:
            resp = self._client.request(
                method,
                path,
                params=params,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.HTTPError as e:
            raise ContainerLifecycleError(transition, handle.name, str(e)) from e

        if resp.status_code == 304:
            logger.debug(f"Container {handle.name} already in requested state ({transition})")
            return
        if resp.status_code != 204:
            raise ContainerLifecycleError(
                transition,
                handle.name,
                f"HTTP {resp.status_code}: {_error_detail(resp)}",
            )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ContainerSpec",
    "ContainerHandle",
    "DockerEngineClient",
]
