"""Docker implementation of the ContainerRuntime interface.

Uses the low-level Docker Engine API through the docker SDK:
- container list (``docker ps``) for discovery
- inspect for the primary pid (``State.Pid``)
- top (``docker top``) for the full process list of a container
"""

from __future__ import annotations

import logging
from typing import Any

import docker
from docker.errors import APIError, DockerException, NotFound

from container_stats.core.constants import RUNNING_STATE
from container_stats.core.exceptions import ContainerUnavailable, RuntimeUnavailable
from container_stats.monitoring.base import ContainerHandle, ContainerRuntime

logger = logging.getLogger(__name__)

# Docker answers 409 Conflict for `top` on a container that is not running.
HTTP_CONFLICT = 409


class DockerRuntime(ContainerRuntime):
    """ContainerRuntime backed by a Docker daemon.

    Example:
        ```python
        runtime = DockerRuntime()
        for container in runtime.list_running_containers():
            print(container.names, runtime.get_container_primary_pid(container.id))
        ```
    """

    def __init__(self, client: docker.DockerClient | None = None) -> None:
        """Initialize the runtime.

        Args:
            client: Docker client to use; defaults to ``docker.from_env()``

        Raises:
            RuntimeUnavailable: If no daemon can be reached
        """
        if client is None:
            logger.info("Attempting to connect to docker daemon")
            try:
                client = docker.from_env()
            except DockerException as e:
                raise RuntimeUnavailable(f"Error connecting to docker daemon: {e}") from e
        self._client = client

    @property
    def name(self) -> str:
        return "docker"

    def is_available(self) -> bool:
        try:
            return bool(self._client.ping())
        except (DockerException, OSError):
            return False

    def list_running_containers(self) -> list[ContainerHandle]:
        try:
            result = self._client.api.containers(filters={"status": RUNNING_STATE})
        except (DockerException, OSError) as e:
            raise RuntimeUnavailable(f"Error listing containers: {e}") from e

        logger.debug(f"Filtering containers {len(result)} by State (want `{RUNNING_STATE}`)")
        return [
            self._to_handle(entry) for entry in result if entry.get("State") == RUNNING_STATE
        ]

    def list_container_processes(self, container_id: str) -> list[int]:
        try:
            top = self._client.api.top(container_id)
        except (DockerException, OSError) as e:
            raise self._translate_error(container_id, e) from e
        return parse_top_pids(top)

    def get_container_primary_pid(self, container_id: str) -> int:
        try:
            info = self._client.api.inspect_container(container_id)
        except (DockerException, OSError) as e:
            raise self._translate_error(container_id, e) from e

        pid = int(info.get("State", {}).get("Pid", 0))
        if pid <= 0:
            raise ContainerUnavailable(container_id, "container has no running process")
        return pid

    def _translate_error(self, container_id: str, error: Exception) -> Exception:
        if isinstance(error, NotFound):
            return ContainerUnavailable(container_id, "no such container")
        if isinstance(error, APIError) and error.status_code == HTTP_CONFLICT:
            return ContainerUnavailable(container_id, "container is not running")
        return RuntimeUnavailable(f"Docker request for {container_id[:12]} failed: {error}")

    @staticmethod
    def _to_handle(entry: dict[str, Any]) -> ContainerHandle:
        return ContainerHandle(
            id=entry["Id"],
            names=[n.lstrip("/") for n in entry.get("Names") or []],
            is_running=entry.get("State") == RUNNING_STATE,
        )


def parse_top_pids(top: dict[str, Any]) -> list[int]:
    """Extract host pids from a ``docker top`` response.

    The PID column is located by title since its position depends on the
    ps arguments used by the daemon.
    """
    titles = top.get("Titles") or []
    try:
        column = titles.index("PID")
    except ValueError:
        logger.warning(f"No PID column in docker top titles {titles}")
        return []

    pids = []
    for row in top.get("Processes") or []:
        try:
            pids.append(int(row[column]))
        except (IndexError, ValueError):
            logger.debug(f"Skipping malformed docker top row {row}")
    return pids
