"""
Type definitions for compose2kube.

These dataclasses represent docker-compose services, their rancher-compose
metadata and the converter configuration.
"""

import os
import shlex
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import DescriptorError


class OutputFormat(str, Enum):
    """Manifest output format."""
    JSON = "json"
    YAML = "yaml"

    @property
    def extension(self) -> str:
        return "json" if self is OutputFormat.JSON else "yml"


class RestartPolicy(str, Enum):
    """Kubernetes pod restart policy."""
    ALWAYS = "Always"
    NEVER = "Never"
    ON_FAILURE = "OnFailure"


def _scalar_to_str(value: Any) -> str:
    """Render a YAML scalar the way it was written in the compose file."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_port(port_spec: Any) -> str:
    if isinstance(port_spec, dict):
        return str(port_spec["target"])
    return str(port_spec)


def _parse_volume(volume_spec: Any) -> str:
    if isinstance(volume_spec, dict):
        if not volume_spec.get("source"):
            # No host path, rejected when the volume is mapped
            return str(volume_spec["target"])
        spec = f"{volume_spec['source']}:{volume_spec['target']}"
        if volume_spec.get("read_only"):
            spec += ":ro"
        return spec
    return str(volume_spec)


def _parse_assignments(data: Any) -> List[str]:
    """Parse environment in list or map form into KEY=VALUE strings."""
    if not data:
        return []
    if isinstance(data, list):
        return [str(item) for item in data]

    assignments = []
    for key, value in data.items():
        if value is None:
            # Inherited from the host environment, nothing to translate
            continue
        assignments.append(f"{key}={_scalar_to_str(value)}")
    return assignments


def _parse_labels(data: Any) -> Dict[str, str]:
    if not data:
        return {}
    if isinstance(data, list):
        labels = {}
        for item in data:
            key, _, value = str(item).partition("=")
            labels[key] = value
        return labels
    return {str(k): _scalar_to_str(v) for k, v in data.items() if v is not None}


def _parse_command(data: Any) -> List[str]:
    if not data:
        return []
    if isinstance(data, str):
        return shlex.split(data)
    return [str(arg) for arg in data]


def service_definitions(data: Optional[Dict]) -> Dict[str, Dict]:
    """
    Return the service map of a compose document.

    Version 2+ files nest services under `services`; version 1 files
    (the format rancher-compose.yml still uses) declare them at top level.
    """
    if not data:
        return {}
    if "services" in data:
        return data["services"] or {}
    return {
        name: definition
        for name, definition in data.items()
        if name != "version" and isinstance(definition, dict)
    }


def _checked_definitions(data: Optional[Dict], source: str) -> Dict[str, Any]:
    if data is not None and not isinstance(data, dict):
        raise DescriptorError(f"The {source} file is not a mapping")
    services = service_definitions(data)
    if not isinstance(services, dict):
        raise DescriptorError(f"The {source} services section is not a mapping")
    return services


@dataclass
class ServiceDescriptor:
    """Parsed docker-compose service, in the string forms compose uses."""
    name: str
    image: Optional[str] = None
    command: List[str] = field(default_factory=list)
    entrypoint: List[str] = field(default_factory=list)
    ports: List[str] = field(default_factory=list)
    environment: List[str] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    volumes: List[str] = field(default_factory=list)
    restart: str = ""

    @classmethod
    def from_dict(cls, name: str, data: Optional[Dict]) -> "ServiceDescriptor":
        """Parse from docker-compose service definition."""
        data = data or {}

        # YAML 1.1 reads an unquoted `restart: no` as a boolean
        restart = data.get("restart", "")
        if restart is False:
            restart = "no"

        return cls(
            name=name,
            image=data.get("image"),
            command=_parse_command(data.get("command")),
            entrypoint=_parse_command(data.get("entrypoint")),
            ports=[_parse_port(p) for p in data.get("ports") or []],
            environment=_parse_assignments(data.get("environment")),
            labels=_parse_labels(data.get("labels")),
            volumes=[_parse_volume(v) for v in data.get("volumes") or []],
            restart=str(restart or ""),
        )


@dataclass
class HealthCheck:
    """Rancher health check. Durations are in milliseconds."""
    port: int
    request_line: Optional[str] = None
    interval: int = 2000
    response_timeout: int = 2000
    initializing_timeout: int = 0
    healthy_threshold: int = 2
    unhealthy_threshold: int = 3

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional["HealthCheck"]:
        """Parse from rancher-compose health_check format."""
        if not data or "port" not in data:
            return None

        return cls(
            port=int(data["port"]),
            request_line=data.get("request_line"),
            interval=int(data.get("interval", 2000)),
            response_timeout=int(data.get("response_timeout", 2000)),
            initializing_timeout=int(data.get("initializing_timeout", 0)),
            healthy_threshold=int(data.get("healthy_threshold", 2)),
            unhealthy_threshold=int(data.get("unhealthy_threshold", 3)),
        )


@dataclass
class RancherService:
    """rancher-compose metadata for one service."""
    scale: int = 1
    health_check: Optional[HealthCheck] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "RancherService":
        if not data:
            return cls()

        return cls(
            scale=int(data.get("scale", 1)),
            health_check=HealthCheck.from_dict(data.get("health_check")),
        )


@dataclass
class ComposeProject:
    """Parsed docker-compose project with its rancher-compose metadata."""
    name: str
    path: str
    services: List[ServiceDescriptor] = field(default_factory=list)
    rancher: Dict[str, RancherService] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls,
        name: str,
        path: str,
        data: Dict,
        rancher_data: Optional[Dict] = None,
    ) -> "ComposeProject":
        """
        Parse from docker-compose.yml and rancher-compose.yml content.

        Raises:
            DescriptorError: If a service definition is malformed
        """
        services = []
        for svc_name, svc_data in _checked_definitions(data, "compose").items():
            try:
                services.append(ServiceDescriptor.from_dict(svc_name, svc_data))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise DescriptorError(
                    f"Invalid compose definition for service {svc_name}: {e!r}",
                    service=svc_name,
                ) from e

        rancher = {}
        for svc_name, svc_data in _checked_definitions(rancher_data, "rancher-compose").items():
            try:
                rancher[svc_name] = RancherService.from_dict(svc_data)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise DescriptorError(
                    f"Invalid rancher-compose definition for service {svc_name}: {e!r}",
                    service=svc_name,
                ) from e

        return cls(name=name, path=path, services=services, rancher=rancher)


@dataclass
class ConverterConfig:
    """Output settings shared by the translation engine and the writer."""
    output_format: OutputFormat = OutputFormat.YAML
    output_dir: str = "output"
    namespace: str = "default"

    @classmethod
    def from_env(
        cls,
        output_format: str = "yaml",
        output_dir: str = "output",
        namespace: Optional[str] = None,
    ) -> "ConverterConfig":
        """Build config, falling back to $NAMESPACE and then "default"."""
        return cls(
            output_format=OutputFormat(output_format),
            output_dir=output_dir,
            namespace=namespace or os.environ.get("NAMESPACE") or "default",
        )
