"""
Kubernetes manifest generators for Docker Compose services.

Converts each docker-compose service to a ReplicationController and a
companion Service.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from .errors import InvalidPortError, InvalidVolumeError, UnknownRestartPolicyError
from .types import ConverterConfig, RancherService, RestartPolicy, ServiceDescriptor

logger = logging.getLogger(__name__)

# Kubernetes resource name ceiling used for generated names
SHORT_NAME_LIMIT = 24

RANCHER_SCHEDULER_PREFIX = "io.rancher.scheduler"
RANCHER_HOST_AFFINITY = "io.rancher.scheduler.affinity:host_label"

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")

_RESTART_POLICIES = {
    "": RestartPolicy.ALWAYS,
    "always": RestartPolicy.ALWAYS,
    "no": RestartPolicy.NEVER,
    "on-failure": RestartPolicy.ON_FAILURE,
}


def short_name(name: str) -> str:
    """Truncate a service name to the Kubernetes name limit."""
    return name[:SHORT_NAME_LIMIT]


def _ms_to_seconds(value: int) -> int:
    """Convert rancher milliseconds to whole seconds, rounding up."""
    return -(-value // 1000)


def configure_ports(name: str, service: ServiceDescriptor) -> List[Dict[str, Any]]:
    """
    Map compose ports to container ports.

    "8080", "80:8080" and "\"8080\"" all give container port 8080.

    Raises:
        InvalidPortError: If a port is not a 32-bit integer
    """
    ports = []
    for port in service.ports:
        port = port.strip().strip('"').strip()
        if ":" in port:
            # Mapped port, only the container side matters. With ip:host:container
            # the last part is kept, not the host port in the middle.
            port = port.rsplit(":", 1)[1]

        if not _INTEGER_RE.match(port) or not INT32_MIN <= int(port) <= INT32_MAX:
            raise InvalidPortError(
                f"Invalid container port {port} for service {name}",
                service=name,
            )
        ports.append({"containerPort": int(port)})
    return ports


def configure_environment(
    service: ServiceDescriptor,
    namespace: str,
) -> List[Dict[str, str]]:
    """Map KEY=VALUE assignments to env vars, NAMESPACE first."""
    env_vars = [{"name": "NAMESPACE", "value": namespace}]
    for assignment in service.environment:
        if "=" not in assignment:
            continue
        key, value = assignment.split("=", 1)
        env_vars.append({"name": key, "value": value})
    return env_vars


def configure_labels(short: str, service: ServiceDescriptor) -> Dict[str, str]:
    """Copy service labels, dropping rancher scheduler hints."""
    labels = {"service": short}
    for key, value in service.labels.items():
        if RANCHER_SCHEDULER_PREFIX in key:
            logger.warning(f"Ignoring label {key}: {value}")
            continue
        labels[key] = value
    # The selector relies on this label
    labels["service"] = short
    return labels


def configure_affinity(short: str, service: ServiceDescriptor) -> Dict[str, str]:
    """Turn the rancher host_label affinity into a node selector."""
    affinity = {}
    for key, value in service.labels.items():
        if key != RANCHER_HOST_AFFINITY:
            continue
        parts = value.split("=")
        if len(parts) != 2:
            logger.warning(f"Wrong label value {key}: {value} for service {short}")
            continue
        affinity[parts[0]] = parts[1]
    return affinity


def configure_volumes(
    name: str,
    service: ServiceDescriptor,
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Map host:container[:mode] volumes to hostPath mounts.

    Returns:
        Tuple of (volume mounts, pod volumes)

    Raises:
        InvalidVolumeError: If a volume has no host path
    """
    volume_mounts = []
    volumes = []

    for spec in service.volumes:
        parts = spec.split(":")
        if len(parts) < 2 or not parts[0]:
            raise InvalidVolumeError(
                f"Volumes without host path are not supported: {spec} "
                f"(service {name})",
                service=name,
            )

        host_path, container_path = parts[0], parts[1]
        read_only = False
        for option in parts[2:]:
            if option == "ro":
                read_only = True
            elif option == "rw":
                read_only = False

        # Collisions between paths differing only by "/" are not resolved
        vol_name = host_path.replace("/", "")

        volume_mounts.append({
            "name": vol_name,
            "mountPath": container_path,
            "readOnly": read_only,
        })
        volumes.append({
            "name": vol_name,
            "hostPath": {
                "path": host_path,
            },
        })

    return volume_mounts, volumes


def configure_restart_policy(name: str, service: ServiceDescriptor) -> RestartPolicy:
    """
    Map compose restart values to a pod restart policy.

    Raises:
        UnknownRestartPolicyError: For anything but "", always, no, on-failure
    """
    try:
        return _RESTART_POLICIES[service.restart]
    except KeyError:
        raise UnknownRestartPolicyError(
            f"Unknown restart policy {service.restart} for service {name}",
            service=name,
        ) from None


def configure_scale(name: str, rancher: Dict[str, RancherService]) -> int:
    """Replica count from rancher-compose scale (default: 1)."""
    meta = rancher.get(name)
    if meta is None:
        return 1
    return meta.scale


def configure_readiness_probe(
    name: str,
    rancher: Dict[str, RancherService],
) -> Optional[Dict[str, Any]]:
    """
    Build a readiness probe from the rancher-compose health check.

    An HTTP request line gives an httpGet probe, otherwise the port is
    probed over TCP.
    """
    meta = rancher.get(name)
    if meta is None or meta.health_check is None:
        return None

    check = meta.health_check
    probe: Dict[str, Any] = {}

    if check.request_line:
        words = check.request_line.split()
        path = words[1] if len(words) > 1 else "/"
        probe["httpGet"] = {"path": path, "port": check.port}
    else:
        probe["tcpSocket"] = {"port": check.port}

    if check.initializing_timeout > 0:
        probe["initialDelaySeconds"] = _ms_to_seconds(check.initializing_timeout)
    probe["timeoutSeconds"] = _ms_to_seconds(check.response_timeout)
    probe["periodSeconds"] = _ms_to_seconds(check.interval)
    probe["successThreshold"] = check.healthy_threshold
    probe["failureThreshold"] = check.unhealthy_threshold

    return probe


def generate_replication_controller(
    name: str,
    short: str,
    service: ServiceDescriptor,
    config: ConverterConfig,
    rancher: Optional[Dict[str, RancherService]] = None,
) -> Dict[str, Any]:
    """
    Generate Kubernetes ReplicationController from compose service.

    Args:
        name: Full compose service name
        short: Truncated name used for the resource, labels and selector
        service: Compose service
        config: Converter configuration (namespace)
        rancher: rancher-compose metadata keyed by service name

    Returns:
        ReplicationController manifest dict
    """
    rancher = rancher or {}

    container: Dict[str, Any] = {"name": short}
    if service.image:
        container["image"] = service.image
    if service.command:
        container["args"] = service.command
    if service.entrypoint:
        container["command"] = service.entrypoint

    ports = configure_ports(name, service)
    if ports:
        container["ports"] = ports

    container["env"] = configure_environment(service, config.namespace)

    probe = configure_readiness_probe(name, rancher)
    if probe:
        container["readinessProbe"] = probe

    volume_mounts, volumes = configure_volumes(name, service)
    if volume_mounts:
        container["volumeMounts"] = volume_mounts

    pod_spec: Dict[str, Any] = {}
    if volumes:
        pod_spec["volumes"] = volumes
    pod_spec["containers"] = [container]
    pod_spec["restartPolicy"] = configure_restart_policy(name, service).value

    node_selector = configure_affinity(short, service)
    if node_selector:
        pod_spec["nodeSelector"] = node_selector

    return {
        "kind": "ReplicationController",
        "apiVersion": "v1",
        "metadata": {
            "name": short,
            "namespace": config.namespace,
            "labels": {"service": short},
        },
        "spec": {
            "replicas": configure_scale(name, rancher),
            "selector": {"service": short},
            "template": {
                "metadata": {
                    "labels": configure_labels(short, service),
                },
                "spec": pod_spec,
            },
        },
    }


def generate_service(
    short: str,
    service: ServiceDescriptor,
    controller: Dict[str, Any],
    config: ConverterConfig,
) -> Dict[str, Any]:
    """
    Generate Kubernetes Service exposing a ReplicationController.

    Args:
        short: Truncated service name
        service: Compose service
        controller: ReplicationController generated for the service
        config: Converter configuration (namespace)

    Returns:
        Service manifest dict
    """
    container = controller["spec"]["template"]["spec"]["containers"][0]

    ports = []
    for p in container.get("ports", []):
        ports.append({
            "name": f"port-{p['containerPort']}",
            "port": p["containerPort"],
            "targetPort": p["containerPort"],
            "protocol": "TCP",
        })

    spec: Dict[str, Any] = {"selector": dict(controller["spec"]["selector"])}
    if ports:
        spec["ports"] = ports

    logger.debug(f"Service {short} exposes {len(ports)} ports of {service.name}")

    return {
        "kind": "Service",
        "apiVersion": "v1",
        "metadata": {
            "name": short,
            "namespace": config.namespace,
            "labels": {"service": short},
        },
        "spec": spec,
    }
