"""
Converts every service of a compose project and writes the manifests.
"""

import logging
from pathlib import Path
from typing import Callable, List

from .errors import SerializationError
from .generators import generate_replication_controller, generate_service, short_name
from .types import ComposeProject, ConverterConfig
from .writer import ManifestWriter

logger = logging.getLogger(__name__)


def convert_project(
    project: ComposeProject,
    config: ConverterConfig,
    echo: Callable[[str], None] = print,
) -> List[Path]:
    """
    Write a ReplicationController and a Service for each compose service.

    Services are processed in declaration order. The first error stops the
    batch and is raised to the caller; manifests already written are kept.

    Args:
        project: Parsed compose project
        config: Converter configuration
        echo: Called with each written path (default: print to stdout)

    Returns:
        Paths of the written files, in write order
    """
    try:
        Path(config.output_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SerializationError(
            f"Failed to create the output directory {config.output_dir}: {e}"
        ) from e

    writer = ManifestWriter(config)
    pending_rancher = dict(project.rancher)
    written = []

    for service in project.services:
        short = short_name(service.name)
        if short != service.name:
            logger.info(f"Service {service.name} truncated to {short}")

        rc = generate_replication_controller(
            service.name, short, service, config, project.rancher
        )
        pending_rancher.pop(service.name, None)
        path = writer.write(short, "rc", rc)
        echo(str(path))
        written.append(path)

        srv = generate_service(short, service, rc, config)
        path = writer.write(short, "srv", srv)
        echo(str(path))
        written.append(path)

    for name in pending_rancher:
        logger.warning(f"rancher-compose entry {name} matches no compose service")

    return written
