"""
Docker Compose parser for compose2kube.

Loads docker-compose.yml and the optional rancher-compose.yml next to it.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from .errors import DescriptorError
from .types import ComposeProject, service_definitions

logger = logging.getLogger(__name__)

COMPOSE_FILENAMES = [
    "docker-compose.yml",
    "docker-compose.yaml",
    "compose.yml",
    "compose.yaml",
]


def load_docker_compose(
    path: str,
    filename: str = "docker-compose.yml",
) -> Dict[str, Any]:
    """
    Load docker-compose.yml file.

    Args:
        path: Directory containing docker-compose.yml
        filename: Compose file name (default: docker-compose.yml)

    Returns:
        Parsed YAML content

    Raises:
        FileNotFoundError: If compose file not found
        DescriptorError: If the file declares no services
    """
    compose_path = Path(path) / filename
    if not compose_path.exists():
        alternatives = [f for f in COMPOSE_FILENAMES if f != filename]
        for alt in alternatives:
            alt_path = Path(path) / alt
            if alt_path.exists():
                compose_path = alt_path
                break
        else:
            raise FileNotFoundError(
                f"No docker-compose file found in {path}. "
                f"Tried: {filename}, {', '.join(alternatives)}"
            )

    logger.debug(f"Loading compose file {compose_path}")
    try:
        with open(compose_path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise DescriptorError(f"Failed to read the compose project from {compose_path}: {e}")
    except yaml.YAMLError as e:
        raise DescriptorError(f"Failed to parse the compose project from {compose_path}: {e}")

    if not isinstance(data, dict) or not service_definitions(data):
        raise DescriptorError(f"No service config found in {compose_path}, aborting")
    return data


def load_rancher_compose(
    path: str,
    filename: str = "rancher-compose.yml",
) -> Dict[str, Any]:
    """
    Load rancher-compose.yml file if present.

    Returns:
        Parsed YAML content, or an empty dict when there is no such file
    """
    rancher_path = Path(path) / filename
    if not rancher_path.exists():
        logger.debug(f"No rancher-compose file at {rancher_path}")
        return {}

    try:
        with open(rancher_path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise DescriptorError(f"Failed to read the rancher compose file {rancher_path}: {e}")
    except yaml.YAMLError as e:
        raise DescriptorError(f"Failed to parse the rancher compose file {rancher_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DescriptorError(f"Rancher compose file {rancher_path} is not a mapping")
    return data


def parse_compose_project(
    name: str,
    path: str,
    filename: str = "docker-compose.yml",
    rancher_filename: str = "rancher-compose.yml",
) -> ComposeProject:
    """
    Parse a docker-compose project.

    Args:
        name: Project name
        path: Directory containing docker-compose.yml
        filename: Compose file name
        rancher_filename: rancher-compose file name

    Returns:
        Parsed ComposeProject
    """
    data = load_docker_compose(path, filename)
    rancher_data = load_rancher_compose(path, rancher_filename)
    return ComposeProject.from_dict(name, path, data, rancher_data)
