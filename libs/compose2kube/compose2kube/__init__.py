"""
compose2kube - CLI tool for Docker Compose projects

Converts docker-compose.yml services to Kubernetes ReplicationControllers
and Services.
"""

__version__ = "0.1.0"

from .types import (
    OutputFormat,
    RestartPolicy,
    ServiceDescriptor,
    HealthCheck,
    RancherService,
    ComposeProject,
    ConverterConfig,
)

from .errors import (
    ConversionError,
    DescriptorError,
    InvalidPortError,
    InvalidVolumeError,
    UnknownRestartPolicyError,
    SerializationError,
)

from .parser import (
    load_docker_compose,
    load_rancher_compose,
    parse_compose_project,
)

from .generators import (
    short_name,
    generate_replication_controller,
    generate_service,
)

from .writer import ManifestWriter

from .converter import convert_project

__all__ = [
    # Types
    "OutputFormat",
    "RestartPolicy",
    "ServiceDescriptor",
    "HealthCheck",
    "RancherService",
    "ComposeProject",
    "ConverterConfig",
    # Errors
    "ConversionError",
    "DescriptorError",
    "InvalidPortError",
    "InvalidVolumeError",
    "UnknownRestartPolicyError",
    "SerializationError",
    # Parser
    "load_docker_compose",
    "load_rancher_compose",
    "parse_compose_project",
    # Generators
    "short_name",
    "generate_replication_controller",
    "generate_service",
    # Output
    "ManifestWriter",
    "convert_project",
]
