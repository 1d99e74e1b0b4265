"""
Manifest writer for compose2kube.

Renders manifests as JSON or YAML and writes one file per object.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict

import yaml

from .errors import SerializationError
from .types import ConverterConfig, OutputFormat

logger = logging.getLogger(__name__)

# Rancher cannot read this field back, so it is left commented out
_EXTERNAL_NAME_RE = re.compile(r"^([ \t]*)(ExternalName:)", re.MULTILINE)


class QuotedString(str):
    """String that is always emitted double-quoted in YAML."""


class ManifestDumper(yaml.SafeDumper):
    """YAML dumper that knows about QuotedString."""


def _represent_quoted(dumper: yaml.SafeDumper, data: QuotedString) -> yaml.Node:
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(data), style='"')


ManifestDumper.add_representer(QuotedString, _represent_quoted)


def _quote_env_values(obj: Any) -> Any:
    """
    Mark every container env value for double quoting.

    Unquoted values such as true or 8080 would come back as booleans or
    numbers when the manifest is read again.
    """
    if isinstance(obj, list):
        return [_quote_env_values(item) for item in obj]
    if not isinstance(obj, dict):
        return obj

    result = {}
    for key, value in obj.items():
        if key == "env" and isinstance(value, list):
            result[key] = [
                {
                    k: QuotedString(v) if k == "value" and isinstance(v, str) else v
                    for k, v in entry.items()
                }
                for entry in value
            ]
        else:
            result[key] = _quote_env_values(value)
    return result


def _comment_external_name(content: str) -> str:
    return _EXTERNAL_NAME_RE.sub(r"\1# \2", content)


class ManifestWriter:
    """Serializes manifests into the configured output directory."""

    def __init__(self, config: ConverterConfig):
        self.config = config

    def render(self, manifest: Dict[str, Any]) -> str:
        """
        Render a manifest in the configured format.

        The manifest always goes through JSON first so both formats see
        the same plain data.
        """
        try:
            data = json.dumps(manifest, indent=2)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to encode manifest: {e}")

        if self.config.output_format == OutputFormat.JSON:
            return data

        plain = _quote_env_values(json.loads(data))
        try:
            content = yaml.dump(
                plain,
                Dumper=ManifestDumper,
                default_flow_style=False,
                sort_keys=False,
            )
        except yaml.YAMLError as e:
            raise SerializationError(f"Failed to encode manifest as YAML: {e}")
        return _comment_external_name(content)

    def output_path(self, short: str, suffix: str) -> Path:
        filename = f"{short}-{suffix}.{self.config.output_format.extension}"
        return Path(self.config.output_dir) / filename

    def write(self, short: str, suffix: str, manifest: Dict[str, Any]) -> Path:
        """
        Write a manifest to <output_dir>/<short>-<suffix>.<ext>.

        Returns:
            Path of the written file

        Raises:
            SerializationError: If the manifest cannot be encoded or written
        """
        try:
            content = self.render(manifest)
        except SerializationError as e:
            raise SerializationError(
                f"Failed to marshal file {short}-{suffix}: {e}",
                service=short,
            ) from e

        out_file = self.output_path(short, suffix)
        try:
            out_file.write_text(content)
        except OSError as e:
            raise SerializationError(
                f"Failed to write file {out_file}: {e}",
                service=short,
            ) from e

        logger.debug(f"Wrote {out_file}")
        return out_file
