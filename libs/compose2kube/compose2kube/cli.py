"""
CLI for compose2kube - Docker Compose to Kubernetes converter.

Commands:
    generate    Write ReplicationController and Service manifests
    parse       Parse and display docker-compose.yml
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .converter import convert_project
from .errors import ConversionError
from .parser import parse_compose_project
from .types import ConverterConfig


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="compose2kube",
        description="Convert Docker Compose services to Kubernetes manifests",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # generate command
    gen_parser = subparsers.add_parser(
        "generate",
        help="Write ReplicationController and Service manifests",
    )
    gen_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory containing docker-compose.yml (default: .)",
    )
    gen_parser.add_argument(
        "--compose-file",
        default="docker-compose.yml",
        help="Compose file name (default: docker-compose.yml)",
    )
    gen_parser.add_argument(
        "--rancher-file",
        default="rancher-compose.yml",
        help="rancher-compose file name (default: rancher-compose.yml)",
    )
    gen_parser.add_argument(
        "-o", "--output",
        default="output",
        help="Output directory (default: output)",
    )
    gen_parser.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Output format (default: yaml)",
    )
    gen_parser.add_argument(
        "-n", "--namespace",
        help="Target namespace (default: $NAMESPACE or default)",
    )

    # parse command
    parse_parser = subparsers.add_parser(
        "parse",
        help="Parse and display docker-compose.yml",
    )
    parse_parser.add_argument(
        "path",
        help="Directory containing docker-compose.yml",
    )
    parse_parser.add_argument(
        "--compose-file",
        default="docker-compose.yml",
        help="Compose file name (default: docker-compose.yml)",
    )
    parse_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )

    return parser


def cmd_generate(args: argparse.Namespace) -> int:
    """Handle generate command."""
    config = ConverterConfig.from_env(
        output_format=args.format,
        output_dir=args.output,
        namespace=args.namespace,
    )

    try:
        project = parse_compose_project(
            name=Path(args.path).resolve().name,
            path=args.path,
            filename=args.compose_file,
            rancher_filename=args.rancher_file,
        )
        written = convert_project(project, config)
    except (FileNotFoundError, ConversionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        print(
            f"Generated {len(written)} manifests for {project.name} "
            f"({len(project.services)} services)",
            file=sys.stderr,
        )

    return 0


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle parse command."""
    try:
        project = parse_compose_project(
            name=Path(args.path).resolve().name,
            path=args.path,
            filename=args.compose_file,
        )
    except (FileNotFoundError, ConversionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        data = {
            "name": project.name,
            "path": project.path,
            "services": [],
        }
        for svc in project.services:
            meta = project.rancher.get(svc.name)
            data["services"].append({
                "name": svc.name,
                "image": svc.image,
                "ports": svc.ports,
                "volumes": svc.volumes,
                "environment": svc.environment,
                "labels": svc.labels,
                "restart": svc.restart,
                "scale": meta.scale if meta else 1,
            })
        print(json.dumps(data, indent=2))
    else:
        print(f"Project: {project.name}")
        print(f"Path: {project.path}")
        print(f"Services: {len(project.services)}")
        print()

        for svc in project.services:
            print(f"  Service: {svc.name}")
            if svc.image:
                print(f"    Image: {svc.image}")
            if svc.ports:
                print(f"    Ports: {', '.join(svc.ports)}")
            if svc.volumes:
                print(f"    Volumes: {len(svc.volumes)}")
            if svc.environment:
                print(f"    Environment: {len(svc.environment)} vars")
            if svc.restart:
                print(f"    Restart: {svc.restart}")
            print()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "generate": cmd_generate,
        "parse": cmd_parse,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
