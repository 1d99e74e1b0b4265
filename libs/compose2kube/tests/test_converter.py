"""Tests for compose2kube project conversion."""

import json
import logging

import pytest
import yaml

from compose2kube.converter import convert_project
from compose2kube.errors import InvalidPortError
from compose2kube.types import ComposeProject, ConverterConfig, OutputFormat


@pytest.fixture
def compose_project():
    """Create a compose project with multiple services."""
    return ComposeProject.from_dict(
        "testproject",
        "/path/to/project",
        {
            "services": {
                "web": {
                    "image": "nginx",
                    "ports": ["80:8080"],
                    "restart": "always",
                    "labels": {"env": "prod"},
                },
                "a-really-long-service-name-for-testing": {
                    "image": "busybox",
                    "environment": ["MODE=batch"],
                },
            },
        },
        {"web": {"scale": 2}, "gone": {"scale": 5}},
    )


@pytest.fixture
def yaml_config(tmp_path):
    return ConverterConfig(
        output_format=OutputFormat.YAML,
        output_dir=str(tmp_path / "out"),
        namespace="apps",
    )


class TestConvertProject:
    def test_written_files(self, compose_project, yaml_config, tmp_path):
        echoed = []
        written = convert_project(compose_project, yaml_config, echo=echoed.append)

        out = tmp_path / "out"
        assert written == [
            out / "web-rc.yml",
            out / "web-srv.yml",
            out / "a-really-long-service-na-rc.yml",
            out / "a-really-long-service-na-srv.yml",
        ]
        assert echoed == [str(p) for p in written]
        assert all(p.exists() for p in written)

    def test_web_controller(self, compose_project, yaml_config, tmp_path):
        convert_project(compose_project, yaml_config, echo=lambda _: None)

        content = (tmp_path / "out" / "web-rc.yml").read_text()
        rc = yaml.safe_load(content)

        container = rc["spec"]["template"]["spec"]["containers"][0]
        assert container["ports"] == [{"containerPort": 8080}]
        assert container["env"][0] == {"name": "NAMESPACE", "value": "apps"}
        assert rc["spec"]["selector"] == {"service": "web"}
        assert rc["spec"]["template"]["metadata"]["labels"] == {"service": "web", "env": "prod"}
        assert rc["spec"]["template"]["spec"]["restartPolicy"] == "Always"
        assert rc["spec"]["replicas"] == 2
        assert 'value: "apps"' in content

    def test_prints_paths(self, compose_project, yaml_config, capsys):
        written = convert_project(compose_project, yaml_config)

        out = capsys.readouterr().out
        assert out.splitlines() == [str(p) for p in written]

    def test_json_output(self, compose_project, tmp_path):
        config = ConverterConfig(
            output_format=OutputFormat.JSON,
            output_dir=str(tmp_path),
            namespace="apps",
        )

        convert_project(compose_project, config, echo=lambda _: None)

        srv = json.loads((tmp_path / "web-srv.json").read_text())
        assert srv["kind"] == "Service"
        assert srv["spec"]["selector"] == {"service": "web"}

    def test_unused_rancher_entry_logged(self, compose_project, yaml_config, caplog):
        with caplog.at_level(logging.WARNING):
            convert_project(compose_project, yaml_config, echo=lambda _: None)

        assert "gone" in caplog.text
        assert "rancher-compose entry web" not in caplog.text

    def test_error_stops_batch(self, yaml_config, tmp_path):
        project = ComposeProject.from_dict("broken", "/path", {
            "services": {
                "first": {"image": "nginx", "ports": ["80"]},
                "second": {"image": "nginx", "ports": ["http"]},
                "third": {"image": "nginx"},
            },
        })

        with pytest.raises(InvalidPortError) as exc:
            convert_project(project, yaml_config, echo=lambda _: None)

        assert exc.value.service == "second"
        out = tmp_path / "out"
        # Earlier manifests are not rolled back
        assert sorted(p.name for p in out.iterdir()) == ["first-rc.yml", "first-srv.yml"]
