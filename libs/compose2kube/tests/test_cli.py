"""Tests for compose2kube CLI."""

import json

import pytest
import yaml

from compose2kube.cli import main


@pytest.fixture
def compose_dir(tmp_path):
    """Project directory with the web example."""
    project_dir = tmp_path / "shop"
    project_dir.mkdir()
    (project_dir / "docker-compose.yml").write_text(
        "web:\n"
        "  image: nginx\n"
        "  ports:\n"
        "    - \"80:8080\"\n"
        "  restart: always\n"
        "  labels:\n"
        "    env: prod\n"
    )
    return project_dir


class TestGenerate:
    def test_generate_yaml(self, compose_dir, tmp_path, capsys):
        out = tmp_path / "manifests"

        code = main(["generate", str(compose_dir), "-o", str(out), "-n", "shop"])

        assert code == 0
        assert capsys.readouterr().out.splitlines() == [
            str(out / "web-rc.yml"),
            str(out / "web-srv.yml"),
        ]

        rc = yaml.safe_load((out / "web-rc.yml").read_text())
        assert rc["metadata"]["namespace"] == "shop"
        assert rc["spec"]["template"]["spec"]["containers"][0]["ports"] == [
            {"containerPort": 8080}
        ]

    def test_generate_json(self, compose_dir, tmp_path, monkeypatch):
        monkeypatch.setenv("NAMESPACE", "from-env")
        out = tmp_path / "manifests"

        code = main(["generate", str(compose_dir), "-o", str(out), "--format", "json"])

        assert code == 0
        rc = json.loads((out / "web-rc.json").read_text())
        assert rc["metadata"]["namespace"] == "from-env"

    def test_missing_compose_file(self, tmp_path, capsys):
        code = main(["generate", str(tmp_path), "-o", str(tmp_path / "out")])

        assert code == 1
        assert capsys.readouterr().err.startswith("Error: ")

    def test_conversion_error(self, tmp_path, capsys):
        (tmp_path / "docker-compose.yml").write_text(
            "services:\n"
            "  web:\n"
            "    image: nginx\n"
            "    restart: sometimes\n"
        )

        code = main(["generate", str(tmp_path), "-o", str(tmp_path / "out")])

        err = capsys.readouterr().err
        assert code == 1
        assert "Unknown restart policy sometimes for service web" in err

    def test_invalid_rancher_scale(self, compose_dir, tmp_path, capsys):
        (compose_dir / "rancher-compose.yml").write_text("web:\n  scale: lots\n")

        code = main(["generate", str(compose_dir), "-o", str(tmp_path / "out")])

        err = capsys.readouterr().err
        assert code == 1
        assert err.startswith("Error: Invalid rancher-compose definition for service web")
        assert len(err.splitlines()) == 1


class TestParse:
    def test_parse_json(self, compose_dir, capsys):
        code = main(["parse", str(compose_dir), "--json"])

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["name"] == "shop"
        assert data["services"][0]["ports"] == ["80:8080"]
        assert data["services"][0]["scale"] == 1

    def test_parse_text(self, compose_dir, capsys):
        code = main(["parse", str(compose_dir)])

        out = capsys.readouterr().out
        assert code == 0
        assert "Service: web" in out
        assert "Ports: 80:8080" in out


def test_no_command(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out
