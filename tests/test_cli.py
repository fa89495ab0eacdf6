"""Tests for the mantle CLI."""

import json
import sys
from pathlib import Path

import pytest

from mantle.application import Application
from mantle.cli import Pipeline, Services, describe_service, load_application, main
from mantle.config import clear_config_instance, get_config
from mantle.exceptions import MantleError

APP_MODULE = '''
from unittest.mock import MagicMock

from mantle import HookDefinition, ProtocolType, Provider, ServiceDefinition, ServiceResponseType, create_response, mantle


async def get_user(request):
    return create_response(ServiceResponseType.SUCCESS, {"id": request.get_param("id")})


async def create_order(request):
    return create_response(ServiceResponseType.CREATED, request.data)


def create_app():
    app = mantle(HookDefinition(name="auth"))
    app.protocols(Provider(type=ProtocolType.HTTP, style="REST", fn=MagicMock()))
    app.use(ServiceDefinition(fn=get_user, hooks=[HookDefinition(name="cache"), HookDefinition(name="audit")]))
    app.use(ServiceDefinition(fn=create_order, bindings=[{"type": ProtocolType.HTTP, "style": "REST"}]))
    return app


def create_unresolvable_app():
    return mantle().use(ServiceDefinition(fn=get_user))


def create_configured_app():
    from mantle import Application

    return Application.from_config()


app = create_app()
empty_app = mantle()
not_an_app = 42
'''


@pytest.fixture(autouse=True)
def cli_app(tmp_path: Path, monkeypatch):
    """Write an importable application module."""
    (tmp_path / "cli_app.py").write_text(APP_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, "cli_app", raising=False)
    yield "cli_app"
    sys.modules.pop("cli_app", None)
    clear_config_instance()


class TestLoadApplication:
    """Test application import."""

    def test_load_instance(self) -> None:
        assert isinstance(load_application("cli_app:app"), Application)

    def test_load_dotted_path(self) -> None:
        assert isinstance(load_application("cli_app.app"), Application)

    def test_load_factory(self) -> None:
        app = load_application("cli_app:create_app")
        assert [s.operation_id for s in app.services] == ["get_user", "create_order"]

    def test_not_an_application(self) -> None:
        with pytest.raises(MantleError, match="is not an Application"):
            load_application("cli_app:not_an_app")

    def test_missing_module(self) -> None:
        with pytest.raises(MantleError, match="Failed to import"):
            load_application("missing_cli_module_xyz:app")


class TestServicesCommand:
    """Test the services subcommand."""

    def test_services_json(self, capsys) -> None:
        main(Services(target="cli_app:create_app", json=True))

        data = json.loads(capsys.readouterr().out)
        assert data["state"] == "accepting"
        assert data["global_hooks"] == 1
        assert data["providers"] == [{"type": "HTTP", "style": "REST"}]
        assert data["services"][0] == {
            "operation_id": "get_user",
            "name": "get_user",
            "method": "get",
            "resource": "users",
            "bindings": [],
            "hooks": 2,
            "setup": False,
        }
        assert data["services"][1]["bindings"] == ["HTTP/REST"]
        assert data["services"][1]["resource"] == "orders"

    def test_services_json_with_setup(self, capsys) -> None:
        main(Services(target="cli_app:create_app", json=True, setup=True))

        data = json.loads(capsys.readouterr().out)
        assert data["state"] == "setup"
        assert all(s["setup"] for s in data["services"])

    def test_services_table(self, capsys) -> None:
        main(Services(target="cli_app:create_app"))

        out = capsys.readouterr().out
        assert "get_user" in out
        assert "create_order" in out
        assert "Operation" in out

    def test_no_services(self, capsys) -> None:
        main(Services(target="cli_app:empty_app"))
        assert "No services registered" in capsys.readouterr().out

    def test_setup_failure(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(Services(target="cli_app:create_unresolvable_app", setup=True))

        assert exc_info.value.code == 1
        assert "No provider configured" in capsys.readouterr().err

    def test_load_failure(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(Services(target="cli_app:not_an_app"))

        assert exc_info.value.code == 1
        assert "Error loading application" in capsys.readouterr().err


class TestPipelineCommand:
    """Test the pipeline subcommand."""

    def test_pipeline_json(self, capsys) -> None:
        main(Pipeline(target="cli_app:create_app", operation_id="get_user", json=True))

        data = json.loads(capsys.readouterr().out)
        assert data["before"] == ["auth", "cache", "audit"]
        assert data["after"] == ["audit", "cache", "auth"]
        assert data["layers"][0] == {"scope": "global", "hook": "auth"}
        assert data["layers"][1] == {"scope": "service", "hook": "cache"}

    def test_pipeline_table(self, capsys) -> None:
        main(Pipeline(target="cli_app:create_app", operation_id="get_user"))

        out = capsys.readouterr().out
        assert "Pipeline: get_user" in out
        assert "<<get_user>>" in out
        assert "auth" in out

    def test_unknown_operation(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(Pipeline(target="cli_app:create_app", operation_id="missing"))

        assert exc_info.value.code == 1
        assert "No service registered with operation id 'missing'" in capsys.readouterr().err


class TestConfigDir:
    def test_config_dir_sets_global_config(self, tmp_path: Path, capsys) -> None:
        config_dir = tmp_path / "conf"
        config_dir.mkdir()
        (config_dir / "mantle.yaml").write_text("mantle:\n  hooks:\n    - hook_fixtures.audit_hook\n")

        main(Services(target="cli_app:create_configured_app", json=True), config_dir=config_dir)

        data = json.loads(capsys.readouterr().out)
        assert data["global_hooks"] == 1
        assert get_config().config_path == config_dir / "mantle.yaml"


def test_describe_service() -> None:
    app = load_application("cli_app:create_app")
    summary = describe_service(app.service("create_order"))
    assert summary["method"] == "create"
    assert summary["hooks"] == 0
