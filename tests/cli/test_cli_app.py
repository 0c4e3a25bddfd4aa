"""
Tests for the apigate CLI.
"""

from unittest.mock import patch

from typer.testing import CliRunner

from apigate import __version__
from apigate.cli.app import app
from apigate.cli.utils import load_dispatcher

runner = CliRunner()


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"apigate {__version__}" in result.output


class TestOperations:
    def test_lists_operations(self):
        result = runner.invoke(app, ["operations", "tests._support.handlers:dispatcher"])
        assert result.exit_code == 0, result.output
        assert "/calc/add" in result.output
        assert "/block/run_async" in result.output
        assert "/calc/helper" not in result.output

    def test_all_includes_unexposed(self):
        result = runner.invoke(app, ["operations", "tests._support.handlers:dispatcher", "--all"])
        assert result.exit_code == 0, result.output
        assert "/calc/helper" in result.output

    def test_factory_target(self):
        result = runner.invoke(app, ["operations", "tests._support.handlers:make_dispatcher"])
        assert result.exit_code == 0, result.output
        assert "tests.api" in result.output

    def test_bad_target(self):
        assert runner.invoke(app, ["operations", "no_colon"]).exit_code == 1
        assert runner.invoke(app, ["operations", "missing_module_xyz:api"]).exit_code == 1
        assert runner.invoke(app, ["operations", "tests._support.handlers:nothing"]).exit_code == 1
        assert runner.invoke(app, ["operations", "tests._support.handlers:HANDLERS"]).exit_code == 1


class TestServe:
    def test_serve_runs_uvicorn(self):
        with patch("apigate.cli.serve.uvicorn.run") as run:
            result = runner.invoke(
                app, ["serve", "tests._support.handlers:dispatcher", "--host", "0.0.0.0", "--port", "9001"]
            )
        assert result.exit_code == 0, result.output
        run.assert_called_once()
        kwargs = run.call_args.kwargs
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9001
        assert run.call_args.args[0].state.dispatcher.name == "tests.api"


def test_load_dispatcher_instance():
    from tests._support.handlers import dispatcher

    assert load_dispatcher("tests._support.handlers:dispatcher") is dispatcher
