"""
Unit tests for the ``lds-admin`` CLI (alembic subprocess patched out).
"""

import sys
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from loguru import logger
from typer.testing import CliRunner

from datastore import cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_sqlalchemy_url_uses_psycopg3_driver():
    assert cli._sqlalchemy_url("postgresql://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
    assert cli._sqlalchemy_url("sqlite:///x.db") == "sqlite:///x.db"


@patch("datastore.cli.subprocess.run")
def test_migrate_runs_alembic_upgrade(mock_run):
    mock_run.return_value = SimpleNamespace(returncode=0, stdout="", stderr="")

    result = runner.invoke(cli.app, ["--log-level", "CRITICAL", "migrate", "0001_initial"])

    assert result.exit_code == 0
    args = mock_run.call_args.args[0]
    assert args[0] == "alembic"
    assert args[-2:] == ["upgrade", "0001_initial"]


@patch("datastore.cli.subprocess.run")
def test_migrate_failure_exits_nonzero(mock_run):
    mock_run.return_value = SimpleNamespace(returncode=1, stdout="", stderr="boom")
    result = runner.invoke(cli.app, ["--log-level", "CRITICAL", "migrate"])
    assert result.exit_code == 1
