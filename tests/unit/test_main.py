from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.main import create_app
from app.main import main


@patch("app.main.close_pool")
@patch("app.main.Worker")
@patch("app.main.JobRunner")
@patch("app.main.JobRepository")
@patch("app.main.build_workflow")
@patch("app.main.apply_schema")
@patch("app.main.init_pool")
@patch("app.main.Log")
@patch("app.main.Settings")
class TestWorkerMain:
    def test_schema_is_applied_before_worker_starts(
        self,
        mock_settings: MagicMock,
        _log: MagicMock,
        mock_init_pool: MagicMock,
        mock_apply_schema: MagicMock,
        mock_build_workflow: MagicMock,
        _job_repo: MagicMock,
        _job_runner: MagicMock,
        mock_worker: MagicMock,
        mock_close_pool: MagicMock,
    ) -> None:
        calls = MagicMock()
        calls.attach_mock(mock_init_pool, "init_pool")
        calls.attach_mock(mock_apply_schema, "apply_schema")
        calls.attach_mock(mock_build_workflow, "build_workflow")
        calls.attach_mock(mock_worker.return_value.run, "run")
        calls.attach_mock(mock_close_pool, "close_pool")

        main()

        assert [name for name, _args, _kwargs in calls.mock_calls] == [
            "init_pool",
            "apply_schema",
            "build_workflow",
            "run",
            "close_pool",
        ]
        mock_init_pool.assert_called_once_with(mock_settings.return_value)

    def test_pool_is_closed_when_schema_fails(
        self,
        _settings: MagicMock,
        _log: MagicMock,
        _init_pool: MagicMock,
        mock_apply_schema: MagicMock,
        mock_build_workflow: MagicMock,
        _job_repo: MagicMock,
        _job_runner: MagicMock,
        mock_worker: MagicMock,
        mock_close_pool: MagicMock,
    ) -> None:
        mock_apply_schema.side_effect = RuntimeError("permission denied for schema public")

        with pytest.raises(RuntimeError, match="permission denied"):
            main()

        mock_build_workflow.assert_not_called()
        mock_worker.return_value.run.assert_not_called()
        mock_close_pool.assert_called_once()


class TestApiLifespan:
    @patch("app.api.main.close_pool")
    @patch("app.api.main.build_gateway")
    @patch("app.api.main.apply_schema")
    @patch("app.api.main.init_pool")
    @patch("app.api.main.Log")
    @patch("app.api.main.Settings")
    def test_schema_is_applied_on_startup(
        self,
        _settings: MagicMock,
        _log: MagicMock,
        mock_init_pool: MagicMock,
        mock_apply_schema: MagicMock,
        mock_build_gateway: MagicMock,
        mock_close_pool: MagicMock,
    ) -> None:
        application: FastAPI = create_app()

        with TestClient(application):
            mock_init_pool.assert_called_once()
            mock_apply_schema.assert_called_once_with()
            assert application.state.gateway is mock_build_gateway.return_value

        mock_close_pool.assert_called_once()
