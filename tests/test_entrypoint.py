"""
Test Server Entry Point
"""
from unittest.mock import patch

from vidvault.__main__ import main
from vidvault.config import get_settings


def test_main_runs_uvicorn_with_settings():
    with patch("vidvault.__main__.uvicorn.run") as mock_run:
        main()

    mock_run.assert_called_once()
    args, kwargs = mock_run.call_args
    assert args[0] == "vidvault.main:app"
    settings = get_settings()
    assert kwargs["host"] == settings.host
    assert kwargs["port"] == settings.port
    assert kwargs["reload"] is False
