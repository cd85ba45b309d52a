"""
Unit tests for the command line entry point.
"""

from webdispatch.__main__ import main


class TestMain:
    """Tests for main()."""

    def test_bad_environment_reports_error(self, monkeypatch, capsys):
        """Test that an invalid HTTP_TIMEOUT exits with 1 and a message."""
        monkeypatch.setenv("HTTP_TIMEOUT", "soon")

        assert main([]) == 1
        assert capsys.readouterr().err.startswith("Error: ")

    def test_invalid_config_reports_error(self, monkeypatch, capsys):
        """Test that validation errors are reported the same way."""
        monkeypatch.setenv("HTTP_TIMEOUT", "-1")

        assert main(["--web-root", "web"]) == 1
        assert "timeout" in capsys.readouterr().err
