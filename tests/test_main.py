"""
Tests for the command-line interface.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from image_extractor import __version__
from image_extractor.config import DEFAULT_SOCKET
from image_extractor.engine import EngineKind
from image_extractor.errors import ContentPathNotFoundError, RuntimeDetectionError
from image_extractor.extractor import ExtractionResult
from image_extractor.main import main
from image_extractor.reference import parse_reference


@pytest.fixture
def runner():
    return CliRunner()


def make_result(**overrides):
    values = {
        "reference": parse_reference("quay.io/org/catalog:v1"),
        "engine": EngineKind.DOCKER,
        "container_id": "abc123",
        "destination": Path("out"),
        "entries": 3,
        "removed": True,
    }
    values.update(overrides)
    return ExtractionResult(**values)


class TestCli:
    """Test option handling and exit codes."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert f"image-extract, version {__version__}" in result.output

    def test_requires_image(self, runner):
        result = runner.invoke(main, ["--download-path", "out"])

        assert result.exit_code != 0

    def test_defaults(self, runner):
        with patch("image_extractor.main.extract_image", return_value=make_result()) as mock_extract:
            result = runner.invoke(main, ["quay.io/org/catalog:v1"])

        assert result.exit_code == 0
        image, request, socket = mock_extract.call_args.args
        assert image == "quay.io/org/catalog:v1"
        assert request.source_path == "/"
        assert request.destination_path == Path(".")
        assert request.username == ""
        assert request.force_pull is False
        assert socket == DEFAULT_SOCKET

    def test_all_options(self, runner):
        with patch("image_extractor.main.extract_image", return_value=make_result()) as mock_extract:
            result = runner.invoke(
                main,
                [
                    "-d", "out",
                    "-c", "configs",
                    "-u", "user",
                    "-p", "secret",
                    "-f",
                    "-s", "unix:///tmp/podman.sock",
                    "-l", "debug",
                    "quay.io/org/catalog:v1",
                ],
            )

        assert result.exit_code == 0
        _, request, socket = mock_extract.call_args.args
        assert request.destination_path == Path("out")
        assert request.source_path == "configs"
        assert request.username == "user"
        assert request.password == "secret"
        assert request.force_pull is True
        assert socket == "unix:///tmp/podman.sock"

    def test_password_from_environment(self, runner):
        with patch("image_extractor.main.extract_image", return_value=make_result()) as mock_extract:
            result = runner.invoke(
                main,
                ["quay.io/org/catalog:v1"],
                env={"IMAGE_EXTRACT_USERNAME": "robot", "IMAGE_EXTRACT_PASSWORD": "token"},
            )

        assert result.exit_code == 0
        _, request, _ = mock_extract.call_args.args
        assert request.username == "robot"
        assert request.password == "token"

    def test_write_to_stdout_rejected_without_probing(self, runner):
        with patch("image_extractor.extractor.select_runtime") as mock_select:
            result = runner.invoke(main, ["-w", "quay.io/org/catalog:v1"])

        assert result.exit_code == 1
        assert "not currently implemented" in result.output
        mock_select.assert_not_called()

    def test_no_runtime(self, runner):
        with patch(
            "image_extractor.extractor.select_runtime",
            side_effect=RuntimeDetectionError("no container engine reachable"),
        ):
            result = runner.invoke(main, ["quay.io/org/catalog:v1"])

        assert result.exit_code == 1
        assert "no container engine reachable" in result.output

    def test_missing_content_path(self, runner):
        with patch(
            "image_extractor.main.extract_image",
            side_effect=ContentPathNotFoundError("manifests"),
        ):
            result = runner.invoke(main, ["-c", "manifests", "quay.io/org/catalog:v1"])

        assert result.exit_code == 1
        assert "content path not found in container: manifests" in result.output

    def test_cleanup_failure_still_succeeds(self, runner):
        failed_cleanup = make_result(removed=False, cleanup_error="remove failed: gone")
        with patch("image_extractor.main.extract_image", return_value=failed_cleanup):
            result = runner.invoke(main, ["quay.io/org/catalog:v1"])

        assert result.exit_code == 0
        assert "could not be removed" in result.output
