"""Tests for the command line interface."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from photobridge.cli import cli
from photobridge.sync.errors import TransportUnavailable

CAMERA = "/sdcard/DCIM/Camera"


@pytest.fixture
def run(context, tmp_path):
    """Invoke the CLI against the in-memory context."""
    runner = CliRunner()
    config_path = tmp_path / "cli-config.yaml"

    def invoke(*args):
        with patch("photobridge.cli.PhotoBridgeContext.from_config", return_value=context):
            return runner.invoke(cli, ["--config", str(config_path), *args])

    return invoke


class TestCli:
    """Test the CLI commands end to end."""

    def test_devices_list(self, run, transport):
        transport.add_device("A1", "SM_G991B", "o1sxeea")
        transport.add_device("P1", "Pixel_5", "redfin")

        result = run("devices", "list")

        assert result.exit_code == 0
        assert "CONNECTED" in result.output
        assert "A1" in result.output
        assert "P1" in result.output

    def test_devices_list_without_backup(self, run, transport):
        transport.add_device("A1", "SM_G991B", "o1sxeea")

        result = run("devices", "list")

        assert result.exit_code == 0
        assert "NOT CONNECTED" in result.output

    def test_missing_adb_exits(self, run, transport):
        transport.service_error = TransportUnavailable("adb not found")

        result = run("devices", "list")

        assert result.exit_code == 1
        assert "adb not found" in result.output

    def test_set_backup(self, run, transport, context):
        transport.add_device("A1", "SM_G991B", "o1sxeea")

        result = run("devices", "set-backup", "SM_G991B", "o1sxeea")

        assert result.exit_code == 0
        assert context.backup_identity.model == "SM_G991B"

    def test_backup_folder(self, run, transport):
        transport.add_device("A1", "SM_G991B", "o1sxeea")
        transport.add_remote_file("A1", f"{CAMERA}/IMG_1.jpg", 10, 1_700_000_000)

        result = run("backup", "folder", "DCIM/Camera")

        assert result.exit_code == 0
        assert "Transfer completed successfully" in result.output

    def test_partial_backup_exits_with_error(self, run, transport):
        transport.add_device("A1", "SM_G991B", "o1sxeea")
        transport.add_remote_file("A1", f"{CAMERA}/IMG_1.jpg", 10, 1_700_000_000)
        transport.fail_pull.add(f"{CAMERA}/IMG_1.jpg")

        result = run("backup", "folder", CAMERA)

        assert result.exit_code == 1
        assert "some errors" in result.output

    def test_ambiguous_device_needs_serial(self, run, transport):
        transport.add_device("A1", "SM_G991B", "o1sxeea")
        transport.add_device("B2", "SM_A525F", "a52qnsxx")

        result = run("backup", "folder", CAMERA)

        assert result.exit_code == 1
        assert "--serial" in result.output

    def test_backup_photos_requires_backup_device(self, run, transport):
        transport.add_device("A1", "SM_G991B", "o1sxeea")

        result = run("backup", "photos")

        assert result.exit_code == 1
        assert "not connected" in result.output

    def test_backup_photos(self, run, transport):
        transport.add_device("A1", "SM_G991B", "o1sxeea")
        transport.add_device("P1", "Pixel_5", "redfin")
        transport.add_remote_file("A1", f"{CAMERA}/IMG_1.jpg", 10, 1_700_000_000)

        result = run("backup", "photos", "--delete")

        assert result.exit_code == 0
        assert transport.remote_paths("A1") == []
        assert transport.remote_paths("P1") == [f"{CAMERA}/IMG_1.jpg"]
        assert "Deleted" in result.output

    def test_server_kill(self, run, transport):
        result = run("server", "kill")

        assert result.exit_code == 0
        assert ("kill-server", "") in transport.calls
