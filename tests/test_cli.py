"""
Tests verifying CLI flags are parsed and wired through to behavior.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from kairos_state.cli import main, parse_args
from kairos_state.errors import EnumerationError
from kairos_state.schema import Kairos, Runtime


@pytest.fixture(autouse=True)
def _quiet_logging():
    with patch("kairos_state.cli.setup_logging"):
        yield


@pytest.fixture
def snapshot():
    return Runtime(uuid="abc-node", kairos=Kairos(flavor="alpine", version="v2.4.3"))


def test_defaults(monkeypatch):
    monkeypatch.delenv("KAIROS_STATE_HOST_ROOT", raising=False)
    args = parse_args([])
    assert args.host_root == Path("/")
    assert args.debug is False
    assert args.trace is False
    assert args.command == "show"
    assert args.json is False


def test_host_root_from_environment(monkeypatch):
    monkeypatch.setenv("KAIROS_STATE_HOST_ROOT", "/mnt/host")
    assert parse_args([]).host_root == Path("/mnt/host")


def test_all_flags_set():
    args = parse_args(["--host-root", "/sysroot", "--debug", "--trace", "get", "oem.mount_point"])
    assert args.host_root == Path("/sysroot")
    assert args.debug is True
    assert args.trace is True
    assert args.command == "get"
    assert args.query == "oem.mount_point"


def test_show_json_flag():
    args = parse_args(["show", "--json"])
    assert args.command == "show"
    assert args.json is True


def test_get_prints_query_result(snapshot, capsys):
    with patch("kairos_state.inspectors.new_runtime", return_value=snapshot) as mock_new_runtime:
        assert main(["--host-root", "/sysroot", "get", "kairos.version"]) == 0
    mock_new_runtime.assert_called_once_with(Path("/sysroot"))
    assert capsys.readouterr().out == "v2.4.3\n"


def test_get_bad_query_exits_nonzero(snapshot, capsys):
    with patch("kairos_state.inspectors.new_runtime", return_value=snapshot):
        assert main(["get", "kairos.["]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error:" in captured.err


def test_show_text(snapshot, capsys):
    with patch("kairos_state.inspectors.new_runtime", return_value=snapshot):
        assert main(["show"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("uuid: abc-node\n")
    assert "    version: v2.4.3\n" in out


def test_show_json(snapshot, capsys):
    with patch("kairos_state.inspectors.new_runtime", return_value=snapshot):
        assert main(["show", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["kairos"]["flavor"] == "alpine"
    assert data["oem"]["found"] is False


def test_enumeration_failure_still_answers(snapshot, capsys):
    err = EnumerationError("cannot enumerate block devices", runtime=snapshot)
    with patch("kairos_state.inspectors.new_runtime", side_effect=err):
        assert main(["get", "kairos.flavor"]) == 0
    assert capsys.readouterr().out == "alpine\n"
