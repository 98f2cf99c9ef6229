import json
import logging
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from src import main as cli
from src.modules.msg_adapter import DecoderContext
from src.modules.msg_parser import MsgParser
from src.utils.config import Config


class FakeMessage:
    def __init__(self, path):
        self.subject = f"Subject of {path.rsplit('/', 1)[-1]}"
        self.body = "body"
        self.sender = "Jane <jane@example.com>"
        self.attachments = [SimpleNamespace(longFilename="a.txt", data=b"abc")]

    def close(self):
        pass


def _fake_decoder():
    def factory(path):
        if "broken" in path:
            raise ValueError("not an OLE2 file")
        return FakeMessage(path)
    return SimpleNamespace(Message=factory)


@pytest.fixture
def reader(monkeypatch):
    monkeypatch.setenv("COLOR_OUTPUT", "false")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    config = Config("/nonexistent/.env")
    instance = cli.MsgReader(config)
    instance.parser = MsgParser(DecoderContext(module=_fake_decoder()))
    yield instance
    logging.getLogger().handlers.clear()


def test_run_prints_rendered_messages(reader, tmp_path, capsys):
    msg_file = tmp_path / "hello.msg"
    msg_file.write_bytes(b"")

    exit_code = reader.run([str(msg_file)])

    out = capsys.readouterr().out
    assert exit_code == cli.EXIT_OK
    assert "Subject of hello.msg" in out
    assert "Jane <jane@example.com>" in out


def test_run_expands_directories(reader, tmp_path, capsys):
    for name in ["one.msg", "two.MSG", "skip.txt"]:
        (tmp_path / name).write_bytes(b"")

    exit_code = reader.run([str(tmp_path)], as_json=True)

    data = json.loads(capsys.readouterr().out)
    assert exit_code == cli.EXIT_OK
    assert [item["subject"] for item in data] == ["Subject of one.msg", "Subject of two.MSG"]


def test_run_reports_invalid_messages(reader, tmp_path, capsys):
    good = tmp_path / "good.msg"
    broken = tmp_path / "broken.msg"
    good.write_bytes(b"")
    broken.write_bytes(b"")

    exit_code = reader.run([str(good), str(broken)], as_json=True)

    data = json.loads(capsys.readouterr().out)
    assert exit_code == cli.EXIT_PARSE_FAILURE
    assert data[0]["is_valid"] is True
    assert data[1] == {
        "path": str(broken),
        "is_valid": False,
        "error_message": f"Failed to open MSG file: {broken}",
    }


def test_run_without_files(reader, tmp_path):
    assert reader.run([str(tmp_path)]) == cli.EXIT_PARSE_FAILURE


def test_run_saves_attachments(reader, tmp_path):
    msg_file = tmp_path / "mail.msg"
    msg_file.write_bytes(b"")
    out_dir = tmp_path / "out"

    reader.run([str(msg_file)], save_dir=str(out_dir))

    assert (out_dir / "mail" / "a.txt").read_bytes() == b"abc"


def test_main_config_error(monkeypatch, capsys):
    monkeypatch.setenv("LOG_FORMAT", "xml")
    exit_code = cli.main(["--env", "/nonexistent/.env", "a.msg"])
    assert exit_code == cli.EXIT_CONFIG_ERROR
    assert "LOG_FORMAT" in capsys.readouterr().err


def test_main_wires_arguments(monkeypatch):
    monkeypatch.setenv("ATTACHMENT_OUTPUT_DIR", "from-env")
    monkeypatch.setenv("LOG_FORMAT", "text")
    with patch.object(cli.MsgReader, "run", return_value=0) as mock_run, \
            patch.object(cli, "setup_logging"):
        exit_code = cli.main(["--env", "/nonexistent/.env", "--json",
                              "--save-attachments", "x.msg"])

    assert exit_code == 0
    mock_run.assert_called_once_with(["x.msg"], as_json=True, save_dir="from-env")


def test_main_output_dir_overrides_config(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "text")
    with patch.object(cli.MsgReader, "run", return_value=0) as mock_run, \
            patch.object(cli, "setup_logging"):
        cli.main(["--env", "/nonexistent/.env", "--save-attachments",
                  "--output-dir", "custom", "x.msg"])

    assert mock_run.call_args.kwargs["save_dir"] == "custom"
