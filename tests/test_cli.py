# tests/test_cli.py
import argparse
import json

import pytest

from cmdexec.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_OK,
    EXIT_PARAMETER_ERROR,
    main,
    parse_parameters,
)

pytestmark = pytest.mark.usefixtures("restore_logging")

CONFIG = """
commands:
  - command: echo {{msg}}
    required:
      - msg: ^\\w+$
    timeout: 2
"""


def test_parse_parameters_collects_repeats():
    assert parse_parameters(["a=1", "a=2", "b=x=y", "c="]) == {
        "a": ["1", "2"],
        "b": ["x=y"],
        "c": [""],
    }


def test_parse_parameters_rejects_malformed():
    with pytest.raises(argparse.ArgumentTypeError):
        parse_parameters(["novalue"])


def test_main_prints_text(write_config, capsys):
    path = write_config(CONFIG)
    assert main([str(path), "-p", "msg=hi", "--log-level", "ERROR"]) == EXIT_OK
    assert capsys.readouterr().out == "hi\n"


def test_main_json_output(write_config, capsys):
    path = write_config(CONFIG)
    assert main([str(path), "-p", "msg=hi", "--json", "--log-level", "ERROR"]) == EXIT_OK
    assert json.loads(capsys.readouterr().out) == {"Result": {"echo": "hi\n"}}


def test_main_parameter_error(write_config, capsys):
    path = write_config(CONFIG)
    assert main([str(path), "-p", "msg=two words", "--log-level", "ERROR"]) == EXIT_PARAMETER_ERROR
    assert json.loads(capsys.readouterr().out)["Code"] == 1


def test_main_config_error(tmp_path, capsys):
    code = main([str(tmp_path / "missing.yaml"), "--log-level", "ERROR"])
    assert code == EXIT_CONFIG_ERROR
    assert "Failed to load config" in capsys.readouterr().err


def test_main_bad_parameter_syntax_exits(write_config):
    path = write_config(CONFIG)
    with pytest.raises(SystemExit):
        main([str(path), "-p", "oops"])
