import json
from pathlib import Path

from md2pdf.config import Config, get_config_from_env, get_user_config_dir, load_config_file


def test_defaults(tmp_path):
    config = Config(environ={}, config_file=tmp_path / "missing.json")

    assert config.get_output_dir() == Path.home()
    assert config.is_verbose() is False
    assert config.get_max_workers() == 4


def test_precedence_cli_over_env_over_file(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"output_dir": "/from/file", "max_workers": 2, "verbose": True}))

    config = Config(
        cli_args={"output_dir": str(tmp_path), "verbose": None},
        environ={"MD2PDF_OUTPUT_DIR": "/from/env", "MD2PDF_MAX_WORKERS": "8"},
        config_file=config_file,
    )

    assert config.get_output_dir() == tmp_path
    assert config.get_max_workers() == 8
    assert config.is_verbose() is True


def test_env_parsing():
    env = get_config_from_env({
        "MD2PDF_VERBOSE": "yes",
        "MD2PDF_MAX_WORKERS": "not-a-number",
        "MD2PDF_OUTPUT_DIR": "~/pdfs",
    })

    assert env == {"verbose": True, "output_dir": "~/pdfs"}
    assert get_config_from_env({"MD2PDF_MAX_WORKERS": "0"}) == {}


def test_output_dir_expands_user():
    config = Config(environ={"MD2PDF_OUTPUT_DIR": "~/pdfs"}, config_file=Path("/nonexistent/config.json"))

    assert config.get_output_dir() == Path.home() / "pdfs"


def test_broken_config_file_is_ignored(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text("{not json")

    assert load_config_file(config_file) == {}


def test_user_config_dir_name():
    assert get_user_config_dir().name == "md2pdf"
