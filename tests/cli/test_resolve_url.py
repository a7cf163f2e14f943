"""Tests for the resolver command line."""

import json
import logging

import pytest

from imgparams.cli import main, resolve_url
from imgparams.cli.resolve_url import load_user_config_dict

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces root handlers; put them back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def user_config_file(tmp_path):
    path = tmp_path / "user_config.py"
    path.write_text('CONFIG = {"ADVANCED_FEATURES": True, "OVERLAY_OFFSET": 10}\n')
    return path


def test_load_user_config_dict(user_config_file):
    assert load_user_config_dict(str(user_config_file)) == {
        "ADVANCED_FEATURES": True,
        "OVERLAY_OFFSET": 10,
    }


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_user_config_dict(str(tmp_path / "missing.py"))


def test_load_file_without_config(tmp_path):
    path = tmp_path / "empty.py"
    path.write_text("VALUE = 1\n")
    with pytest.raises(ValueError, match="No CONFIG dict"):
        load_user_config_dict(str(path))


def test_resolve_url_defaults():
    result = resolve_url("/a.jpg?im.blur=20&w=300")
    assert result.options == {"width": 300}


def test_user_config_enables_advanced(user_config_file):
    result = resolve_url("/a.jpg?im=Composite,url=u,placement=north", str(user_config_file))
    assert result.options == {"overlays": [{"url": "u", "top": 10}]}


def test_cli_overrides_user_config(user_config_file):
    result = resolve_url("/a.jpg?im.blur=20", str(user_config_file), {"advanced_features": False})
    assert result.options == {}


def test_dimensions_feed_conditions():
    result = resolve_url(
        "/a.jpg?im.if-dimension=width>1000,quality=40",
        cli_args={"advanced_features": True},
        dimensions=(1200, 900),
    )
    assert result.options == {"quality": 40}


class TestMain:
    """Test the argparse entry point."""

    def test_prints_json(self, capsys):
        assert main(["/a.jpg?im.resize=width:800,mode:fit"]) == 0
        assert json.loads(capsys.readouterr().out) == {"width": 800, "fit": "contain"}

    def test_query_string_output(self, capsys):
        main(["/a.jpg?w=800&f=s", "--query-string"])
        assert capsys.readouterr().out.strip() == "width=800"

    def test_advanced_and_dimensions(self, capsys):
        main([
            "/a.jpg?im.if-dimension=ratio>1,im.blur=2",
            "--advanced", "--width", "1600", "--height", "900",
        ])
        assert json.loads(capsys.readouterr().out) == {"blur": 5}

    def test_verbose_prints_diagnostics(self, capsys):
        main(["/thumbnail/a.jpg?w=10", "-v"])
        out = capsys.readouterr().out
        assert "Diagnostics:" in out
        assert '"derivative": "thumbnail"' in out
