import re
from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = Path(__file__).resolve().parent.parent


def _project():
    with open(ROOT / "pyproject.toml", "rb") as f:
        return tomllib.load(f)["project"]


@pytest.mark.parametrize("script", ["wavecursor.py", "wavecursor-gui.py"])
def test_install_hints_name_declared_extras(script):
    extras = set(_project().get("optional-dependencies", {}))
    text = (ROOT / script).read_text(encoding="utf-8")
    for extra in re.findall(r"pip install wavecursor\[(\w+)\]", text):
        assert extra in extras


def test_gui_dependencies_are_base_requirements():
    names = {re.split(r"[<>=!~ ]", d, maxsplit=1)[0].lower()
             for d in _project()["dependencies"]}
    assert {"pyside6", "sounddevice", "numpy", "soundfile"} <= names
