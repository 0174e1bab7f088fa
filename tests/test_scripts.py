import importlib.util
import sys
from pathlib import Path

SCRIPTS = Path(__file__).resolve().parent.parent / "scripts"


def _load(name):
    spec = importlib.util.spec_from_file_location(f"scripts_{name}", SCRIPTS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_scripts_import_without_touching_sys_path():
    before = list(sys.path)
    for name in ("smoke", "drop_collection"):
        assert callable(_load(name).main)
    assert sys.path == before


def test_drop_collection_refuses_without_yes(capsys):
    drop = _load("drop_collection")
    assert drop.main(["users", "--url", "mongodb://nowhere/app"]) == 2
    assert "Re-run with --yes" in capsys.readouterr().err
