import importlib.util
from pathlib import Path

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "check_core_no_qt.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("check_core_no_qt", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_core_modules_have_no_qt_imports():
    module = _load_script()
    assert module.find_violations(SCRIPT.parent.parent) == []


def test_violation_is_reported(tmp_path):
    module = _load_script()
    for rel in module.CORE_MODULES:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("import numpy\n", encoding="utf-8")
    (tmp_path / module.CORE_MODULES[0]).write_text("from PyQt5 import QtCore\n", encoding="utf-8")
    violations = module.find_violations(tmp_path)
    assert len(violations) == 1
    assert "PyQt" in violations[0]
