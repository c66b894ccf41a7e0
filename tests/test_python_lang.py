import pytest

from powertools.imports.model import ImportKind, ImportLocation, ImportStatement
from powertools.imports.python_lang import PythonImportAnalyzer


def _write(tmp_path, code, name="module.py"):
    path = tmp_path / name
    path.write_text(code, encoding="utf-8")
    return path


def _statement(source, symbols, kind, alias=None):
    return ImportStatement(
        source=source,
        symbols=symbols,
        location=ImportLocation(0, 0, 0, 0),
        kind=kind,
        alias=alias,
    )


def test_find_simple_import(tmp_path):
    path = _write(tmp_path, "\nimport os\nimport sys\n")
    imports = PythonImportAnalyzer().find_imports(path)
    assert len(imports) == 2
    assert imports[0].source == "os"
    assert imports[0].kind == ImportKind.SIMPLE_IMPORT
    assert imports[1].source == "sys"


def test_find_from_import(tmp_path):
    path = _write(tmp_path, "\nfrom typing import List, Dict\nfrom pathlib import Path\n")
    imports = PythonImportAnalyzer().find_imports(path)
    assert len(imports) == 2
    assert imports[0].source == "typing"
    assert imports[0].symbols == ["List", "Dict"]
    assert imports[0].kind == ImportKind.FROM_IMPORT


def test_find_import_with_alias(tmp_path):
    path = _write(tmp_path, "\nimport numpy as np\nimport pandas as pd\n")
    imports = PythonImportAnalyzer().find_imports(path)
    assert len(imports) == 2
    assert imports[0].source == "numpy"
    assert imports[0].alias == "np"
    assert imports[1].source == "pandas"
    assert imports[1].alias == "pd"


def test_find_wildcard_import(tmp_path):
    path = _write(tmp_path, "\nfrom os import *\n")
    imports = PythonImportAnalyzer().find_imports(path)
    assert len(imports) == 1
    assert imports[0].source == "os"
    assert imports[0].kind == ImportKind.NAMESPACE


def test_relative_import_without_module(tmp_path):
    path = _write(tmp_path, "from . import sibling\n")
    (statement,) = PythonImportAnalyzer().find_imports(path)
    assert statement.source == "."
    assert statement.symbols == ["sibling"]


def test_nested_imports_are_not_reported(tmp_path):
    path = _write(tmp_path, "import os\n\ndef f():\n    import sys\n")
    imports = PythonImportAnalyzer().find_imports(path)
    assert [s.source for s in imports] == ["os"]


def test_invalid_python_raises(tmp_path):
    path = _write(tmp_path, "def broken(:\n")
    with pytest.raises(ValueError):
        PythonImportAnalyzer().find_imports(path)


def test_add_from_import_after_last(tmp_path):
    path = _write(tmp_path, "import os\n\nx = 1\n")
    statement = _statement("typing", ["List"], ImportKind.FROM_IMPORT)
    result = PythonImportAnalyzer().add_import(path, statement)
    assert result == "import os\nfrom typing import List\n\nx = 1\n"


def test_add_simple_import_with_alias_at_start(tmp_path):
    path = _write(tmp_path, "x = 1\n")
    statement = _statement("numpy", ["numpy"], ImportKind.SIMPLE_IMPORT, alias="np")
    result = PythonImportAnalyzer().add_import(path, statement)
    assert result == "import numpy as np\nx = 1\n"


def test_add_wildcard_import(tmp_path):
    path = _write(tmp_path, "x = 1\n")
    statement = _statement("os", ["*"], ImportKind.NAMESPACE)
    result = PythonImportAnalyzer().add_import(path, statement)
    assert result == "from os import *\nx = 1\n"


def test_add_unsupported_kind_raises(tmp_path):
    path = _write(tmp_path, "x = 1\n")
    statement = _statement("os", [], ImportKind.REQUIRE)
    with pytest.raises(ValueError):
        PythonImportAnalyzer().add_import(path, statement)


def test_remove_import(tmp_path):
    path = _write(tmp_path, "import os\nimport sys\nx = 1\n")
    result = PythonImportAnalyzer().remove_import(path, "sys")
    assert result == "import os\nx = 1\n"


def test_remove_from_import_by_symbol(tmp_path):
    path = _write(tmp_path, "from typing import List\nx = 1\n")
    result = PythonImportAnalyzer().remove_import(path, "List")
    assert result == "x = 1\n"


def test_update_import_path(tmp_path):
    path = _write(tmp_path, "from old_pkg import thing\nx = 1\n")
    result = PythonImportAnalyzer().update_import_path(path, "old_pkg", "new_pkg")
    assert result == "from new_pkg import thing\nx = 1\n"