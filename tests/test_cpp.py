from powertools.imports.cpp import CppImportAnalyzer
from powertools.imports.model import ImportKind, ImportLocation, ImportStatement


def _write(tmp_path, code, name="file.cpp"):
    path = tmp_path / name
    path.write_text(code, encoding="utf-8")
    return path


def _include(source):
    return ImportStatement(
        source=source,
        symbols=[],
        location=ImportLocation(0, 0, 0, 0),
        kind=ImportKind.INCLUDE,
    )


def test_find_system_includes(tmp_path):
    path = _write(tmp_path, "\n#include <vector>\n#include <string>\n")
    imports = CppImportAnalyzer().find_imports(path)
    assert len(imports) == 2
    assert imports[0].source == "vector"
    assert imports[0].kind == ImportKind.INCLUDE
    assert imports[1].source == "string"


def test_find_local_includes(tmp_path):
    path = _write(tmp_path, '\n#include "header.h"\n#include "utils/helpers.h"\n')
    imports = CppImportAnalyzer().find_imports(path)
    assert len(imports) == 2
    assert imports[0].source == "header.h"
    assert imports[1].source == "utils/helpers.h"


def test_include_locations_are_one_based_lines(tmp_path):
    path = _write(tmp_path, "\n#include <vector>\n")
    (statement,) = CppImportAnalyzer().find_imports(path)
    assert statement.location.line == 2
    assert statement.location.end_line == 2
    assert statement.symbols == []


def test_includes_inside_block_comments_are_ignored(tmp_path):
    path = _write(tmp_path, "/*\n#include <vector>\n*/\n#include <string>\n")
    imports = CppImportAnalyzer().find_imports(path)
    assert [s.source for s in imports] == ["string"]


def test_add_local_include_after_last(tmp_path):
    path = _write(tmp_path, "#include <vector>\n\nint main() {}\n")
    result = CppImportAnalyzer().add_import(path, _include("utils/helpers.h"))
    assert result == '#include <vector>\n#include "utils/helpers.h"\n\nint main() {}\n'


def test_add_system_include_at_start_without_includes(tmp_path):
    path = _write(tmp_path, "int main() {}\n")
    result = CppImportAnalyzer().add_import(path, _include("map"))
    assert result == "#include <map>\nint main() {}\n"


def test_remove_include(tmp_path):
    path = _write(tmp_path, "#include <vector>\n#include <string>\nint x;\n")
    result = CppImportAnalyzer().remove_import(path, "vector")
    assert result == "#include <string>\nint x;\n"


def test_update_include_path(tmp_path):
    path = _write(tmp_path, '#include "old.h"\n#include <old.h>\n')
    result = CppImportAnalyzer().update_import_path(path, "old.h", "new.h")
    assert result == '#include "new.h"\n#include <new.h>\n'