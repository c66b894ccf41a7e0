# powertools

A library of helpers for refactoring source trees. It uses only the standard
library.

## Installation

```
pip install .
```

## What it provides

### Import analysis: `powertools.imports`

Each analyzer subclasses `ImportAnalyzer` from `powertools.imports.model`.
Each one provides `find_imports`, `add_import`, `remove_import` and
`update_import_path`. The three editing methods return the new file content.
They do not write the file.

- `CppImportAnalyzer` (`powertools.imports.cpp`) handles `#include <...>` and
  `#include "..."` directives.
- `PythonImportAnalyzer` (`powertools.imports.python_lang`) handles top-level
  `import` and `from ... import` statements. It parses them with `ast`.
- `RustImportAnalyzer` (`powertools.imports.rust_lang`) handles top-level `use`
  declarations, including groups, renames and globs. Its line numbers are
  approximate: each top-level item counts as one line.
- `TypeScriptImportAnalyzer` (`powertools.imports.typescript`) handles ES
  module `import` statements: named, default, namespace and side-effect
  imports.

`get_analyzer_for_file(path)` in `powertools.imports.registry` picks an
analyzer from the file extension. It returns `None` for an unknown extension.

### Batch replacement: `powertools.replacer.BatchReplacer`

`BatchReplacer` runs one regular-expression replacement over every file under
a root directory.

- Directories such as `.git/`, `target/`, `node_modules/`, `build/` and
  `venv/` are skipped.
- Files can be filtered by name with a simple glob such as `*.rs` or `**/*.ts`.
- The replacement text may use `$1`, `$name`, `${name}` and `$$`.
- `preview()` returns one `PreviewDiff` per file that has matches.
- `apply()` rewrites the files and returns a `BatchResult`
  (`powertools.results`). A `BatchResult` holds the counts, the modified files
  and the per-file errors.

### Previews: `powertools.preview`

- `PreviewDiff` collects the changes for one file. `format_diff()` renders
  them.
- `RefactoringSummary` totals several diffs and gives each file a
  `RiskLevel` of low, medium or high:
  - High: an import is removed, or the file name contains `main`, `index` or
    `app`.
  - Medium: there are more than ten changes, or any import changes.
  - Low: everything else.

  It also collects warnings. `format_summary()` renders the whole report.
- `generate_preview(diffs)` formats a summary without changing the diffs
  passed in.

### Transactions: `powertools.transaction`

`RefactoringTransaction` queues file writes.

- `commit()` applies all of them. If a write fails, it restores what was
  already written and raises `TransactionError`.
- In `TransactionMode.DRY_RUN`, nothing is written.
- `preview()` turns the queued writes into a line-by-line
  `RefactoringSummary`.
- `TransactionResult.format_summary()` renders the outcome.

### Symbol renaming: `powertools.rename`

`SymbolRenamer` renames the identifier at a given position everywhere it is
referenced.

- It takes a `SymbolQuery`: any object with `find_definition(file_path, line,
  column)` and `find_references(symbol, include_declarations)`.
- `rename(options)` commits the edits through a transaction. `RenameOptions`
  sets the mode.
- `preview(options)` returns a `RefactoringSummary` and changes no file.
- When `update_imports` is true, which is the default, import lines that name
  the symbol are updated too.
- Failures raise `RenameError`.

### Watch filters and index metadata: `powertools.filters`, `powertools.metadata`

- `should_ignore`, `detect_language_from_path` and `is_relevant_file` decide
  which source files matter.
- `IndexMetadata.generate(root)` hashes the paths and modification times of
  the relevant files.
- `save(index_path)` and `load(index_path)` store that hash as JSON in a
  `.scip.meta` file next to the index.
- `is_stale(root)` compares the stored hash with the project as it is now.
- `check_staleness(root)` returns the name of the first known index file
  (`index.python.scip`, `index.rust.scip`, ...) that is stale or has no
  readable metadata.

## Example

```python
from pathlib import Path
from powertools.replacer import BatchReplacer
from powertools.preview import generate_preview

replacer = BatchReplacer(r"old_name", "new_name", "*.py", Path("."))
print(generate_preview(replacer.preview()))
result = replacer.apply()
print(result.files_modified, result.replacements_made)
```

## What it does not do

- There is no command-line program. Everything is used from Python.
- It does not build code indexes. Symbol definitions and references for
  renaming must come from a `SymbolQuery` that you supply.
- It does not watch the file system or re-index on change. It only provides
  the filters and the staleness check that such a watcher would use.

## Running the tests

```
pip install .[test]
pytest
```