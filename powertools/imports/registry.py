"""Choice of import analyzer by file extension."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from .cpp import CppImportAnalyzer
from .model import ImportAnalyzer, PathLike
from .python_lang import PythonImportAnalyzer
from .rust_lang import RustImportAnalyzer
from .typescript import TypeScriptImportAnalyzer

_ANALYZERS: dict[str, Callable[[], ImportAnalyzer]] = {
    **dict.fromkeys(("ts", "tsx", "js", "jsx", "mjs"), TypeScriptImportAnalyzer),
    **dict.fromkeys(("py", "pyi"), PythonImportAnalyzer),
    "rs": RustImportAnalyzer,
    **dict.fromkeys(("cpp", "cc", "cxx", "c", "h", "hpp", "hxx"), CppImportAnalyzer),
}


def get_analyzer_for_file(file: PathLike) -> Optional[ImportAnalyzer]:
    """Return the import analyzer for the file's extension, or None if unsupported."""
    suffix = Path(file).suffix
    if not suffix:
        return None
    factory = _ANALYZERS.get(suffix[1:])
    return factory() if factory is not None else None