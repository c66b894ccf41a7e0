"""Import analyzers for C/C++, Python, Rust and TypeScript, their shared model and lookup by extension."""

__all__ = ["model", "cpp", "python_lang", "rust_lang", "typescript", "registry"]