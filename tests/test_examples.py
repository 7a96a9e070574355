"""Tests for example scripts.

Verifies that all example scripts in the examples/ directory have valid
syntax and the structure expected of a runnable example.
"""

import ast
from pathlib import Path

import pytest

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"

ALL_EXAMPLES = sorted(p.stem for p in EXAMPLES_DIR.glob("*.py"))


def test_examples_present() -> None:
    assert ALL_EXAMPLES


class TestExampleSyntax:
    """Verify every example script has valid Python syntax."""

    @pytest.mark.parametrize("name", ALL_EXAMPLES)
    def test_syntax(self, name: str) -> None:
        source = (EXAMPLES_DIR / f"{name}.py").read_text()
        ast.parse(source, filename=f"{name}.py")

    @pytest.mark.parametrize("name", ALL_EXAMPLES)
    def test_has_module_docstring(self, name: str) -> None:
        source = (EXAMPLES_DIR / f"{name}.py").read_text()
        tree = ast.parse(source)
        docstring = ast.get_docstring(tree)
        assert docstring, f"{name}.py is missing a module docstring"

    @pytest.mark.parametrize("name", ALL_EXAMPLES)
    def test_has_main_guard(self, name: str) -> None:
        source = (EXAMPLES_DIR / f"{name}.py").read_text()
        assert 'if __name__ == "__main__"' in source, (
            f'{name}.py is missing \'if __name__ == "__main__" guard'
        )

    @pytest.mark.parametrize("name", ALL_EXAMPLES)
    def test_has_async_main(self, name: str) -> None:
        source = (EXAMPLES_DIR / f"{name}.py").read_text()
        tree = ast.parse(source)
        has_main = any(
            isinstance(node, ast.AsyncFunctionDef) and node.name == "main"
            for node in ast.walk(tree)
        )
        assert has_main, f"{name}.py is missing 'async def main()'"

    @pytest.mark.parametrize("name", ALL_EXAMPLES)
    def test_imports_only_public_api(self, name: str) -> None:
        tree = ast.parse((EXAMPLES_DIR / f"{name}.py").read_text())
        modules = [
            node.module
            for node in ast.walk(tree)
            if isinstance(node, ast.ImportFrom) and node.module
        ]
        assert all(not m.startswith("lifx_lan.") for m in modules), modules
