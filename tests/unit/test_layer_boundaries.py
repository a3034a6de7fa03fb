"""Layer boundary checks for the hexagonal layout.

- domain/ imports nothing from other qube_manager layers
- application/ never imports adapters, the API or the CLI
"""

import ast
from pathlib import Path

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[2] / "qube_manager"

OUTER_LAYERS = ("application", "infrastructure", "api", "bootstrap", "workers", "config", "cli")


def _imported_modules(path: Path) -> set[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    modules: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            modules.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            modules.add(node.module)
    return modules


def _layer_files(layer: str) -> list[Path]:
    return sorted((PACKAGE_ROOT / layer).rglob("*.py"))


def _violations(layer: str, forbidden: tuple[str, ...]) -> list[str]:
    found = []
    for path in _layer_files(layer):
        for module in _imported_modules(path):
            for target in forbidden:
                if module == f"qube_manager.{target}" or module.startswith(
                    f"qube_manager.{target}."
                ):
                    found.append(f"{path.relative_to(PACKAGE_ROOT)} -> {module}")
    return found


class TestLayerBoundaries:
    def test_layers_exist(self) -> None:
        for layer in ("domain", "application", "infrastructure", "api"):
            assert _layer_files(layer), layer

    def test_domain_imports_no_outer_layer(self) -> None:
        assert _violations("domain", OUTER_LAYERS) == []

    @pytest.mark.parametrize("target", ["infrastructure.adapters", "api", "cli", "bootstrap"])
    def test_application_does_not_reach_outward(self, target: str) -> None:
        assert _violations("application", (target,)) == []
