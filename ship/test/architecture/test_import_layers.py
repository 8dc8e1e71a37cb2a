from __future__ import annotations

import pytest

from ._gate import require_arch_checks_enabled
from ._utils import iter_python_files, matches_prefix, parse_imports, ship_root


@pytest.mark.parametrize("layer", ["core", "platform", "pipeline", "services", "git", "ci"])
def test_lower_layers_do_not_import_cli(layer: str) -> None:
    require_arch_checks_enabled()

    root = ship_root()
    offenders: list[str] = []
    for file_path in iter_python_files(root / layer):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            if matches_prefix(item.module, "ship.cli") or matches_prefix(item.module, "ship.build"):
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, f"{layer} -> cli dependency violations:\n" + "\n".join(offenders)


def test_core_does_not_import_services() -> None:
    require_arch_checks_enabled()

    root = ship_root()
    offenders: list[str] = []
    for file_path in iter_python_files(root / "core"):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            if matches_prefix(item.module, "ship.services"):
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, "core -> services dependency violations:\n" + "\n".join(offenders)
