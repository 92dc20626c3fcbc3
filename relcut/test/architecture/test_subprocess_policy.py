from __future__ import annotations

import ast

from relcut.test.architecture._utils import iter_source_files, package_root, parse_imports, read_tree


def _direct_subprocess_calls(tree: ast.AST) -> list[int]:
    lines: list[int] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue
        func = node.func
        if not isinstance(func, ast.Attribute):
            continue
        if func.attr not in {"run", "check_output", "check_call", "call", "Popen"}:
            continue
        if isinstance(func.value, ast.Name) and func.value.id == "subprocess":
            lines.append(node.lineno)
    return lines


def test_subprocess_is_only_used_by_platform_process() -> None:
    root = package_root()
    allowlist = {"platform/process.py"}

    offenders: list[str] = []
    for file_path in iter_source_files(root):
        rel = file_path.relative_to(root).as_posix()
        if rel in allowlist:
            continue
        for line in _direct_subprocess_calls(read_tree(file_path)):
            offenders.append(f"{rel}:{line}: direct subprocess call")
        for item in parse_imports(file_path):
            if item.module == "subprocess":
                offenders.append(f"{rel}:{item.line}: subprocess import")

    assert not offenders, "Subprocess policy violations:\n" + "\n".join(offenders)
