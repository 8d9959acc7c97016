"""Lexical transforms applied to script sources before concatenation.

Nothing here parses JavaScript. Every transform is a pattern substitution, so
the output is only as good as the source is conventional: annotations inside
strings or object literals whose values are bare identifiers are stripped
too. Import statements are neutralized first and shielded from the type
stripping that follows.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Tuple

RUNTIME_MODULES = {"react": "React", "react-dom": "ReactDOM", "react-dom/client": "ReactDOM"}

_IMPORT_STATEMENT = re.compile(r"""^[ \t]*import\b[^;'"]*?['"][^'"\n]+['"][ \t]*;?""", re.MULTILINE)
_IMPORT_PARTS = re.compile(
    r"""import\s+(?P<type>type\s+)?(?:(?P<clause>[\s\S]+?)\s*from\s*)?['"](?P<module>[^'"]+)['"]"""
)
_NAMED_BINDINGS = re.compile(r"\{([^}]*)\}")
_DEFAULT_BINDING = re.compile(r"^\s*(?:\*\s+as\s+)?([A-Za-z_$][\w$]*)")

_EXPORT_DEFAULT_NAME = re.compile(r"^([ \t]*)export\s+default\s+([A-Za-z_$][\w$]*)[ \t]*;?[ \t]*$", re.MULTILINE)
_EXPORT_DEFAULT_DECL = re.compile(r"^([ \t]*)export\s+default\s+(?=(?:async\s+)?(?:function|class)\b)", re.MULTILINE)

_INTERFACE_BLOCK = re.compile(r"(?:\bexport\s+)?\binterface\s+\w+(?:\s+extends\s+[\w$.,\s<>]+?)?\s*\{[^}]*\}")
_TYPE_ALIAS_BLOCK = re.compile(r"(?:\bexport\s+)?\btype\s+\w+(?:<[^>]*>)?\s*=\s*\{[^}]*\};?")
_TYPE_ALIAS_LINE = re.compile(r"^[ \t]*(?:export\s+)?type\s+\w+(?:<[^>]*>)?\s*=[^;{\n]*;?[ \t]*$", re.MULTILINE)
_TYPE_ANNOTATION = re.compile(r"(?<=[\w$)\]])\??:[ \t]*[A-Za-z_$][\w$.]*(?:<[^>]+>)?(?:\[\])*")
_TYPE_CAST = re.compile(r"\s+\bas\s+[A-Za-z_$][\w$.]*(?:<[^>]+>)?(?:\[\])*")
_CALL_GENERICS = re.compile(r"<[^>]+>(?=\()")
_NON_NULL = re.compile(r"(?<=[\w$)\]])!(?=[.)\],;])")

_PLACEHOLDER = "\x00import{}\x00"
_PLACEHOLDER_PATTERN = re.compile("\x00import(\\d+)\x00")


def strip_types(content: str) -> str:
    """Remove type-only syntax: interface/type blocks, annotations, casts, call generics."""

    result = _INTERFACE_BLOCK.sub("", content)
    result = _TYPE_ALIAS_BLOCK.sub("", result)
    result = _TYPE_ALIAS_LINE.sub("", result)
    result = _TYPE_ANNOTATION.sub("", result)
    result = _TYPE_CAST.sub("", result)
    result = _CALL_GENERICS.sub("", result)
    result = _NON_NULL.sub("", result)
    return result


def _squash(text: str) -> str:
    return " ".join(text.split())


def _runtime_clause(clause: str) -> Tuple[Optional[str], List[Tuple[str, str]]]:
    """Split an import clause into its default local name and ``(imported, local)`` pairs."""

    named = _NAMED_BINDINGS.search(clause)
    head = clause[: named.start()] if named else clause
    default = _DEFAULT_BINDING.match(head.rstrip(", "))
    pairs: List[Tuple[str, str]] = []
    if named:
        for raw in named.group(1).split(","):
            name = _squash(raw)
            if not name or name.startswith("type "):
                continue
            imported, _, local = name.partition(" as ")
            pairs.append((imported, local or imported))
    return (default.group(1) if default else None), pairs


def collect_runtime_bindings(sources: Iterable[str]) -> List[str]:
    """Declarations for every runtime name imported across ``sources``, each declared once.

    The bundle is a single module scope, so a ``useState`` imported by two
    files must only be bound once. Names keep their first-seen order; a local
    name that was already bound keeps its first binding.
    """

    aliases: Dict[str, str] = {}
    named: Dict[str, Dict[str, str]] = {}
    for content in sources:
        for match in _IMPORT_STATEMENT.finditer(content):
            parts = _IMPORT_PARTS.search(match.group(0))
            if parts is None or parts.group("type") or parts.group("module") not in RUNTIME_MODULES:
                continue
            binding = RUNTIME_MODULES[parts.group("module")]
            default, pairs = _runtime_clause(parts.group("clause") or "")
            taken = set(aliases) | {local for group in named.values() for local in group}
            if default and default not in RUNTIME_MODULES.values() and default not in taken:
                aliases[default] = binding
                taken.add(default)
            for imported, local in pairs:
                if local in taken or local in RUNTIME_MODULES.values():
                    continue
                named.setdefault(binding, {})[local] = imported
                taken.add(local)
    lines = [f"const {local} = {binding};" for local, binding in aliases.items()]
    for binding, group in named.items():
        entries = [local if imported == local else f"{imported}: {local}" for local, imported in group.items()]
        lines.append(f"const {{ {', '.join(entries)} }} = {binding};")
    return lines


def neutralize_import(statement: str) -> str:
    """Rewrite one import statement so the concatenated bundle stays loadable.

    Runtime imports become comments; the runtime comes from the CDN preamble
    and :func:`collect_runtime_bindings` declares the names they bind once per
    bundle. Relative imports are commented out and bare third-party imports
    are kept.
    """

    parts = _IMPORT_PARTS.search(statement)
    if parts is None:
        return statement
    module = parts.group("module")
    clause = parts.group("clause") or ""
    indent = statement[: len(statement) - len(statement.lstrip())]
    if parts.group("type"):
        return f"{indent}// import type {_squash(clause)} from {module}"
    if module in RUNTIME_MODULES:
        return f"{indent}// {RUNTIME_MODULES[module]} imported from CDN"
    if module.startswith("./") or module.startswith("../"):
        if clause:
            return f"{indent}// import {_squash(clause)} from {module}"
        return f"{indent}// import {module}"
    return statement


def neutralize_exports(content: str) -> str:
    result = _EXPORT_DEFAULT_NAME.sub(r"\1// export default \2", content)
    return _EXPORT_DEFAULT_DECL.sub(r"\1", result)


def transform_source(content: str) -> str:
    """Full per-file transform: imports, default exports, then type stripping."""

    shielded: List[str] = []

    def _shield(match: re.Match[str]) -> str:
        shielded.append(neutralize_import(match.group(0)))
        return _PLACEHOLDER.format(len(shielded) - 1)

    result = _IMPORT_STATEMENT.sub(_shield, content)
    result = neutralize_exports(result)
    result = strip_types(result)
    return _PLACEHOLDER_PATTERN.sub(lambda match: shielded[int(match.group(1))], result)


__all__ = [
    "RUNTIME_MODULES",
    "collect_runtime_bindings",
    "neutralize_exports",
    "neutralize_import",
    "strip_types",
    "transform_source",
]
