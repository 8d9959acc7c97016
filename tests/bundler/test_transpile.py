from __future__ import annotations

import pytest

from reactide.app.bundler.transpile import (
    collect_runtime_bindings,
    neutralize_exports,
    neutralize_import,
    strip_types,
    transform_source,
)


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("const x: number = 5;", "const x = 5;"),
        ("function f(a: string, b?: number): void {}", "function f(a, b) {}"),
        ("const items: string[] = [];", "const items = [];"),
        ("const n = value as number;", "const n = value;"),
        ("const [v, setV] = useState<number>(0);", "const [v, setV] = useState(0);"),
        ("const size = items!.length;", "const size = items.length;"),
    ],
)
def test_strip_types_removes_type_syntax(source: str, expected: str) -> None:
    assert strip_types(source) == expected


def test_strip_types_drops_interfaces_and_aliases() -> None:
    source = "interface Props {\n  title: string;\n}\ntype Id = string;\nconst a = 1;\n"
    result = strip_types(source)
    assert "interface" not in result
    assert "type Id" not in result
    assert "const a = 1;" in result


def test_strip_types_keeps_spaced_ternary_and_comparisons() -> None:
    source = "const y = ok ? left : right;\nconst same = a !== b;\n"
    assert strip_types(source) == source


def test_neutralize_runtime_imports() -> None:
    assert neutralize_import("import React from 'react';") == "// React imported from CDN"
    assert neutralize_import("import ReactDOM from 'react-dom/client';") == "// ReactDOM imported from CDN"
    assert neutralize_import("import { useState } from 'react';") == "// React imported from CDN"


def test_runtime_bindings_keep_aliases() -> None:
    bindings = collect_runtime_bindings(["import React, { useEffect as useFx } from 'react';"])
    assert bindings == ["const { useEffect: useFx } = React;"]


def test_runtime_bindings_are_declared_once_across_files() -> None:
    sources = [
        "import { useState } from 'react';\nexport function Counter() {}\n",
        "import React, { useState, useEffect } from 'react';\nimport R from 'react';\n",
        "import ReactDOM from 'react-dom/client';\nimport { createRoot } from 'react-dom/client';\n",
        "import type { FC } from 'react';\nimport { useEffect as useFx } from 'react';\n",
    ]
    assert collect_runtime_bindings(sources) == [
        "const R = React;",
        "const { useState, useEffect, useEffect: useFx } = React;",
        "const { createRoot } = ReactDOM;",
    ]


def test_runtime_bindings_ignore_other_modules() -> None:
    assert collect_runtime_bindings(["import { useState } from './hooks';", "import x from 'lodash';"]) == []


def test_neutralize_relative_and_side_effect_imports() -> None:
    assert neutralize_import("import App from './App';") == "// import App from ./App"
    assert neutralize_import("import './index.css';") == "// import ./index.css"
    assert neutralize_import("import type { Foo } from './types';") == "// import type { Foo } from ./types"


def test_bare_third_party_import_is_kept() -> None:
    statement = "import lodash from 'lodash';"
    assert neutralize_import(statement) == statement


def test_neutralize_exports() -> None:
    assert neutralize_exports("export default App;") == "// export default App"
    assert neutralize_exports("export default function App() {}") == "function App() {}"


def test_transform_source_shields_imports_from_type_stripping() -> None:
    source = (
        "import { useState } from 'react';\n"
        "import App from './App';\n"
        "function Counter(props: Props) {\n"
        "  const [n] = useState<number>(0);\n"
        "  return n;\n"
        "}\n"
        "export default Counter;\n"
    )
    result = transform_source(source)
    assert "// React imported from CDN" in result
    assert "= React;" not in result
    assert "// import App from ./App" in result
    assert "function Counter(props) {" in result
    assert "useState(0)" in result
    assert "// export default Counter" in result
    assert "\x00" not in result
