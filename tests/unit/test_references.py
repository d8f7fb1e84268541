"""Tests for the references module."""

from __future__ import annotations

import pytest

from affected_apps.references import (
    NodeKind,
    classify,
    extract_references,
    is_source_file,
    iter_references,
    parse_typescript,
)


def refs(source: str) -> list[str]:
    return list(iter_references(parse_typescript(source)))


class TestIsSourceFile:
    def test_ts_file(self) -> None:
        assert is_source_file("libs/lib1/index.ts")

    def test_declaration_file_counts_as_ts(self) -> None:
        assert is_source_file("libs/lib1/typings.d.ts")

    @pytest.mark.parametrize(
        "path", ["apps/app1/main.html", "apps/app1/styles.css", "README.md", "apps/app1/app.tsx", "Makefile"]
    )
    def test_other_extensions_skipped(self, path: str) -> None:
        assert not is_source_file(path)


class TestClassify:
    def test_import_statement(self) -> None:
        root = parse_typescript("import { a } from '@org/lib';")
        assert classify(root.children[0]) is NodeKind.IMPORT_DECLARATION

    def test_program_is_other(self) -> None:
        root = parse_typescript("const a = 1;")
        assert classify(root) is NodeKind.OTHER


class TestIterReferences:
    def test_named_import(self) -> None:
        assert refs("import { Foo } from '@org/lib1';") == ["@org/lib1"]

    def test_default_import_double_quotes(self) -> None:
        assert refs('import x from "@org/lib1";') == ["@org/lib1"]

    def test_side_effect_import(self) -> None:
        assert refs("import '@org/polyfills';") == ["@org/polyfills"]

    def test_multiple_imports_in_source_order(self) -> None:
        source = (
            "import { A } from '@angular/core';\n"
            "import { B } from '@org/lib1';\n"
            "import * as c from './local';\n"
        )
        assert refs(source) == ["@angular/core", "@org/lib1", "./local"]

    def test_load_children_literal(self) -> None:
        source = "const routes = [{ path: 'a', loadChildren: '@org/lazy#LazyModule' }];"
        assert refs(source) == ["@org/lazy#LazyModule"]

    def test_load_children_quoted_key(self) -> None:
        source = "const routes = [{ 'loadChildren': '@org/lazy' }];"
        assert refs(source) == ["@org/lazy"]

    def test_load_children_nested_in_children(self) -> None:
        source = (
            "export const routes = [\n"
            "  { path: 'a', children: [{ path: 'b', loadChildren: '@org/deep#Mod' }] },\n"
            "];\n"
        )
        assert refs(source) == ["@org/deep#Mod"]

    def test_load_children_inside_call(self) -> None:
        source = (
            "RouterModule.forRoot([\n"
            "  { path: 'x', loadChildren: '@org/x/module#XModule' },\n"
            "]);\n"
        )
        assert refs(source) == ["@org/x/module#XModule"]

    def test_load_children_dynamic_value_ignored(self) -> None:
        source = "const r = { loadChildren: () => import('@org/lazy').then(m => m.Mod) };"
        assert refs(source) == []

    def test_dynamic_load_children_value_not_walked(self) -> None:
        source = "const r = { loadChildren: pick({ loadChildren: '@org/inner' }) };"
        assert refs(source) == []

    def test_other_property_value_walked(self) -> None:
        source = "const r = { data: { route: { loadChildren: '@org/nested' } } };"
        assert refs(source) == ["@org/nested"]

    def test_load_children_template_string_ignored(self) -> None:
        source = "const r = { loadChildren: `@org/lazy` };"
        assert refs(source) == []

    def test_other_string_properties_ignored(self) -> None:
        source = "const r = { path: '@org/lib1', component: '@org/lib2' };"
        assert refs(source) == []

    def test_require_and_exports_ignored(self) -> None:
        source = (
            "const a = require('@org/lib1');\n"
            "export { b } from '@org/lib2';\n"
        )
        assert refs(source) == []

    def test_empty_source(self) -> None:
        assert refs("") == []


class TestExtractReferences:
    def test_reads_and_parses_ts_file(self) -> None:
        files = {"apps/app1/main.ts": "import x from '@org/lib1';"}
        assert extract_references("apps/app1/main.ts", files.__getitem__) == ["@org/lib1"]

    def test_non_ts_file_is_never_read(self) -> None:
        def read_file(path: str) -> str:
            raise AssertionError(f"unexpected read of {path}")

        assert extract_references("apps/app1/index.html", read_file) == []

    def test_read_failure_propagates(self) -> None:
        def read_file(path: str) -> str:
            raise FileNotFoundError(path)

        with pytest.raises(FileNotFoundError):
            extract_references("apps/app1/main.ts", read_file)

    def test_custom_parser(self) -> None:
        calls: list[str] = []

        def parse(source: str):
            calls.append(source)
            return parse_typescript(source)

        result = extract_references("a.ts", lambda p: "import '@org/a';", parse=parse)
        assert result == ["@org/a"]
        assert calls == ["import '@org/a';"]
