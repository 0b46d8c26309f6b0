"""End-to-end rendering tests for the TypeScript generator."""

from __future__ import annotations

from pathlib import Path

import pytest

from crd_typegen.codegen import generate_from_source
from crd_typegen.codegen.core.generator import generate_code
from crd_typegen.codegen.languages.typescript import TypeScriptGenerator
from crd_typegen.codegen.registry import (
    RegistryError,
    create_default_registry,
    list_supported_languages,
)
from tests._fixtures.document_builder import (
    V1,
    DocumentBuilder,
    make_config,
    member,
    render,
)

META = "k8s.io/apimachinery/pkg/apis/meta/v1"

WIDGET_OUTPUT = """\
// Code generated by crd-typegen. DO NOT EDIT.

// example.com/v1

export type Widget = {
  name: string;
  size?: number;
};
"""


def test_widget_scenario(widget_document: DocumentBuilder) -> None:
    assert render(widget_document.versioned()) == WIDGET_OUTPUT


def test_generate_from_source(widget_document: DocumentBuilder) -> None:
    result = generate_from_source(widget_document.build())

    assert result.success
    assert result.code == WIDGET_OUTPUT
    assert result.metadata["packages"] == ["example.com/v1"]
    assert result.metadata["type_count"] == 1
    assert result.metadata["file_extension"] == ".ts"


def test_rendering_is_deterministic(builder: DocumentBuilder) -> None:
    builder.package()
    builder.struct("Zeta", [member("Name", "string", "name")])
    builder.struct("Alpha", [member("Zeta", f"{V1}.Zeta", "zeta")])
    builder.struct("Root", exported=True)

    first = render(builder.versioned())
    second = render(builder.versioned())

    assert first == second
    assert first.index("export type Root") < first.index("export type Alpha")
    assert first.index("export type Alpha") < first.index("export type Zeta")


def test_regrouping_does_not_change_output(widget_document: DocumentBuilder) -> None:
    packages = widget_document.versioned()
    before = render(packages)

    packages[0].merge(packages[0].raw_packages[0])

    assert render(packages) == before


def test_embedded_members_compose_by_intersection(builder: DocumentBuilder) -> None:
    builder.package()
    builder.struct("Base", [member("ID", "string", "id")])
    builder.struct(
        "Widget",
        [
            member("TypeMeta", f"{META}.TypeMeta", inline=True),
            member("Base", f"{V1}.Base", inline=True),
            member("Name", "string", "name"),
        ],
    )
    config = make_config(hideMemberFields=["TypeMeta"])

    code = render(builder.versioned(), config)

    assert "export type Widget = {\n  name: string;\n} & Base;" in code
    assert "id: string;" in code.split("export type Widget")[0]
    assert "TypeMeta" not in code


def test_appears_in_cross_links(builder: DocumentBuilder) -> None:
    builder.package()
    builder.struct("Spec", [member("Name", "string", "name")], comments=["Spec of a thing."])
    builder.struct("Widget", [member("Spec", f"{V1}.Spec", "spec")])
    builder.struct("Gadget", [member("Specs", f"[]{V1}.Spec", "specs")])

    code = render(builder.versioned())

    assert (
        "/**\n * Spec of a thing.\n *\n * Appears in: Gadget, Widget\n */\n"
        "export type Spec = {"
    ) in code
    assert "  specs: Spec[];" in code


def test_member_docs_are_indented(builder: DocumentBuilder) -> None:
    builder.package()
    builder.struct(
        "Widget",
        [member("Size", "int", "size", optional=True, comments=["Size in bytes."])],
    )

    code = render(builder.versioned())

    assert "  /**\n   * Size in bytes.\n   */\n  size?: number;" in code


def test_aliases_render_enum_unions_or_underlying(builder: DocumentBuilder) -> None:
    builder.package()
    color = builder.alias("Color", "string")
    builder.constant("Red", color, "red")
    builder.constant("Blue", color, "blue")
    builder.alias("Labels", "map[string]string")
    builder.raw(package=V1, name="Anything", kind="Interface")

    code = render(builder.versioned())

    assert 'export type Color = "blue" | "red";' in code
    assert "export type Labels = Record<string, string>;" in code
    assert "export type Anything = unknown;" in code
    assert "Red" not in code


def test_hidden_types_and_members_are_omitted(builder: DocumentBuilder) -> None:
    builder.package()
    builder.struct(
        "Widget",
        [
            member("Name", "string", "name"),
            member("Status", "string", "status"),
            member("Cache", "string", "-"),
        ],
        exported=True,
    )
    builder.struct("WidgetList", [member("Items", f"[]{V1}.Widget", "items")], exported=True)
    builder.struct("widgetCache")
    config = make_config(hideTypePatterns=["List$"], hideMemberFields=["status"])

    code = render(builder.versioned(), config)

    assert "WidgetList" not in code
    assert "widgetCache" not in code
    assert "status" not in code
    assert "Cache" not in code
    assert "export type Widget = {\n  name: string;\n};" in code


def test_external_types_are_named_and_reported(builder: DocumentBuilder) -> None:
    builder.package()
    builder.struct(
        "Widget",
        [
            member("Meta", f"{META}.ObjectMeta", "metadata"),
            member("Created", f"*{META}.Time", "created"),
        ],
    )
    config = make_config(
        externalPackages=[{"typeMatchPrefix": r"^k8s\.io/"}],
        typeReplacements={"Time": "string"},
    )

    result = generate_code(TypeScriptGenerator(config), builder.versioned())

    assert result.success
    assert "  metadata: ObjectMeta;\n  created: string;" in result.code
    assert result.metadata["external_types"] == [f"{META}.ObjectMeta", f"{META}.Time"]


def test_non_identifier_property_names_are_quoted(builder: DocumentBuilder) -> None:
    builder.package()
    builder.struct("Widget", [member("Class", "string", "x-class")])

    assert '  "x-class": string;' in render(builder.versioned())


def test_packages_get_banners(builder: DocumentBuilder) -> None:
    for path in ("example.com/api/v1", "example.com/api/v2"):
        builder.package(path)
        builder.struct("Widget", package=path)

    code = render(builder.versioned())

    assert code.index("// example.com/v1") < code.index("// example.com/v2")
    assert "\n\n\n" not in code
    assert all(line == line.rstrip() for line in code.splitlines())


def test_unrenderable_member_fails_the_whole_pass(widget_document: DocumentBuilder) -> None:
    widget_document.raw(package=V1, name="Handler", kind="Func")
    widget_document.struct("Hook", [member("Run", f"{V1}.Handler", "run")])

    result = generate_code(TypeScriptGenerator(), widget_document.versioned())

    assert not result.success
    assert result.code == ""
    assert "kind=Func" in result.error_message
    assert isinstance(result.exception, Exception)


def test_constant_without_value_fails_the_pass(builder: DocumentBuilder) -> None:
    builder.package()
    color = builder.alias("Color", "string")
    builder.constant("Red", color, None)

    result = generate_code(TypeScriptGenerator(), builder.versioned())

    assert not result.success
    assert "non-const declaration" in result.error_message


def test_custom_template_directory(tmp_path: Path, widget_document: DocumentBuilder) -> None:
    (tmp_path / "packages.ts.j2").write_text(
        "{% for package in packages %}{% for type in package.types %}"
        "{{ package.identifier }} {{ type.name }}\n"
        "{% endfor %}{% endfor %}",
        encoding="utf-8",
    )

    result = generate_code(
        TypeScriptGenerator(template_dir=tmp_path), widget_document.versioned()
    )

    assert result.success
    assert result.code == "example.com/v1 Widget\n"


def test_missing_template_fails(tmp_path: Path, widget_document: DocumentBuilder) -> None:
    result = generate_code(
        TypeScriptGenerator(template_dir=tmp_path), widget_document.versioned()
    )

    assert not result.success
    assert "packages.ts.j2" in result.error_message


def test_registry_resolves_aliases() -> None:
    registry = create_default_registry()

    assert list_supported_languages() == ["typescript"]
    assert registry.get_aliases_for_language("typescript") == ["ts"]
    assert registry.is_supported("ts")
    assert not registry.is_supported("rust")
    assert isinstance(registry.create_generator("TS"), TypeScriptGenerator)


def test_registry_rejects_duplicate_names() -> None:
    registry = create_default_registry()

    with pytest.raises(RegistryError, match="already registered"):
        registry.register("TypeScript", TypeScriptGenerator)

    with pytest.raises(RegistryError, match="already registered"):
        registry.register("other", TypeScriptGenerator, aliases=["ts"])


def test_registry_rejects_unknown_language() -> None:
    with pytest.raises(RegistryError, match="unsupported language 'rust'"):
        create_default_registry().create_generator("rust")


def test_declaration_names_ignore_type_replacements(builder: DocumentBuilder) -> None:
    builder.package()
    builder.struct("Time", [member("Seconds", "int64", "seconds")])
    builder.struct("Event", [member("Created", f"*{V1}.Time", "created")])
    config = make_config(typeReplacements={"Time": "string"})

    code = render(builder.versioned(), config)

    assert "export type Time = {\n  seconds: number;\n};" in code
    assert "/**\n * Appears in: Event\n */" in code
    assert "  created: string;" in code
    assert "export type string" not in code


def test_named_wrapper_declarations_alias_their_structure(builder: DocumentBuilder) -> None:
    builder.package()
    builder.raw(package=V1, name="Labels", kind="Map", key="string", elem="string")
    builder.raw(package=V1, name="Names", kind="Slice", elem="string")
    builder.raw(package=V1, name="Ref", kind="Pointer", elem="int")

    code = render(builder.versioned())

    assert "export type Labels = Record<string, string>;" in code
    assert "export type Names = string[];" in code
    assert "export type Ref = number;" in code
    assert "export type Record<" not in code


def test_named_builtin_declarations(builder: DocumentBuilder) -> None:
    builder.package()
    builder.raw(package=V1, name="Quantity", kind="Builtin")

    assert "export type Quantity = unknown;" in render(builder.versioned())

    config = make_config(typeReplacements={"Quantity": "string"})
    assert "export type Quantity = string;" in render(builder.versioned(), config)
