"""Visibility and display-name policy tests."""

from __future__ import annotations

import pytest

from crd_typegen.codegen.core.generator import RenderError
from crd_typegen.codegen.core.naming import (
    constant_literal,
    field_embedded,
    field_name,
    hidden_member,
    hide_type,
    is_exported_type,
    is_optional_member,
    render_comments,
    sort_types,
    type_display_name,
    visible_types,
)
from crd_typegen.codegen.core.references import extract_type_to_package_map
from crd_typegen.codegen.core.schema import Declaration, Kind, Member, TypeName
from crd_typegen.codegen.languages.typescript.types import build_replacements
from tests._fixtures.document_builder import V1, DocumentBuilder, make_config, member

META = "k8s.io/apimachinery/pkg/apis/meta/v1"


def _declaration(name: str, package: str = V1, **kwargs) -> Declaration:
    return Declaration(name=TypeName(package, name), kind=Kind.STRUCT, **kwargs)


def _member(tags: str = "", comments: list[str] | None = None) -> Member:
    return Member(
        name="Size",
        type=Declaration(TypeName(name="int"), Kind.BUILTIN),
        tags=tags,
        comment_lines=comments or [],
    )


# Visibility


def test_hide_pattern_wins_over_export_tag() -> None:
    widget = _declaration(
        "WidgetList", second_closest_comment_lines=["+kubebuilder:object:root=true"]
    )
    config = make_config(hideTypePatterns=["List$"])

    assert is_exported_type(widget)
    assert hide_type(widget, config)


def test_lowercase_types_hidden_unless_exported() -> None:
    config = make_config()
    internal = _declaration("internalState")
    exported = _declaration(
        "internalRoot", comment_lines=["+kubebuilder:object:root=true"]
    )

    assert hide_type(internal, config)
    assert not hide_type(exported, config)
    assert not hide_type(_declaration("Widget"), config)


def test_hide_patterns_match_qualified_names() -> None:
    config = make_config(hideTypePatterns=[r"^example\.com/api/v1\."])

    assert hide_type(_declaration("Widget"), config)
    assert not hide_type(_declaration("Widget", package="other.io/v1"), config)


def test_visible_types_keeps_order() -> None:
    types = [_declaration("Zeta"), _declaration("hidden"), _declaration("Alpha")]

    visible = visible_types(types, make_config())

    assert [t.name.name for t in visible] == ["Zeta", "Alpha"]


def test_sort_puts_exported_first_then_by_name() -> None:
    root = ["+kubebuilder:object:root=true"]
    types = [
        _declaration("Beta"),
        _declaration("Zeta", second_closest_comment_lines=root),
        _declaration("Alpha"),
        _declaration("Gamma", comment_lines=root),
    ]

    ordered = sort_types(types)

    assert [t.name.name for t in ordered] == ["Gamma", "Zeta", "Alpha", "Beta"]
    assert sort_types(list(reversed(types))) == ordered


# Members


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        ('json:"size"', "size"),
        ('json:"size,omitempty"', "size"),
        ('json:",inline"', "Size"),
        ('protobuf:"varint,1"', "Size"),
        ("", "Size"),
    ],
)
def test_field_name(tags: str, expected: str) -> None:
    assert field_name(_member(tags)) == expected


def test_field_embedded() -> None:
    assert field_embedded(_member('json:",inline"'))
    assert not field_embedded(_member('json:"size"'))


def test_hidden_member_uses_serialized_name() -> None:
    config = make_config(hideMemberFields=["TypeMeta", "status"])

    assert hidden_member(_member('json:"status"'), config)
    assert hidden_member(_member('json:"-"'), config)
    assert not hidden_member(_member('json:"size"'), config)


def test_optional_member_needs_tag() -> None:
    assert is_optional_member(_member(comments=["Size in bytes.", "+optional"]))
    assert not is_optional_member(_member(comments=["This field is optional."]))


# Comments


def test_render_comments_drops_tags() -> None:
    rendered = render_comments(["Widget is a thing.", "", "It has a size.", "+optional"])

    assert rendered == "/**\n * Widget is a thing.\n *\n * It has a size.\n */"


def test_render_comments_with_extra_lines() -> None:
    assert render_comments([], ["Appears in: Gadget"]) == "/**\n * Appears in: Gadget\n */"
    assert render_comments(["Doc."], ["Appears in: Gadget"]) == (
        "/**\n * Doc.\n *\n * Appears in: Gadget\n */"
    )


def test_render_comments_empty() -> None:
    assert render_comments([]) == ""
    assert render_comments([""]) == ""
    assert render_comments(["+optional"]) == ""


# Display names


def _widget_members(builder: DocumentBuilder, *members):
    builder.package()
    builder.struct("Spec")
    builder.struct("Widget", list(members))
    (package,) = builder.versioned()
    widget = next(t for t in package.types if t.name.name == "Widget")
    return [m.type for m in widget.members], extract_type_to_package_map([package])


def test_local_types_use_bare_name(builder: DocumentBuilder) -> None:
    (spec, pointer), type_pkg_map = _widget_members(
        builder,
        member("Spec", f"{V1}.Spec", "spec"),
        member("Backup", f"*{V1}.Spec", "backup"),
    )

    assert type_display_name(spec, make_config(), type_pkg_map) == "Spec"
    assert type_display_name(pointer, make_config(), type_pkg_map) == "Spec"


def test_slices_and_maps_render_recursively(builder: DocumentBuilder) -> None:
    (specs, labels, nested), type_pkg_map = _widget_members(
        builder,
        member("Specs", f"[]{V1}.Spec", "specs"),
        member("Labels", "map[string]string", "labels"),
        member("Nested", "map[string][]*int", "nested"),
    )
    config = make_config()
    replacements = build_replacements(config)

    assert type_display_name(specs, config, type_pkg_map) == "Spec[]"
    assert type_display_name(labels, config, type_pkg_map) == "Record<string, string>"
    assert (
        type_display_name(nested, config, type_pkg_map, replacements)
        == "Record<string, number[]>"
    )


def test_custom_slice_template(builder: DocumentBuilder) -> None:
    (specs,), type_pkg_map = _widget_members(
        builder, member("Specs", f"[]{V1}.Spec", "specs")
    )
    config = make_config(sliceTemplate="Array<{{ type }}>")

    assert type_display_name(specs, config, type_pkg_map) == "Array<Spec>"


@pytest.mark.parametrize("template", ["{{ type", "{{ missing }}[]"])
def test_broken_slice_template_falls_back_to_element(
    builder: DocumentBuilder, template: str
) -> None:
    (specs,), type_pkg_map = _widget_members(
        builder, member("Specs", f"[]{V1}.Spec", "specs")
    )
    config = make_config(sliceTemplate=template)

    assert type_display_name(specs, config, type_pkg_map) == "Spec"


def test_external_types_use_override_then_replacement(builder: DocumentBuilder) -> None:
    (meta, time, other), type_pkg_map = _widget_members(
        builder,
        member("Meta", f"{META}.ObjectMeta", "metadata"),
        member("Created", f"{META}.Time", "created"),
        member("Other", "other.io/v1.Thing", "other"),
    )
    config = make_config(
        externalPackages=[{"typeMatchPrefix": r"^k8s\.io/apimachinery/pkg/apis/meta/v1\."}],
        externalTypes={META: {"ObjectMeta": "KubeObjectMeta"}},
        typeReplacements={"Time": "string"},
    )

    assert type_display_name(meta, config, type_pkg_map) == "KubeObjectMeta"
    assert type_display_name(time, config, type_pkg_map) == "string"
    assert type_display_name(other, config, type_pkg_map) == "other.io/v1.Thing"


def test_replacements_apply_to_builtins(builder: DocumentBuilder) -> None:
    (count,), type_pkg_map = _widget_members(builder, member("Count", "int64", "count"))
    config = make_config(typeReplacements={"int64": "bigint"})

    assert type_display_name(count, config, type_pkg_map) == "bigint"
    assert (
        type_display_name(count, config, type_pkg_map, build_replacements(config))
        == "bigint"
    )
    assert (
        type_display_name(count, make_config(), type_pkg_map, build_replacements(make_config()))
        == "number"
    )


def test_constant_literals() -> None:
    string = Declaration(TypeName(name="string"), Kind.BUILTIN)
    integer = Declaration(TypeName(name="int"), Kind.BUILTIN)
    color = Declaration(TypeName(V1, "Color"), Kind.ALIAS, underlying=string)
    level = Declaration(TypeName(V1, "Level"), Kind.ALIAS, underlying=integer)

    red = Declaration(TypeName(V1, "Red"), Kind.DECLARATION_OF, underlying=color, const_value="red")
    high = Declaration(TypeName(V1, "High"), Kind.DECLARATION_OF, underlying=level, const_value="3")

    assert constant_literal(red) == '"red"'
    assert constant_literal(high) == "3"
    green = Declaration(
        TypeName(V1, "Green"), Kind.DECLARATION_OF, underlying=color, const_value="grün"
    )
    assert constant_literal(green) == '"grün"'
    assert type_display_name(red, make_config(), {}) == '"red"'


def test_constant_without_value_is_a_render_error() -> None:
    missing = Declaration(TypeName(V1, "Missing"), Kind.DECLARATION_OF)

    with pytest.raises(RenderError, match="non-const declaration"):
        type_display_name(missing, make_config(), {})


@pytest.mark.parametrize("kind", [Kind.ARRAY, Kind.CHAN, Kind.FUNC, Kind.UNSUPPORTED])
def test_unsupported_kinds_are_render_errors(kind: Kind) -> None:
    declaration = Declaration(TypeName(V1, "Handler"), kind)

    with pytest.raises(RenderError, match="unhandled"):
        type_display_name(declaration, make_config(), {})
