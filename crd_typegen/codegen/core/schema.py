"""
Declaration graph for code generation.

Converts the source declaration document into a graph of shared
Declaration objects that the grouping, naming and rendering stages
work with consistently.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from enum import Enum


class IngestionError(Exception):
    """Exception raised when the source declaration graph is malformed."""

    pass


class Kind(Enum):
    """Declaration kinds produced by the source type system."""

    STRUCT = "Struct"
    ALIAS = "Alias"
    BUILTIN = "Builtin"
    POINTER = "Pointer"
    SLICE = "Slice"
    MAP = "Map"
    DECLARATION_OF = "DeclarationOf"  # named constant
    INTERFACE = "Interface"

    # Accepted at ingestion, not expressible in the target language
    ARRAY = "Array"
    CHAN = "Chan"
    FUNC = "Func"
    UNSUPPORTED = "Unsupported"


WRAPPER_KINDS = frozenset({Kind.POINTER, Kind.SLICE, Kind.MAP})


@dataclass(frozen=True)
class TypeName:
    """Qualified identity of a declaration: owning package path + local name."""

    package: str = ""
    name: str = ""

    def __str__(self) -> str:
        if self.package:
            return f"{self.package}.{self.name}"
        return self.name


@dataclass(eq=False)
class Declaration:
    """
    A named type definition in the source graph.

    Declarations compare and hash by identity: two references to the
    same source type always resolve to the same object.
    """

    name: TypeName
    kind: Kind
    members: List["Member"] = field(default_factory=list)

    # Alias and constant declarations
    underlying: Optional["Declaration"] = None
    const_value: Optional[str] = None

    # Pointer, slice and map wrappers
    elem: Optional["Declaration"] = None
    key: Optional["Declaration"] = None

    comment_lines: List[str] = field(default_factory=list)
    second_closest_comment_lines: List[str] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Declaration({self.name}, {self.kind.value})"


@dataclass
class Member:
    """A field of a record declaration."""

    name: str
    type: Declaration
    tags: str = ""
    comment_lines: List[str] = field(default_factory=list)


@dataclass
class RawPackage:
    """A source package as reported by the ingestion collaborator."""

    path: str
    name: str  # basename, e.g. "v1" in "example.com/api/v1"
    source_path: str = ""
    comments: List[str] = field(default_factory=list)
    doc_comments: List[str] = field(default_factory=list)
    types: Dict[str, Declaration] = field(default_factory=dict)
    constants: Dict[str, Declaration] = field(default_factory=dict)


def innermost_element(t: Declaration) -> Declaration:
    """Strip pointer, slice and map wrapping down to the element declaration."""
    while t.elem is not None:
        t = t.elem
    return t


def final_underlying(t: Declaration) -> Declaration:
    """Walk the underlying chain of t to the declaration that has none."""
    while t.underlying is not None:
        t = t.underlying
    return t


def extract_comment_tags(marker: str, lines: List[str]) -> Dict[str, List[str]]:
    """
    Extract machine-readable tags from comment lines.

    ``+key=value`` yields ``{"key": ["value"]}`` and a bare ``+key``
    yields ``{"key": [""]}``. Repeated keys accumulate values.
    """
    tags: Dict[str, List[str]] = {}
    for line in lines:
        line = line.strip()
        if not line.startswith(marker):
            continue
        body = line[len(marker):]
        key, sep, value = body.partition("=")
        tags.setdefault(key, []).append(value if sep else "")
    return tags


_STRUCT_TAG = re.compile(r'([^\s:"]+):"((?:[^"\\]|\\.)*)"')


def struct_tag_get(tags: str, key: str) -> str:
    """Return the value for key in a ``key:"value"`` struct tag string."""
    for match in _STRUCT_TAG.finditer(tags or ""):
        if match.group(1) != key:
            continue
        raw = match.group(2)
        try:
            return json.loads(f'"{raw}"')
        except json.JSONDecodeError:
            return raw
    return ""


def split_qualified_name(expr: str) -> TypeName:
    """Split ``example.com/api/v1.Widget`` into package path and local name."""
    slash = expr.rfind("/")
    dot = expr.rfind(".")
    if dot > slash:
        return TypeName(package=expr[:dot], name=expr[dot + 1 :])
    return TypeName(name=expr)


class DeclarationUniverse:
    """Resolves type reference strings to shared Declaration objects."""

    def __init__(self):
        self._declarations: Dict[str, Declaration] = {}

    def add(self, declaration: Declaration) -> Declaration:
        """Register a declaration under its qualified name."""
        key = str(declaration.name)
        if key in self._declarations:
            raise IngestionError(f"duplicate declaration {key}")
        self._declarations[key] = declaration
        return declaration

    def resolve(self, expr: str) -> Declaration:
        """
        Resolve a type reference.

        Args:
            expr: ``*T``, ``[]T``, ``map[K]V``, a qualified name or a builtin

        Returns:
            The Declaration for expr, created on first use
        """
        expr = expr.strip()
        if not expr:
            raise IngestionError("empty type reference")

        if expr in self._declarations:
            return self._declarations[expr]

        if expr.startswith("*"):
            elem = self.resolve(expr[1:])
            return self._wrapper(Kind.POINTER, f"*{elem.name}", elem=elem)

        if expr.startswith("[]"):
            elem = self.resolve(expr[2:])
            return self._wrapper(Kind.SLICE, f"[]{elem.name}", elem=elem)

        if expr.startswith("map["):
            close = _matching_bracket(expr, 3)
            key = self.resolve(expr[4:close])
            elem = self.resolve(expr[close + 1 :])
            return self._wrapper(
                Kind.MAP, f"map[{key.name}]{elem.name}", elem=elem, key=key
            )

        type_name = split_qualified_name(expr)
        if type_name.package:
            # Declared outside the ingested set
            declaration = Declaration(name=type_name, kind=Kind.STRUCT)
        else:
            declaration = Declaration(name=type_name, kind=Kind.BUILTIN)
        return self.add(declaration)

    def _wrapper(self, kind: Kind, name: str, **refs) -> Declaration:
        existing = self._declarations.get(name)
        if existing is not None:
            return existing
        return self.add(Declaration(name=TypeName(name=name), kind=kind, **refs))


def _matching_bracket(expr: str, start: int) -> int:
    depth = 0
    for i in range(start, len(expr)):
        if expr[i] == "[":
            depth += 1
        elif expr[i] == "]":
            depth -= 1
            if depth == 0:
                return i
    raise IngestionError(f"unbalanced map type reference: {expr}")


def _require(entry: Dict[str, Any], key: str, context: str) -> Any:
    if not isinstance(entry, dict) or key not in entry:
        raise IngestionError(f"{context} is missing required key '{key}'")
    return entry[key]


def _parse_kind(value: Any, context: str) -> Kind:
    try:
        return Kind(value)
    except ValueError:
        raise IngestionError(f"{context} has unknown kind {value!r}") from None


# References a named wrapper declaration must carry
_WRAPPER_REFS = {Kind.POINTER: ("elem",), Kind.SLICE: ("elem",), Kind.MAP: ("key", "elem")}


def _check_wrapper(declaration: Declaration) -> None:
    for ref in _WRAPPER_REFS.get(declaration.kind, ()):
        if getattr(declaration, ref) is None:
            raise IngestionError(
                f"{declaration.kind.value} declaration {declaration.name} has no {ref}"
            )


def convert_source_document(document: Dict[str, Any]) -> List[RawPackage]:
    """
    Convert a source declaration document into raw packages.

    Args:
        document: Parsed JSON with ``packages`` and ``types`` lists

    Returns:
        Raw packages in document order, with their types and constants
        resolved into a shared declaration graph
    """
    if not isinstance(document, dict):
        raise IngestionError("source document must be a JSON object")

    universe = DeclarationUniverse()
    entries = document.get("types", [])
    if not isinstance(entries, list):
        raise IngestionError("'types' must be a list")

    # First pass: shells, so members may reference any declared type
    shells = []
    for entry in entries:
        name = _require(entry, "name", "type entry")
        context = f"type {entry.get('package', '')}.{name}"
        kind = _parse_kind(_require(entry, "kind", context), context)
        type_name = TypeName(package=entry.get("package", ""), name=name)
        declaration = universe.add(Declaration(name=type_name, kind=kind))
        shells.append((declaration, entry))

    # Second pass: references
    for declaration, entry in shells:
        for member_entry in entry.get("members", []):
            context = f"member of {declaration.name}"
            declaration.members.append(
                Member(
                    name=_require(member_entry, "name", context),
                    type=universe.resolve(_require(member_entry, "type", context)),
                    tags=member_entry.get("tags", ""),
                    comment_lines=list(member_entry.get("commentLines", [])),
                )
            )
        for ref in ("underlying", "elem", "key"):
            if entry.get(ref):
                setattr(declaration, ref, universe.resolve(entry[ref]))
        _check_wrapper(declaration)
        declaration.const_value = entry.get("constValue")
        declaration.comment_lines = list(entry.get("commentLines", []))
        declaration.second_closest_comment_lines = list(
            entry.get("secondClosestCommentLines", [])
        )

    packages = []
    by_path: Dict[str, RawPackage] = {}
    for entry in document.get("packages", []):
        path = _require(entry, "path", "package entry")
        package = RawPackage(
            path=path,
            name=entry.get("name") or path.rsplit("/", 1)[-1],
            source_path=entry.get("sourcePath", ""),
            comments=list(entry.get("comments", [])),
            doc_comments=list(entry.get("docComments", [])),
        )
        by_path[path] = package
        packages.append(package)

    for declaration, _ in shells:
        package = by_path.get(declaration.name.package)
        if package is None:
            continue
        if declaration.kind is Kind.DECLARATION_OF:
            package.constants[declaration.name.name] = declaration
        else:
            package.types[declaration.name.name] = declaration

    return packages
