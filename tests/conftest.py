from __future__ import annotations

import pytest

from tests._fixtures.document_builder import DocumentBuilder, member


@pytest.fixture
def builder() -> DocumentBuilder:
    """Provide an empty declarations document builder."""
    return DocumentBuilder()


@pytest.fixture
def widget_document(builder: DocumentBuilder) -> DocumentBuilder:
    """The example.com/v1 package with a single Widget record."""
    builder.package()
    builder.struct(
        "Widget",
        [
            member("Name", "string", "name"),
            member("Size", "*int", "size,omitempty", optional=True),
        ],
    )
    return builder
