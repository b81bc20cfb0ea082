"""Tests for dbinfo.classify.markers."""

from __future__ import annotations

from dbinfo.classify.markers import DEFAULT_MATCHER, AnnotationMatcher
from dbinfo.models import Annotation, FieldElement


def test_matches_known_qualified_name() -> None:
    annotation = Annotation(name="Column", qualified_name="jakarta.persistence.Column")

    assert DEFAULT_MATCHER.matches(annotation, "Column")


def test_matches_fully_qualified_name_as_written() -> None:
    matcher = AnnotationMatcher(suffix_fallback=False)

    assert matcher.matches(Annotation(name="javax.persistence.Entity"), "Entity")


def test_suffix_fallback_uses_dot_boundary() -> None:
    assert DEFAULT_MATCHER.matches(Annotation(name="Entity"), "Entity")
    assert DEFAULT_MATCHER.matches(Annotation(name="persistence.Id"), "Id")
    assert not DEFAULT_MATCHER.matches(Annotation(name="JoinColumn"), "Column")
    assert not DEFAULT_MATCHER.matches(
        Annotation(name="JoinColumn", qualified_name="javax.persistence.JoinColumn"), "Column"
    )


def test_suffix_fallback_skips_resolved_foreign_names() -> None:
    assert not DEFAULT_MATCHER.matches(Annotation(name="Id", qualified_name="com.acme.Id"), "Id")
    assert not DEFAULT_MATCHER.matches(
        Annotation(name="Entity", qualified_name="com.acme.search.Entity"), "Entity"
    )


def test_suffix_fallback_can_be_disabled() -> None:
    matcher = AnnotationMatcher(suffix_fallback=False)

    assert not matcher.matches(Annotation(name="Entity"), "Entity")
    assert not matcher.matches(Annotation(name="Entity", qualified_name="com.acme.Entity"), "Entity")


def test_custom_marker_table() -> None:
    matcher = AnnotationMatcher({"Entity": ("com.acme.Entity",)}, suffix_fallback=False)

    assert matcher.matches(Annotation(name="Entity", qualified_name="com.acme.Entity"), "Entity")
    assert not matcher.matches(Annotation(name="Column"), "Column")


def test_transactional_recognizes_spring_and_jakarta() -> None:
    matcher = AnnotationMatcher(suffix_fallback=False)

    for qualified in (
        "org.springframework.transaction.annotation.Transactional",
        "jakarta.transaction.Transactional",
    ):
        assert matcher.matches(Annotation(name="Transactional", qualified_name=qualified), "Transactional")


def test_annotatable_reads_first_annotation_carrying_key() -> None:
    element = FieldElement(
        name="amount",
        annotations=[
            Annotation(name="Column", attributes={"name": '"amount"'}),
            Annotation(name="Column", attributes={"length": "12"}),
        ],
    )

    assert element.has_annotation("Column")
    assert element.first_marker(("Id", "Column")) == "Column"
    assert element.annotation_value("Column", "length").value == 12
    assert element.annotation_value("Column", "unique") is None
