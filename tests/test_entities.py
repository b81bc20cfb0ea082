"""Tests for dbinfo.classify.entities."""

from __future__ import annotations

from dbinfo.classify.entities import EntityExtractor
from dbinfo.classify.markers import AnnotationMatcher

INVOICE = """
package com.example.billing;

import java.math.BigDecimal;
import javax.persistence.*;

@Entity
@Table(name = "invoice")
public class Invoice {
    private static final long serialVersionUID = 1L;

    @Id
    private Long id;

    @Column(name = "amount", nullable = false, length = 12, unique = true)
    private BigDecimal amount;

    @Column(length = "wide")
    private String note;

    @ManyToOne
    @JoinColumn(name = "customer_id", referencedColumnName = "id")
    private Customer customer;

    @Transient
    private String cached;
}
"""

ACCOUNT = """
package com.example.billing;

import javax.persistence.Column;
import javax.persistence.Entity;
import javax.persistence.Id;
import javax.persistence.Transient;

@Entity
public class Account {
    private Long id;
    private String owner;
    private boolean active;

    @Id
    public Long getId() { return id; }

    @Column(name = "owner_name")
    public String getOwner() { return owner; }

    public boolean isActive() { return active; }

    @Transient
    public String getDisplay() { return owner; }

    public void setOwner(String owner) { this.owner = owner; }
}
"""


def test_invoice_entity_end_to_end(build_model) -> None:
    model = build_model(Invoice=INVOICE)

    [record] = EntityExtractor().extract(model)

    assert record.name == "com.example.billing.Invoice"
    assert record.kind == "Entity"
    assert record.table == "invoice"
    assert record.id_field == "id"
    assert [f.name for f in record.fields] == ["id", "amount", "note"]

    id_field, amount, note = record.fields
    assert id_field.java_type == "java.lang.Long"
    assert id_field.column is None and id_field.nullable is None
    assert amount.java_type == "java.math.BigDecimal"
    assert amount.column == "amount"
    assert amount.nullable is False
    assert amount.length == 12
    assert amount.unique is True
    # non-integer length degrades to null
    assert note.length is None


def test_id_can_be_left_out_of_fields(build_model) -> None:
    model = build_model(Invoice=INVOICE)

    [record] = EntityExtractor(include_id_in_fields=False).extract(model)

    assert record.id_field == "id"
    assert [f.name for f in record.fields] == ["amount", "note"]


def test_property_access_entity(build_model) -> None:
    model = build_model(Account=ACCOUNT)

    [record] = EntityExtractor().extract(model)

    assert record.id_field == "id"
    assert [(f.name, f.java_type, f.column) for f in record.fields] == [
        ("id", "java.lang.Long", None),
        ("owner", "java.lang.String", "owner_name"),
        ("active", "boolean", None),
    ]


def test_entity_kind_priority_and_unannotated_types(build_model) -> None:
    model = build_model(
        Address="""
        package com.example;
        import javax.persistence.Embeddable;
        @Embeddable
        public class Address { private String city; }
        """,
        Base="""
        package com.example;
        @javax.persistence.MappedSuperclass
        public abstract class Base { protected Long version; }
        """,
        Plain="""
        package com.example;
        public class Plain { private String name; }
        """,
        Marker="""
        package com.example;
        @Entity
        public interface Marker { }
        """,
    )

    records = EntityExtractor().extract(model)

    assert [(r.name, r.kind) for r in records] == [
        ("com.example.Address", "Embeddable"),
        ("com.example.Base", "MappedSuperclass"),
    ]
    assert records[0].fields[0].name == "city"
    assert records[0].table is None
    assert records[0].id_field is None


def test_excluded_type_suffixes(build_model) -> None:
    model = build_model(
        InvoiceDTO="""
        package com.example;
        @Entity
        public class InvoiceDTO { @Id private Long id; }
        """,
    )

    assert EntityExtractor(excluded_type_suffixes=["DTO"]).extract(model) == []
    assert len(EntityExtractor().extract(model)) == 1


def test_unresolved_annotations_need_suffix_fallback(build_model) -> None:
    model = build_model(
        Thing="""
        package com.example;
        @Entity
        public class Thing { @Id private Long id; }
        """,
    )

    assert EntityExtractor(AnnotationMatcher(suffix_fallback=False)).extract(model) == []


def test_wildcard_persistence_import_needs_no_suffix_fallback(build_model) -> None:
    model = build_model(
        Thing="""
        package com.example;
        import javax.persistence.*;
        @Entity
        public class Thing { @Id private Long id; }
        """,
    )

    [record] = EntityExtractor(AnnotationMatcher(suffix_fallback=False)).extract(model)

    assert record.name == "com.example.Thing"
    assert record.id_field == "id"


def test_same_named_annotation_from_other_library_is_ignored(build_model) -> None:
    model = build_model(
        Foo="""
        package com.x;
        import com.acme.search.Entity;
        @Entity
        public class Foo { Long id; }
        """,
    )

    assert EntityExtractor().extract(model) == []
