"""Tests for dbinfo.output.json_encoder and dbinfo.output.json_reformatter."""

from __future__ import annotations

import json

import pytest

from dbinfo.models import (
    DbInteractions,
    EntitiesDocument,
    EntityRecord,
    FieldRecord,
    InteractionRecord,
    JoinColumnRecord,
    RelationRecord,
    RelationshipsDocument,
    RepositoryRecord,
)
from dbinfo.output.json_encoder import encode, escape
from dbinfo.output.json_reformatter import reformat


def test_encode_record_uses_json_keys_in_declaration_order() -> None:
    record = FieldRecord(name="amount", java_type="java.math.BigDecimal", nullable=False)

    assert encode(record) == (
        '{"name":"amount","type":"java.math.BigDecimal","column":null,'
        '"nullable":false,"length":null,"unique":null}'
    )


def test_encode_scalars_and_containers() -> None:
    assert encode({"x": [1, True, None, "s"]}) == '{"x":[1,true,null,"s"]}'
    assert encode(()) == "[]"
    assert encode(RepositoryRecord(name="R", kind="interface", extends_types=["A"])) == (
        '{"name":"R","kind":"interface","extends":["A"]}'
    )


def test_escape_backslash_quote_and_control_characters() -> None:
    assert escape('a"b\\c') == 'a\\"b\\\\c'
    assert encode('say "hi"') == '"say \\"hi\\""'
    assert escape("a\nb\tc\r\b\f\x01") == "a\\nb\\tc\\r\\b\\f\\u0001"


def test_control_characters_survive_reformat_round_trip() -> None:
    record = InteractionRecord(
        site="a.B#m",
        kind="SpringJDBC",
        api="org.springframework.jdbc.core.JdbcTemplate",
        method="execute",
        declaring_type="org.springframework.jdbc.core.JdbcTemplate",
        sql_literal="SELECT *\nFROM t",
    )
    field = FieldRecord(name="code", java_type="java.lang.String", column="a\tb")

    parsed = json.loads(reformat(encode([record, field])))

    assert parsed[0]["sqlLiteral"] == "SELECT *\nFROM t"
    assert parsed[1]["column"] == "a\tb"


def test_encode_rejects_unknown_types() -> None:
    with pytest.raises(TypeError):
        encode(1.5)


def test_reformat_indents_two_spaces_per_level() -> None:
    assert reformat('{"a":[1,2]}') == '{\n  "a": [\n    1,\n    2\n  ]\n}'


def test_reformat_drops_whitespace_outside_strings() -> None:
    assert reformat('{ "a" :  1 ,\n "b" : "x y" }') == '{\n  "a": 1,\n  "b": "x y"\n}'


def test_reformat_leaves_string_contents_alone() -> None:
    text = '{"k":"a,{b}: [\\"c\\"]"}'

    assert reformat(text) == '{\n  "k": "a,{b}: [\\"c\\"]"\n}'


def test_reformat_empty_container_follows_general_rule() -> None:
    assert reformat("[]") == "[\n  \n]"


def test_reformat_returns_blank_input_unchanged() -> None:
    assert reformat("") == ""
    assert reformat("   ") == "   "


def test_reformat_copies_rest_of_unterminated_string() -> None:
    assert reformat('["ab') == '[\n  "ab'


@pytest.mark.parametrize(
    "document",
    [
        EntitiesDocument(
            entities=[
                EntityRecord(
                    name="com.example.Invoice",
                    kind="Entity",
                    table="invoice",
                    id_field="id",
                    fields=[
                        FieldRecord(name="id", java_type="java.lang.Long"),
                        FieldRecord(name="memo", column='odd "name"', nullable=True, length=255, unique=False),
                    ],
                )
            ]
        ),
        RelationshipsDocument(
            relationships=[
                RelationRecord(
                    source="com.example.Invoice",
                    kind="ManyToOne",
                    target="com.example.Customer",
                    owning_side=True,
                    cascade=["CascadeType.ALL"],
                    join_column=JoinColumnRecord(name="customer_id"),
                )
            ]
        ),
        DbInteractions(
            repositories=[RepositoryRecord(name="com.example.InvoiceRepository", kind="interface")],
            transactional_sites=["com.example.InvoiceService#find"],
            interactions=[
                InteractionRecord(
                    site="com.example.InvoiceService#find",
                    kind="JDBC",
                    api="java.sql.Connection",
                    method="prepareStatement",
                    declaring_type="java.sql.Connection",
                    sql_literal="SELECT * FROM t WHERE a = 'x, y'",
                )
            ],
        ),
    ],
)
def test_reformatted_output_parses_back_to_records(document) -> None:
    assert json.loads(reformat(encode(document))) == document.model_dump(by_alias=True)
