"""Tests for dbinfo.classify.interactions."""

from __future__ import annotations

from dbinfo.classify.interactions import DbInteractionExtractor
from dbinfo.models import CallExpression

REPOSITORY = """
package com.example.billing;

import org.springframework.data.jpa.repository.JpaRepository;

public interface InvoiceRepository extends JpaRepository<Invoice, Long> {
}
"""

DAO = """
package com.example.billing;

import org.springframework.stereotype.Repository;

@Repository
public class JdbcInvoiceDao {
}
"""

SERVICE = """
package com.example.billing;

import java.sql.Connection;
import java.sql.PreparedStatement;
import javax.persistence.EntityManager;
import org.springframework.jdbc.core.JdbcTemplate;
import org.springframework.stereotype.Service;
import org.springframework.transaction.annotation.Transactional;

@Service
@Transactional
public class InvoiceService {
    private final InvoiceRepository invoices;
    private final EntityManager em;
    private JdbcTemplate jdbc;

    public InvoiceService(InvoiceRepository invoices, EntityManager em) {
        this.invoices = invoices;
        this.em = em;
        em.clear();
    }

    @Transactional(readOnly = true)
    public Invoice find(Long id) {
        return invoices.findById(id).orElse(null);
    }

    public void purge(Connection connection) throws Exception {
        em.createQuery("delete from Invoice").executeUpdate();
        jdbc.update("DELETE FROM invoice_line");
        PreparedStatement ps = connection.prepareStatement("SELECT 1");
        ps.execute();
        helper();
    }

    @Transactional
    void helper() {
        this.em.flush();
    }
}
"""


def test_repositories_are_listed_even_without_members(build_model) -> None:
    model = build_model(InvoiceRepository=REPOSITORY, JdbcInvoiceDao=DAO, InvoiceService=SERVICE)

    result = DbInteractionExtractor().extract(model)

    assert [(r.name, r.kind, r.extends_types) for r in result.repositories] == [
        (
            "com.example.billing.InvoiceRepository",
            "interface",
            ["org.springframework.data.jpa.repository.JpaRepository"],
        ),
        ("com.example.billing.JdbcInvoiceDao", "class", []),
    ]


def test_transactional_sites_are_sorted(build_model) -> None:
    model = build_model(InvoiceService=SERVICE)

    sites = DbInteractionExtractor().transactional_sites(model)

    assert sites == [
        "com.example.billing.InvoiceService",
        "com.example.billing.InvoiceService#find",
        "com.example.billing.InvoiceService#helper",
    ]


def test_call_sites_are_classified(build_model) -> None:
    model = build_model(InvoiceRepository=REPOSITORY, InvoiceService=SERVICE)

    records = DbInteractionExtractor().interactions(model)

    assert [(r.site.split("#")[1], r.kind, r.method, r.declaring_type, r.sql_literal) for r in records] == [
        ("find", "RepoCall", "findById", "com.example.billing.InvoiceRepository", None),
        ("purge", "JPA", "createQuery", "javax.persistence.EntityManager", "delete from Invoice"),
        ("purge", "SpringJDBC", "update", "org.springframework.jdbc.core.JdbcTemplate", "DELETE FROM invoice_line"),
        ("purge", "JDBC", "prepareStatement", "java.sql.Connection", "SELECT 1"),
        ("purge", "JDBC", "execute", "java.sql.PreparedStatement", None),
        ("helper", "JPA", "flush", "javax.persistence.EntityManager", None),
    ]
    assert records[0].site == "com.example.billing.InvoiceService#find"
    assert records[0].api == "com.example.billing.InvoiceRepository"


def test_classify_call_prefix_order() -> None:
    extractor = DbInteractionExtractor()

    record = extractor.classify_call(
        "a.B#m",
        CallExpression(declaring_type="org.hibernate.Session", member="createNativeQuery", first_argument='"select 1"'),
    )

    assert record.kind == "Hibernate"
    assert record.sql_literal == "select 1"
    assert extractor.classify_kind("jakarta.persistence.EntityManager") == "JPA"
    assert extractor.classify_kind("com.example.Util") is None


def test_first_matching_prefix_wins() -> None:
    extractor = DbInteractionExtractor(call_prefixes={"Broad": ("com.",), "Narrow": ("com.x.",)})

    assert extractor.classify_kind("com.x.Query") == "Broad"


def test_unresolved_and_unrelated_calls_are_skipped() -> None:
    extractor = DbInteractionExtractor()

    assert extractor.classify_call("a.B#m", CallExpression(member="run")) is None
    assert extractor.classify_call("a.B#m", CallExpression(declaring_type="com.example.Util", member="run")) is None
    assert extractor.classify_call(
        "a.B#m", CallExpression(declaring_type="java.sql.Statement", member="execute", first_argument="42")
    ).sql_literal is None


REPORT_DAO = '''
package com.example.billing;

import org.springframework.jdbc.core.JdbcTemplate;

public class ReportDao {
    private JdbcTemplate jdbc;

    public void refresh() {
        jdbc.execute("""
            SELECT *
              FROM invoice
            """);
        jdbc.execute("DELETE FROM report\\nWHERE stale = true");
    }
}
'''


def test_text_block_and_escaped_sql_literals(build_model) -> None:
    records = DbInteractionExtractor().interactions(build_model(ReportDao=REPORT_DAO))

    assert [(r.kind, r.sql_literal) for r in records] == [
        ("SpringJDBC", "SELECT *\n  FROM invoice\n"),
        ("SpringJDBC", "DELETE FROM report\nWHERE stale = true"),
    ]
