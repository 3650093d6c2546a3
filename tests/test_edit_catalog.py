import pytest

from hmda_checker.domain.edits import EditCatalog, EditCheck, Finding, Projection, Scope, run_gated
from hmda_checker.domain.errors import CatalogError
from hmda_checker.domain.predicates import Verdict
from hmda_checker.domain.results import Category, OutcomeStatus
from hmda_checker.domain.rules.catalog import build_catalog
from hmda_checker.infrastructure.parsing.records import parse_line


def _check(check_id, category=Category.VALIDITY, parent=None, verdict=Verdict.SUCCESS, blocking=False):
    return EditCheck(
        check_id,
        category,
        Scope.LAR,
        f"{check_id} description",
        evaluate=lambda record: verdict,
        parent=parent,
        blocking=blocking,
    )


def test_catalog_rejects_duplicates():
    with pytest.raises(CatalogError):
        EditCatalog([_check("V100"), _check("V100")])


def test_catalog_rejects_unknown_or_later_parent():
    with pytest.raises(CatalogError):
        EditCatalog([_check("V101", parent="V999")])
    with pytest.raises(CatalogError):
        EditCatalog([_check("V101", parent="V102"), _check("V102")])
    with pytest.raises(CatalogError):
        EditCatalog([_check("S101", category=Category.SYNTACTICAL, parent="Q102"), _check("Q102", Category.QUALITY)])


def test_check_definition_is_validated():
    with pytest.raises(CatalogError):
        _check("X100")
    with pytest.raises(CatalogError):
        _check("S100", Category.SYNTACTICAL, blocking=True)
    with pytest.raises(CatalogError):
        EditCheck("Q100", Category.QUALITY, Scope.FILING, "no strategy")
    with pytest.raises(CatalogError):
        EditCheck("Q100", Category.QUALITY, Scope.LAR, "wrong strategy", accumulator=lambda ts: None)


def test_ordered_sorts_by_stage_then_declaration():
    catalog = EditCatalog(
        [
            _check("Q001", Category.QUALITY),
            _check("V001"),
            _check("S001", Category.SYNTACTICAL),
            _check("V002", parent="V001"),
        ]
    )

    assert [check.check_id for check in catalog.ordered(Scope.LAR)] == ["S001", "V001", "V002", "Q001"]


def test_run_gated_marks_children_not_evaluated():
    checks = (_check("V001", verdict=Verdict.FAILURE), _check("V002", parent="V001"), _check("V003"))

    outcomes = run_gated(checks, lambda check: (check.apply(_Record()),), lambda check: check.skip("r1", 2))

    assert [outcome.status for outcome in outcomes] == [
        OutcomeStatus.FAILED,
        OutcomeStatus.NOT_EVALUATED,
        OutcomeStatus.PASSED,
    ]
    assert outcomes[1].message == "parent edit V001 did not pass"


def test_not_evaluated_child_gates_grandchild():
    checks = (
        _check("V001", verdict=Verdict.FAILURE),
        _check("V002", parent="V001"),
        _check("V003", parent="V002"),
    )

    outcomes = run_gated(checks, lambda check: (check.apply(_Record()),), lambda check: check.skip())

    assert outcomes[2].status is OutcomeStatus.NOT_EVALUATED


def test_projection_frame_and_apply_filing(lar_line, ts_line):
    ts = parse_line(ts_line())
    lars = [parse_line(lar_line(f"L{n}", loan_amount=str(n * 100))) for n in (1, 2, 3)]
    check = EditCheck(
        "Q900",
        Category.MACRO,
        Scope.AGGREGATE,
        "large loans",
        projection=Projection(
            columns=("loan_amount",),
            select=lambda lar: (lar.loan.amount,),
            evaluate=lambda frame, ts: [
                Finding("large", int(row.line_number), row.record_id)
                for row in frame[frame["loan_amount"] > 200].itertuples(index=False)
            ],
        ),
    )

    outcomes = check.apply_filing(ts, lars)

    assert [(o.status, o.line_number, o.record_id) for o in outcomes] == [(OutcomeStatus.FAILED, 4, "L3")]


def test_default_catalog_is_consistent():
    catalog = build_catalog(filing_year=2017)

    assert "Q632" in catalog
    assert catalog.get("S100").blocking
    assert catalog.get("V613-2").parent == "V613-1"
    assert catalog.get("Q080").is_buffered
    assert all(check.scope.is_record == (check.evaluate is not None) for check in catalog)


class _Record:
    record_id = "r1"
