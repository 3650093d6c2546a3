from hmda_checker.domain.edits import EditCatalog
from hmda_checker.domain.results import OutcomeStatus
from hmda_checker.domain.rules.filing import DuplicateLoanIds, filing_edits
from hmda_checker.infrastructure.parsing.records import parse_line

EDITS = EditCatalog(filing_edits())


def run(check_id, ts, lars):
    return EDITS.get(check_id).apply_filing(ts, lars)


def test_record_count_matches_declaration(ts_line, lar_line):
    ts = parse_line(ts_line(total_lines="3"))
    lars = [parse_line(lar_line(f"L{n}")) for n in range(3)]

    (outcome,) = run("Q130", ts, lars)

    assert outcome.status is OutcomeStatus.PASSED


def test_record_count_mismatch_reports_declared_and_found(ts_line, lar_line):
    ts = parse_line(ts_line(total_lines="3"))
    lars = [parse_line(lar_line(f"L{n}")) for n in range(2)]

    (outcome,) = run("Q130", ts, lars)

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.message == "Transmittal sheet declares 3 records, found 2"


def test_control_numbers_and_action_year(ts_line, lar_line):
    ts = parse_line(ts_line())
    lars = [
        parse_line(lar_line("L1")),
        parse_line(lar_line("L2", respondent_id="9999999999")),
        parse_line(lar_line("L3", action_date="20180105")),
    ]

    s025 = run("S025", ts, lars)
    s270 = run("S270", ts, lars)

    assert [(o.line_number, o.record_id) for o in s025] == [(3, "L2")]
    assert [(o.line_number, o.record_id) for o in s270] == [(4, "L3")]


def test_duplicate_loan_ids(ts_line, lar_line):
    ts = parse_line(ts_line())
    lars = [parse_line(lar_line(loan_id)) for loan_id in ("A", "B", "A", "A")]

    outcomes = run("S040", ts, lars)

    assert [(o.line_number, o.record_id) for o in outcomes] == [(4, "A"), (5, "A")]
    assert outcomes[0].message == "Loan id A already reported on line 2"


def test_duplicate_accumulator_merges_across_chunks(lar_line):
    first, second = DuplicateLoanIds(), DuplicateLoanIds()
    first.add(2, parse_line(lar_line("A")))
    first.add(3, parse_line(lar_line("B")))
    second.add(4, parse_line(lar_line("B")))
    second.add(5, parse_line(lar_line("C")))

    merged = first.merge(second)

    assert [(f.line_number, f.record_id) for f in merged.findings()] == [(4, "B")]


def test_withdrawn_share(ts_line, lar_line):
    ts = parse_line(ts_line())
    withdrawn = dict(action_taken="4", rate_spread="NA")
    lars = [parse_line(lar_line(f"L{n}", **(withdrawn if n < 2 else {}))) for n in range(4)]

    (outcome,) = run("Q008", ts, lars)

    assert outcome.status is OutcomeStatus.FAILED
    assert "2 of 4 records (50.0%) are withdrawn" in outcome.message

    (ok,) = run("Q008", ts, lars[1:] + [parse_line(lar_line("L9"))] * 3)
    assert ok.status is OutcomeStatus.PASSED


def test_approved_not_accepted_threshold_is_configurable(ts_line, lar_line):
    ts = parse_line(ts_line())
    lars = [parse_line(lar_line("L1", action_taken="2"))] + [parse_line(lar_line(f"L{n}")) for n in range(2, 6)]

    (default,) = run("Q009", ts, lars)
    (relaxed,) = EditCatalog(filing_edits({"Q009": 0.5})).get("Q009").apply_filing(ts, lars)

    assert default.status is OutcomeStatus.FAILED
    assert relaxed.status is OutcomeStatus.PASSED


def test_loan_amount_outliers(ts_line, lar_line):
    ts = parse_line(ts_line())
    amounts = ["200", "210", "190", "2000", "205"]
    lars = [parse_line(lar_line(f"L{n}", loan_amount=amount)) for n, amount in enumerate(amounts)]

    outcomes = run("Q080", ts, lars)

    assert [(o.status, o.line_number, o.record_id) for o in outcomes] == [(OutcomeStatus.FAILED, 5, "L3")]
    assert run("Q080", ts, [])[0].status is OutcomeStatus.PASSED
