from datetime import datetime, timezone

import pytest

from raleys_clipper.models import ClipOutcome, ClipTally, Offer
from raleys_clipper.report import NOTHING_TO_DO, build_report, format_outcome, log_report

NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


@pytest.mark.unit_build
class TestReport:
    def test_nothing_to_do(self) -> None:
        assert build_report(ClipTally(clipped=0, failed=0, total=0)) == NOTHING_TO_DO

    def test_tally_line(self) -> None:
        report = build_report(ClipTally(clipped=4, failed=1, total=5))
        assert report.splitlines()[0] == "Clipped 4 of 5 offers (1 failed)."

    def test_lists_failures(self) -> None:
        offer = Offer(external_id="3", badge_type_code="WeeklyExclusive", headline="Half off bread")
        failed = ClipOutcome(offer=offer, success=False, attempted_at=NOW, reason="500 Internal Server Error")

        report = build_report(ClipTally(clipped=0, failed=1, total=1), [failed])

        assert "Clipped 0 of 1 offer (1 failed)." in report
        assert "WeeklyExclusive: Half off bread: 500 Internal Server Error" in report

    def test_format_outcome(self) -> None:
        offer = Offer(external_id="1", badge_type_code="mfg", headline="$1 OFF", sub_headline="Coffee\n12 oz")
        outcome = ClipOutcome(offer=offer, success=True, attempted_at=NOW)

        assert format_outcome(outcome) == "Clipped Coupon: $1 OFF Coffee 12 oz"

    def test_log_report_writes_report_logger(self, caplog) -> None:
        with caplog.at_level("INFO", logger="raleys_clipper.reports"):
            log_report(ClipTally(clipped=0, failed=0, total=0))

        assert any(r.name == "raleys_clipper.reports" and r.getMessage() == NOTHING_TO_DO for r in caplog.records)
