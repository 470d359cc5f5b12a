from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError


CSV = (
    "Section,Pillar,Key Result Area,Target,Jan Target,Jan Actual,Apr Target,Apr Actual\n"
    "Membership & Customer Satisfaction,Growth,Grow membership,Recruit,100,95,100,10\n"
    "Sales,Leads,New leads,50,10,10,10,10\n"
)


class TestScoreAppraisalTableCommand:
    def test_prints_subtotals_and_score(self, tmp_path):
        path = tmp_path / "targets.csv"
        path.write_text(CSV, encoding="utf-8")
        out = StringIO()

        call_command("score_appraisal_table", str(path), "--period-type", "Quarterly", "--quarter", "1", stdout=out)

        text = out.getvalue()
        assert "Period: Quarterly (Jan, Feb, Mar)" in text
        assert "Unrecognized section skipped: Sales" in text
        assert "Membership & Customer Satisfaction: 1 row(s), weight 4, weighted average 380.00" in text
        assert "Strategic objectives score: 67" in text

    def test_missing_file(self, tmp_path):
        with pytest.raises(CommandError):
            call_command("score_appraisal_table", str(tmp_path / "missing.csv"), stdout=StringIO())
