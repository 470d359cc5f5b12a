# appraisal_app/management/commands/score_appraisal_table.py
from django.core.management.base import BaseCommand, CommandError

from appraisal_app.constants import PeriodType
from appraisal_app.services.appraisal_math import compose_score
from appraisal_app.services.period_months import resolve_active_months
from appraisal_app.services.section_table import import_table
from appraisal_app.services.table_readers import read_table_path
from appraisal_app.utils import normalize_period_type


class Command(BaseCommand):
    help = """
    Score a Section B table (CSV or XLSX) offline: prints every section's
    subtotal, the unrecognized section names and the strategic objectives
    score (no soft skills are involved).
    """

    def add_arguments(self, parser):
        parser.add_argument("path", help="CSV / XLSX file exported from an appraisal")
        parser.add_argument("--period-type", default=PeriodType.ANNUAL,
                            help="Quarterly, Semi-annually or Annual (default)")
        parser.add_argument("--quarter", default=None, help="1-4 or Q1-Q4 for quarterly periods")
        parser.add_argument("--half", default=None, help="1-2 or H1-H2 for semi-annual periods")

    def handle(self, *args, **options):
        try:
            table = read_table_path(options["path"])
        except (OSError, ValueError) as e:
            raise CommandError(f"Cannot read {options['path']}: {e}") from e

        period_type = normalize_period_type(options["period_type"])
        months = resolve_active_months(period_type, options["quarter"], options["half"])
        self.stdout.write(f"Period: {period_type} ({', '.join(m.label for m in months)})")

        result = import_table(table, months)
        for name in result.unrecognized_section_names:
            self.stdout.write(self.style.WARNING(f"Unrecognized section skipped: {name}"))

        if not result.sections:
            self.stdout.write(self.style.WARNING("No rows imported."))

        for section in result.sections:
            self.stdout.write(
                f"{section.name}: {len(section.rows)} row(s), "
                f"weight {section.subtotal_weight}, "
                f"weighted average {section.subtotal_weighted_average:.2f}"
            )

        score = compose_score(result.sections, [])
        self.stdout.write(self.style.SUCCESS(
            f"Strategic objectives score: {score.strategic_objectives_score}"
        ))
