import csv
import io

from degreeplan.services.evaluator import CreditsSummary, ProgramProgress

CSV_COLUMNS = [
    "category",
    "completed_units",
    "total_units",
    "percentage",
    "completed_credits",
    "min_credits",
    "complete",
]


def progress_to_csv(progress: ProgramProgress, credits: CreditsSummary) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for category in progress.categories:
        writer.writerow(
            [
                category.name,
                category.completed_units,
                category.total_units,
                category.percentage,
                category.completed_credits,
                "" if category.min_credits is None else category.min_credits,
                "yes" if category.is_complete else "no",
            ]
        )
    # Program row: category counts in the unit columns, credits against the
    # program's declared total.
    writer.writerow(
        [
            "TOTAL",
            progress.complete_category_count,
            progress.total_category_count,
            progress.overall_percentage,
            credits.completed_credits,
            credits.total_credits,
            "yes" if progress.complete_category_count == progress.total_category_count
            and progress.total_category_count > 0
            else "no",
        ]
    )
    return buffer.getvalue()
