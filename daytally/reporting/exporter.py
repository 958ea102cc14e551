"""Report exporter for DayTally.

Generates Word (.docx) documents from analytics data using python-docx.
"""

import logging
import os
from typing import Optional, Sequence

from daytally.core.models import (
    AnalyticsOverview,
    Category,
    CategorySlice,
    ChartRow,
    WeeklySummary,
)
from daytally.core.timeutil import format_duration
from daytally.reporting.analytics import category_name

logger = logging.getLogger(__name__)


class ReportExporter:
    """Exports analytics data to a formatted Word document (.docx)."""

    def export_analytics(
        self,
        overview: AnalyticsOverview,
        rows: Sequence[ChartRow],
        categories: Sequence[Category],
        user_name: str,
        output_path: str,
        week_summary: Optional[WeeklySummary] = None,
    ) -> str:
        """Generate a .docx file from an analytics overview and weekly trends.

        Args:
            overview: Overview numbers for the selected date range.
            rows: Weekly trend rows, oldest week first.
            categories: Categories used to resolve names in the trend table.
            user_name: The user's configured display name.
            output_path: File path for the generated .docx file.
            week_summary: Optional headline numbers for the current week.

        Returns:
            The path to the generated file.

        Raises:
            ImportError: If python-docx is not installed.
        """
        try:
            from docx import Document
        except ImportError:
            raise ImportError(
                "python-docx is required for report export. "
                "Install it with: pip install python-docx"
            )

        parent_dir = os.path.dirname(output_path)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)

        doc = Document()

        self._add_title_page(doc, overview, user_name)

        doc.add_heading("Overview", level=1)
        counts = overview.rating_counts
        for label, value in (
            ("Total Time Logged", format_duration(overview.total_minutes)),
            ("Avg. Per Day", format_duration(overview.avg_minutes_per_day)),
            ("Days Rated", str(counts.total)),
            ("Top Category", overview.top_category_name),
        ):
            para = doc.add_paragraph()
            para.add_run(f"{label}: ").bold = True
            para.add_run(value)

        doc.add_heading("Time by Category", level=1)
        if not overview.breakdown:
            doc.add_paragraph("No activities logged in this period.")
        else:
            self._add_category_table(doc, overview.breakdown, overview.total_minutes)

        doc.add_heading("Day Quality", level=1)
        if counts.total == 0:
            doc.add_paragraph("No day ratings in this period.")
        else:
            for name, value in (("Great", counts.great), ("OK", counts.ok), ("Tough", counts.tough)):
                doc.add_paragraph(f"{name}: {value}", style="List Bullet")

        doc.add_heading("Weekly Trends", level=1)
        self._add_trends_table(doc, rows, categories)
        if week_summary is not None:
            doc.add_paragraph(
                f"This week: {format_duration(week_summary.total_minutes)} logged over "
                f"{week_summary.days_with_activities} days, "
                f"{format_duration(week_summary.avg_minutes_per_day)} per day, "
                f"top category {week_summary.top_category}."
            )

        doc.save(output_path)
        logger.info("Analytics report written to %s", output_path)
        return output_path

    def _add_title_page(self, doc, overview: AnalyticsOverview, user_name: str) -> None:
        """Add a title page with report title, date range, and user name."""
        from docx.enum.text import WD_ALIGN_PARAGRAPH
        from docx.shared import Pt

        title_para = doc.add_paragraph()
        title_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = title_para.add_run("DayTally Analytics Report")
        run.bold = True
        run.font.size = Pt(24)

        start_str = overview.start_date.strftime("%B %d, %Y")
        end_str = overview.end_date.strftime("%B %d, %Y")
        date_para = doc.add_paragraph()
        date_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = date_para.add_run(f"{start_str} - {end_str}")
        run.font.size = Pt(14)

        if user_name:
            name_para = doc.add_paragraph()
            name_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
            run = name_para.add_run(f"Prepared for: {user_name}")
            run.font.size = Pt(12)

        doc.add_page_break()

    def _add_category_table(
        self, doc, slices: Sequence[CategorySlice], total_minutes: int
    ) -> None:
        """Add the category breakdown table to the document."""
        # Header row + data rows + total row
        table = doc.add_table(rows=1 + len(slices) + 1, cols=3)
        table.style = "Light Grid Accent 1"

        header_cells = table.rows[0].cells
        header_cells[0].text = "Category"
        header_cells[1].text = "Total Time"
        header_cells[2].text = "Share"

        for i, s in enumerate(slices, start=1):
            row_cells = table.rows[i].cells
            row_cells[0].text = s.name
            row_cells[1].text = format_duration(s.minutes)
            row_cells[2].text = f"{s.percent:.0f}%"

        total_row = table.rows[-1].cells
        total_row[0].text = "Total"
        total_row[1].text = format_duration(total_minutes)
        total_row[2].text = "100%"

        _bold_row(table.rows[0])
        _bold_row(table.rows[-1])
        doc.add_paragraph()

    def _add_trends_table(
        self, doc, rows: Sequence[ChartRow], categories: Sequence[Category]
    ) -> None:
        """One row per week, one column per category seen in any week."""
        column_ids = list(rows[0].values) if rows else []
        table = doc.add_table(rows=1 + len(rows), cols=2 + len(column_ids))
        table.style = "Light Grid Accent 1"

        header = table.rows[0].cells
        header[0].text = "Week"
        for j, cat_id in enumerate(column_ids, start=1):
            header[j].text = category_name(categories, cat_id)
        header[-1].text = "Total"

        for i, row in enumerate(rows, start=1):
            cells = table.rows[i].cells
            cells[0].text = row.week
            for j, cat_id in enumerate(column_ids, start=1):
                cells[j].text = format_duration(row.values.get(cat_id, 0))
            cells[-1].text = format_duration(sum(row.values.values()))

        _bold_row(table.rows[0])
        doc.add_paragraph()


def _bold_row(row) -> None:
    for cell in row.cells:
        for paragraph in cell.paragraphs:
            for run in paragraph.runs:
                run.bold = True
