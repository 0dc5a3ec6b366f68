# clearwater/docx_report.py: Word version of a water quality report
import io
import logging
from datetime import datetime
from pathlib import Path

import pandas as pd
from docx import Document

from clearwater.grading import compute_grade
from clearwater.insights import lead_copper_summary, recommendations, violation_stats
from clearwater.models import Report
from clearwater.tables import samples_frame, system_summary, violations_frame

logger = logging.getLogger(__name__)


def add_table(doc, df: pd.DataFrame):
    t = doc.add_table(rows=1, cols=len(df.columns))
    try:
        t.style = "Table Grid"
    except KeyError:
        pass  # style missing from a custom template
    for j, h in enumerate(df.columns):
        t.cell(0, j).text = str(h)
    for row in df.itertuples(index=False):
        cells = t.add_row().cells
        for j, v in enumerate(row):
            cells[j].text = "" if v is None or (isinstance(v, float) and pd.isna(v)) else str(v)
    return t


def _table_or_placeholder(doc, df: pd.DataFrame, empty: str = "No data available."):
    if df.empty:
        doc.add_paragraph(empty)
    else:
        add_table(doc, df)


def build_document(report: Report, now: datetime | None = None):
    """Build the python-docx Document for ``report``."""
    now = now or datetime.now()
    grade = compute_grade(report.violations, now)
    stats = violation_stats(report.violations, now)

    doc = Document()
    title = report.system.name if report.system else report.pwsid
    doc.add_heading(f"Water Quality Report: {title}", level=0)
    doc.add_paragraph("USEPA Safe Drinking Water Information System (SDWIS)")
    if report.system:
        for label, value in system_summary(report.system).items():
            doc.add_paragraph(f"{label}: {value}")
    else:
        doc.add_paragraph(f"PWSID: {report.pwsid} (no system detail on record)")

    # ---------------- grade ----------------
    doc.add_heading(f"Grade {grade.letter}", level=1)
    doc.add_paragraph(grade.label)
    doc.add_paragraph(
        f"Total violations: {stats['total']}    Active: {stats['active']}    "
        f"Active health-based: {stats['activeHealth']}    "
        f"Health-based in last 5 years: {grade.score.recent_health}"
    )

    # ---------------- lead & copper ----------------
    doc.add_heading("Lead & Copper", level=1)
    for summary in lead_copper_summary(report.samples).values():
        doc.add_paragraph(
            f"{summary.name} (action level {summary.action_level:g} mg/L): "
            f"{summary.total} samples, {summary.over_action_level} above the action level"
        )
        _table_or_placeholder(doc, samples_frame(summary.samples, summary.name),
                              f"No {summary.name.lower()} sample data available.")

    # ---------------- violations ----------------
    doc.add_heading("Violations", level=1)
    vio = violations_frame(report.violations, now)
    doc.add_paragraph("Health Based")
    _table_or_placeholder(doc, vio[vio["Health-Based"] == "Yes"].drop(columns=["Health-Based"]))
    doc.add_paragraph("")  # spacer
    doc.add_paragraph("Non-Health Based")
    _table_or_placeholder(doc, vio[vio["Health-Based"] == "No"].drop(columns=["Health-Based"]))

    # ---------------- recommendations ----------------
    doc.add_heading("What You Can Do", level=1)
    for rec in recommendations(report.violations, report.samples, now):
        p = doc.add_paragraph(style="List Bullet")
        p.add_run(rec.title).bold = rec.priority
        p.add_run(f": {rec.desc}")

    return doc


def generate_report(report: Report, out_path: str | Path | None = None, now: datetime | None = None) -> Path:
    """Write the report to ``out_path`` (default ``<PWSID>_Water_Report.docx``)."""
    out = Path(out_path) if out_path else Path(f"{report.pwsid}_Water_Report.docx")
    build_document(report, now).save(str(out))
    logger.info("Report saved: %s", out)
    return out


def report_bytes(report: Report, now: datetime | None = None) -> bytes:
    """Report as .docx bytes, for download buttons."""
    buf = io.BytesIO()
    build_document(report, now).save(buf)
    return buf.getvalue()
