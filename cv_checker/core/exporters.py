"""
Report serialization (CSV and HTML) for verified records.

Rows are (record, verdict, selected candidate) triples as produced by
cv_checker.core.pipeline.verify_publications.
"""

import csv
import html
import io
from typing import List, Optional, Sequence, Tuple

from cv_checker.core.schemas import ExternalCandidate, PublicationRecord, VerificationVerdict


ReportRow = Tuple[PublicationRecord, Optional[VerificationVerdict], Optional[ExternalCandidate]]

CSV_HEADERS = [
    "Section",
    "Type",
    "Title",
    "Authors (CV)",
    "Journal/Event (CV)",
    "Year (CV)",
    "External Title",
    "External Authors",
    "External Journal",
    "External Year",
    "DOI",
    "Authorship Status",
    "Position Status",
    "Overall Status",
    "Details",
]

STATUS_COLORS = {"good": "#16a34a", "warning": "#f59e0b", "bad": "#dc2626"}


def _text(value) -> str:
    return "" if value is None else str(value)


def _row_values(record: PublicationRecord, verdict, candidate) -> List[str]:
    return [
        record.section,
        record.type,
        record.title,
        "; ".join(record.authors),
        record.venue,
        _text(record.year),
        candidate.title if candidate else "",
        "; ".join(candidate.authors) if candidate else "",
        _text(candidate.venue) if candidate else "",
        _text(candidate.year) if candidate else "",
        _text(candidate.external_id) if candidate else "",
        verdict.authorship if verdict else "",
        verdict.position if verdict else "",
        verdict.status if verdict else "",
        verdict.explanation if verdict else "",
    ]


def export_csv(rows: Sequence[ReportRow]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for record, verdict, candidate in rows:
        writer.writerow(_row_values(record, verdict, candidate))
    return buf.getvalue()


def export_html(rows: Sequence[ReportRow]) -> str:
    """Standalone HTML report; every value is escaped."""
    body = []
    for record, verdict, candidate in rows:
        status = verdict.status if verdict else "unverified"
        color = STATUS_COLORS.get(status, "#6b7280")
        cells = [
            record.title,
            ", ".join(record.authors),
            record.venue,
            _text(record.year),
            candidate.title if candidate else "",
            ", ".join(candidate.authors) if candidate else "",
            _text(candidate.venue) if candidate else "",
            _text(candidate.year) if candidate else "",
        ]
        tds = "".join(f'<td style="padding:8px 12px;">{html.escape(c)}</td>' for c in cells)
        details = html.escape(verdict.explanation) if verdict else ""
        body.append(
            f'<tr style="border-bottom:1px solid #e5e7eb;">{tds}'
            f'<td style="padding:8px 12px;"><span style="color:{color};font-weight:600;">{status}</span>'
            f'<div style="color:#6b7280;font-size:12px;">{details}</div></td></tr>'
        )

    head = "".join(
        f'<th style="text-align:left;padding:8px 12px;">{h}</th>'
        for h in ("Title", "Authors (CV)", "Journal/Event (CV)", "Year (CV)", "External Title",
                  "External Authors", "External Journal", "External Year", "Status")
    )
    return (
        "<!doctype html>\n"
        '<html><head><meta charset="UTF-8"><title>CV Checker Report</title></head>\n'
        '<body style="font-family:Arial, sans-serif; background:#f8fafc; color:#0f172a;">\n'
        '<main style="max-width:1200px; margin:32px auto; background:white; padding:24px 28px;">\n'
        '<h1 style="font-size:24px; margin-bottom:4px;">CV Publication Checker</h1>\n'
        '<p style="color:#6b7280; margin-top:0;">Verification summary.</p>\n'
        f'<table style="width:100%; border-collapse:collapse; font-size:14px;"><thead><tr>{head}</tr></thead>'
        f'<tbody>{"".join(body)}</tbody></table>\n'
        "</main>\n</body></html>\n"
    )
