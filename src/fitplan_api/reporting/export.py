"""History export: delimited text and a printable HTML document."""
import csv
import io
from datetime import date, datetime, timezone
from html import escape
from typing import List, Optional

from fitplan_api.models import CompletedSession
from fitplan_api.reporting.progress import round_half_up, summarize

CSV_HEADERS = [
    "Date",
    "Workout",
    "Duration (min)",
    "Total Weight (kg)",
    "Completed Sets",
    "Total Sets",
]

_PRINT_STYLE = """
    body { font-family: Arial, sans-serif; padding: 20px; }
    h1 { color: #333; border-bottom: 2px solid #666; padding-bottom: 10px; }
    table { width: 100%; border-collapse: collapse; margin-top: 20px; }
    th, td { border: 1px solid #ddd; padding: 12px; text-align: left; }
    th { background-color: #f2f2f2; font-weight: bold; }
    tr:nth-child(even) { background-color: #f9f9f9; }
    .summary { margin-top: 30px; padding: 15px; background-color: #f0f0f0; border-radius: 5px; }
    .summary h2 { margin-top: 0; }
"""


def export_filename(today: Optional[date] = None, extension: str = "csv") -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"workout-history-{today.isoformat()}.{extension}"


def _minutes(seconds: int) -> int:
    return round_half_up(seconds / 60)


def render_csv(history: List[CompletedSession]) -> str:
    """One row per session: date, workout, minutes, weight, completed and total sets."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for session in history:
        writer.writerow([
            session.completed_at.strftime("%d/%m/%Y"),
            session.workout_name,
            _minutes(session.duration),
            round_half_up(float(session.total_weight)),
            session.completed_sets,
            session.total_sets,
        ])
    return buffer.getvalue()


def render_printable_html(
    history: List[CompletedSession],
    generated_at: Optional[datetime] = None,
) -> str:
    """Standalone HTML page with the history table and an aggregate summary."""
    generated_at = generated_at or datetime.now(timezone.utc)
    summary = summarize(history)

    rows = []
    for session in history:
        rows.append(
            "<tr>"
            f"<td>{escape(session.completed_at.strftime('%d %b %H:%M'))}</td>"
            f"<td>{escape(session.workout_name)}</td>"
            f"<td>{_minutes(session.duration)} min</td>"
            f"<td>{round_half_up(float(session.total_weight))} kg</td>"
            f"<td>{session.completed_sets}/{session.total_sets}</td>"
            "</tr>"
        )

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Workout History</title>
<style>{_PRINT_STYLE}</style>
</head>
<body>
<h1>Workout History</h1>
<p>Generated on: {escape(generated_at.strftime('%d %B %Y'))}</p>
<table>
<thead>
<tr><th>Date</th><th>Workout</th><th>Duration</th><th>Total Weight</th><th>Sets</th></tr>
</thead>
<tbody>
{''.join(rows)}
</tbody>
</table>
<div class="summary">
<h2>Summary</h2>
<p><strong>Total Workouts:</strong> {summary.total_workouts}</p>
<p><strong>Total Time:</strong> {summary.total_minutes} minutes</p>
<p><strong>Total Weight Lifted:</strong> {round_half_up(summary.total_weight)} kg</p>
<p><strong>Total Sets:</strong> {summary.total_sets}</p>
</div>
</body>
</html>
"""
