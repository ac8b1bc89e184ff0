"""JSON serialization of reports."""

import json

from branch_health.models.report import Report


def render_json(report: Report) -> str:
    """Serialize a report to an indented JSON document."""
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)
