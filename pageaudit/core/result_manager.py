"""
Result Manager for PageAudit
Handles storage of analysis reports as JSON and HTML
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Template

from .model import AnalysisReport

HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <title>PageAudit Report - {{ report.target }}</title>
    <meta charset="utf-8">
    <style>
        body { font-family: Arial, sans-serif; margin: 20px; background-color: #f5f5f5; }
        .header { background: linear-gradient(135deg, #2b5876 0%, #4e4376 100%); color: white; padding: 20px; border-radius: 10px; margin-bottom: 20px; }
        .summary { display: grid; grid-template-columns: repeat(auto-fit, minmax(250px, 1fr)); gap: 20px; margin-bottom: 30px; }
        .card { background: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
        .grade { font-size: 48px; font-weight: bold; }
        table { border-collapse: collapse; width: 100%; background: white; }
        th, td { padding: 8px; border-bottom: 1px solid #ddd; text-align: left; }
        .failed { color: #d32f2f; }
        .high { border-left: 4px solid #f57c00; }
        .medium { border-left: 4px solid #fbc02d; }
        .low { border-left: 4px solid #388e3c; }
        .item { background: white; margin: 10px 0; padding: 12px; border-radius: 8px; }
        .error { background: #fdecea; padding: 15px; border-radius: 8px; }
    </style>
</head>
<body>
    <div class="header">
        <h1>PageAudit Report</h1>
        <p>{{ report.target }} | Analyzer: {{ report.analyzer }} | Generated on {{ generated }}</p>
    </div>

    {% if not report.success %}
    <div class="error">
        <h3>Analysis aborted</h3>
        <p>{{ report.error }}</p>
        <p>Content detected: {{ report.fallback.content_detected }}</p>
    </div>
    {% else %}
    <div class="summary">
        <div class="card">
            <h3>Overall</h3>
            <p class="grade">{{ report.combined.overall.grade }}</p>
            <p><strong>Score:</strong> {{ report.combined.overall.score }} / 100</p>
            <p><strong>Compliance:</strong> {{ report.combined.overall.compliance_status }}</p>
            <p><strong>Source:</strong> {{ report.combined.overall.source }}</p>
        </div>
        <div class="card">
            <h3>Coverage</h3>
            <p><strong>Detectors:</strong> {{ report.detection.summary.successful_detectors }} / {{ report.detection.summary.total_detectors }}</p>
            <p><strong>Heuristics:</strong> {{ report.heuristics.summary.successful_heuristics }} / {{ report.heuristics.summary.total_heuristics }}</p>
            <p><strong>Rules passed:</strong> {{ report.rules.rules_passed }} / {{ report.rules.rules_executed }}</p>
            <p><strong>Duration:</strong> {{ "%.1f"|format(report.execution_time_ms) }} ms</p>
        </div>
    </div>

    <h2>Categories</h2>
    <table>
        <tr><th>Category</th><th>Score</th><th>Grade</th></tr>
        {% for name, category in report.combined.per_category.items() %}
        <tr><td>{{ category.title }}</td><td>{{ category.score if category.score is not none else "n/a" }}</td><td>{{ category.grade or "-" }}</td></tr>
        {% endfor %}
    </table>

    <h2>Detectors</h2>
    <table>
        <tr><th>Detector</th><th>Score</th><th>Status</th></tr>
        {% for name, entry in report.detection.detectors.items() %}
        <tr><td>{{ name }}</td><td>{{ entry.sub_score if entry.sub_score is not none else "-" }}</td>
            <td {% if not entry.success %}class="failed"{% endif %}>{{ "ok" if entry.success else entry.error }}</td></tr>
        {% endfor %}
    </table>

    {% if report.insights %}
    <h2>Insights</h2>
    {% for insight in report.insights %}
    <div class="item">{{ insight.type }}: {{ insight.message }}</div>
    {% endfor %}
    {% endif %}

    {% if report.recommendations %}
    <h2>Recommendations</h2>
    {% for rec in report.recommendations %}
    <div class="item {{ rec.priority }}">
        <strong>{{ rec.title or rec.rule }}</strong> ({{ rec.priority }})
        {% if rec.description %}<p>{{ rec.description }}</p>{% endif %}
        {% if rec.actions %}<ul>{% for action in rec.actions %}<li>{{ action }}</li>{% endfor %}</ul>{% endif %}
    </div>
    {% endfor %}
    {% endif %}

    {% if report.issues %}
    <h2>Issues</h2>
    {% for issue in report.issues %}
    <div class="item {{ issue.severity }}">{{ issue.type }}: {{ issue.message }}</div>
    {% endfor %}
    {% endif %}
    {% endif %}

    <div style="margin-top: 40px; padding: 20px; background: #f8f9fa; border-radius: 8px; text-align: center;">
        <p><strong>PageAudit v{{ report.version or "1.0.0" }}</strong></p>
    </div>
</body>
</html>
"""


def report_slug(target: str) -> str:
    """Filesystem-safe name fragment for a target."""
    slug = re.sub(r"^[a-z]+://", "", target)
    slug = re.sub(r"[^A-Za-z0-9._-]+", "_", slug).strip("_")
    return slug[:80] or "report"


class ResultManager:
    """Persists analysis reports."""

    def __init__(self, output_dir: str = "./reports"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(__name__)

        # Create subdirectories
        (self.output_dir / "json").mkdir(exist_ok=True)
        (self.output_dir / "html").mkdir(exist_ok=True)

    def _filepath(self, report: AnalysisReport, kind: str, extension: str) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.output_dir / kind / f"report_{report_slug(report.target.key)}_{timestamp}.{extension}"

    async def generate_json_report(self, report: AnalysisReport) -> str:
        """Write the report's dictionary form as JSON."""
        filepath = self._filepath(report, "json", "json")
        data = {
            "metadata": {
                "tool": "PageAudit",
                "generated_at": datetime.now().isoformat(),
            },
            "report": report.to_dict(),
        }
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)

        self.logger.info(f"JSON report generated: {filepath}")
        return str(filepath)

    async def generate_html_report(self, report: AnalysisReport) -> str:
        filepath = self._filepath(report, "html", "html")
        template = Template(HTML_TEMPLATE)
        html_content = template.render(
            report=report.to_dict(),
            generated=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        )
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(html_content)

        self.logger.info(f"HTML report generated: {filepath}")
        return str(filepath)

    async def generate_reports(self, report: AnalysisReport, formats: List[str]) -> Dict[str, str]:
        """Generate the requested formats; a failing writer does not stop the others."""
        writers = {
            "json": self.generate_json_report,
            "html": self.generate_html_report,
        }
        reports = {}
        for fmt in formats:
            writer = writers.get(fmt)
            if writer is None:
                continue
            try:
                reports[fmt] = await writer(report)
            except OSError as e:
                self.logger.error(f"Error generating {fmt} report: {e}")

        self.logger.debug(f"Generated {len(reports)} reports for {report.target}")
        return reports

    def load_report(self, filepath: str) -> Dict[str, Any]:
        """Load a report dictionary previously written by generate_json_report."""
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data.get("report", data)
