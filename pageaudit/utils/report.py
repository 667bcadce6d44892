"""
Report Generation Utilities for PageAudit
CSV opportunity export and plain-text summaries of analysis reports
"""

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from tabulate import tabulate

from pageaudit.core.config import GradeBands
from pageaudit.core.scoring import grade_rank


def _overall(report: Dict[str, Any]) -> Dict[str, Any]:
    return (report.get("combined") or {}).get("overall") or {}


def _failed_units(report: Dict[str, Any]) -> int:
    detection = (report.get("detection") or {}).get("summary") or {}
    heuristics = (report.get("heuristics") or {}).get("summary") or {}
    return detection.get("failed_detectors", 0) + heuristics.get("failed_heuristics", 0)


def summary_rows(reports: List[Dict[str, Any]]) -> List[List[Any]]:
    rows = []
    for report in reports:
        if not report.get("success"):
            rows.append([report.get("target", ""), "-", "-", "aborted", "-", report.get("error", "")])
            continue
        overall = _overall(report)
        rows.append([
            report.get("target", ""),
            overall.get("score", 0),
            overall.get("grade", "F"),
            overall.get("compliance_status", ""),
            _failed_units(report),
            len(report.get("issues", [])),
        ])
    return rows


SUMMARY_HEADERS = ["Target", "Score", "Grade", "Compliance", "Failed units", "Issues"]


class ReportGenerator:
    """Generate auxiliary report formats from report dictionaries."""

    def __init__(self, output_dir: str = "./reports"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(__name__)

    def generate_csv_report(self, reports: List[Dict[str, Any]],
                            filename: Optional[str] = None) -> str:
        """One CSV row per ranked optimization opportunity."""
        if not filename:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"opportunities_{timestamp}.csv"

        filepath = self.output_dir / filename

        columns = [
            'Target', 'Rank', 'Rule', 'Category', 'Impact', 'Effort',
            'Estimated_Gain', 'Current_Value', 'Target_Value', 'Description'
        ]

        with open(filepath, 'w', newline='', encoding='utf-8') as csvfile:
            writer = csv.writer(csvfile)
            writer.writerow(columns)

            for report in reports:
                opportunities = (report.get("rules") or {}).get("opportunities", [])
                for rank, opportunity in enumerate(opportunities, start=1):
                    writer.writerow([
                        report.get("target", ""),
                        rank,
                        opportunity.get("rule", ""),
                        opportunity.get("category", ""),
                        opportunity.get("impact", ""),
                        opportunity.get("effort", ""),
                        opportunity.get("estimated_score_gain", 0),
                        opportunity.get("current_value", ""),
                        opportunity.get("target_value", ""),
                        opportunity.get("description", ""),
                    ])

        self.logger.info(f"CSV report generated: {filepath}")
        return str(filepath)

    def generate_summary_report(self, reports: List[Dict[str, Any]],
                                filename: Optional[str] = None) -> str:
        """Write a plain-text summary of every analyzed target."""
        if not filename:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"summary_{timestamp}.txt"

        filepath = self.output_dir / filename

        content = []
        content.append("=" * 70)
        content.append("PAGEAUDIT SUMMARY REPORT")
        content.append("=" * 70)
        content.append("")
        content.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        content.append(f"Targets analyzed: {len(reports)}")
        content.append("")
        content.append(tabulate(summary_rows(reports), headers=SUMMARY_HEADERS, tablefmt='grid'))
        content.append("")

        for report in reports:
            if not report.get("success"):
                continue
            per_category = (report.get("combined") or {}).get("per_category", {})
            if per_category:
                content.append(f"CATEGORIES - {report.get('target', '')}")
                content.append("-" * 40)
                rows = [[c.get("title", name), c.get("score"), c.get("grade")] for name, c in per_category.items()]
                content.append(tabulate(rows, headers=["Category", "Score", "Grade"], tablefmt='simple'))
                content.append("")

            recommendations = report.get("recommendations", [])
            if recommendations:
                content.append("TOP RECOMMENDATIONS")
                content.append("-" * 19)
                for rec in recommendations[:5]:
                    content.append(f"- [{rec.get('priority', 'medium')}] {rec.get('title') or rec.get('rule')}")
                content.append("")

        content.append("=" * 70)

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write('\n'.join(content))

        self.logger.info(f"Summary report generated: {filepath}")
        return str(filepath)

    def generate_console_summary(self, reports: List[Dict[str, Any]],
                                 bands: Optional[GradeBands] = None) -> str:
        """Console-friendly summary table, best grade first; aborted runs last."""
        ranked = sorted(
            reports,
            key=lambda r: (grade_rank(_overall(r).get("grade"), bands) if r.get("success") else -1,
                           _overall(r).get("score") or 0),
            reverse=True,
        )
        return tabulate(summary_rows(ranked), headers=SUMMARY_HEADERS, tablefmt='grid')
