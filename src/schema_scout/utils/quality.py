"""
Quality assessment and reporting for store tables.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from schema_scout.models import Affinity, RelationshipCandidate
from schema_scout.profiling.affinity import map_declared_affinity
from schema_scout.profiling.literal import quote_identifier as q
from schema_scout.store.base import Store

logger = logging.getLogger(__name__)

HIGH_NULL_RATE = 0.5
TOP_UNIQUE_RATIO = 8


class QualityReporter:
    """
    Generates quality reports for the tables in a store.

    Reports include:
    - Row and column counts, and a rows x columns size score
    - Per-column null rate, distinct count and unique ratio
    - Columns with the highest unique ratio across tables
    - Average null rate and whole-row duplicate rate per table
    - Declared type distribution per table
    - Referential integrity of inferred relationships (when supplied)
    """

    def __init__(
        self,
        store: Store,
        relationships: Optional[Sequence[RelationshipCandidate]] = None,
    ):
        """
        Initialize quality reporter.

        Args:
            store: Store to read
            relationships: Inferred relationships to report coverage for
        """
        self.store = store
        self.relationships = list(relationships or [])

        self.report: Dict[str, Any] = {
            "generated_at": datetime.now().isoformat(),
            "summary": {},
            "tables": {},
            "referential_integrity": {},
        }

    async def generate_report(self, tables: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Generate quality report.

        Args:
            tables: Tables to analyze (default: all)

        Returns:
            Report dictionary
        """
        logger.info("Generating quality report...")

        if tables is None:
            tables = await self.store.list_tables()

        for table_name in tables:
            self.report["tables"][table_name] = await self._analyze_table(table_name)

        self.report["referential_integrity"] = self._check_referential_integrity()
        self.report["summary"] = self._generate_summary()

        return self.report

    async def _analyze_table(self, table_name: str) -> Dict[str, Any]:
        """Analyze a single table's quality."""
        columns = await self.store.get_columns(table_name)
        names = [c.name for c in columns]
        rows = await self.store.query(f"SELECT * FROM {q(table_name)}")
        df = pd.DataFrame(rows, columns=names)

        report: Dict[str, Any] = {
            "row_count": len(df),
            "column_count": len(names),
            "size_score": len(df) * len(names),
            "columns": {},
            "type_distribution": {a.value: 0 for a in Affinity},
        }

        for col in columns:
            affinity = map_declared_affinity(col.declared_type)
            report["type_distribution"][affinity.value] += 1
            report["columns"][col.name] = self._analyze_column(df[col.name], col.declared_type)

        null_rates = [c["null_fraction"] for c in report["columns"].values()]
        report["avg_null_rate"] = sum(null_rates) / len(null_rates) if null_rates else 0.0
        report["duplicate_row_rate"] = float(df.duplicated().mean()) if len(df) else 0.0

        return report

    def _analyze_column(self, series: pd.Series, declared_type: str) -> Dict[str, Any]:
        """Analyze a single column's quality."""
        return {
            "declared_type": declared_type or "",
            "null_count": int(series.isna().sum()),
            "null_fraction": float(series.isna().mean()) if len(series) else 0.0,
            "distinct_count": int(series.nunique()),
            "unique_ratio": float(series.nunique() / len(series)) if len(series) else 0.0,
        }

    def _check_referential_integrity(self) -> Dict[str, Any]:
        """Summarize coverage of the supplied relationships."""
        ri_report: Dict[str, Any] = {
            "total_relationships": len(self.relationships),
            "fully_covered": 0,
            "partial": [],
        }

        for rel in self.relationships:
            orphans = rel.total - rel.matched
            if orphans == 0:
                ri_report["fully_covered"] += 1
            else:
                ri_report["partial"].append({
                    "relationship": rel.name,
                    "child_table": rel.from_table,
                    "child_column": rel.from_column,
                    "parent_table": rel.to_table,
                    "parent_column": rel.to_column,
                    "orphan_count": orphans,
                    "coverage": rel.coverage,
                })

        ri_report["integrity_score"] = (
            ri_report["fully_covered"] / max(ri_report["total_relationships"], 1)
        )
        return ri_report

    def _rank_unique_ratio(self) -> List[Dict[str, Any]]:
        """Columns with the highest distinct/row ratio, empty tables skipped."""
        ranked = []
        for table_name, table_report in self.report["tables"].items():
            if not table_report["row_count"]:
                continue
            for col_name, col_report in table_report.get("columns", {}).items():
                ranked.append({
                    "column": f"{table_name}.{col_name}",
                    "unique_ratio": col_report["unique_ratio"],
                })
        ranked.sort(key=lambda r: r["unique_ratio"], reverse=True)
        return ranked[:TOP_UNIQUE_RATIO]

    def _generate_summary(self) -> Dict[str, Any]:
        """Generate overall quality summary."""
        tables = self.report["tables"]
        summary = {
            "total_tables": len(tables),
            "total_rows": sum(t["row_count"] for t in tables.values()),
            "referential_integrity_score": self.report["referential_integrity"].get("integrity_score", 1.0),
            "top_unique_ratio": self._rank_unique_ratio(),
            "tables_with_issues": [],
        }

        for table_name, table_report in tables.items():
            issues = []

            for col_name, col_report in table_report.get("columns", {}).items():
                if col_report.get("null_fraction", 0) > HIGH_NULL_RATE:
                    issues.append(f"High null rate in {col_name}")

            if table_report.get("duplicate_row_rate", 0) > 0:
                issues.append(f"Duplicate rows: {table_report['duplicate_row_rate']:.1%}")

            if issues:
                summary["tables_with_issues"].append({
                    "table": table_name,
                    "issues": issues,
                })

        return summary

    def save(self, output_dir: Path) -> tuple:
        """
        Save quality report to files.

        Args:
            output_dir: Output directory

        Returns:
            Tuple of (json_path, markdown_path)
        """
        report_dir = Path(output_dir) / "report"
        report_dir.mkdir(parents=True, exist_ok=True)

        json_path = report_dir / "quality.json"
        with open(json_path, "w") as f:
            json.dump(self.report, f, indent=2, default=str)

        md_path = report_dir / "quality.md"
        with open(md_path, "w") as f:
            f.write(self._generate_markdown())

        logger.info(f"Quality report saved to {report_dir}")
        return json_path, md_path

    def _generate_markdown(self) -> str:
        """Generate Markdown version of quality report."""
        summary = self.report["summary"]
        lines = [
            "# Data Quality Report",
            "",
            f"Generated: {self.report['generated_at']}",
            "",
            "## Summary",
            "",
            f"- **Total Tables**: {summary['total_tables']}",
            f"- **Total Rows**: {summary['total_rows']:,}",
            f"- **Referential Integrity Score**: {summary['referential_integrity_score']:.2%}",
            "",
        ]

        if summary["top_unique_ratio"]:
            lines.extend(["## Most Distinct Columns", ""])
            for entry in summary["top_unique_ratio"]:
                lines.append(f"- {entry['column']}: {entry['unique_ratio']:.1%}")
            lines.append("")

        ri = self.report["referential_integrity"]
        if ri.get("total_relationships"):
            lines.extend([
                "## Referential Integrity",
                "",
                f"- Fully Covered: {ri['fully_covered']}/{ri['total_relationships']}",
            ])
            for p in ri.get("partial", []):
                lines.append(
                    f"- **{p['relationship']}**: {p['orphan_count']} orphan values in "
                    f"{p['child_table']}.{p['child_column']} ({p['coverage']:.1%} covered)"
                )
            lines.append("")

        lines.append("## Table Details")
        lines.append("")

        for table_name, table_report in self.report["tables"].items():
            lines.append(f"### {table_name}")
            lines.append("")
            lines.append(f"- Rows: {table_report['row_count']:,}")
            lines.append(f"- Columns: {table_report['column_count']}")
            lines.append(f"- Average Null Rate: {table_report['avg_null_rate']:.1%}")
            lines.append(f"- Duplicate Row Rate: {table_report['duplicate_row_rate']:.1%}")
            lines.append("")

            lines.append("| Column | Type | Nulls | Distinct |")
            lines.append("|--------|------|-------|----------|")

            for col_name, col_report in table_report.get("columns", {}).items():
                null_pct = f"{col_report['null_fraction']:.1%}"
                lines.append(
                    f"| {col_name} | {col_report['declared_type']} | {null_pct} | {col_report['distinct_count']:,} |"
                )

            lines.append("")

        return "\n".join(lines)
