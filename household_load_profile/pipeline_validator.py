# household_load_profile/pipeline_validator.py
"""
Data quality checkpoints between pipeline stages.
"""

from __future__ import annotations

import logging

import polars as pl

logger = logging.getLogger(__name__)


class PipelineValidator:
    """Track tables through pipeline stages"""

    def __init__(self) -> None:
        self.checkpoints: dict[str, dict[str, object]] = {}

    def checkpoint(
        self,
        step_name: str,
        df: pl.DataFrame,
        required_cols: list[str] | None = None,
        key_cols: list[str] | None = None,
        value_col: str | None = None,
    ) -> dict[str, object]:
        """Validate a table at a pipeline checkpoint."""
        issues: list[str] = []
        warnings: list[str] = []

        if required_cols:
            missing = [c for c in required_cols if c not in df.columns]
            if missing:
                issues.append(f"Missing required columns: {missing}")

        if key_cols and all(c in df.columns for c in key_cols):
            n_unique = df.select(key_cols).unique().height
            if n_unique < df.height:
                issues.append(f"Found {df.height - n_unique:,} duplicate {'/'.join(key_cols)} rows")

        # Missing readings are allowed; report how many.
        if value_col and value_col in df.columns and df.height > 0:
            null_count = df[value_col].null_count()
            if null_count > 0:
                pct = 100 * null_count / df.height
                warnings.append(f"{value_col}: {null_count:,} nulls ({pct:.1f}%)")

        report: dict[str, object] = {
            "step": step_name,
            "status": "FAIL" if issues else "PASS",
            "rows": df.height,
            "columns": len(df.columns),
            "issues": issues,
            "warnings": warnings,
        }
        self.checkpoints[step_name] = report

        if issues:
            logger.error(f"❌ {step_name}: FAILED validation")
            for issue in issues:
                logger.error(f"  - {issue}")
        else:
            logger.info(f"✅ {step_name}: {df.height:,} rows, {len(df.columns)} cols")

        for warning in warnings:
            logger.warning(f"  ⚠️  {warning}")

        return report

    def failed(self) -> list[str]:
        return [name for name, report in self.checkpoints.items() if report["status"] == "FAIL"]

    def summary(self) -> None:
        """Log validation summary"""
        logger.info("=" * 70)
        logger.info("PIPELINE VALIDATION SUMMARY")
        logger.info("=" * 70)
        for step_name, report in self.checkpoints.items():
            status_icon = "✅" if report["status"] == "PASS" else "❌"
            logger.info(f"{status_icon} {step_name}: {report['rows']:,} rows, {report['columns']} cols")
            for issue in report["issues"]:  # type: ignore[attr-defined]
                logger.info(f"    ❌ {issue}")
            for warning in report["warnings"]:  # type: ignore[attr-defined]
                logger.info(f"    ⚠️  {warning}")
