import json
import logging
import math
from typing import Any

logger = logging.getLogger(__name__)


def format_number_no_trailing_zeros(value: float, precision: int = 4) -> str:
    """Round to ``precision`` decimals and drop trailing zeros (``0.5000`` -> ``0.5``)."""
    if not math.isfinite(value):
        return str(value)
    rounded = round(float(value), precision)
    if rounded.is_integer():
        return str(int(rounded))
    return f"{rounded:.{precision}f}".rstrip("0").rstrip(".")


def _json_default(obj: Any):
    # numpy scalars and sympy objects
    if hasattr(obj, "item"):
        return obj.item()
    return str(obj)


def format_json(payload: dict) -> str:
    """Serialize a result dict; infinities become strings so the output stays valid JSON."""

    def clean(value):
        if isinstance(value, float) and not math.isfinite(value):
            return str(value)
        if isinstance(value, dict):
            return {k: clean(v) for k, v in value.items()}
        if isinstance(value, list):
            return [clean(v) for v in value]
        return value

    return json.dumps(clean(payload), indent=2, default=_json_default)


def format_score_table(scores: dict, precision: int = 4) -> str:
    """Fixed-width table of train/test MSE per model."""
    rows = [f"{'model':<12}{'train MSE':>12}{'test MSE':>12}"]
    for name, score in scores.items():
        rows.append(
            f"{name:<12}"
            f"{format_number_no_trailing_zeros(score.train_mse, precision):>12}"
            f"{format_number_no_trailing_zeros(score.test_mse, precision):>12}"
        )
    return "\n".join(rows)


def print_result_pretty(report, output_format: str = "human", precision: int = 4) -> None:
    """Print an AnalysisReport as human-readable text or JSON."""
    if output_format == "json":
        print(format_json(report.to_dict()))
        return

    for line in report.summary_lines(precision):
        print(line)
    print()
    print(format_score_table(report.scores, precision))
    print()
    print("Dominating equations (simplest first):")
    for solution in report.pareto_front:
        print(
            f"  [{solution.complexity:>2}] loss "
            f"{format_number_no_trailing_zeros(solution.loss, precision):>8}  "
            f"{solution.sympy_expr}"
        )
