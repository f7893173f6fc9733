from __future__ import annotations

import argparse
import logging
import sys

from ..config import VERSION

_logger = logging.getLogger(__name__)


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running MoodGP health check...")
    print("-" * 50)

    for module_name in ("numpy", "pandas", "scipy", "sklearn", "sympy", "matplotlib"):
        try:
            module = __import__(module_name)
            print(f"[OK] {module_name} {getattr(module, '__version__', '?')} available")
            checks_passed += 1
        except ImportError as e:
            print(f"[FAIL] {module_name} import failed: {e}")
            checks_failed += 1

    # A tiny search must recover a linear relation
    try:
        import numpy as np

        from ..symbolic_regression import SearchOptions
        from ..symbolic_regression import SymbolicRegressor

        X = np.linspace(-2, 2, 40).reshape(-1, 1)
        y = 2 * X[:, 0] + 1
        options = SearchOptions(
            npopulations=2,
            population_size=40,
            generations_per_iteration=10,
            seed=1,
            verbose=False,
        )
        regressor = SymbolicRegressor(options, niterations=2).fit(X, y, ["x"])
        if regressor.best.loss < 1e-3:
            print(f"[OK] Equation search works ({regressor.best.sympy_expr})")
            checks_passed += 1
        else:
            print(f"[FAIL] Equation search loss too high: {regressor.best.loss:.4g}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Equation search check failed: {e}")
        checks_failed += 1

    print("-" * 50)
    print(f"{checks_passed} passed, {checks_failed} failed")
    return 0 if checks_failed == 0 else 1


def build_parser() -> argparse.ArgumentParser:
    import moodgp_pkg.config as _config

    parser = argparse.ArgumentParser(
        prog="moodgp",
        description="Genetic programming vs linear regression on a mood diary",
    )
    parser.add_argument(
        "-d",
        "--data",
        type=str,
        default=_config.DATA_URL,
        help="Path or URL of the mood diary CSV",
    )
    parser.add_argument(
        "--delimiter", type=str, default=_config.DATA_DELIMITER, help="CSV field separator"
    )
    parser.add_argument(
        "-r",
        "--response",
        type=str,
        choices=list(_config.RESPONSE_CHOICES),
        default=_config.DEFAULT_RESPONSE,
        help="Response variable to analyse",
    )
    parser.add_argument(
        "--periods",
        type=int,
        nargs="+",
        default=_config.AGGREGATION_PERIODS,
        help="Aggregation periods in days (default: 2 7 21 60)",
    )
    parser.add_argument(
        "-k",
        "--test-every",
        type=int,
        default=_config.TEST_EVERY,
        help="Every k-th day goes to the test set",
    )
    parser.add_argument("--niterations", type=int, help="Equation search iterations")
    parser.add_argument("--npopulations", type=int, help="Number of populations")
    parser.add_argument("--population-size", type=int, help="Individuals per population")
    parser.add_argument(
        "--generations", type=int, help="Generations per iteration and population"
    )
    parser.add_argument("--maxsize", type=int, help="Maximum equation complexity")
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for a reproducible search (0 = unseeded, as MOODGP_GP_SEED)",
    )
    parser.add_argument("-t", "--timeout", type=float, help="Search timeout (seconds)")
    parser.add_argument(
        "-p", "--precision", type=int, help="Decimals when printing MSE values"
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument("--plot-dir", type=str, help="Save figures as PNG into this directory")
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    return parser


def _save_plots(prepared, report, plot_dir: str) -> None:
    from ..plotting import plot_correlation_heatmap
    from ..plotting import plot_predictions
    from ..plotting import plot_smoothed_responses
    from ..plotting import save_figure

    save_figure(plot_correlation_heatmap(prepared.correlations), plot_dir, "correlations")
    save_figure(
        plot_smoothed_responses(
            prepared.wellbeing.values,
            prepared.emotionality,
            show_wellbeing=True,
            show_emotionality=True,
        ),
        plot_dir,
        "responses",
    )
    for subset in ("train", "test"):
        y, y_pred = report.predictions_for(subset)
        save_figure(plot_predictions(y, y_pred), plot_dir, f"predictions_{subset}")


def search_options(args: argparse.Namespace):
    """SearchOptions from the command line; unset flags keep the configured defaults."""
    from ..symbolic_regression import SearchOptions

    overrides = {
        "npopulations": args.npopulations,
        "population_size": args.population_size,
        "generations_per_iteration": args.generations,
        "maxsize": args.maxsize,
        "timeout": args.timeout,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if args.seed is not None:
        overrides["seed"] = args.seed or None
    return SearchOptions(verbose=args.log_level in ("DEBUG", "INFO"), **overrides)


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for the MoodGP CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = build_parser().parse_args(argv)

    if args.version:
        print(VERSION)
        return 0

    from ..logging_config import setup_logging

    setup_logging(level=args.log_level, log_file=args.log_file)

    if args.health_check:
        return _health_check()

    # Apply CLI configuration overrides
    import moodgp_pkg.config as _config

    if args.precision is not None and args.precision >= 0:
        _config.OUTPUT_PRECISION = int(args.precision)

    from ..analysis.pipeline import prepare_analysis
    from ..analysis.pipeline import run_analysis
    from ..types import MoodGPError
    from ..utils.data_loading import load_dataset
    from ..utils.formatting import print_result_pretty

    try:
        options = search_options(args)
        df = load_dataset(args.data, delimiter=args.delimiter)
        prepared = prepare_analysis(df, periods=args.periods)
        report = run_analysis(
            prepared,
            response=args.response,
            k=args.test_every,
            niterations=(
                args.niterations if args.niterations is not None else _config.GP_NITERATIONS
            ),
            options=options,
        )
    except MoodGPError as e:
        _logger.debug("Analysis failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == "human":
        print(
            f"The wellbeing variable explains {prepared.wellbeing.explained_percent:.0f} % "
            f"of the variance of all {len(prepared.wellbeing.loadings)} original variables."
        )
    print_result_pretty(report, args.format, _config.OUTPUT_PRECISION)

    if args.plot_dir:
        _save_plots(prepared, report, args.plot_dir)
    return 0
