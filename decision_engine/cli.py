"""
CLI entry point for the decision engine.
"""

import argparse
import json
import sys

from decision_engine.errors import DocumentError
from decision_engine.log import configure_logging, get_logger

logger = get_logger(__name__)

VERBOSITY_LEVELS = ["WARNING", "INFO", "DEBUG"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="decision-engine",
        description="Decision Engine - Weighted multi-criteria decision analysis",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log progress (-v for info, -vv for debug)"
    )
    parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        default="console",
        help="Log line format (default: console)"
    )
    
    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    
    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze a saved decision")
    analyze_parser.add_argument("file", help="Decision document (JSON)")
    analyze_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the stability simulation"
    )
    analyze_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Report format (default: text)"
    )
    analyze_parser.add_argument(
        "-o", "--output",
        help="Write the report to this file instead of stdout"
    )
    
    # What-if command
    whatif_parser = subparsers.add_parser("whatif", help="Try different weights on a saved decision")
    whatif_parser.add_argument("file", help="Decision document (JSON)")
    whatif_parser.add_argument(
        "--set",
        dest="weights",
        action="append",
        default=[],
        metavar="CRITERION_ID=WEIGHT",
        help="Raw weight for one criterion (repeatable)"
    )
    
    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Analyze the bundled example decision")
    demo_parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Seed for the stability simulation (default: 42)"
    )
    
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    
    level = VERBOSITY_LEVELS[min(args.verbose, len(VERBOSITY_LEVELS) - 1)]
    configure_logging(level=level, fmt=args.log_format)
    
    try:
        if args.command == "analyze":
            return run_analyze(args)
        elif args.command == "whatif":
            return run_whatif(args)
        elif args.command == "demo":
            return run_demo(args)
        else:
            parser.print_help()
            return 1
    except (OSError, DocumentError, KeyError, ValueError) as exc:
        message = exc.args[0] if isinstance(exc, KeyError) and exc.args else exc
        logger.debug("command_failed", command=args.command, error=str(exc))
        print(f"error: {message}", file=sys.stderr)
        return 1


def load_model(path: str):
    """Read a decision document from disk."""
    from decision_engine.engine.model import DecisionModel
    
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise DocumentError(f"{path} is not valid JSON: {exc}") from exc
    return DecisionModel.from_document(data)


def parse_weight(text: str):
    """Parse ``CRITERION_ID=WEIGHT``."""
    cid, sep, value = text.partition("=")
    if not sep:
        raise ValueError(f"Expected CRITERION_ID=WEIGHT, got {text!r}")
    try:
        return int(cid), float(value)
    except ValueError:
        raise ValueError(f"Expected CRITERION_ID=WEIGHT, got {text!r}") from None


def run_analyze(args) -> int:
    """Run the full analysis on a saved decision."""
    from decision_engine.config import AnalysisConfig
    from decision_engine.output.diagnostics import DecisionAnalyzer
    from decision_engine.output.reporter import Reporter, ReportFormat
    
    model = load_model(args.file)
    analysis = DecisionAnalyzer(AnalysisConfig(seed=args.seed)).analyze(model)
    content = Reporter(analysis).generate(ReportFormat.from_name(args.format))
    
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(content)
        print(f"Report saved to: {args.output}")
    else:
        print(content)
    return 0


def run_whatif(args) -> int:
    """Apply raw weights to a saved decision and show the new ranking."""
    from decision_engine.whatif.session import WhatIfSession
    
    model = load_model(args.file)
    session = WhatIfSession(model)
    
    for text in args.weights:
        cid, value = parse_weight(text)
        session.set_weight(cid, value)
    
    result = session.flush() if args.weights else session.evaluate()
    
    names = {c.id: c.name for c in session.working.criteria}
    print("Weights:")
    for cid, weight in result.weights.items():
        committed = session.committed_weights.get(cid, 0.0)
        print(f"  {names.get(cid, cid)}: {weight:.1f}% (was {committed:.1f}%)")
    print()
    print("Ranking:")
    for r in result.ranked:
        marker = " (tie)" if r.is_tied else ""
        print(f"  #{r.rank} {r.option.name}: {r.total_score:.2f}{marker}")
    print()
    if result.differs_from_baseline:
        print(f"Winner changed! Now: {result.winner.option.name}")
    elif result.winner is not None:
        print(f"Same winner: {result.winner.option.name}")
    return 0


def run_demo(args) -> int:
    """Analyze the bundled example decision."""
    from decision_engine.config import AnalysisConfig
    from decision_engine.examples.sample_decision import build_example_model
    from decision_engine.output.diagnostics import DecisionAnalyzer
    
    model = build_example_model()
    analysis = DecisionAnalyzer(AnalysisConfig(seed=args.seed)).analyze(model)
    print(analysis.describe())
    return 0


if __name__ == "__main__":
    sys.exit(main())
