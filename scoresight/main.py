"""
Main entry point for the Scoresight engine.
"""

import argparse
import logging
import sys
from typing import Optional

from .api.rest_api import ScoresightRestAPI
from .config import AnalyticsConfig, configure_logging, load_config
from .core.entities import members_of_class
from .core.exceptions import ConfigurationError
from .demo_data import build_demo_dataset
from .services import AnalyticsService
from .services.gap_analysis import performance_band

logger = logging.getLogger(__name__)


class ScoresightPlatform:
    """Wires configuration, the analytics service and the REST API together."""

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self._config = config or AnalyticsConfig()
        self._rest_api = ScoresightRestAPI(self._config)
        logger.info("Scoresight platform initialized")

    @property
    def app(self):
        return self._rest_api.app

    def start_rest_server(self, host: str = "127.0.0.1", port: int = 8000):
        """Run the REST server until interrupted."""
        import uvicorn

        logger.info("REST server starting on %s:%s (docs at /docs)", host, port)
        uvicorn.run(self._rest_api.app, host=host, port=port, log_level=self._config.log_level.lower())

    def run_demo(self, seed: Optional[int] = None, per_class: int = 5):
        """Print a dashboard for generated demo data."""
        dataset = build_demo_dataset(per_class=per_class, seed=seed)
        service = AnalyticsService(dataset.program.subjects, self._config)
        students = list(dataset.students)

        summary = service.dashboard_summary(students)
        stats = summary.statistics
        print(f"=== {dataset.program.name}: {stats.total_students} students ===")
        print(f"Average {stats.average:.1f}%  highest {stats.highest:.1f}%  "
              f"lowest {stats.lowest:.1f}%  stddev {stats.stddev:.2f}")
        print(f"Needing attention: {summary.needing_attention}")

        print("\n=== Top students ===")
        for entry in summary.top_students:
            print(f"  #{entry.rank} {entry.student.name} ({entry.student.class_id}) "
                  f"{entry.percentage:.1f}% {performance_band(entry.percentage).value}")

        print("\n=== Subject averages ===")
        for code, average in summary.subject_averages.items():
            print(f"  {code}: {average:.1f}%")

        print("\n=== Weakest sub-topics ===")
        for gap in summary.weakest_topics:
            print(f"  [{gap.priority.value}] {gap.subject_code} {gap.name}: {gap.average_percentage:.1f}%")

        report = service.class_report(students, dataset.classes)
        print("\n=== Classes ===")
        for average, plot in zip(report.comparison, report.box_plots):
            quartiles = plot.statistics.quartiles
            print(f"  {average.class_name}: average {average.average:.1f}%  "
                  f"box [{plot.statistics.min:.1f} | {quartiles.q1:.1f} {quartiles.median:.1f} "
                  f"{quartiles.q3:.1f} | {plot.statistics.max:.1f}]")

        if students:
            student = students[0]
            cohort = members_of_class(students, student.class_id)
            student_report = service.student_report(student, cohort)
            print(f"\n=== {student.name} ===")
            print(f"  Total {student_report.total.percentage:.1f}%  rank {student_report.rank.rank}"
                  f"/{student_report.rank.cohort_size}  percentile {student_report.rank.percentile:.0f}")
            print(f"  Gap to top {self._config.top_fraction:.0%}: {student_report.skill_profile.gap_to_top:.1f} points")
            for topic in student_report.weaknesses[:3]:
                print(f"  {topic.recommendation} ({topic.percentage:.0f}%)")

        print("\nDemo completed")


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Scoresight score analytics engine")
    parser.add_argument("--serve", action="store_true", help="Run the REST API")
    parser.add_argument("--demo", action="store_true", help="Print a dashboard for generated demo data")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="REST server host")
    parser.add_argument("--port", type=int, default=8000, help="REST server port")
    parser.add_argument("--config", type=str, help="Configuration file path")
    parser.add_argument("--seed", type=int, help="Seed for demo data")
    parser.add_argument("--log-level", type=str, help="Override the configured log level")

    args = parser.parse_args(argv)

    overrides = {"log_level": args.log_level.upper()} if args.log_level else None
    try:
        config = load_config(args.config, overrides)
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 2

    configure_logging(config.log_level)
    platform = ScoresightPlatform(config)

    if args.serve:
        try:
            platform.start_rest_server(args.host, args.port)
        except KeyboardInterrupt:
            logger.info("Shutting down")
    else:
        platform.run_demo(seed=args.seed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
