#!/usr/bin/env python3
"""
Discount engine command line.

Usage:
    campaign-engine init-db                        # Create missing tables
    campaign-engine run                            # One engine pass, JSON summary on stdout
    campaign-engine run --now 2026-03-01T00:00:00  # Evaluate as of a given time
    campaign-engine clear-expired                  # Only clear ended campaigns
    campaign-engine audit-report --csv out.csv     # Per-rule audit summary
    campaign-engine -q run                         # Errors only on stderr
"""
import argparse
import json
import logging
import sys

from campaign_engine.core.config import Config
from campaign_engine.core.exceptions import ConfigurationError, DatabaseError, EngineBusyError
from campaign_engine.core.logging import setup_logging
from campaign_engine.core.utils import parse_timestamp
from campaign_engine.services import AuditReport, DatabaseService, DiscountEngine

logger = logging.getLogger(__name__)


# ------------------------
# CLI arguments
# ------------------------
def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        prog="campaign-engine",
        description="Run the campaign pricing engine against the catalog database.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Technical logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create missing tables")

    run = commands.add_parser("run", help="Sweep expired campaigns and apply active rules")
    run.add_argument("--now", type=parse_timestamp, default=None,
                     help="Reference time (ISO 8601; an offset is converted to UTC, naive values are UTC)")

    clear = commands.add_parser("clear-expired", help="Clear ended campaign prices only")
    clear.add_argument("--now", type=parse_timestamp, default=None)

    report = commands.add_parser("audit-report", help="Summarize the audit trail per rule")
    report.add_argument("--since", type=parse_timestamp, default=None)
    report.add_argument("--until", type=parse_timestamp, default=None)
    report.add_argument("--csv", default=None, help="Write the report to this CSV file")

    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_arguments(argv)
    setup_logging(
        verbose=args.verbose or Config.app.VERBOSE,
        level=Config.app.LOG_LEVEL,
        quiet=args.quiet,
    )

    try:
        Config.engine.validate()
    except ConfigurationError as e:
        logger.critical(f"FATAL CONFIGURATION ERROR: {e}")
        return 2

    db_service = DatabaseService(args.database_url)

    if args.command == "init-db":
        try:
            db_service.create_all()
        except DatabaseError as e:
            logger.critical(f"❌ {e.message}: {e.__cause__}")
            return 1
        return 0

    if args.command == "audit-report":
        with db_service.get_session() as session:
            report = AuditReport(session).by_rule(args.since, args.until)
        if args.csv:
            report.to_csv(args.csv, index=False)
            logger.info(f"✅ Audit report written to {args.csv}")
        else:
            print(report.to_string(index=False) if not report.empty else "No audit records.")
        return 0

    engine = DiscountEngine(db_service)
    try:
        if args.command == "clear-expired":
            cleared = engine.clear_expired(args.now)
            print(json.dumps({"success": True, "clearedCount": cleared}))
            return 0

        summary = engine.run(args.now)
    except EngineBusyError as e:
        logger.error(f"🔒 {e.message}")
        return 75

    print(json.dumps({**summary.to_dict(), "message": summary.message()}, indent=2))
    return 0 if summary.success else 1


if __name__ == "__main__":
    sys.exit(main())
