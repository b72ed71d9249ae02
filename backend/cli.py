"""Command line entry points for roster maintenance.

Generation is triggered synchronously from here (e.g. by an external cron);
nothing in this service schedules itself.
"""
import argparse
import json

import config
import roster
from database import SessionLocal, init_db
from logging_config import setup_logging


def _cmd_init_db(args: argparse.Namespace) -> None:
    init_db()
    print("Database initialized:", config.DATABASE_URL)


def _cmd_generate(args: argparse.Namespace) -> None:
    db = SessionLocal()
    try:
        summary = roster.generate_daily_tasks(db, args.hotel, args.date, roster.SYSTEM_REQUESTER)
    finally:
        db.close()
    print(json.dumps(summary, indent=2))


def _cmd_generate_all(args: argparse.Namespace) -> None:
    db = SessionLocal()
    try:
        results = roster.generate_for_all_hotels(db, args.date)
    finally:
        db.close()
    failed = [r for r in results if not r["success"]]
    print(json.dumps(results, indent=2))
    if failed:
        raise SystemExit(f"Roster generation failed for {len(failed)} of {len(results)} hotel(s)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hms-roster", description="Housekeeping roster tools")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="Create database tables")
    p.set_defaults(func=_cmd_init_db)

    p = sub.add_parser("generate", help="Generate one hotel's roster for a day")
    p.add_argument("--hotel", required=True, help="Hotel id")
    p.add_argument("--date", required=True, help="Day to generate (YYYY-MM-DD)")
    p.set_defaults(func=_cmd_generate)

    p = sub.add_parser("generate-all", help="Generate every active hotel's roster")
    p.add_argument("--date", default=None, help="Day to generate (default: tomorrow)")
    p.set_defaults(func=_cmd_generate_all)

    return parser


def main(argv=None) -> None:
    setup_logging(config.LOG_LEVEL, config.LOG_FILE)
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
