import argparse
import json
import sys
from typing import List, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from . import __version__
from .env import LOG_LEVELS, load_env, resolve_db_path, resolve_log_dir, resolve_log_level
from .errors import NotFound
from .logger import get_logger, reset_logger
from .model import InvalidStatus, Status
from .retry import RetryError, exponential_backoff, is_locked_error
from .schema import ValidationError, ensure_valid, validate_job, validate_note
from .store import Store

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2
EXIT_STORAGE = 3


def parse_status(value: str) -> Status:
    try:
        return Status.from_token(value)
    except InvalidStatus:
        raise argparse.ArgumentTypeError(
            f"invalid status '{value}' (choose from {', '.join(Status.tokens())})"
        )


def _print_json(items) -> None:
    print(json.dumps([i.to_dict() for i in items], indent=2, ensure_ascii=False))


def cmd_add(args: argparse.Namespace, store: Store) -> None:
    ensure_valid(validate_job(args.company, args.role, args.url))
    job_id = store.add_job(args.company, args.role, args.url, args.status)
    print(f"Added job #{job_id}: {args.company} — {args.role}")


def cmd_list(args: argparse.Namespace, store: Store) -> None:
    jobs = store.list_jobs()
    if args.json:
        _print_json(jobs)
        return
    if not jobs:
        print("No jobs yet.")
        return
    for j in jobs:
        print(f"#{j.id:03} | {j.company} | {j.role} | {j.status} | {j.url or '-'}")


def cmd_update_status(args: argparse.Namespace, store: Store) -> None:
    store.update_status(args.id, args.status)
    print(f"Updated job #{args.id} -> {args.status}")


def cmd_delete(args: argparse.Namespace, store: Store) -> None:
    store.delete_job(args.id)
    print(f"Deleted job #{args.id}")


def cmd_note_add(args: argparse.Namespace, store: Store) -> None:
    ensure_valid(validate_note(args.text))
    note_id = store.add_note(args.id, args.text)
    print(f"Added note #{note_id} to job #{args.id}")


def cmd_note_list(args: argparse.Namespace, store: Store) -> None:
    notes = store.list_notes(args.id)
    if args.json:
        _print_json(notes)
        return
    if not notes:
        print(f"No notes for job #{args.id}.")
        return
    for n in notes:
        print(f"#{n.id:03} | {n.created_at} | {n.text}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="job", description="Track job applications locally")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db-path", help="Path to SQLite database (or set JOBTRACKER_DB_PATH)")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="DEBUG, INFO, WARNING, ERROR, CRITICAL (or set JOBTRACKER_LOG_LEVEL)",
    )

    subparsers = parser.add_subparsers(dest="command")
    status_help = f"One of: {', '.join(Status.tokens())}"

    add = subparsers.add_parser("add", help="Record a new application")
    add.add_argument("--company", required=True, help="Company name")
    add.add_argument("--role", required=True, help="Role applied for")
    add.add_argument("--url", help="Posting URL")
    add.add_argument("--status", type=parse_status, default=Status.APPLIED, help=f"{status_help} (default: applied)")
    add.set_defaults(func=cmd_add)

    lst = subparsers.add_parser("list", help="List all applications, newest first")
    lst.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    lst.set_defaults(func=cmd_list)

    upd = subparsers.add_parser("update-status", help="Change the status of an application")
    upd.add_argument("--id", type=int, required=True, help="Job id")
    upd.add_argument("--status", type=parse_status, required=True, help=status_help)
    upd.set_defaults(func=cmd_update_status)

    dele = subparsers.add_parser("delete", help="Delete an application and its notes")
    dele.add_argument("--id", type=int, required=True, help="Job id")
    dele.set_defaults(func=cmd_delete)

    note = subparsers.add_parser("note", help="Add or list notes on an application")
    note_sub = note.add_subparsers(dest="note_command")

    note_add = note_sub.add_parser("add", help="Attach a note to a job")
    note_add.add_argument("--id", type=int, required=True, help="Job id")
    note_add.add_argument("--text", required=True, help="Note text")
    note_add.set_defaults(func=cmd_note_add)

    note_list = note_sub.add_parser("list", help="List the notes of a job, newest first")
    note_list.add_argument("--id", type=int, required=True, help="Job id")
    note_list.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    note_list.set_defaults(func=cmd_note_list)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return EXIT_OK

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_USAGE

    try:
        level = resolve_log_level(args.log_level)
    except ValueError as e:
        print(f"Invalid: {e}", file=sys.stderr)
        return EXIT_USAGE

    reset_logger()
    log_dir = resolve_log_dir()
    logger = get_logger(
        level=level,
        log_dir=log_dir,
        enable_file=log_dir is not None,
        stream=sys.stderr,
    )

    def _on_retry(attempt, exc, delay):
        logger.warning(f"Database busy, retrying in {delay:.2f}s", attempt=attempt)

    run = exponential_backoff(
        exceptions=(OperationalError,),
        should_retry=is_locked_error,
        on_retry=_on_retry,
    )(args.func)

    db_path = resolve_db_path(args.db_path)
    try:
        with Store.open(db_path, logger=logger) as store:
            run(args, store)
    except ValidationError as e:
        for err in e.errors:
            print(f"Invalid: {err}", file=sys.stderr)
        return EXIT_USAGE
    except NotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except (RetryError, SQLAlchemyError, InvalidStatus, OSError) as e:
        logger.error("Command failed", command=args.command, db_path=str(db_path), error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_STORAGE
    finally:
        logger.log_metrics_summary()

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
