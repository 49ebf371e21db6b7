"""Main entry point for Jobboard."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from src import __version__
from src.config.settings import Settings
from src.utils.logging import configure_logging

KIND_CHOICES = ["application", "study"]


def _day_of_week(value: str) -> int:
    day = int(value)
    if not (0 <= day <= 6):
        raise argparse.ArgumentTypeError("--day must be between 0 (Sunday) and 6")
    return day


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("value must be a positive integer")
    return number


def _int_list(value: str) -> list[int]:
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError("expected comma-separated integers") from e


def _str_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _print_json(payload: object) -> None:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return str(value)

    print(json.dumps(payload, indent=2, default=_default))


def _add_db_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Override board DB path (defaults to settings)",
    )


def _add_owner_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--owner", required=True, help="Owner (user) id")


def _add_kind_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--kind",
        choices=KIND_CHOICES,
        default="application",
        help="Board kind (default: application)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="jobboard",
        description="Jobboard: application pipeline and study schedule boards",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src columns seed --owner user_1
  python -m src columns move --owner user_1 --id <column-id> --to 0
  python -m src activity --owner user_1 --limit 5
  python -m src leaderboard --limit 10
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="mode",
        title="modes",
        description="Available command groups",
    )

    # Status columns
    columns_parser = subparsers.add_parser(
        "columns",
        help="Status columns (list, create, update, delete, move, seed)",
    )
    columns_subparsers = columns_parser.add_subparsers(
        dest="columns_cmd",
        title="columns",
        description="Status column operations",
        required=True,
    )

    columns_list = columns_subparsers.add_parser("list", help="List columns in order")
    _add_owner_argument(columns_list)
    _add_kind_argument(columns_list)
    _add_db_argument(columns_list)

    columns_create = columns_subparsers.add_parser("create", help="Append a column")
    _add_owner_argument(columns_create)
    _add_kind_argument(columns_create)
    columns_create.add_argument("--name", required=True, help="Column name")
    columns_create.add_argument("--color", default="bg-gray-500", help="Color token")
    _add_db_argument(columns_create)

    columns_update = columns_subparsers.add_parser("update", help="Rename or recolor")
    columns_update.add_argument("--id", required=True, help="Column id")
    _add_kind_argument(columns_update)
    columns_update.add_argument("--name", default=None, help="New name")
    columns_update.add_argument("--color", default=None, help="New color token")
    _add_db_argument(columns_update)

    columns_delete = columns_subparsers.add_parser(
        "delete", help="Delete a column and its items"
    )
    columns_delete.add_argument("--id", required=True, help="Column id")
    _add_kind_argument(columns_delete)
    _add_db_argument(columns_delete)

    columns_move = columns_subparsers.add_parser("move", help="Reposition a column")
    _add_owner_argument(columns_move)
    _add_kind_argument(columns_move)
    columns_move.add_argument("--id", required=True, help="Column id")
    columns_move.add_argument(
        "--to", type=int, required=True, help="New zero-based position (clamped)"
    )
    _add_db_argument(columns_move)

    columns_seed = columns_subparsers.add_parser(
        "seed", help="Create default columns for a new owner"
    )
    _add_owner_argument(columns_seed)
    _add_db_argument(columns_seed)

    # Items
    items_parser = subparsers.add_parser(
        "items",
        help="Applications and study problems (list, add, move, reorder, delete, counts)",
    )
    items_subparsers = items_parser.add_subparsers(
        dest="items_cmd",
        title="items",
        description="Item operations",
        required=True,
    )

    items_list = items_subparsers.add_parser("list", help="List items by position")
    _add_owner_argument(items_list)
    _add_kind_argument(items_list)
    _add_db_argument(items_list)

    items_add_app = items_subparsers.add_parser(
        "add-application", help="Add an application at the top of a column"
    )
    _add_owner_argument(items_add_app)
    items_add_app.add_argument("--status", required=True, help="Status column id")
    items_add_app.add_argument("--company", required=True, help="Company name")
    items_add_app.add_argument("--company-id", default=None, help="Company record id")
    items_add_app.add_argument("--position", required=True, help="Role applied for")
    items_add_app.add_argument(
        "--date-applied", required=True, help="Date applied (YYYY-MM-DD)"
    )
    items_add_app.add_argument("--location", default=None, help="Job location")
    items_add_app.add_argument("--url", default=None, help="Job posting URL")
    _add_db_argument(items_add_app)

    items_add_problem = items_subparsers.add_parser(
        "add-problem", help="Add a study problem at the top of a day bucket"
    )
    _add_owner_argument(items_add_problem)
    items_add_problem.add_argument("--status", required=True, help="Status column id")
    items_add_problem.add_argument(
        "--day", type=_day_of_week, required=True, help="Day of week (0 = Sunday)"
    )
    items_add_problem.add_argument("--title", required=True, help="Problem title")
    items_add_problem.add_argument(
        "--score", type=int, required=True, help="Confidence score (1-5)"
    )
    items_add_problem.add_argument("--link", default=None, help="Problem link")
    items_add_problem.add_argument("--difficulty", default=None, help="Difficulty")
    _add_db_argument(items_add_problem)

    items_move = items_subparsers.add_parser(
        "move", help="Move an item to another column (and day)"
    )
    _add_kind_argument(items_move)
    items_move.add_argument("--id", required=True, help="Item id")
    items_move.add_argument("--status", required=True, help="Destination column id")
    items_move.add_argument(
        "--day", type=_day_of_week, default=None, help="Destination day (study only)"
    )
    _add_db_argument(items_move)

    items_reorder = items_subparsers.add_parser(
        "reorder", help="Reorder every item of one column"
    )
    _add_kind_argument(items_reorder)
    items_reorder.add_argument(
        "--ids", type=_str_list, required=True, help="Comma-separated item ids"
    )
    items_reorder.add_argument(
        "--order",
        type=_int_list,
        required=True,
        help="Comma-separated new positions, one per id",
    )
    _add_db_argument(items_reorder)

    items_delete = items_subparsers.add_parser("delete", help="Delete an item")
    _add_kind_argument(items_delete)
    items_delete.add_argument("--id", required=True, help="Item id")
    _add_db_argument(items_delete)

    items_counts = items_subparsers.add_parser("counts", help="Count items per column")
    _add_owner_argument(items_counts)
    _add_kind_argument(items_counts)
    _add_db_argument(items_counts)

    # Network
    network_parser = subparsers.add_parser(
        "network",
        help="Companies, referrals and message templates",
    )
    network_subparsers = network_parser.add_subparsers(
        dest="network_cmd",
        title="network",
        description="Network operations",
        required=True,
    )

    network_company = network_subparsers.add_parser("add-company", help="Add a company")
    _add_owner_argument(network_company)
    network_company.add_argument("--name", required=True, help="Company name")
    network_company.add_argument("--website", default=None, help="Company website")
    _add_db_argument(network_company)

    network_referral = network_subparsers.add_parser(
        "add-referral", help="Add a referral contact"
    )
    _add_owner_argument(network_referral)
    network_referral.add_argument("--company-id", required=True, help="Company id")
    network_referral.add_argument("--name", required=True, help="Contact name")
    network_referral.add_argument("--linkedin", default=None, help="LinkedIn URL")
    network_referral.add_argument(
        "--final",
        action="store_true",
        help="Contact was already asked for the final referral",
    )
    _add_db_argument(network_referral)

    network_templates = network_subparsers.add_parser(
        "templates", help="List message templates (seeds the default)"
    )
    _add_owner_argument(network_templates)
    _add_db_argument(network_templates)

    network_referrals = network_subparsers.add_parser(
        "referrals", help="List referral contacts, optionally at one company"
    )
    _add_owner_argument(network_referrals)
    network_referrals.add_argument("--company-id", default=None, help="Company id")
    _add_db_argument(network_referrals)

    for name, id_flag, help_text in (
        ("remove-company", "--company-id", "Delete a company"),
        ("remove-referral", "--referral-id", "Delete a referral contact"),
        ("remove-template", "--template-id", "Delete a message template"),
    ):
        remove_parser = network_subparsers.add_parser(name, help=help_text)
        remove_parser.add_argument(id_flag, required=True, dest="record_id", help="Record id")
        _add_db_argument(remove_parser)

    # Community timeline
    community_parser = subparsers.add_parser(
        "community", help="Shared application timeline"
    )
    community_subparsers = community_parser.add_subparsers(
        dest="community_cmd",
        title="community",
        description="Community operations",
        required=True,
    )
    community_timeline = community_subparsers.add_parser(
        "timeline", help="Page through shared applications, newest first"
    )
    community_timeline.add_argument("--limit", type=_positive_int, default=20, help="Page size")
    community_timeline.add_argument(
        "--skip", type=int, default=0, help="Number of applications to skip"
    )
    community_timeline.add_argument(
        "--search", default=None, help="Filter on company, position or location"
    )
    _add_db_argument(community_timeline)

    community_share = community_subparsers.add_parser(
        "share", help="Opt in to or out of the community timeline"
    )
    _add_owner_argument(community_share)
    community_share.add_argument(
        "--off", action="store_true", help="Hide this user's applications"
    )
    _add_db_argument(community_share)

    # Activity feed
    activity_parser = subparsers.add_parser("activity", help="Show recent activity")
    _add_owner_argument(activity_parser)
    activity_parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Maximum number of events (defaults to settings)",
    )
    _add_db_argument(activity_parser)

    # Leaderboards
    leaderboard_parser = subparsers.add_parser("leaderboard", help="Show leaderboards")
    leaderboard_parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Maximum number of entries (defaults to settings)",
    )
    leaderboard_parser.add_argument(
        "--applications",
        action="store_true",
        help="Rank by applications instead of referrals",
    )
    leaderboard_parser.add_argument(
        "--names",
        type=Path,
        default=None,
        help="JSON file mapping user ids to display names",
    )
    _add_db_argument(leaderboard_parser)

    # Admin jobs
    admin_parser = subparsers.add_parser(
        "admin",
        help="Maintenance jobs (backfill-history, migrate-statuses)",
    )
    admin_subparsers = admin_parser.add_subparsers(
        dest="admin_cmd",
        title="admin",
        description="Maintenance jobs",
        required=True,
    )
    for name, help_text in (
        ("backfill-history", "Record each application's current status in history"),
        ("migrate-statuses", "Bring every user onto the default status columns"),
    ):
        job_parser = admin_subparsers.add_parser(name, help=help_text)
        job_parser.add_argument("--secret", required=True, help="Admin secret")
        _add_db_argument(job_parser)

    return parser


async def _run_columns(parsed: argparse.Namespace, board) -> int:
    if parsed.columns_cmd == "seed":
        _print_json(await board.seed_owner(parsed.owner))
        return 0

    manager = board.column_manager(parsed.kind)

    if parsed.columns_cmd == "list":
        _print_json(await manager.list_columns(parsed.owner))
        return 0

    if parsed.columns_cmd == "create":
        print(await manager.create_column(parsed.owner, parsed.name, parsed.color))
        return 0

    if parsed.columns_cmd == "update":
        if parsed.name is None and parsed.color is None:
            print("Provide --name or --color", file=sys.stderr)
            return 1
        await manager.rename_or_recolor(parsed.id, name=parsed.name, color=parsed.color)
        print("ok")
        return 0

    if parsed.columns_cmd == "delete":
        await manager.delete_column(parsed.id)
        print("ok")
        return 0

    if parsed.columns_cmd == "move":
        await manager.reposition_column(parsed.owner, parsed.id, parsed.to)
        _print_json(await manager.list_columns(parsed.owner))
        return 0

    print("Unknown columns command", file=sys.stderr)
    return 1


async def _run_items(parsed: argparse.Namespace, board) -> int:
    items = board.items

    if parsed.items_cmd == "list":
        _print_json(await items.list_items(parsed.kind, parsed.owner))
        return 0

    if parsed.items_cmd == "add-application":
        fields = {
            key: value
            for key, value in (
                ("company_id", parsed.company_id),
                ("location", parsed.location),
                ("url", parsed.url),
            )
            if value is not None
        }
        item_id = await items.create_application(
            parsed.owner,
            parsed.status,
            company_name=parsed.company,
            position=parsed.position,
            date_applied=parsed.date_applied,
            **fields,
        )
        print(item_id)
        return 0

    if parsed.items_cmd == "add-problem":
        fields = {
            key: value
            for key, value in (("link", parsed.link), ("difficulty", parsed.difficulty))
            if value is not None
        }
        item_id = await items.create_study_problem(
            parsed.owner,
            parsed.status,
            parsed.day,
            title=parsed.title,
            score=parsed.score,
            **fields,
        )
        print(item_id)
        return 0

    if parsed.items_cmd == "move":
        await items.transfer_item(parsed.kind, parsed.id, parsed.status, parsed.day)
        print("ok")
        return 0

    if parsed.items_cmd == "reorder":
        await items.reorder_batch(parsed.kind, parsed.ids, parsed.order)
        print("ok")
        return 0

    if parsed.items_cmd == "delete":
        await items.delete_item(parsed.kind, parsed.id)
        print("ok")
        return 0

    if parsed.items_cmd == "counts":
        _print_json(await items.count_by_status(parsed.kind, parsed.owner))
        return 0

    print("Unknown items command", file=sys.stderr)
    return 1


async def _run_network(parsed: argparse.Namespace, repo) -> int:
    from src.network.service import NetworkService
    from src.network.templates import TemplateService

    network = NetworkService(repo)

    if parsed.network_cmd == "add-company":
        print(await network.create_company(parsed.owner, parsed.name, website=parsed.website))
        return 0

    if parsed.network_cmd == "add-referral":
        print(
            await network.create_referral(
                parsed.owner,
                parsed.company_id,
                parsed.name,
                linkedin_url=parsed.linkedin,
                has_asked_for_final_referral=parsed.final,
            )
        )
        return 0

    if parsed.network_cmd == "templates":
        templates = TemplateService(repo)
        await templates.ensure_default_template(parsed.owner)
        _print_json(await templates.list_templates(parsed.owner))
        return 0

    if parsed.network_cmd == "referrals":
        if parsed.company_id is None:
            _print_json(await network.list_referrals(parsed.owner))
        else:
            _print_json(await network.list_company_referrals(parsed.owner, parsed.company_id))
        return 0

    if parsed.network_cmd == "remove-company":
        await network.delete_company(parsed.record_id)
    elif parsed.network_cmd == "remove-referral":
        await network.delete_referral(parsed.record_id)
    elif parsed.network_cmd == "remove-template":
        await TemplateService(repo).delete_template(parsed.record_id)
    else:
        print("Unknown network command", file=sys.stderr)
        return 1
    print("ok")
    return 0


async def _run_community(parsed: argparse.Namespace, repo) -> int:
    from src.activity.community import CommunityService

    community = CommunityService(repo)

    if parsed.community_cmd == "timeline":
        _print_json(
            await community.timeline(limit=parsed.limit, skip=parsed.skip, search=parsed.search)
        )
        return 0

    if parsed.community_cmd == "share":
        await community.set_visibility(parsed.owner, not parsed.off)
        print("ok")
        return 0

    print("Unknown community command", file=sys.stderr)
    return 1


async def _run_command(parsed: argparse.Namespace, settings: Settings) -> int:
    from src.activity.identity import StaticIdentityProvider
    from src.activity.service import ActivityService
    from src.admin.auth import SecretAuthorizer
    from src.admin.service import AdminService
    from src.board.service import BoardService
    from src.board.templates import load_board_template
    from src.store.repository import BoardRepository

    db_path = getattr(parsed, "db", None) or settings.tracker_db_path
    repo = BoardRepository(db_path)
    await repo.initialize()

    try:
        board = BoardService(repo, templates=load_board_template(settings.board_template_path))

        if parsed.mode == "columns":
            return await _run_columns(parsed, board)

        if parsed.mode == "items":
            return await _run_items(parsed, board)

        if parsed.mode == "network":
            return await _run_network(parsed, repo)

        if parsed.mode == "community":
            return await _run_community(parsed, repo)

        if parsed.mode == "activity":
            activity = ActivityService(repo)
            limit = parsed.limit or settings.activity_limit
            _print_json(await activity.recent_activity(parsed.owner, limit=limit))
            return 0

        if parsed.mode == "leaderboard":
            identity = None
            if parsed.names is not None:
                names = json.loads(parsed.names.read_text(encoding="utf-8"))
                if not isinstance(names, dict):
                    print("--names must contain a JSON object", file=sys.stderr)
                    return 1
                identity = StaticIdentityProvider(names)

            activity = ActivityService(repo, identity=identity)
            limit = parsed.limit or settings.leaderboard_limit
            if parsed.applications:
                entries = await activity.applications_leaderboard(limit=limit)
            else:
                entries = await activity.leaderboard(limit=limit)
            _print_json(entries)
            return 0

        if parsed.mode == "admin":
            admin = AdminService(board, SecretAuthorizer(settings.admin_secret))
            if parsed.admin_cmd == "backfill-history":
                _print_json(await admin.run_history_backfill(parsed.secret))
                return 0
            if parsed.admin_cmd == "migrate-statuses":
                _print_json(await admin.run_status_migration(parsed.secret))
                return 0
            print("Unknown admin command", file=sys.stderr)
            return 1

        print(f"Unknown mode: {parsed.mode}", file=sys.stderr)
        return 1
    finally:
        await repo.close()


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    from src.board.errors import BoardError

    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    if parsed.mode is None:
        parser.print_help()
        return 0

    logger.debug("Running %s command", parsed.mode)

    try:
        return asyncio.run(_run_command(parsed, settings))
    except BoardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
