from .. import store as task_store
from ..board import COLUMNS
from ..deps import Store
from ..services.rollover import rollover_tasks
from ..services.summary import export_week_summary, week_summary
from ..services.week import format_duration, get_week_id, parse_week_id


def register(subparsers) -> None:
    p = subparsers.add_parser("summary", help="Show week summary (default: current week)")
    p.add_argument("week_id", nargs="?", metavar="WEEK_ID", help="e.g. 2026-W07")
    p.set_defaults(handler=summary)

    p = subparsers.add_parser("list", help="List a week's tasks by status (default: current week)")
    p.add_argument("week_id", nargs="?", metavar="WEEK_ID")
    p.set_defaults(handler=list_week)

    p = subparsers.add_parser("rollover", help="Move unfinished tasks from earlier weeks into this week")
    p.set_defaults(handler=rollover)


def _target_week(args) -> str:
    if args.week_id:
        parse_week_id(args.week_id)
        return args.week_id.strip()
    return get_week_id()


def summary(args, store: Store) -> int:
    week_id = _target_week(args)
    with store.session() as db:
        print(export_week_summary(week_summary(db, week_id)))
    return 0


def list_week(args, store: Store) -> int:
    week_id = _target_week(args)
    with store.session() as db:
        grouped = task_store.get_tasks_by_status(db, week_id)

    print(f"Week {week_id}")
    for key, title in COLUMNS:
        print(f"\n{title} ({len(grouped[key])})")
        for t in grouped[key]:
            line = f"  {t.id}. [{t.project_name}] {t.title}"
            if t.duration_minutes:
                line += f" ({format_duration(t.duration_minutes)})"
            print(line)
    return 0


def rollover(args, store: Store) -> int:
    with store.session() as db:
        moved = rollover_tasks(db, get_week_id())
    print(f"Rolled over {moved} task(s).")
    return 0
