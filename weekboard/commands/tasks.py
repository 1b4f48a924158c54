import sys

from .. import store as task_store
from ..deps import Store
from ..exceptions import TaskNotFoundError
from ..schemas import TaskCreate
from ..services.week import get_week_id

STATUS_ALIASES = {
    "t": "todo",
    "todo": "todo",
    "ip": "in-progress",
    "in-progress": "in-progress",
    "d": "done",
    "done": "done",
    "a": "archived",
    "archived": "archived",
}


def register(subparsers) -> None:
    p = subparsers.add_parser("add", help="Quick-add a task (project::title::description::duration)")
    p.add_argument("--project", metavar="NAME", help="Add with an explicit project; remaining words are the title")
    p.add_argument("words", nargs="*", metavar="TEXT")
    p.set_defaults(handler=add)

    p = subparsers.add_parser("move", help="Move a task to another status (t/ip/d/a)")
    p.add_argument("task_id", type=int)
    p.add_argument("status")
    p.set_defaults(handler=move)

    p = subparsers.add_parser("rm", help="Delete a task by id")
    p.add_argument("task_id", type=int)
    p.set_defaults(handler=remove)


def add(args, store: Store) -> int:
    text = " ".join(args.words).strip()
    if not text:
        if args.project:
            print("Error: title is required after --project <name>", file=sys.stderr)
        else:
            print("Usage: weekboard add 'project::title::description::duration'", file=sys.stderr)
            print("       weekboard add --project work 'Fix bug'", file=sys.stderr)
        return 1

    week_id = get_week_id()
    with store.session() as db:
        if args.project:
            task = task_store.create_task(db, TaskCreate(project=args.project, title=text), week_id)
        else:
            task = task_store.create_task_from_shorthand(db, text, week_id)

    print(f"Created: [{task.project_name}] {task.title}")
    for w in task.warnings:
        print(f"Warning: {w}", file=sys.stderr)
    return 0


def move(args, store: Store) -> int:
    status = STATUS_ALIASES.get(args.status.lower())
    if not status:
        print(f"Error: invalid status {args.status!r}; use t/ip/d/a", file=sys.stderr)
        return 1
    with store.session() as db:
        task = task_store.move_task(db, args.task_id, status)
    print(f"Task {task.id} moved to \"{task.status}\".")
    return 0


def remove(args, store: Store) -> int:
    with store.session() as db:
        if not task_store.delete_task(db, args.task_id):
            raise TaskNotFoundError(f"Task {args.task_id} not found")
    print(f"Task {args.task_id} removed.")
    return 0
