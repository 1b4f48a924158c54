from .. import store as task_store
from ..deps import Store


def register(subparsers) -> None:
    p = subparsers.add_parser("projects", help="List all projects")
    p.set_defaults(handler=list_projects)


def list_projects(args, store: Store) -> int:
    with store.session() as db:
        rows = [(p.name, p.color) for p in task_store.list_projects(db)]
    if not rows:
        print("No projects yet. Create one with: weekboard add 'project::task'")
        return 0
    for name, color in rows:
        print(f"  {name} ({color})")
    return 0
