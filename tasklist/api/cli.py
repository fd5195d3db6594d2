from tasklist.domain.errors import TaskNotFoundError, TaskValidationError, PersistenceError, DomainError
from tasklist.domain.task import Task, TaskId
from tasklist.domain.enums import Priority, TaskFilter
from tasklist.services.task_store import TaskStore
from tasklist.services.view_query import ViewState
from tasklist.ports.storage import KeyValueStorage
from tasklist.adapters.memory.storage import InMemoryStorage
from tasklist.adapters.jsonfile.storage import JsonFileStorage
from tasklist.adapters.sql.storage import SqlStorage
from tasklist.adapters.system.id_provider_timestamp import TimestampIdProvider
from tasklist.api.colors import PriorityColor
from tasklist.config import get_settings
from tasklist.logging_setup import setup_logging
from typer import Context, Option, Typer, Exit, confirm
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape
from pathlib import Path
from typing import Optional
import logging

logger = logging.getLogger(__name__)


### COMMENTS
# ==========================================================
# CLI (Typer + Rich): terminal front-end for the task list.
# ==========================================================
# Role:
# - Maps commands onto TaskStore operations (add/toggle/rm) and onto the
#   view query (list with --filter/--search).
# - Renders results as tables and panels.
# - Catches DomainError and prints a friendly message.
#
# Rules:
# - No business logic here: validation lives in the store, filtering in view_query.
# - Deleting always asks for confirmation unless --yes is given.
# - One store per process, built in the callback.


app = Typer(help="Task list CLI")
console = Console()

store: TaskStore | None = None  # set in the callback

DELETE_PROMPT = "Are you sure you want to delete this task?"


def build_storage(file: Optional[Path], db: Optional[str], memory: bool) -> KeyValueStorage:
    """Picks the storage adapter.
    - --memory -> InMemory (nothing persists)
    - --db URL -> SQL table
    - otherwise -> JSON file in --file directory (or the configured data dir)
    """
    settings = get_settings()
    if memory:
        return InMemoryStorage()
    url = db or settings.db_url
    if url:
        return SqlStorage(url)
    return JsonFileStorage(file or settings.data_dir)


def open_storage(file: Optional[Path], db: Optional[str], memory: bool, strict: bool) -> KeyValueStorage:
    """Like `build_storage`, but outside strict mode an unusable backend
    degrades to memory for this run instead of stopping the CLI.

    :raises PersistenceError: Only in strict mode.
    """
    try:
        return build_storage(file, db, memory)
    except PersistenceError as e:
        if strict:
            raise
        logger.warning("Storage unavailable, keeping tasks in memory: %s", e)
        console.print(Panel.fit(
            f"⚠️ {escape(str(e))}\n[dim]Storage unavailable, tasks are kept in memory for this run only[/]",
            title="Not saved",
            border_style="yellow",
        ))
        return InMemoryStorage()


@app.callback()
def main(
    ctx: Context,
    file: Optional[Path] = Option(
        None,
        "--file",
        "-f",
        help="Directory holding the JSON task file",
    ),
    db: Optional[str] = Option(None, "--db", help="SQLAlchemy URL, e.g. sqlite:///tasks.db"),
    memory: bool = Option(False, "--memory", help="Keep tasks in memory only"),
    strict: bool = Option(False, "--strict", help="Fail when stored tasks cannot be read"),
) -> None:
    """Bootstraps logging and the store once per CLI process."""
    global store
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    if ctx.invoked_subcommand == "demo":
        # demo builds its own in-memory store
        return
    strict = strict or settings.strict_load
    try:
        storage = open_storage(file, db, memory, strict)
        store = TaskStore(storage, TimestampIdProvider(), key=settings.storage_key, strict=strict)
    except PersistenceError as e:
        console.print(Panel.fit(
            f"❌ {escape(str(e))}\n[dim]Fix the storage location or the stored data, or run without --strict[/]",
            title="Storage error",
            border_style="red",
        ))
        raise Exit(code=1)
    if store.load_error is not None:
        console.print(Panel.fit(
            f"⚠️ {escape(str(store.load_error))}\n[dim]Starting with an empty list[/]",
            title="Warning",
            border_style="yellow",
        ))


def resolve_id(raw: str) -> TaskId:
    """Accepts a full id or a unique prefix of one.

    :raises TaskNotFoundError: When nothing matches.
    :raises TaskValidationError: When the prefix matches more than one task.
    """
    if store.get(TaskId(raw)) is not None:
        return TaskId(raw)
    matches = [t.task_id for t in store.tasks if t.task_id.startswith(raw)] if raw else []
    if not matches:
        raise TaskNotFoundError(raw)
    if len(matches) > 1:
        raise TaskValidationError("id", f"'{raw}' matches {len(matches)} tasks, type more characters")
    return matches[0]


def color_priority(priority: Priority) -> str:
    """Returns the priority as a colored Rich-markup badge."""
    match priority:
        case Priority.LOW:
            return f"{PriorityColor.LOW}Low{PriorityColor.RESET}"
        case Priority.MEDIUM:
            return f"{PriorityColor.MEDIUM}Medium{PriorityColor.RESET}"
        case Priority.HIGH:
            return f"{PriorityColor.HIGH}High{PriorityColor.RESET}"
        case _:
            return str(priority)


def cli_priority(raw: str) -> Priority | str:
    """Maps `-p high` onto Priority.HIGH; unknown values go through so the store rejects them."""
    for priority in Priority:
        if raw.strip().lower() == priority.value.lower():
            return priority
    return raw


def due_text(task: Task) -> str:
    return escape(task.due_date) if task.due_date else "No due date"


def status_text(task: Task) -> str:
    return "[green]Completed[/]" if task.completed else "Pending"


def warn_if_unsaved() -> None:
    if store.unsaved:
        console.print(Panel.fit(
            "⚠️ Could not save tasks, changes are kept for this session only",
            title="Not saved",
            border_style="yellow",
        ))


def render_list(items: list[Task], total: int, view: ViewState) -> None:
    """Renders a Rich table with columns: ID, Title, Priority, Due, Status."""
    if not items:
        console.print("[dim]No tasks found[/]")
        return

    table = Table(show_lines=True, header_style="bold")
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Title")
    table.add_column("Priority", no_wrap=True)
    table.add_column("Due", no_wrap=True, style="dim")
    table.add_column("Status", no_wrap=True)

    for t in items:
        title = escape(t.title)
        if t.completed:
            title = f"{PriorityColor.DONE}{title}{PriorityColor.RESET}"
        table.add_row(escape(t.task_id), title, color_priority(t.priority), due_text(t), status_text(t))

    console.print(table)
    console.print(
        f"[dim]Showing {len(items)} of {total} • Filter: {view.task_filter}"
        + (f" • Search: {escape(view.search)}" if view.search else "")
        + "[/dim]"
    )


@app.command("add")
def add(
    title: str,
    desc: str = Option("", "--desc", "-d", help="Description"),
    due: str = Option("", "--due", help="Due date, YYYY-MM-DD"),
    priority: str = Option(Priority.LOW.value, "--priority", "-p", help="Low, Medium or High (any letter case)"),
) -> None:
    """
    Adds a new task at the top of the list.

    Flow:
    - store.create(title, desc, priority, due)
    - Success: green panel with the new ID.
    - TaskValidationError: red panel, nothing is stored.
    """
    try:
        task = store.create(title, description=desc, priority=cli_priority(priority), due_date=due)
        console.print(Panel.fit(
            f"✅ Task added\n"
            f"[cyan]ID:[/cyan] {escape(task.task_id)}\n"
            f"[dim]Title:[/dim] {escape(task.title)}\n"
            f"[dim]Priority:[/dim] {color_priority(task.priority)}\n"
            f"[dim]Due:[/dim] {due_text(task)}",
            title="Success",
            border_style="green",
        ))
        warn_if_unsaved()
    except TaskValidationError as e:
        console.print(Panel.fit(
            f"❌ {escape(str(e))}\n[dim]Hint: tasklist add 'Buy milk' -p High --due 2025-01-31[/]",
            title="Validation error",
            border_style="red",
        ))
        raise Exit(code=1)


@app.command("list")
def list_cmd(
    filter_: str = Option(TaskFilter.ALL.value, "--filter", "-F", help="All, Completed, Pending, Low, Medium or High"),
    search: str = Option("", "--search", "-s", help="Case-insensitive text in the title"),
) -> None:
    """
    Lists tasks, newest first.

    Flow:
    - view = ViewState(filter, search); items = view.apply(store.tasks)
    - render_list(items, total, view); empty -> "No tasks found".
    """
    try:
        view = ViewState(TaskFilter.parse(filter_), search)
    except TaskValidationError as e:
        console.print(Panel.fit(f"❌ {escape(str(e))}", title="Validation error", border_style="red"))
        raise Exit(code=1)
    render_list(view.apply(store.tasks), len(store), view)


@app.command("toggle")
def toggle(task_id: str) -> None:
    """
    Marks a task completed, or back to pending when it already is.

    Flow:
    - store.toggle_complete(id)
    - Unknown id: yellow notice, nothing changes (not an error).
    """
    try:
        resolved = resolve_id(task_id)
    except TaskNotFoundError as e:
        console.print(Panel.fit(
            f"🟡 {escape(str(e))}\n[dim]Nothing to toggle. Use 'tasklist list' to find the ID[/]",
            title="Not found",
            border_style="yellow",
        ))
        return
    except DomainError as e:
        console.print(Panel.fit(f"❌ {escape(str(e))}", title="Error", border_style="red"))
        raise Exit(code=1)

    store.toggle_complete(resolved)
    task = store.get(resolved)
    label = "Completed" if task.completed else "Undone"
    console.print(Panel.fit(
        f"✅ {label}: {escape(task.title)}\nID: {escape(task.task_id)}\nStatus: {status_text(task)}",
        title="Success",
        border_style="green",
    ))
    warn_if_unsaved()


@app.command("rm")
def rm(task_id: str, yes: bool = Option(False, "--yes", "-y", help="Skip the confirmation")) -> None:
    """
    Deletes a task permanently.

    Flow:
    - confirm "Are you sure you want to delete this task?" (unless --yes)
    - store.delete(id)
    - Declined: nothing changes.
    """
    try:
        resolved = resolve_id(task_id)
    except TaskNotFoundError as e:
        console.print(Panel.fit(
            f"🟡 {escape(str(e))}\n[dim]Nothing to delete. Use 'tasklist list' to find the ID[/]",
            title="Not found",
            border_style="yellow",
        ))
        return
    except DomainError as e:
        console.print(Panel.fit(f"❌ {escape(str(e))}", title="Error", border_style="red"))
        raise Exit(code=1)

    task = store.get(resolved)
    if not yes and not confirm(f"{DELETE_PROMPT} ({task.title})", default=False):
        console.print("[dim]Cancelled, task kept[/]")
        return

    store.delete(resolved)
    console.print(Panel.fit(
        f"🗑️ Task deleted\nID: {escape(resolved)}\n[dim]{escape(task.title)}[/]",
        title="Deleted",
        border_style="yellow",
    ))
    warn_if_unsaved()


@app.command("show")
def show(task_id: str) -> None:
    """
    Shows a single task with its description.

    Flow:
    - task = store.get(resolve_id(id))
    - Panel with: ID, Title, Description (if any), Priority, Due, Status.
    - TaskNotFoundError: red panel.
    """
    try:
        task = store.get(resolve_id(task_id))
    except TaskNotFoundError as e:
        console.print(Panel.fit(
            f"❌ {escape(str(e))}\n"
            f"[dim]Use 'tasklist list' to find the ID[/]",
            title="Not found",
            border_style="red",
        ))
        raise Exit(code=1)
    except DomainError as e:
        console.print(Panel.fit(f"❌ {escape(str(e))}", title="Error", border_style="red"))
        raise Exit(code=1)

    lines = [f"ID: {escape(task.task_id)}", f"Title: {escape(task.title)}"]
    if task.description:
        lines.append(f"Description: {escape(task.description)}")
    lines.append(f"Priority: {color_priority(task.priority)}")
    lines.append(f"Due: {due_text(task)}")
    lines.append(f"Status: {status_text(task)}")

    console.print(Panel.fit("\n".join(lines), title="Task details", border_style="cyan"))


@app.command("demo")
def demo() -> None:
    """
    Walks through the whole flow on a throw-away in-memory store.

    - Creates 4 tasks.
    - Shows the list.
    - Completes one, deletes another.
    - Shows Pending and a search.
    """
    global store
    store = TaskStore(InMemoryStorage(), TimestampIdProvider())

    console.print(Panel.fit("🚀 Demo start", border_style="cyan"))

    store.create("Buy milk", description="2% lactose-free", priority=Priority.HIGH)
    lunch = store.create("Lunch plan", priority=Priority.MEDIUM, due_date="2025-01-31")
    store.create("Call mom", description="Sunday afternoon")
    bob = store.create("lunch with Bob")

    console.print("\n📋 All tasks:")
    render_list(list(store.tasks), len(store), ViewState())

    store.toggle_complete(lunch.task_id)
    console.print(Panel.fit(f"✔️ Completed: {lunch.title}", border_style="green"))

    store.delete(bob.task_id)
    console.print(Panel.fit(f"🗑️ Deleted: {bob.title}", border_style="red"))

    pending = ViewState(TaskFilter.PENDING)
    console.print("\n📋 Pending:")
    render_list(pending.apply(store.tasks), len(store), pending)

    search = ViewState(search="LUNCH")
    console.print("\n📋 Search 'LUNCH':")
    render_list(search.apply(store.tasks), len(store), search)

    console.print(Panel.fit("🏁 Demo finished", border_style="cyan"))


if __name__ == "__main__":
    app()
