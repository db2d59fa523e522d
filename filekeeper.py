#!/usr/bin/env python3
"""
FileKeeper - Console File Manager

Main entry point for the FileKeeper CLI application.
"""

import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from typing import Optional

from core import ConfigManager, AuditLogger, FilesystemError, OperationOutcome
from modules.fs_engine import FileOperationsEngine, EntryKind


console = Console()


def get_config(ctx: click.Context) -> ConfigManager:
    """Get the configuration for this invocation."""
    return ctx.obj["config"]


def get_engine(ctx: click.Context) -> FileOperationsEngine:
    """Get a configured engine instance."""
    config = get_config(ctx)
    root = ctx.obj.get("root") or config.root
    return FileOperationsEngine(
        root,
        recursive_size=config.recursive_size,
        logger=AuditLogger(log_path=config.audit_log)
    )


def print_path(path) -> None:
    console.print(str(path), soft_wrap=True, markup=False, highlight=False)


def report_failure(outcome: OperationOutcome, action: str) -> None:
    """Print why an operation failed."""
    console.print(f"[red]Failed to {action}.[/red] Error: ", end="")
    console.print(str(outcome.error), soft_wrap=True, markup=False, highlight=False)


def show_content(engine: FileOperationsEngine) -> bool:
    outcome = engine.list_entries()
    if not outcome.success:
        report_failure(outcome, "list content")
        return False

    for entry in outcome.value:
        suffix = "/" if entry.kind == EntryKind.DIRECTORY else ""
        print_path(f"{entry.path}{suffix}")
    return True


def create_folder(engine: FileOperationsEngine, name: str) -> bool:
    outcome = engine.create_directory(name)
    if outcome.success and outcome.value:
        console.print("[green]Folder created successfully.[/green]")
        return True
    if outcome.success:
        console.print("[yellow]Folder not created: it already exists or its parent is missing.[/yellow]")
        return False
    report_failure(outcome, "create folder")
    return False


def delete_item(engine: FileOperationsEngine, name: str) -> bool:
    outcome = engine.delete_entry(name)
    if not outcome.success:
        report_failure(outcome, "delete item")
        return False
    if outcome.value == 0:
        console.print("[yellow]Nothing to delete.[/yellow]")
    else:
        console.print(f"[green]Item deleted successfully[/green] ({outcome.value} item(s) removed).")
    return True


def rename_item(engine: FileOperationsEngine, old_name: str, new_name: str) -> bool:
    outcome = engine.rename_entry(old_name, new_name)
    if not outcome.success:
        report_failure(outcome, "rename item")
        return False
    console.print("[green]Item renamed successfully.[/green]")
    return True


def copy_item(engine: FileOperationsEngine, source: str, destination: str) -> bool:
    outcome = engine.copy_entry(source, destination)
    if not outcome.success:
        report_failure(outcome, "copy item")
        return False
    console.print("[green]Item copied successfully.[/green]")
    return True


def show_size(engine: FileOperationsEngine, name: str) -> bool:
    outcome = engine.get_size(name)
    if not outcome.success:
        report_failure(outcome, "get size of item")
        return False
    console.print(f"Size of {name}: {outcome.value} bytes", markup=False, highlight=False)
    return True


def search_files(engine: FileOperationsEngine, mask: str, ignore_case: bool = False) -> bool:
    outcome = engine.search_by_mask(mask, ignore_case=ignore_case)
    if not outcome.success:
        report_failure(outcome, "search files")
        return False

    found = 0
    for path in outcome.value:
        print_path(path)
        found += 1
    console.print(f"[dim]{found} file(s) found.[/dim]")
    return True


MENU_ITEMS = [
    "Show Disk Content",
    "Create Folder",
    "Delete Folder/File",
    "Rename Folder/File",
    "Copy Folder/File",
    "Get Size of Folder/File",
    "Search Files by Mask",
    "Exit",
]


def display_menu() -> None:
    console.print("\n[bold]File Manager Menu:[/bold]")
    for number, label in enumerate(MENU_ITEMS, start=1):
        console.print(f"{number}. {label}")


def run_menu_choice(engine: FileOperationsEngine, choice: str) -> None:
    """Prompt for the arguments of one menu choice and run it."""
    ask = console.input

    if choice == "1":
        show_content(engine)
    elif choice == "2":
        create_folder(engine, ask("Enter folder name to create: ").strip())
    elif choice == "3":
        delete_item(engine, ask("Enter folder/file name to delete: ").strip())
    elif choice == "4":
        old_name = ask("Enter old name: ").strip()
        new_name = ask("Enter new name: ").strip()
        rename_item(engine, old_name, new_name)
    elif choice == "5":
        source = ask("Enter source name: ").strip()
        destination = ask("Enter destination name: ").strip()
        copy_item(engine, source, destination)
    elif choice == "6":
        show_size(engine, ask("Enter folder/file name to get size: ").strip())
    elif choice == "7":
        search_files(engine, ask("Enter file mask (e.g., .txt): ").strip())
    else:
        console.print("[red]Invalid choice. Please enter a valid option.[/red]")


@click.group()
@click.version_option(version="0.1.0", prog_name="FileKeeper")
@click.option("--config", "config_path", default="config.yaml", show_default=True,
              help="Path to the YAML configuration file.")
@click.option("--root", default=None, help="Root directory (overrides the configuration).")
@click.pass_context
def filekeeper(ctx: click.Context, config_path: str, root: Optional[str]):
    """
    FileKeeper - Console File Manager

    List, create, delete, rename, copy, measure and search files inside
    a single root directory.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = ConfigManager(config_path=config_path)
    ctx.obj["root"] = root


@filekeeper.command()
@click.pass_context
def menu(ctx: click.Context):
    """Start the interactive file manager menu."""
    engine = get_engine(ctx)
    console.print(Panel.fit(
        "[bold blue]FileKeeper[/bold blue]\n"
        f"[dim]Root: {engine.root}[/dim]",
        title="File Manager"
    ))

    while True:
        display_menu()
        try:
            choice = console.input("Enter your choice (1-8): ").strip()
        except (EOFError, KeyboardInterrupt):
            console.print("\n[dim]Exiting File Manager.[/dim]")
            break

        if choice == "8":
            console.print("[dim]Exiting File Manager.[/dim]")
            break

        try:
            run_menu_choice(engine, choice)
        except (EOFError, KeyboardInterrupt):
            console.print("\n[dim]Exiting File Manager.[/dim]")
            break
        except (FilesystemError, OSError) as e:
            console.print("[red]Filesystem error:[/red] ", end="")
            console.print(str(e), markup=False, highlight=False)


@filekeeper.command("ls")
@click.pass_context
def ls_command(ctx: click.Context):
    """Show the content of the root directory."""
    if not show_content(get_engine(ctx)):
        sys.exit(1)


@filekeeper.command("mkdir")
@click.argument("name")
@click.pass_context
def mkdir_command(ctx: click.Context, name: str):
    """Create a folder."""
    if not create_folder(get_engine(ctx), name):
        sys.exit(1)


@filekeeper.command("rm")
@click.argument("name")
@click.pass_context
def rm_command(ctx: click.Context, name: str):
    """Delete a folder or file."""
    if not delete_item(get_engine(ctx), name):
        sys.exit(1)


@filekeeper.command("mv")
@click.argument("old_name")
@click.argument("new_name")
@click.pass_context
def mv_command(ctx: click.Context, old_name: str, new_name: str):
    """Rename a folder or file."""
    if not rename_item(get_engine(ctx), old_name, new_name):
        sys.exit(1)


@filekeeper.command("cp")
@click.argument("source")
@click.argument("destination")
@click.pass_context
def cp_command(ctx: click.Context, source: str, destination: str):
    """Copy a folder or file."""
    if not copy_item(get_engine(ctx), source, destination):
        sys.exit(1)


@filekeeper.command("size")
@click.argument("name")
@click.pass_context
def size_command(ctx: click.Context, name: str):
    """Get the size of a file (or folder, if enabled)."""
    if not show_size(get_engine(ctx), name):
        sys.exit(1)


@filekeeper.command("find")
@click.argument("mask")
@click.option("--ignore-case", "-i", is_flag=True, help="Match the mask case-insensitively.")
@click.pass_context
def find_command(ctx: click.Context, mask: str, ignore_case: bool):
    """Search files by name mask, including subfolders."""
    if not search_files(get_engine(ctx), mask, ignore_case=ignore_case):
        sys.exit(1)


@filekeeper.command()
@click.pass_context
def status(ctx: click.Context):
    """Show FileKeeper's current status."""
    config = get_config(ctx)
    engine = get_engine(ctx)

    console.print(Panel.fit(
        "[bold blue]FileKeeper - Console File Manager[/bold blue]\n"
        "[dim]Version 0.1.0[/dim]",
        title="Status"
    ))

    console.print("\nRoot: ", end="")
    print_path(engine.root)
    if engine.root.path.is_dir():
        console.print("   [green]accessible[/green]")
    else:
        console.print("   [red]not accessible[/red]")

    policy = "recursive sum" if config.recursive_size else "files only"
    console.print(f"Folder size: {policy}")
    console.print("Audit log: ", end="")
    print_path(config.audit_log)


@filekeeper.command()
@click.option("--limit", default=20, show_default=True, help="Number of entries to show.")
@click.option("--failed", is_flag=True, help="Only show failed or rejected operations.")
@click.pass_context
def audit(ctx: click.Context, limit: int, failed: bool):
    """View the audit log."""
    logger = AuditLogger(log_path=get_config(ctx).audit_log)
    entries = logger.get_failed_actions(limit=limit) if failed else logger.get_recent(limit=limit)

    if not entries:
        console.print("[dim]No audit entries found.[/dim]")
        return

    table = Table(title="Recent Audit Log")
    table.add_column("Time", style="dim")
    table.add_column("Action")
    table.add_column("Status")
    table.add_column("Result")

    for entry in entries:
        time_str = entry.timestamp.split("T")[1].split(".")[0] if "T" in entry.timestamp else entry.timestamp

        status_str = entry.status
        if entry.status == "executed":
            status_str = f"[green]{entry.status}[/green]"
        elif entry.status in ("failed", "rejected"):
            status_str = f"[red]{entry.status}[/red]"

        description = entry.action_description
        if len(description) > 50:
            description = description[:50] + "..."

        table.add_row(time_str, description, status_str, entry.result or "—")

    console.print(table)


@filekeeper.group("config")
def config_group():
    """Inspect and change configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Show the current configuration."""
    config = get_config(ctx)
    console.print("\n[bold]Configuration:[/bold] ", end="")
    print_path(config.config_path)
    console.print("  root: ", end="")
    print_path(config.root)
    console.print("  audit_log: ", end="")
    print_path(config.audit_log)
    console.print(f"  size.recursive: {config.recursive_size}")


@config_group.command("set-root")
@click.argument("root")
@click.pass_context
def config_set_root(ctx: click.Context, root: str):
    """Set and save the root directory."""
    config = get_config(ctx)
    config.set_root(root)
    config.save_config()
    console.print("[green]Root set to:[/green] ", end="")
    print_path(root)


if __name__ == "__main__":
    filekeeper()
