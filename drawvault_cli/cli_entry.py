"""
cli_entry.py - CLI Entry Point

Supports:
- Command-line argument mode
- Interactive mode
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from drawvault import (
    FileCommands, CommandResult, VaultOptions, DocumentSchema, TreeNode, FileChange,
)

from .cli_interactive import interactive_mode


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser"""
    parser = argparse.ArgumentParser(
        prog="drawvault",
        description="Document folder manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive mode
  drawvault

  # List documents
  drawvault list ./drawings

  # Show folder tree, keeping folders without documents
  drawvault --all-dirs tree ./drawings

  # Create, rename, move
  drawvault create ./drawings "meeting notes"
  drawvault rename ./drawings/meeting\\ notes.excalidraw retro
  drawvault move ./drawings/retro.excalidraw ./drawings/archive

  # Restrict every path to one folder
  drawvault --root ./drawings delete ./drawings/retro.excalidraw --yes
"""
    )

    parser.add_argument("--root", type=str, default=None, help="Sandbox root every path must stay inside")
    parser.add_argument("--ext", type=str, default=None, help="Document extension (default: .excalidraw)")
    parser.add_argument("--type-tag", type=str, default=None, help="Required document 'type' field")
    parser.add_argument("--all-dirs", action="store_true", help="Keep folders without documents in tree output")
    parser.add_argument("--json", action="store_true", help="Print JSON output")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="More logging (-v, -vv)")

    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    p = subparsers.add_parser("list", help="List documents recursively")
    p.add_argument("directory", type=str, help="Directory")

    p = subparsers.add_parser("tree", help="Show document tree")
    p.add_argument("directory", type=str, help="Directory")

    p = subparsers.add_parser("read", help="Print a validated document")
    p.add_argument("path", type=str, help="Document path")

    p = subparsers.add_parser("create", help="Create a new document")
    p.add_argument("directory", type=str, help="Target directory")
    p.add_argument("name", type=str, help="Document name")

    p = subparsers.add_parser("rename", help="Rename a document")
    p.add_argument("path", type=str, help="Document path")
    p.add_argument("new_name", type=str, help="New name")

    p = subparsers.add_parser("move", help="Move a document to another directory")
    p.add_argument("path", type=str, help="Document path")
    p.add_argument("target", type=str, help="Target directory")

    p = subparsers.add_parser("delete", help="Delete a document")
    p.add_argument("path", type=str, help="Document path")
    p.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    p = subparsers.add_parser("mkdir", help="Create a directory")
    p.add_argument("parent", type=str, help="Parent directory")
    p.add_argument("name", type=str, help="Directory name")

    p = subparsers.add_parser("rename-dir", help="Rename a directory")
    p.add_argument("path", type=str, help="Directory path")
    p.add_argument("new_name", type=str, help="New name")

    p = subparsers.add_parser("rmdir", help="Delete a directory and everything in it")
    p.add_argument("path", type=str, help="Directory path")
    p.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    p = subparsers.add_parser("watch", help="Print document changes until Ctrl+C")
    p.add_argument("directory", type=str, help="Directory")

    p = subparsers.add_parser("cleanup", help="Remove leftover staging files")
    p.add_argument("directory", type=str, help="Directory")

    return parser


def build_commands(args) -> FileCommands:
    """Build FileCommands from global options"""
    options = VaultOptions()
    if args.ext:
        options.extension = args.ext if args.ext.startswith(".") else "." + args.ext
    if args.type_tag:
        options.schema = DocumentSchema(type_tag=args.type_tag)
    if args.root:
        options.sandbox_root = Path(args.root)
    options.prune_empty_dirs = not args.all_dirs
    return FileCommands(options)


def configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def confirm(prompt: str) -> bool:
    return input(f"{prompt} (y/N): ").strip().lower() == 'y'


def report(result: CommandResult, success_msg: Optional[str] = None) -> int:
    """Print failure or success message and warnings; return exit code"""
    for warn in result.warnings:
        print(f"Warning: {warn}")
    if not result.ok:
        print(f"Error: {result.message}")
        return 1
    if success_msg:
        print(success_msg)
    return 0


def print_tree(nodes: List[TreeNode], indent: int = 0) -> None:
    for node in nodes:
        marker = " *" if node.modified else ""
        if node.is_directory:
            print(f"{'  ' * indent}{node.name}/")
            print_tree(node.children or [], indent + 1)
        else:
            print(f"{'  ' * indent}{node.name}{marker}")


def cmd_list(commands: FileCommands, args) -> int:
    """Handle list command"""
    result = commands.scan_files(args.directory)
    if not result.ok:
        return report(result)

    if args.json:
        print(json.dumps([f.to_dict() for f in result.value], indent=2))
        return report(result)

    files = result.value
    if not files:
        print("No documents found")
        return report(result)

    base = Path(args.directory).resolve()
    print(f"Found {len(files)} documents:")
    print("-" * 80)
    for f in files:
        print(f"  {f.relative_to(base)}")
    print("-" * 80)
    return report(result)


def cmd_tree(commands: FileCommands, args) -> int:
    """Handle tree command"""
    result = commands.scan_tree(args.directory)
    if not result.ok:
        return report(result)
    if args.json:
        print(json.dumps([n.to_dict() for n in result.value], indent=2))
    elif not result.value:
        print("No documents found")
    else:
        print_tree(result.value)
    return report(result)


def cmd_read(commands: FileCommands, args) -> int:
    """Handle read command"""
    result = commands.read_document(args.path)
    if result.ok:
        sys.stdout.write(result.value.decode("utf-8"))
        sys.stdout.write("\n")
    return report(result)


def cmd_watch(commands: FileCommands, args) -> int:
    """Handle watch command"""
    def on_change(change: FileChange):
        if args.json:
            print(json.dumps({"path": str(change.path), "kind": change.kind.value}), flush=True)
        else:
            print(f"[{change.kind.value}] {change.path}", flush=True)

    result = commands.watch_directory(args.directory, on_change)
    if not result.ok:
        return report(result)

    print(f"Watching {result.value} (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nStopped")
    finally:
        commands.context.close()
    return 0


def run_command(commands: FileCommands, args) -> int:
    """Dispatch a parsed subcommand"""
    if args.command == "list":
        return cmd_list(commands, args)
    elif args.command == "tree":
        return cmd_tree(commands, args)
    elif args.command == "read":
        return cmd_read(commands, args)
    elif args.command == "create":
        result = commands.create_document(args.directory, args.name)
        return report(result, f"Created: {result.value}")
    elif args.command == "rename":
        result = commands.rename_document(args.path, args.new_name)
        return report(result, f"Renamed to: {result.value}")
    elif args.command == "move":
        result = commands.move_document(args.path, args.target)
        return report(result, f"Moved to: {result.value}")
    elif args.command == "delete":
        if not args.yes and not confirm(f"Delete {args.path}?"):
            print("Cancelled")
            return 0
        return report(commands.delete_document(args.path), f"Deleted: {args.path}")
    elif args.command == "mkdir":
        result = commands.create_directory(args.parent, args.name)
        return report(result, f"Created directory: {result.value}")
    elif args.command == "rename-dir":
        result = commands.rename_directory(args.path, args.new_name)
        return report(result, f"Renamed to: {result.value}")
    elif args.command == "rmdir":
        if not args.yes and not confirm(f"Delete {args.path} and everything in it?"):
            print("Cancelled")
            return 0
        return report(commands.delete_directory(args.path), f"Deleted directory: {args.path}")
    elif args.command == "watch":
        return cmd_watch(commands, args)
    elif args.command == "cleanup":
        result = commands.cleanup(args.directory)
        return report(result, f"Removed {result.value} staging files")
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    commands = build_commands(args)

    if args.command is None:
        # No subcommand, enter interactive mode
        return interactive_mode(commands)

    return run_command(commands, args)


if __name__ == "__main__":
    sys.exit(main())
