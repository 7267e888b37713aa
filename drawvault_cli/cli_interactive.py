"""
cli_interactive.py - Interactive CLI

Provides a menu-style interactive interface
"""

import os
from pathlib import Path
from typing import Optional, List

from drawvault import FileCommands, PreferenceStore, TreeNode


def clear_screen():
    """Clear screen"""
    os.system('cls' if os.name == 'nt' else 'clear')


def print_header(title: str):
    """Print header"""
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)
    print()


def input_directory(prompt: str = "Please enter directory path", default: Optional[str] = None) -> Optional[Path]:
    """Input and validate directory"""
    default_str = f" [{default}]" if default else ""
    while True:
        path_str = input(f"{prompt}{default_str} (q to return): ").strip()
        if path_str.lower() == 'q':
            return None
        if not path_str and default:
            path_str = default

        path = Path(path_str).expanduser()
        if path.is_dir():
            return path
        else:
            print(f"Error: Directory does not exist: {path}")


def input_bool(prompt: str, default: bool = False) -> bool:
    """Input boolean value"""
    default_str = "Y/n" if default else "y/N"
    value = input(f"{prompt} ({default_str}): ").strip().lower()
    if not value:
        return default
    return value == 'y'


def pause():
    input("\nPress Enter to return...")


def print_numbered(nodes: List[TreeNode], numbered: List[TreeNode], indent: int = 0) -> None:
    """Print the tree, numbering documents so they can be picked"""
    for node in nodes:
        if node.is_directory:
            print(f"      {'  ' * indent}{node.name}/")
            print_numbered(node.children or [], numbered, indent + 1)
        else:
            numbered.append(node)
            marker = " *" if node.modified else ""
            print(f"  {len(numbered):>3}. {'  ' * indent}{node.name}{marker}")


def pick_document(commands: FileCommands, directory: Path) -> Optional[Path]:
    """Show the tree and let the user pick a document by number"""
    result = commands.scan_tree(directory)
    if not result.ok:
        print(f"Error: {result.message}")
        return None

    numbered: List[TreeNode] = []
    print_numbered(result.value, numbered)
    for warn in result.warnings:
        print(f"Warning: {warn}")
    if not numbered:
        print("No documents found")
        return None

    value = input("\nDocument number (q to return): ").strip()
    if value.lower() == 'q':
        return None
    try:
        index = int(value)
    except ValueError:
        print("Please enter a valid integer")
        return None
    if not 1 <= index <= len(numbered):
        print("Invalid choice")
        return None
    return numbered[index - 1].path


def menu_browse(commands: FileCommands, directory: Path):
    """Show documents menu"""
    print_header(f"Documents in {directory}")
    result = commands.scan_tree(directory)
    if not result.ok:
        print(f"Error: {result.message}")
    else:
        print_numbered(result.value, [])
        for warn in result.warnings:
            print(f"Warning: {warn}")
    pause()


def menu_create(commands: FileCommands, directory: Path):
    """Create document menu"""
    print_header("New Document")
    name = input("Document name: ").strip()
    result = commands.create_document(directory, name)
    print(f"Created: {result.value}" if result.ok else f"Error: {result.message}")
    pause()


def menu_rename(commands: FileCommands, directory: Path):
    """Rename document menu"""
    print_header("Rename Document")
    path = pick_document(commands, directory)
    if path is None:
        pause()
        return
    new_name = input("New name: ").strip()
    result = commands.rename_document(path, new_name)
    for warn in result.warnings:
        print(f"Warning: {warn}")
    print(f"Renamed to: {result.value}" if result.ok else f"Error: {result.message}")
    pause()


def menu_move(commands: FileCommands, directory: Path):
    """Move document menu"""
    print_header("Move Document")
    path = pick_document(commands, directory)
    if path is None:
        pause()
        return
    target = input_directory("Target directory")
    if target is None:
        return
    result = commands.move_document(path, target)
    for warn in result.warnings:
        print(f"Warning: {warn}")
    print(f"Moved to: {result.value}" if result.ok else f"Error: {result.message}")
    pause()


def menu_delete(commands: FileCommands, directory: Path):
    """Delete document menu"""
    print_header("Delete Document")
    path = pick_document(commands, directory)
    if path is None:
        pause()
        return
    if not input_bool(f"Delete {path.name}", default=False):
        print("Cancelled")
        pause()
        return
    result = commands.delete_document(path)
    print("Deleted" if result.ok else f"Error: {result.message}")
    pause()


def menu_mkdir(commands: FileCommands, directory: Path):
    """New folder menu"""
    print_header("New Folder")
    name = input("Folder name: ").strip()
    result = commands.create_directory(directory, name)
    print(f"Created: {result.value}" if result.ok else f"Error: {result.message}")
    pause()


def interactive_mode(commands: Optional[FileCommands] = None, store: Optional[PreferenceStore] = None) -> int:
    """Interactive mode main loop"""
    commands = commands or FileCommands()
    store = store or PreferenceStore()
    prefs = store.load_preferences()

    print_header("drawvault")
    directory = input_directory("Please enter document folder", default=prefs.last_directory)
    if directory is None:
        return 0

    prefs.remember_directory(str(directory.resolve()))
    try:
        store.save_preferences(prefs)
    except OSError as e:
        print(f"Warning: could not save preferences: {e}")

    menu = {
        '1': menu_browse,
        '2': menu_create,
        '3': menu_rename,
        '4': menu_move,
        '5': menu_delete,
        '6': menu_mkdir,
    }

    while True:
        clear_screen()
        print_header(f"drawvault - {directory}")

        print("Please select function:")
        print()
        print("  1. Show documents")
        print("  2. New document")
        print("  3. Rename document")
        print("  4. Move document")
        print("  5. Delete document")
        print("  6. New folder")
        print()
        print("  q. Exit")
        print()

        choice = input("Please select (1-6/q): ").strip().lower()

        if choice == 'q':
            print("Goodbye!")
            return 0
        handler = menu.get(choice)
        if handler is None:
            print("Invalid choice")
            input("Press Enter to continue...")
            continue
        handler(commands, directory)


if __name__ == "__main__":
    interactive_mode()
