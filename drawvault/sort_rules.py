"""
sort_rules.py - Sorting Rules Module

Name ordering is case-sensitive ordinal comparison, so "B.excalidraw" sorts
before "a.excalidraw".
"""

from typing import List
from .models_fs import DocumentFile, TreeNode


def sort_documents(files: List[DocumentFile], reverse: bool = False) -> List[DocumentFile]:
    """
    Sort documents by name (path breaks ties)

    Args:
        files: Document list
        reverse: Whether to sort in reverse

    Returns:
        Sorted document list (new list)
    """
    return sorted(files, key=lambda f: (f.name, str(f.path)), reverse=reverse)


def tree_sort_key(node: TreeNode) -> tuple:
    """Directories first, then name"""
    return (not node.is_directory, node.name)


def sort_tree_nodes(nodes: List[TreeNode]) -> List[TreeNode]:
    """Sort one tree level in place and return it"""
    nodes.sort(key=tree_sort_key)
    return nodes
