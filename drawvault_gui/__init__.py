"""
drawvault_gui - PySide6 desktop shell for drawvault
"""

from .gui_entry import main

__all__ = ["main"]
