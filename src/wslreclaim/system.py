"""Host platform checks."""

import os
import sys


def is_windows() -> bool:
    """Check if running on a Windows host."""
    return sys.platform == "win32"


def is_elevated() -> bool:
    """Check if running as Administrator (Windows) or root (elsewhere)."""
    if is_windows():
        import ctypes

        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except OSError:
            return False
    return os.geteuid() == 0
