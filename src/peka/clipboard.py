"""Clipboard helpers for copying credential passwords."""

import threading
import time

import pyperclip

CLIPBOARD_TIMEOUT_SECONDS = 30


def copy_to_clipboard(text: str) -> bool:
    """Copy text to clipboard. Returns True on success, False on failure."""
    try:
        pyperclip.copy(text)
        return True
    except pyperclip.PyperclipException:
        return False


def _clipboard_clear_worker(timeout: int, clipboard_content: str) -> None:
    """Clear the clipboard after ``timeout`` unless the user copied something else."""
    time.sleep(timeout)
    try:
        if pyperclip.paste() == clipboard_content:
            pyperclip.copy("")
    except pyperclip.PyperclipException:
        pass


def copy_to_clipboard_with_autoclear(
    text: str, timeout: int = CLIPBOARD_TIMEOUT_SECONDS
) -> bool:
    """
    Copy text to clipboard and automatically clear after timeout.

    Args:
        text: Text to copy
        timeout: Seconds before auto-clearing (default: 30)

    Returns:
        True if copy successful, False otherwise
    """
    success = copy_to_clipboard(text)

    if success and timeout > 0:
        thread = threading.Thread(
            target=_clipboard_clear_worker,
            args=(timeout, text),
            daemon=True,
        )
        thread.start()

    return success
