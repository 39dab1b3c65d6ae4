"""Terminal-safe output with ASCII fallback for icon glyphs.

Detects terminal encoding and provides ASCII alternatives for the glyphs used
by the gutter and popup output, so non-UTF-8 terminals never crash on them.
"""
import sys
import locale

from ..config import get_config


# Unicode to ASCII icon mapping
ICON_MAP = {
    # Scope icons
    '◆': '[pub]',
    '◇': '[pkg]',
    '◈': '[pro]',
    '●': '[pri]',
    '¿': '[?]',
    '⌘': '[dep]',

    # Status icons
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',

    # Arrows and structure
    '→': '->',
    '─': '-',
    '│': '|',
    '…': '...',
    '•': '*',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding capability.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    if hasattr(sys.stdout, 'encoding') and sys.stdout.encoding:
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (ValueError, LookupError):
        pass

    return 'ascii'


def is_utf8_capable() -> bool:
    """Check if the terminal can handle UTF-8 and ASCII output was not forced.

    Returns:
        bool: True if glyphs can be printed as-is
    """
    if get_config().force_ascii:
        return False

    encoding = detect_terminal_encoding()
    return encoding in ['utf-8', 'utf8', 'utf_8']


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents if terminal doesn't support UTF-8.

    Args:
        text: Text potentially containing Unicode icons

    Returns:
        str: Sanitized text safe for current terminal
    """
    if is_utf8_capable():
        return text
    return to_ascii(text)


def to_ascii(text: str) -> str:
    """Replace every known glyph with its ASCII equivalent."""
    for unicode_char, ascii_replacement in ICON_MAP.items():
        text = text.replace(unicode_char, ascii_replacement)
    return text
