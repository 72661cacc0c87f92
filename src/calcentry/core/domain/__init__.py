"""
Domain types: входящие события клавиш и исходящее состояние дисплея.
"""

from calcentry.core.domain.display_state import DisplayState, ErrorKind
from calcentry.core.domain.keys import Key, KeyEvent, parse_keys

__all__ = [
    # Inbound
    "Key",
    "KeyEvent",
    "parse_keys",
    # Outbound
    "DisplayState",
    "ErrorKind",
]
