from __future__ import annotations
import re

COMMENT_SPLIT_RE = re.compile(r"//")

def strip_comment(line: str) -> str:
    """Remove comments starting with '//'"""
    m = COMMENT_SPLIT_RE.split(line, maxsplit=1)
    if not m:
        return line.strip()
    return m[0].strip()

SYMBOL_RE = re.compile(r"^[A-Za-z_.$:][A-Za-z0-9_.$:]*$")

def is_symbol(token: str) -> bool:
    """Hack symbol: letters, digits, '_', '.', '$', ':' and no leading digit."""
    return bool(SYMBOL_RE.match(token))

def split_words(line: str):
    s = line.strip()
    if not s:
        return []
    return s.split()

def split_operation(line: str):
    """Return (operation, args) for an already stripped line."""
    words = split_words(line)
    if not words:
        return "", []
    return words[0], words[1:]
