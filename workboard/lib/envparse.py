"""
Safe KEY=value parser for workboard.env.

Values are taken literally: nothing is expanded or executed. Lines that look
like shell (substitution, chaining, pipes) are rejected so a config file
copied from a shell profile fails loudly instead of half-working.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
    r';',           # command chaining
    r'&&',
    r'\|\|',
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')
EXPORT_PREFIX = "export "


def _unquote(value: str) -> tuple[str, bool]:
    """Strip one pair of matching quotes. Returns (value, was_quoted)."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1], True
    return value, False


def parse_env(text: str) -> dict[str, str]:
    """
    Parse env-file text into a dict.

    Raises:
        ValueError: on a malformed line, an invalid key or a forbidden pattern
    """
    result = {}

    for lineno, raw in enumerate(text.splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith('#'):
            continue

        if line.startswith(EXPORT_PREFIX):
            line = line[len(EXPORT_PREFIX):].lstrip()

        key, sep, value = line.partition('=')
        if not sep:
            raise ValueError(f"Line {lineno}: expected KEY=value")

        key = key.strip()
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Line {lineno}: invalid key '{key}'")

        value, quoted = _unquote(value.strip())
        if not quoted and ' #' in value:
            # Trailing comment on an unquoted value
            value = value.split(' #', 1)[0].rstrip()

        for pattern in FORBIDDEN_PATTERNS:
            if re.search(pattern, value):
                raise ValueError(f"Line {lineno}: forbidden pattern in value of {key}")

        result[key] = value

    return result


def load_env(filepath) -> dict[str, str]:
    """
    Parse an env file from disk.

    Raises:
        FileNotFoundError: if the file doesn't exist
        ValueError: see parse_env
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {filepath}")
    return parse_env(path.read_text())
