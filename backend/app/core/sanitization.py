"""
Sanitization of user-provided names and values.
"""
import re

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """
    Reduce a user-supplied file name to a safe base name.

    Path components and control characters are removed, leading/trailing dots
    and spaces stripped. Returns 'unknown' if nothing is left.
    """
    if not filename:
        return "unknown"

    filename = filename.split('/')[-1].split('\\')[-1]
    filename = _CONTROL_CHARS.sub('', filename)
    filename = filename.strip('. ')

    if len(filename) > max_length:
        filename = filename[:max_length]

    return filename or "unknown"


def sanitize_for_logging(value: str, max_length: int = 500) -> str:
    """Make a value safe to interpolate into a log line."""
    if not value:
        return ""

    value = re.sub(r'[\r\n]', ' ', value)
    value = _CONTROL_CHARS.sub('', value)

    if len(value) > max_length:
        value = value[:max_length] + "..."

    return value


def sanitize_column_name(name) -> str:
    """Collapse newlines and repeated whitespace in a header cell."""
    text = "" if name is None else str(name)
    text = text.replace('\n', ' ').replace('\r', ' ')
    return ' '.join(text.split())
