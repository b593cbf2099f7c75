import os
import re
from functools import lru_cache


class PatternError(ValueError):
    pass


def _check_class(pattern, i, escapes):
    """Translate the class starting after '[' at i, returning (end, regex)."""
    negate = i < len(pattern) and pattern[i] in "!^"
    if negate:
        i += 1
    ranges = []
    while i < len(pattern):
        if pattern[i] == "]" and ranges:
            body = "".join(ranges)
            return i + 1, f"[^{body}]" if negate else f"[{body}]"
        if pattern[i] == "\\" and escapes:
            i += 1
            if i == len(pattern):
                break
        lo = pattern[i]
        i += 1
        if i + 1 < len(pattern) and pattern[i] == "-" and pattern[i + 1] != "]":
            hi = pattern[i + 1]
            i += 2
            if hi == "\\" and escapes:
                if i == len(pattern):
                    break
                hi = pattern[i]
                i += 1
            if hi < lo:
                break
            ranges.append(f"{re.escape(lo)}-{re.escape(hi)}")
        else:
            ranges.append(re.escape(lo))
    raise PatternError(f"syntax error in pattern: {pattern}")


@lru_cache(maxsize=None)
def compile_pattern(pattern, escapes=os.sep == "/"):
    """Turn a shell glob into a regex matching a whole '/'-separated path.

    '*' and '?' never match '/'. With escapes, a backslash makes the next
    character literal, otherwise backslashes are separators.
    """
    if not escapes:
        pattern = pattern.replace("\\", "/")
    parts = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "*":
            parts.append("[^/]*")
            i += 1
        elif char == "?":
            parts.append("[^/]")
            i += 1
        elif char == "[":
            i, regex = _check_class(pattern, i + 1, escapes)
            parts.append(regex)
        elif char == "\\" and escapes:
            if i + 1 == len(pattern):
                raise PatternError(f"syntax error in pattern: {pattern}")
            parts.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            parts.append(re.escape(char))
            i += 1
    return re.compile("".join(parts), re.DOTALL)


def validate_pattern(pattern):
    """Reject glob patterns that a shell would not accept."""
    compile_pattern(pattern)


def excluded(path, ignore):
    normalized = path if os.sep == "/" else path.replace("\\", "/")
    for entry in ignore:
        if path.endswith(entry):
            return True
        if compile_pattern(entry).fullmatch(normalized):
            return True
    return False
