"""Regular expression capture extraction for ref names.

Patterns may declare named groups either the Python way ``(?P<name>...)`` or
the Java way ``(?<name>...)``; the latter is rewritten before compiling.

Named groups are discovered in a second pass over the pattern *source text*,
in order of declaration. Escaped parentheses and parentheses inside
character classes do not open groups.
"""

import functools
import re
from typing import Dict, Iterator, List, Match, Optional, Pattern

from .errors import ConfigurationError

_NAMED_GROUP_DECLARATION = re.compile(r"\(\?(P?)<([A-Za-z][A-Za-z0-9_]*)>")


def _group_declarations(pattern: str) -> Iterator[Match[str]]:
    """Yield a match for every named group declaration that opens a real group."""
    index = 0
    in_class = False
    while index < len(pattern):
        char = pattern[index]
        if char == "\\":
            index += 2
            continue
        if in_class:
            if char == "]":
                in_class = False
        elif char == "[":
            in_class = True
            index += 1
            # a leading ']' is a literal member of the class
            if pattern.startswith("^", index):
                index += 1
            if pattern.startswith("]", index):
                index += 1
            continue
        elif char == "(":
            match = _NAMED_GROUP_DECLARATION.match(pattern, index)
            if match is not None:
                yield match
                index = match.end()
                continue
        index += 1


def to_python_syntax(pattern: str) -> str:
    """Rewrite Java style ``(?<name>`` group declarations to ``(?P<name>``."""
    parts: List[str] = []
    last = 0
    for match in _group_declarations(pattern):
        if match.group(1):
            continue
        parts.append(pattern[last:match.start()])
        parts.append(f"(?P<{match.group(2)}>")
        last = match.end()
    parts.append(pattern[last:])
    return "".join(parts)


@functools.lru_cache(maxsize=256)
def compile_pattern(pattern: Optional[str]) -> Optional[Pattern[str]]:
    """Compile a descriptor pattern; None stays None.

    Raises:
        ConfigurationError: the pattern is not a valid regular expression.
    """
    if pattern is None:
        return None
    try:
        return re.compile(to_python_syntax(pattern))
    except re.error as e:
        raise ConfigurationError(f"invalid pattern '{pattern}': {e}") from e


def matches(pattern: Optional[str], text: str) -> bool:
    """Whole-string match; a missing pattern matches everything."""
    compiled = compile_pattern(pattern)
    if compiled is None:
        return True
    return compiled.fullmatch(text) is not None


def declared_group_names(pattern: str) -> List[str]:
    """Scan the pattern source for named group declarations, in order of appearance."""
    return [match.group(2) for match in _group_declarations(pattern)]


def capture_groups(pattern: Optional[str], text: str) -> Dict[str, str]:
    """Map group index and group name to the captured value.

    Index "0" is the whole match. Groups that did not take part in the match
    are left out. Returns an empty map when there is no pattern or no match.
    """
    compiled = compile_pattern(pattern)
    if compiled is None:
        return {}
    match = compiled.fullmatch(text) or compiled.search(text)
    if match is None:
        return {}

    result: Dict[str, str] = {}
    for index in range(compiled.groups + 1):
        value = match.group(index)
        if value is not None:
            result[str(index)] = value

    for name in declared_group_names(pattern):
        value = match.group(name)
        if value is not None:
            result[name] = value
    return result
