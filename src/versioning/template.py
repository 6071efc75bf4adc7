"""Shell-like placeholder substitution for version format templates.

Supported forms:

    ${name}                    value, or the placeholder itself when missing
    ${name:-default}           value, or ``default`` when missing
    ${name:+override}          ``override`` when present, empty when missing
    ${name:+override:-default} ``override`` when present, ``default`` when missing

Placeholders do not nest and substituted values are never scanned again.
"""

import re
from typing import Mapping, Match

_PLACEHOLDER = re.compile(
    r"\$\{"
    r"(?P<name>[^}:]+)"
    r"(?::\+(?P<override>(?:(?!:-)[^}])*))?"
    r"(?::-(?P<default>[^}]*))?"
    r"\}"
)


def render(template: str, values: Mapping[str, str]) -> str:
    """Substitute every placeholder of ``template`` from ``values``."""

    def substitute(match: Match[str]) -> str:
        name = match.group("name")
        override = match.group("override")
        default = match.group("default")
        if name in values:
            if override is not None:
                return override
            return values[name]
        if default is not None:
            return default
        if override is not None:
            return ""
        return match.group(0)

    return _PLACEHOLDER.sub(substitute, template)
