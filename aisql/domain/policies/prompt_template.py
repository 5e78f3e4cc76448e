"""Prompt templates with positional {0}, {1} placeholders, as SQL PROMPT() fills them."""

from __future__ import annotations

import re

from aisql.domain.errors import InvalidCallError

PLACEHOLDER_RE = re.compile(r"\{(\d+)\}")


def render_prompt(template: str, *args: object) -> str:
    """Fill ``{n}`` placeholders with ``args[n]``.

    Other braces are left untouched so JSON snippets in the template survive.

    Raises:
        InvalidCallError: if a placeholder has no matching argument.
    """

    def _sub(match: re.Match) -> str:
        index = int(match.group(1))
        if index >= len(args):
            raise InvalidCallError(
                f"Prompt placeholder {{{index}}} has no argument ({len(args)} given)"
            )
        return str(args[index])

    return PLACEHOLDER_RE.sub(_sub, template)


def placeholder_count(template: str) -> int:
    indexes = [int(i) for i in PLACEHOLDER_RE.findall(template)]
    return max(indexes) + 1 if indexes else 0
