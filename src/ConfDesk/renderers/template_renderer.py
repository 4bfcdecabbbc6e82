"""Placeholder substitution for HTML document templates."""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ConfDesk.utils.log import log

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


@dataclass(slots=True)
class TemplateRenderer:
    """Fill ``{placeholder}`` fields in HTML templates.

    Values are HTML-escaped unless their key is listed in ``raw_keys`` (for
    fragments that were rendered already). Unknown placeholders stay in the
    output and are reported once.
    """

    raw_keys: frozenset[str] = frozenset()
    warned_placeholders: set[str] = field(default_factory=set)

    def render(self, template: str, context: Mapping[str, str]) -> str:
        self._warn_unknown(_PLACEHOLDER_RE.findall(template), context)
        return _PLACEHOLDER_RE.sub(lambda match: self._value(match.group(1), context), template)

    def render_conditional(self, template: str, context: Mapping[str, str]) -> str:
        """Render line by line, dropping lines whose known placeholders are all empty."""
        output_lines: list[str] = []
        for line in template.splitlines():
            placeholders = _PLACEHOLDER_RE.findall(line)
            if not placeholders:
                output_lines.append(line)
                continue
            self._warn_unknown(placeholders, context)
            known = [key for key in placeholders if key in context]
            if known and not any(context.get(key) for key in known):
                continue
            output_lines.append(
                _PLACEHOLDER_RE.sub(lambda match: self._value(match.group(1), context), line)
            )
        return "\n".join(output_lines)

    def _value(self, key: str, context: Mapping[str, str]) -> str:
        if key not in context:
            return "{" + key + "}"
        value = context[key]
        return value if key in self.raw_keys else html.escape(value)

    def _warn_unknown(self, keys: Iterable[str], context: Mapping[str, str]) -> None:
        for key in keys:
            if key in context or key in self.warned_placeholders:
                continue
            self.warned_placeholders.add(key)
            log.warning("Unknown template placeholder: %s", key)
