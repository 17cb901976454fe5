"""Jinja2 environment shared by every page renderer.

Translations are trusted site-owned JSON, so autoescaping is off: markup in a
translation value is inserted verbatim.  The only escaping applied anywhere is
``escape_json_ld`` for values embedded in JSON-LD string literals.
"""

from __future__ import annotations

import logging

from jinja2 import Environment, PackageLoader, StrictUndefined, Undefined

logger = logging.getLogger(__name__)

# Rendered in place of a translation key the record does not define.
MISSING_PLACEHOLDER = "undefined"


class PlaceholderUndefined(Undefined):
    """Undefined that renders a visible placeholder instead of an empty string."""

    __slots__ = ()

    def __str__(self) -> str:
        logger.warning("missing translation key %r, rendering placeholder", self._undefined_name)
        return MISSING_PLACEHOLDER


def escape_json_ld(value: object) -> str:
    """Escape backslash, double quote and newline for a JSON-LD string literal."""
    return str(value).replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def create_environment(strict: bool = False) -> Environment:
    """Return an environment loading templates from ``tapsite/templates``.

    With ``strict=True`` a missing translation key raises
    ``jinja2.UndefinedError`` instead of rendering MISSING_PLACEHOLDER.
    """
    env = Environment(
        loader=PackageLoader("tapsite", "templates"),
        autoescape=False,
        undefined=StrictUndefined if strict else PlaceholderUndefined,
        keep_trailing_newline=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["jsonld"] = escape_json_ld
    return env
