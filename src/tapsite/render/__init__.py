"""HTML rendering: Jinja2 page templates, SEO fragments and the trailer translator."""
from tapsite.render.pages import PAGE_RENDERERS, render_home, render_page, render_press, render_privacy, render_terms
from tapsite.render.trailer import Substitution, apply_substitutions, translate_trailer, validate_markers

__all__ = [
    "PAGE_RENDERERS",
    "Substitution",
    "apply_substitutions",
    "render_home",
    "render_page",
    "render_press",
    "render_privacy",
    "render_terms",
    "translate_trailer",
    "validate_markers",
]
