"""Translation tables: JSON dictionaries keyed by language code."""
from tapsite.i18n.loader import (
    TranslationRecord,
    TranslationTable,
    load_translations,
    missing_keys,
)

__all__ = [
    "TranslationRecord",
    "TranslationTable",
    "load_translations",
    "missing_keys",
]
