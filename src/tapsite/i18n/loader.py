import logging
from pathlib import Path
from typing import Union

from pydantic import TypeAdapter, ValidationError

from tapsite.config import SiteConfig
from tapsite.errors import TranslationError

logger = logging.getLogger(__name__)

TranslationRecord = dict[str, Union[str, list[str]]]
TranslationTable = dict[str, TranslationRecord]

_TABLE_ADAPTER: TypeAdapter[TranslationTable] = TypeAdapter(TranslationTable)


def load_translations(path: Path, config: SiteConfig) -> TranslationTable:
    """Load a translation table keyed by language code. Raises TranslationError on failure.

    Every language in ``config.languages`` must have a record.  Records whose
    key set differs from the default language's are accepted; the missing
    keys are logged and will render as placeholders.
    """
    try:
        table = _TABLE_ADAPTER.validate_json(path.read_bytes())
    except ValidationError as e:
        field_errors = "; ".join(
            f"{' -> '.join(str(x) for x in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise TranslationError(path, f"Schema validation failed: {field_errors}") from e
    except OSError as e:
        raise TranslationError(path, str(e)) from e

    missing_langs = [lang for lang in config.languages if lang not in table]
    if missing_langs:
        raise TranslationError(path, f"No record for language(s): {', '.join(missing_langs)}")

    for lang, keys in missing_keys(table, config).items():
        logger.warning(
            "%s: '%s' record is missing %d key(s): %s",
            path.name, lang, len(keys), ", ".join(keys),
        )
    return table


def missing_keys(table: TranslationTable, config: SiteConfig) -> dict[str, list[str]]:
    """Return keys present in the default-language record but absent elsewhere, per language."""
    reference = table.get(config.default_language, {})
    result: dict[str, list[str]] = {}
    for lang in config.languages:
        record = table.get(lang)
        if record is None or lang == config.default_language:
            continue
        absent = [key for key in reference if key not in record]
        if absent:
            result[lang] = absent
    return result
