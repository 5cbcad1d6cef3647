"""Classification of free-text showtime attributes.

Each table is an ordered tuple of (value, tokens). Matching is a
case-insensitive substring test and the first value with a matching token
wins, so declaration order is the tie-break: "DK" is listed under both
German and Danish and resolves to German.
"""

from collections.abc import Sequence
from typing import TypeVar

from kinoplan.models.enums import DubVariant, Language

T = TypeVar("T")

ClassificationTable = tuple[tuple[T, tuple[str, ...]], ...]

LANGUAGE_TABLE: ClassificationTable[Language] = (
    (Language.GERMAN, ("Deutsch", "de", "deu", "dt.", "DK")),
    (Language.DANISH, ("Dänisch", "dän", "DK")),
    (Language.ENGLISH, ("Englisch", "English", "eng", "engl", "EN.", "GB", "UK", "US", "USA")),
    (Language.FRENCH, ("Französisch", "franz", "frnz", "frz", "FR")),
    (Language.SPANISH, ("Spanisch", "span", "SP", "ES")),
    (Language.ITALIAN, ("Italienisch", "ital", "IT")),
    (Language.TURKISH, ("Türkisch", "türk", "trk", "TR")),
    (Language.RUSSIAN, ("Russisch", "russ")),
    (Language.JAPANESE, ("Japanisch", "jap", "JP", "JA")),
    (Language.KOREAN, ("Koreanisch", "kor", "KO")),
    (Language.HINDI, ("Hindi", "hind", "hin")),
    (Language.POLISH, ("Polnisch", "pol", "PL")),
    (
        Language.OTHER,
        ("Andere", "Verschiedene", "versch.", "div.", "Malayalam", "Filipino", "Georgisch", "georg."),
    ),
    (Language.UNKNOWN, ("Unbekannt",)),
)

DUB_VARIANT_TABLE: ClassificationTable[DubVariant] = (
    (DubVariant.REGULAR, ("",)),
    (
        DubVariant.ORIGINAL_VERSION,
        ("OV", "OF", "Original Version", "Originalversion", "Originalfassung", "Original Fassung"),
    ),
    (DubVariant.SUBTITLED, ("OmU", "OmeU", "OmdU", "Untertitel")),
)


def match_table(text: str, table: Sequence[tuple[T, Sequence[str]]], default: T) -> T:
    """Return the first table value with a token contained in ``text``."""
    needle = text.casefold()
    for value, tokens in table:
        if any(token.strip() and token.casefold() in needle for token in tokens):
            return value
    return default


def classify_language(
    text: str,
    default: Language = Language.UNKNOWN,
    table: ClassificationTable[Language] = LANGUAGE_TABLE,
) -> Language:
    """
    Classify the spoken language described by ``text``.

    Args:
        text: Free-text language hint from a source ("Englisch", "OV engl.")
        default: Value returned when no token matches
        table: Priority-ordered classification table

    Returns:
        The matched language, or ``default``
    """
    language = match_table(text, table, default)
    # An explicit "Unbekannt" tells no more than a missing hint
    return default if language is Language.UNKNOWN else language


def classify_dub_variant(
    text: str,
    table: ClassificationTable[DubVariant] = DUB_VARIANT_TABLE,
) -> DubVariant:
    """
    Classify the dub/subtitle variant described by ``text``.

    Periods and parentheses are removed first so "O.m.U." and "(OmU)" match.
    """
    cleaned = text.strip().replace(".", "").replace("(", "").replace(")", "")
    return match_table(cleaned, table, DubVariant.REGULAR)


def _label(value: T, table: ClassificationTable[T]) -> str:
    for candidate, tokens in table:
        if candidate == value:
            return tokens[0]
    raise KeyError(value)


def language_label(language: Language) -> str:
    """Display label of a language ("Englisch")."""
    return _label(language, LANGUAGE_TABLE)


def dub_variant_label(dub_variant: DubVariant) -> str:
    """Display label of a dub variant ("OmU"); empty for regular screenings."""
    return _label(dub_variant, DUB_VARIANT_TABLE)
