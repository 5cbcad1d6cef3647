"""Enumerations for showtime classification."""

import enum


class Language(str, enum.Enum):
    """Spoken language of a screening."""

    GERMAN = "german"
    DANISH = "danish"
    ENGLISH = "english"
    FRENCH = "french"
    SPANISH = "spanish"
    ITALIAN = "italian"
    TURKISH = "turkish"
    RUSSIAN = "russian"
    JAPANESE = "japanese"
    KOREAN = "korean"
    HINDI = "hindi"
    POLISH = "polish"
    OTHER = "other"
    UNKNOWN = "unknown"


class DubVariant(str, enum.Enum):
    """Audio/subtitle treatment of a screening."""

    REGULAR = "regular"
    ORIGINAL_VERSION = "original_version"
    SUBTITLED = "subtitled"
