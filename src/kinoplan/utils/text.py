"""Text normalization utilities for movie title matching."""

import re
import unicodedata
from collections.abc import Iterable

# Short dub tokens are matched case-sensitively so that words like "of" in a
# title never count as an "OF" (Originalfassung) annotation.
_OMU_TOKEN = r"O\.?m\.?[ed]?\.?U"  # OmU, OmeU, OmdU, O.m.U.
_DUB_TOKEN = rf"(?:{_OMU_TOKEN}|OV|OF|(?i:original\s?(?:version|fassung)))"

# Order matters: bracketed groups first, then free-standing "engl. OmU"
# fragments, then trailing tags.
_ANNOTATION_PATTERNS = (
    # "Title (OmU)", "Title (engl. OmU)", "Title [OV]"
    re.compile(rf"\s*[\(\[][^\)\]]*?\b{_DUB_TOKEN}\b[^\)\]]*[\)\]]"),
    # "Title engl. OmU", "Title OmeU"
    re.compile(rf"\s*\b(?:[A-Za-zÄÖÜäöü]+\.\s*)?{_OMU_TOKEN}\b\.?"),
    # "Title - OV", "Title OF"
    re.compile(rf"\s+[-–]?\s*\b{_DUB_TOKEN}\s*$"),
)

_PREFIXES = [
    r"^Preview:\s+",
    r"^Sneak Preview:\s+",
    r"^Vorpremiere:\s+",
    r"^Premiere:\s+",
    r"^Special Screening:\s+",
]


def _strip_annotations(title: str) -> tuple[str, list[str]]:
    fragments: list[str] = []
    for pattern in _ANNOTATION_PATTERNS:
        for match in pattern.finditer(title):
            fragment = match.group(0).strip(" -–()[]")
            if fragment:
                fragments.append(fragment)
        title = pattern.sub(" ", title)
    return title, fragments


def normalise_title(title: str, special_event_markers: Iterable[str] = ()) -> str:
    """
    Normalize a raw movie title into its canonical display form.

    Steps:
    - Truncate at any of the source's special-event markers found past the
      start of the title: "Film (Best of Cinema)" → "Film"
    - Remove dub/subtitle annotations: "Film (OmU)", "Film engl. OmU",
      "Film - OV" → "Film"
    - Remove square bracket tags and screening prefixes: "Preview: Film [35mm]" → "Film"
    - Collapse whitespace

    The input string is never modified; callers keep the raw value as an alias.

    Args:
        title: Raw movie title
        special_event_markers: Marker strings used by the current source

    Returns:
        Canonical title
    """
    for marker in special_event_markers:
        if not marker:
            continue
        index = title.lower().find(marker.lower())
        if index > 0:
            title = title[:index]

    title, _ = _strip_annotations(title)

    # Remove square bracket tags: "Title [35mm]"
    title = re.sub(r"\s*\[[^\]]+\]\s*", " ", title)

    title = title.strip()
    for prefix in _PREFIXES:
        title = re.sub(prefix, "", title, flags=re.IGNORECASE)

    # Collapse multiple spaces into one
    title = re.sub(r"\s+", " ", title)

    # Dangling separators left behind by a removed suffix
    title = title.strip().rstrip(":-–,").strip()

    return title


def title_annotations(title: str) -> list[str]:
    """
    Return the dub/subtitle annotation fragments found in a raw title.

    Examples:
        "Dune: Part Two (OmU)"   →  ["OmU"]
        "Perfect Days engl. OmU" →  ["engl. OmU"]
        "Dune"                   →  []
    """
    _, fragments = _strip_annotations(title)
    return fragments


def comparison_key(text: str) -> str:
    """
    Build the case- and diacritic-insensitive key used for entity matching.

    Examples:
        "Amélie"          →  "amelie"
        "DUNE:  Part Two" →  "dune: part two"
    """
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return re.sub(r"\s+", " ", stripped.casefold()).strip()


def slugify(text: str) -> str:
    """
    Convert text to a URL-safe slug.

    Args:
        text: Text to slugify

    Returns:
        Lowercase slug with hyphens
    """
    # Fold diacritics so "Kinos am Küchengarten" keeps its letters
    text = comparison_key(text)

    # Replace spaces and underscores with hyphens
    text = re.sub(r"[\s_]+", "-", text)

    # Remove non-alphanumeric characters (except hyphens)
    text = re.sub(r"[^a-z0-9-]", "", text)

    # Remove multiple consecutive hyphens
    text = re.sub(r"-+", "-", text)

    # Strip leading/trailing hyphens
    text = text.strip("-")

    return text
