"""Unit tests for text normalisation utilities."""

from kinoplan.utils.text import comparison_key, normalise_title, slugify, title_annotations


class TestNormaliseTitle:
    def test_passthrough_clean_title(self) -> None:
        assert normalise_title("Dune: Part Two") == "Dune: Part Two"

    def test_removes_bracketed_omu(self) -> None:
        assert normalise_title("Dune: Part Two (OmU)") == "Dune: Part Two"

    def test_removes_bracketed_language_and_omu(self) -> None:
        assert normalise_title("Perfect Days (engl. OmU)") == "Perfect Days"

    def test_removes_free_standing_omu_with_language(self) -> None:
        assert normalise_title("Perfect Days engl. OmU") == "Perfect Days"

    def test_removes_bracketed_dotted_omu(self) -> None:
        assert normalise_title("Perfect Days (O.m.U.)") == "Perfect Days"

    def test_removes_trailing_dotted_omu(self) -> None:
        assert normalise_title("Perfect Days O.m.U.") == "Perfect Days"

    def test_removes_omeu_suffix(self) -> None:
        assert normalise_title("Anatomie eines Falls OmeU") == "Anatomie eines Falls"

    def test_removes_trailing_ov_with_dash(self) -> None:
        assert normalise_title("Oppenheimer - OV") == "Oppenheimer"

    def test_removes_bracketed_original_version(self) -> None:
        assert normalise_title("Poor Things (Original Version)") == "Poor Things"

    def test_keeps_lowercase_of_in_title(self) -> None:
        assert normalise_title("Birth of a Nation") == "Birth of a Nation"

    def test_keeps_non_dub_parenthetical(self) -> None:
        assert normalise_title("Nosferatu (Director's Cut)") == "Nosferatu (Director's Cut)"

    def test_removes_square_bracket_format_tag(self) -> None:
        assert normalise_title("Nosferatu [35mm]") == "Nosferatu"

    def test_removes_preview_prefix(self) -> None:
        assert normalise_title("Preview: The Film") == "The Film"

    def test_removes_sneak_preview_prefix(self) -> None:
        assert normalise_title("Sneak Preview: The Film") == "The Film"

    def test_removes_vorpremiere_prefix(self) -> None:
        assert normalise_title("Vorpremiere: Der Film") == "Der Film"

    def test_collapses_whitespace(self) -> None:
        assert normalise_title("The   Film  ") == "The Film"

    def test_truncates_at_special_event_marker(self) -> None:
        title = normalise_title("La Traviata (MET Opera 2024)", ("(MET ",))
        assert title == "La Traviata"

    def test_marker_match_is_case_insensitive(self) -> None:
        title = normalise_title("Casablanca (best of cinema)", ("(Best of Cinema)",))
        assert title == "Casablanca"

    def test_marker_at_start_is_kept(self) -> None:
        # Nothing would remain if the title were cut at index 0
        title = normalise_title("WoMonGay Special", ("WoMonGay",))
        assert title == "WoMonGay Special"

    def test_empty_after_normalisation(self) -> None:
        assert normalise_title("  (OmU) ") == ""

    def test_does_not_modify_input(self) -> None:
        raw = "Dune: Part Two (OmU)"
        normalise_title(raw)
        assert raw == "Dune: Part Two (OmU)"


class TestTitleAnnotations:
    def test_bracketed_omu(self) -> None:
        assert title_annotations("Dune: Part Two (OmU)") == ["OmU"]

    def test_free_standing_language_and_omu(self) -> None:
        assert title_annotations("Perfect Days engl. OmU") == ["engl. OmU"]

    def test_trailing_ov(self) -> None:
        assert title_annotations("Oppenheimer - OV") == ["OV"]

    def test_dotted_omu(self) -> None:
        assert title_annotations("Perfect Days (O.m.U.)") == ["O.m.U."]

    def test_no_annotations(self) -> None:
        assert title_annotations("Dune") == []


class TestComparisonKey:
    def test_folds_case(self) -> None:
        assert comparison_key("DUNE: PART TWO") == comparison_key("Dune: Part Two")

    def test_folds_diacritics(self) -> None:
        assert comparison_key("Amélie") == "amelie"

    def test_collapses_whitespace(self) -> None:
        assert comparison_key("  Dune:   Part Two ") == "dune: part two"

    def test_keeps_punctuation(self) -> None:
        assert comparison_key("Dune - Part Two") != comparison_key("Dune: Part Two")


class TestSlugify:
    def test_basic(self) -> None:
        assert slugify("Apollo Kino") == "apollo-kino"

    def test_folds_umlauts(self) -> None:
        assert slugify("Kinos am Küchengarten") == "kinos-am-kuchengarten"

    def test_strips_punctuation(self) -> None:
        assert slugify("Dune: Part Two!") == "dune-part-two"

    def test_collapses_hyphens(self) -> None:
        assert slugify("a -- b") == "a-b"
