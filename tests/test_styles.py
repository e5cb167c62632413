"""Tests for style directives and presets."""

import pytest

from director_ai.exceptions import InvalidConfigError
from director_ai.pipeline import PRESETS, get_preset
from director_ai.styles import GENERIC_DIRECTIVE, STYLE_DIRECTIVES, build_expansion_instruction, get_directive


def test_known_style_directive_is_case_insensitive():
    assert get_directive("noir horror") == STYLE_DIRECTIVES["Noir Horror"]


def test_unknown_style_gets_generic_directive():
    assert get_directive("Vaporwave") == GENERIC_DIRECTIVE


def test_instruction_embeds_sentence_style_and_directive():
    instruction = build_expansion_instruction("The door creaks open.", "Junji Ito Manga")

    assert 'Sentence: "The door creaks open."' in instruction
    assert 'Visual style: "Junji Ito Manga"' in instruction
    assert STYLE_DIRECTIVES["Junji Ito Manga"] in instruction
    assert "PG-13" in instruction


def test_get_preset_returns_copy():
    options = get_preset("Economy")
    options.streaming_enabled = True

    assert PRESETS["economy"]["options"].streaming_enabled is False


def test_motion_preset_synthesizes_video():
    assert get_preset("motion").synthesizes_video


def test_unknown_preset():
    with pytest.raises(InvalidConfigError):
        get_preset("deluxe")
