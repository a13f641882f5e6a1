"""Tests for the lighting style table and catalog."""

import pytest

from src.config.options import STYLE_PROMPTS, Options

STYLE_KEYS = [
    "architectural",
    "pathway",
    "garden",
    "outdoor_living",
    "security",
    "combination",
]


def test_exactly_six_styles_in_display_order():
    assert list(STYLE_PROMPTS) == STYLE_KEYS


def test_prompt_table_is_read_only():
    with pytest.raises(TypeError):
        STYLE_PROMPTS["garden"] = "something else"


@pytest.mark.parametrize("style", STYLE_KEYS)
def test_every_prompt_asks_for_a_night_scene(style):
    prompt = Options().get_prompt(style)
    assert prompt
    assert "dusk or nighttime" in prompt


def test_unknown_styles():
    options = Options()
    assert options.get_prompt("not_a_real_style") is None
    assert options.get_prompt("") is None
    assert options.get_prompt(None) is None
    assert not options.is_valid("Garden")


def test_catalog_entries():
    catalog = Options().get_options()

    assert [o["id"] for o in catalog] == STYLE_KEYS
    assert catalog[0]["name"] == "Architectural Uplighting"
    assert catalog[-1]["name"] == "Full Package"
    assert all(set(o) == {"id", "name", "description"} for o in catalog)


def test_description_prompt_wraps_style_prompt():
    options = Options()
    style_prompt = options.get_prompt("pathway")

    prompt = options.build_description_prompt(style_prompt)

    assert style_prompt in prompt
    assert "Do not generate an image" in prompt
    assert "{style_prompt}" not in prompt
