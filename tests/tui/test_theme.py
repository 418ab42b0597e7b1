"""Tests for the theme helpers."""

from __future__ import annotations

import pytest

pytest.importorskip("textual")

from peka.tui.theme import MONOKAI_THEME, Theme, build_css


def test_build_css_includes_palette_values() -> None:
    css = build_css(MONOKAI_THEME)
    assert MONOKAI_THEME.screen_background in css
    assert MONOKAI_THEME.text_error in css
    assert MONOKAI_THEME.text_secure in css


def test_custom_theme_overrides_colors() -> None:
    custom_theme = Theme(
        screen_background="#000000",
        card_background="#111111",
        modal_background="#222222",
        border_card="#333333",
        border_modal="#444444",
        text_default="#aaaaaa",
        text_title="#bbbbbb",
        text_subtitle="#cccccc",
        text_muted="#dddddd",
        text_error="#eeeeee",
        text_success="#ffffff",
        text_secure="#654321",
        list_item_highlight="#123456",
    )
    css = build_css(custom_theme)
    assert "#000000" in css
    assert "#123456" in css
    assert MONOKAI_THEME.screen_background not in css
