"""@brief Theme definitions and helpers for the Peka TUI."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Theme:
    """@brief Capture palette values so styling stays centralized."""

    screen_background: str
    card_background: str
    modal_background: str
    border_card: str
    border_modal: str
    text_default: str
    text_title: str
    text_subtitle: str
    text_muted: str
    text_error: str
    text_success: str
    text_secure: str
    list_item_highlight: str


MONOKAI_THEME = Theme(
    screen_background="#272822",
    card_background="#2d2e27",
    modal_background="#3e3d32",
    border_card="#66d9ef",
    border_modal="#a6e22e",
    text_default="#f8f8f2",
    text_title="#a6e22e",
    text_subtitle="#fd971f",
    text_muted="#75715e",
    text_error="#f92672",
    text_success="#a6e22e",
    text_secure="#e6db74",
    list_item_highlight="#49483e",
)


def build_css(theme: Theme) -> str:
    """@brief Generate a Textual CSS string from the provided theme."""

    return f"""
    Screen {{
        background: {theme.screen_background};
        color: {theme.text_default};
    }}

    .card {{
        width: 72;
        max-width: 100%;
        height: auto;
        padding: 1 2;
        background: {theme.card_background};
        border: round {theme.border_card};
    }}

    .centered {{
        align: center middle;
    }}

    .pane {{
        height: 1fr;
        padding: 1 2;
        background: {theme.card_background};
        border: round {theme.border_card};
    }}

    ModalScreen {{
        align: center middle;
        background: {theme.screen_background} 60%;
    }}

    .modal {{
        width: 64;
        max-width: 100%;
        height: auto;
        padding: 1 2;
        background: {theme.modal_background};
        border: round {theme.border_modal};
    }}

    .title {{
        text-style: bold;
        margin-bottom: 1;
        color: {theme.text_title};
    }}

    .subtitle {{
        color: {theme.text_subtitle};
        margin-bottom: 1;
    }}

    .hint {{
        color: {theme.text_muted};
        margin-top: 1;
    }}

    .error {{
        color: {theme.text_error};
        height: auto;
    }}

    .notice {{
        color: {theme.text_success};
        height: auto;
    }}

    .policy {{
        color: {theme.text_muted};
        height: auto;
    }}

    .buttons {{
        height: auto;
        margin-top: 1;
    }}

    .buttons Button {{
        margin-right: 1;
    }}

    Input {{
        margin-bottom: 1;
    }}

    ListView {{
        height: 1fr;
        background: transparent;
    }}

    ListView > ListItem {{
        color: {theme.text_default};
    }}

    ListView > ListItem.secure {{
        color: {theme.text_secure};
    }}

    ListView > ListItem.--highlight {{
        background: {theme.list_item_highlight};
    }}
    """
