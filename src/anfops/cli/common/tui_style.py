"""Questionary / prompt_toolkit theme for anfops.

Questionary uses prompt_toolkit under the hood. Destructive confirmations
(cleanup, delete) share one style so they stand out the same way everywhere.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

QUESTIONARY_STYLE_CONFIRM = Style.from_dict(
    {
        "qmark": "bold ansibrightcyan",
        "question": "bold ansibrightred",
        "answer": "bold ansibrightred",
        "pointer": "bold ansibrightred",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
    }
)
