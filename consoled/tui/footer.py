"""
Footer Composer - "label: value" status lines wrapped to the console width.
"""

from typing import List

from rich.text import Text

LABEL_STYLE = "green"


def wrap_footer_text(label: str, text: str, max_line_length: int) -> List[Text]:
    """
    Wrap ``text`` behind a highlighted ``label:`` prefix, breaking on whitespace only.

    A word longer than ``max_line_length`` is kept whole on its own line.
    The lines are returned bottom-up (last wrapped line first), which is the
    order the frame stacks footer rows in.
    """
    lines: List[Text] = []

    current = Text()
    current.append(f"{label}:", style=LABEL_STYLE)
    current_len = len(label) + 2
    has_words = False
    is_label_line = True

    for word in text.split():
        # Never leave an empty row behind; the label line may break early
        if current_len + len(word) > max_line_length and (has_words or is_label_line):
            lines.append(current)
            current = Text()
            current_len = 0
            has_words = False
            is_label_line = False

        if has_words or is_label_line:
            current.append(" ")
        current.append(word)
        current_len += len(word) + 1
        has_words = True

    lines.append(current)
    lines.reverse()
    return lines
