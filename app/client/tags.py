from typing import List, Sequence

from app.constants import EXCLUSIVE_TAG_GROUPS


def exclusive_group(tag: str):
    for group in EXCLUSIVE_TAG_GROUPS:
        if tag in group:
            return group
    return None


def toggle_tag(selected: Sequence[str], tag: str) -> List[str]:
    """Return the selection after the user taps ``tag``.

    Selecting one tag of an exclusive pair drops its pair-mate; every other
    tag is a plain add/remove. The input is not modified.
    """
    if tag in selected:
        return [t for t in selected if t != tag]

    group = exclusive_group(tag)
    if group is None:
        return [*selected, tag]
    return [t for t in selected if t not in group] + [tag]
