from operator import itemgetter
from typing import Any, Dict, List

# Fragments within this many layout units of the previous one share a line
LINE_THRESHOLD = 5.0


def group_lines(fragments: List[Dict[str, Any]]) -> List[List[Dict[str, Any]]]:
    """
    Groups positioned text fragments into visual lines.

    Fragments are sorted top to bottom and chained: each one joins the current
    line when it is within LINE_THRESHOLD of the previous fragment's y, so a
    line may drift further than the threshold overall. Every line is then
    sorted left to right.
    """
    if not fragments:
        return []

    ordered = sorted(fragments, key=itemgetter("y"))

    line_groups = []
    current_group = [ordered[0]]
    for prev_fragment, fragment in zip(ordered, ordered[1:]):
        if abs(fragment["y"] - prev_fragment["y"]) < LINE_THRESHOLD:
            current_group.append(fragment)
        else:
            line_groups.append(current_group)
            current_group = [fragment]
    line_groups.append(current_group)

    return [sorted(group, key=itemgetter("x")) for group in line_groups]


def line_text(group: List[Dict[str, Any]]) -> str:
    return " ".join(fragment["text"] for fragment in group).strip()
