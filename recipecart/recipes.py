import json
from pathlib import Path


def load_recipes(path):
    """Load saved-recipe seed data from a JSON file.

    Each entry is a dict with ``title`` and ``link`` and optionally
    ``category``, ``steps`` (a string or a list of lines) and
    ``ingredients`` (a list of names).

    Args:
        path (str or Path): Path to the JSON file.

    Returns:
        list: list of recipe dictionaries, empty if the file is missing.
    """
    p = Path(path)
    if not p.exists():
        return []
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    for entry in data:
        steps = entry.get("steps")
        if isinstance(steps, list):
            entry["steps"] = "\n".join(steps)
    return data
