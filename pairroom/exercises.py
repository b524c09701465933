import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

EXERCISES_DIR = Path(os.environ.get("PAIRROOM_EXERCISES_DIR") or Path(__file__).parent / "exercises")

REQUIRED_FIELDS = ("title", "description", "initialCode", "solution")

# ---------------------------------------------------------------------------
# Exercise loading
# ---------------------------------------------------------------------------


def _normalize_hints(raw_hints) -> list[dict]:
    hints = []
    for hint in raw_hints or []:
        if isinstance(hint, str):
            hints.append({"text": hint, "code": ""})
        elif isinstance(hint, dict):
            hints.append({"text": hint.get("text", ""), "code": hint.get("code", "")})
    return hints


def _load_exercises(directory: Path = EXERCISES_DIR) -> dict[str, dict]:
    """Load every ``*.json`` exercise in *directory*, keyed by title.

    Files that fail to parse or miss a required field are logged and
    skipped; the server still starts with whatever loaded.
    """
    exercises = {}
    for f in sorted(directory.glob("*.json")):
        try:
            e = json.loads(f.read_text(encoding="utf-8"))
            missing = [name for name in REQUIRED_FIELDS if name not in e]
            if missing:
                raise KeyError(", ".join(missing))
        except (KeyError, json.JSONDecodeError) as exc:
            logger.warning("Skipping %s: %s", f.name, exc)
            continue
        if e["title"] in exercises:
            logger.warning("Skipping %s: duplicate title %r", f.name, e["title"])
            continue
        exercises[e["title"]] = {
            "title": e["title"],
            "description": e["description"],
            "initialCode": e["initialCode"],
            "solution": e["solution"],
            "hints": _normalize_hints(e.get("hints")),
        }
    return exercises


EXERCISES = _load_exercises()


def get_exercise(title: str) -> dict | None:
    return EXERCISES.get(title)


def list_exercises() -> list[dict]:
    return [
        {"title": e["title"], "description": e["description"], "initialCode": e["initialCode"]}
        for e in EXERCISES.values()
    ]
