#!/usr/bin/env python3
"""
Validate and fix exercise JSON files.

Usage:
    python scripts/validate_exercises.py --check                # report issues, exit 1 if any
    python scripts/validate_exercises.py --fix                  # auto-repair and report
    python scripts/validate_exercises.py --check foo.json       # check a single file
"""

import json
import sys
from pathlib import Path

EXERCISES_DIR = Path(__file__).parent.parent / "pairroom" / "exercises"

# Required top-level string fields
_REQUIRED_FIELDS = ("title", "description", "initialCode", "solution")


def _issue(fname, field, kind, detail, fixable=False, index=None):
    return {
        "file": fname, "field": field, "index": index,
        "kind": kind, "detail": detail, "fixable": fixable,
    }


def validate_exercise(data, filepath=None):
    """Validate a single exercise dict. Returns list of issue dicts."""
    issues = []
    fname = Path(filepath).name if filepath else "<unknown>"

    for field in _REQUIRED_FIELDS:
        if field not in data:
            issues.append(_issue(fname, field, "missing_field", f"Required field '{field}' is missing"))
        elif not isinstance(data[field], str) or not data[field].strip():
            issues.append(_issue(fname, field, "empty_field", f"Field '{field}' must be a non-empty string"))

    if data.get("initialCode") and data.get("initialCode") == data.get("solution"):
        issues.append(_issue(fname, "solution", "solution_is_starter",
                             "solution is identical to initialCode"))

    hints = data.get("hints", [])
    if not isinstance(hints, list):
        issues.append(_issue(fname, "hints", "invalid_hints", "Field 'hints' must be a list"))
        return issues

    for i, hint in enumerate(hints):
        if isinstance(hint, str):
            issues.append(_issue(fname, "hints", "string_hint",
                                 f"Hint stored as plain string: {hint[:60]}",
                                 fixable=True, index=i))
        elif not isinstance(hint, dict) or not str(hint.get("text", "")).strip():
            issues.append(_issue(fname, "hints", "invalid_hint",
                                 "Hint must be an object with non-empty 'text'", index=i))

    return issues


def fix_exercise(data):
    """Apply auto-fixes to an exercise dict in-place. Returns number of fixes."""
    num_fixed = 0
    hints = data.get("hints")
    if isinstance(hints, list):
        for i, hint in enumerate(hints):
            if isinstance(hint, str):
                hints[i] = {"text": hint, "code": ""}
                num_fixed += 1
    return num_fixed


def validate_file(filepath):
    """Load and validate a single exercise file. Returns issues list."""
    with open(filepath, encoding="utf-8") as f:
        data = json.load(f)
    return validate_exercise(data, filepath)


def fix_file(filepath):
    """Load, fix, and rewrite a single exercise file. Returns (issues_before, fixed)."""
    with open(filepath, encoding="utf-8") as f:
        data = json.load(f)
    issues_before = validate_exercise(data, filepath)
    if not issues_before:
        return [], 0
    num_fixed = fix_exercise(data)
    if num_fixed > 0:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
    return issues_before, num_fixed


def _find_duplicate_titles(files):
    seen = {}
    duplicates = []
    for fpath in files:
        try:
            with open(fpath, encoding="utf-8") as f:
                title = json.load(f).get("title")
        except json.JSONDecodeError:
            continue
        if title in seen:
            duplicates.append((title, seen[title], fpath.name))
        else:
            seen[title] = fpath.name
    return duplicates


def main():
    import argparse
    parser = argparse.ArgumentParser(description="Validate/fix exercise JSON files")
    parser.add_argument("--check", action="store_true", help="Report issues (exit 1 if any)")
    parser.add_argument("--fix", action="store_true", help="Auto-repair fixable issues")
    parser.add_argument("path", nargs="?", default=None,
                        help="Single file or directory (default: pairroom/exercises/)")
    args = parser.parse_args()

    if not args.check and not args.fix:
        parser.error("Specify --check or --fix")

    target = Path(args.path) if args.path else EXERCISES_DIR
    if target.is_file():
        files = [target]
    elif target.is_dir():
        files = sorted(target.glob("*.json"))
    else:
        print(f"Error: {target} not found", file=sys.stderr)
        sys.exit(1)

    total_issues = 0
    total_fixed = 0
    files_affected = 0

    for fpath in files:
        try:
            if args.fix:
                issues, fixed = fix_file(fpath)
            else:
                issues, fixed = validate_file(fpath), 0
        except json.JSONDecodeError as e:
            files_affected += 1
            total_issues += 1
            print(f"{fpath.name}: invalid JSON ({e})")
            continue

        if issues:
            files_affected += 1
            total_issues += len(issues)
            total_fixed += fixed
            print(f"{fpath.name}: {len(issues)} issues" + (f", {fixed} fixed" if args.fix else ""))
            for iss in issues:
                tag = "FIXABLE" if iss["fixable"] else "MANUAL"
                loc = f"{iss['field']}[{iss['index']}]" if iss["index"] is not None else iss["field"]
                print(f"  [{tag}] {loc}: {iss['detail']}")

    for title, first, second in _find_duplicate_titles(files):
        total_issues += 1
        print(f"Duplicate title {title!r} in {first} and {second}")

    print(f"\n{'='*50}")
    print(f"Files scanned: {len(files)}")
    print(f"Files with issues: {files_affected}")
    print(f"Total issues: {total_issues}")
    if args.fix:
        print(f"Hints fixed: {total_fixed}")

    if args.check and total_issues > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
