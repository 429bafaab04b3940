#!/usr/bin/env python3
"""Check fleet YAML files against schema.yaml and the plan rules."""
import sys
from pathlib import Path
from typing import List

import yaml
from jsonschema import Draft7Validator

from fleetpm import PlanConfigError, load_fleet

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"
FLEETS_DIR = Path(__file__).parent / "fleets"


def load_schema() -> dict:
    """Read the fleet JSON schema (stored as YAML)."""
    with open(SCHEMA_PATH) as fp:
        return yaml.safe_load(fp)


def _describe(error) -> str:
    path = ".".join(str(p) for p in error.absolute_path)
    message = f"Schema validation error: {error.message}"
    return f"{message} (at {path})" if path else message


def validate_fleet_file(filepath: Path, schema: dict) -> List[str]:
    """
    Problems found in one fleet file, or an empty list.

    Every schema violation is reported. Plan rules are only checked once
    the file matches the schema.
    """
    try:
        with open(filepath) as fp:
            data = yaml.safe_load(fp)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]

    violations = sorted(
        Draft7Validator(schema).iter_errors(data),
        key=lambda e: [str(p) for p in e.absolute_path],
    )
    errors = [_describe(error) for error in violations]
    if errors:
        return errors

    try:
        load_fleet(filepath)
    except PlanConfigError as e:
        errors.append(f"Plan error: {e}")
    return errors


def main(argv=None) -> int:
    """Check the given fleet files, or every YAML file under fleets/."""
    paths = [Path(p) for p in (sys.argv[1:] if argv is None else argv)]
    if not paths:
        if not FLEETS_DIR.is_dir():
            print(f"Error: fleets directory not found: {FLEETS_DIR}")
            return 1
        paths = sorted(FLEETS_DIR.glob("*.y*ml"))
    if not paths:
        print("Warning: No YAML files found")
        return 0

    schema = load_schema()
    failed = 0
    for filepath in paths:
        errors = validate_fleet_file(filepath, schema)
        print(f"{'FAIL' if errors else 'OK'}: {filepath.name}")
        for error in errors:
            print(f"  {error}")
        failed += bool(errors)

    if failed:
        print(f"{failed} of {len(paths)} files failed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
