"""Validate JSON documents against a model schema.

Loads a schema file (see :class:`typed_models.schema.Schema`), imports each
JSON document into the given model and prints the normalized export.

Usage:
    tm-json-check schema.json User user.json                 # prints to stdout
    tm-json-check schema.json User user.json -o out.json     # writes to file
    tm-json-check schema.json User a.json b.json             # multiple files
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from typed_models.exceptions import TypedModelsError
from typed_models.model import Model
from typed_models.schema import Schema


def _export(loaded):
    if isinstance(loaded, Model):
        return loaded.to_json()
    return [item.to_json() for item in loaded]


def check_document(schema: Schema, model_name: str, data) -> object:
    """Import data into the named model and return its normalized export."""
    return _export(schema.load(model_name, data))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Validate JSON documents against a typed_models schema"
    )
    parser.add_argument("schema", help="JSON schema file defining the models")
    parser.add_argument("model", help="Name of the model to import each document into")
    parser.add_argument("files", nargs="+", help="JSON file(s) to validate")
    parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log registry activity to stderr",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    schema_path = Path(args.schema)
    if not schema_path.exists():
        print(f"Error: {args.schema} not found", file=sys.stderr)
        return 1

    try:
        schema = Schema.load_file(schema_path)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {args.schema}: {e}", file=sys.stderr)
        return 1
    except TypedModelsError as e:
        print(f"Error: Invalid schema {args.schema}: {e}", file=sys.stderr)
        return 1

    results = []
    for filepath in args.files:
        path = Path(filepath)
        if not path.exists():
            print(f"Error: {filepath} not found", file=sys.stderr)
            return 1

        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                print(f"Error: Invalid JSON in {filepath}: {e}", file=sys.stderr)
                return 1

        try:
            results.append(check_document(schema, args.model, data))
        except TypedModelsError as e:
            print(f"Error: {filepath}: {e}", file=sys.stderr)
            return 1

    output = json.dumps(results[0] if len(results) == 1 else results, indent=2)

    if args.output:
        out_path = Path(args.output)
        with open(out_path, "w") as f:
            f.write(output + "\n")
        print(f"Wrote {out_path}", file=sys.stderr)
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
