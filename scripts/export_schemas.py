"""Export JSON schemas for the session export documents."""

import json
from pathlib import Path

from shn_canvas.models import Dashboard, ExtractedExport, RawExport

SCHEMAS = {
    "RawExport": RawExport,
    "ExtractedExport": ExtractedExport,
    "Dashboard": Dashboard,
}


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for name, model in SCHEMAS.items():
        schema = model.model_json_schema(by_alias=True)
        path = schemas_dir / f"{name}.schema.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(schema, f, indent=2, ensure_ascii=False)
        print(f"Exported {name} schema to {path}")


if __name__ == "__main__":
    main()
