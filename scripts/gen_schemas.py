# scripts/gen_schemas.py
"""
Generate JSON Schemas for Alchemist data models.

This script exports JSON Schema files for:
    - Client, Worker, Task (input records, by column alias)
    - Diagnostic (validation output)
    - Config

Output directory: schemas/
"""

import json
from pathlib import Path

from alchemist.schemas.models import Client, Config, Diagnostic, Task, Worker


def export_schema(model_cls, name: str, out_dir: Path) -> Path:
    """
    @brief
    Exports the JSON schema of a given Pydantic model.

    @details
    Schemas are generated by alias so property names match the CSV headers
    and the serialized diagnostic keys.

    @returns
        Path of the written "<name>.schema.json" file.
    """
    out_dir.mkdir(parents=True, exist_ok=True)

    schema_path = (out_dir / f"{name}.schema.json").resolve()
    schema = model_cls.model_json_schema(by_alias=True)

    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
        f.write("\n")

    try:
        rel = schema_path.relative_to(Path.cwd())
    except ValueError:
        rel = schema_path
    print(f"Generated {rel}")
    return schema_path


def main(out_dir: Path | None = None) -> None:
    out_dir = out_dir or Path("schemas").resolve()
    export_schema(Client, "client", out_dir)
    export_schema(Worker, "worker", out_dir)
    export_schema(Task, "task", out_dir)
    export_schema(Diagnostic, "diagnostic", out_dir)
    export_schema(Config, "config", out_dir)


if __name__ == "__main__":
    main()
