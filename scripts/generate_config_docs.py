#!/usr/bin/env python3
from __future__ import annotations

import json
from pathlib import Path
from typing import TypeGuard


REPO_ROOT = Path(__file__).resolve().parents[1]
SCHEMA_RELPATH = Path("services/tfbootstrap/src/tfbootstrap/schemas/config.schema.v1.json")
OUTPUT_RELPATH = Path("docs/reference/config.schema.v1.md")


def _is_dict(value: object) -> TypeGuard[dict[object, object]]:
    return isinstance(value, dict)


def _as_dict(value: object) -> dict[str, object]:
    if not _is_dict(value):
        return {}
    return {str(k): v for k, v in value.items()}


def _md_escape(s: str) -> str:
    return s.replace("<", "&lt;").replace(">", "&gt;").replace("|", "\\|")


def _constraints(prop: dict[str, object]) -> str:
    parts: list[str] = []
    for key in ("pattern", "minimum", "exclusiveMinimum", "minLength"):
        if key in prop:
            parts.append(f"{key}: `{prop[key]}`")
    return ", ".join(parts)


def render(schema: dict[str, object]) -> str:
    lines = [
        "> **Generated file. Do not edit directly.**",
        "> Run: `python scripts/generate_config_docs.py`",
        "",
        f"# {_md_escape(str(schema.get('title') or 'Configuration'))}",
    ]
    desc = str(schema.get("description") or "").strip()
    if desc:
        lines.extend(["", desc])
    lines.extend(
        [
            "",
            "| Key | Type | Constraints | Description |",
            "|---|---|---|---|",
        ]
    )
    props = _as_dict(schema.get("properties"))
    for name in sorted(props):
        prop = _as_dict(props[name])
        description = _md_escape(str(prop.get("description") or "").strip())
        lines.append(
            f"| `{name}` | `{prop.get('type', '(unspecified)')}` "
            f"| {_md_escape(_constraints(prop))} | {description} |"
        )
    return "\n".join(lines) + "\n"


def generate(repo_root: Path = REPO_ROOT) -> Path:
    schema_path = repo_root / SCHEMA_RELPATH
    if not schema_path.exists():
        raise SystemExit(f"Schema file not found: {schema_path}")
    schema = _as_dict(json.loads(schema_path.read_text(encoding="utf-8")))
    out_path = repo_root / OUTPUT_RELPATH
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(render(schema), encoding="utf-8")
    print(f"Generated config docs at {out_path}")
    return out_path


if __name__ == "__main__":
    generate()
