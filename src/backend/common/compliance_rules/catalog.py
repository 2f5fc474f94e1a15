from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel

from .config import RULE_DEFINITIONS
from .registry import registry

# Ensure built-in gates are imported/registered when generating a catalog.
from . import gates as _builtin_gates  # noqa: F401


class RuleCatalogEntry(BaseModel):
    rule_key: str
    name: str
    description: str
    is_gate: bool

    config_model: str
    config_schema: Dict[str, Any]
    default_config: Dict[str, Any]


def build_catalog() -> List[RuleCatalogEntry]:
    entries: List[RuleCatalogEntry] = []
    for key, definition in RULE_DEFINITIONS.items():
        model = definition.config_model
        entries.append(
            RuleCatalogEntry(
                rule_key=key.value,
                name=definition.name,
                description=definition.description,
                is_gate=key in registry,
                config_model=model.__name__,
                config_schema=model.model_json_schema(by_alias=True),
                default_config=model().to_payload(),
            )
        )

    entries.sort(key=lambda e: e.rule_key)
    return entries


def _dump_json(catalog: list[dict[str, Any]]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True)


def _dump_yaml(catalog: list[dict[str, Any]]) -> str:
    return yaml.safe_dump(catalog, sort_keys=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="List compliance rule definitions and their default config.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    args = parser.parse_args(argv)

    catalog = [e.model_dump() for e in build_catalog()]
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
