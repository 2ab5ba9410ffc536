from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import FormatChecker

from .errors import SchemaValidationError

RESPONSE_SCHEMA = "jsonrpc.response.schema.json"
CHAIN_DESCRIPTOR_SCHEMA = "chain.descriptor.schema.json"
TRANSACTION_SCHEMA = "transaction.request.schema.json"

_BUNDLED_ROOT = Path(__file__).resolve().parent / "jsonschemas"


@lru_cache(maxsize=16)
def _validator(schema_path: Path) -> jsonschema.Validator:
    with schema_path.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema, format_checker=FormatChecker())


@dataclass(frozen=True)
class SchemaRegistry:
    schema_root: Path

    @classmethod
    def default(cls) -> "SchemaRegistry":
        return cls(schema_root=_BUNDLED_ROOT)

    def schema_path(self, schema_filename: str) -> Path:
        return self.schema_root / schema_filename

    def validator_for(self, schema_filename: str) -> jsonschema.Validator:
        return _validator(self.schema_path(schema_filename))

    def errors_for(self, instance: Any, schema_filename: str) -> list[str]:
        validator = self.validator_for(schema_filename)
        errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
        return [self._format_error(err) for err in errors]

    def validate_instance(self, instance: Any, schema_filename: str) -> None:
        formatted = self.errors_for(instance, schema_filename)
        if formatted:
            raise SchemaValidationError(
                f"Schema validation failed for {schema_filename}.",
                errors=formatted,
            )

    @staticmethod
    def _format_error(error: jsonschema.ValidationError) -> str:
        location = "/".join(str(part) for part in error.path) or "<root>"
        return f"{location}: {error.message}"
