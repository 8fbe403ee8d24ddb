# participants/schema.py
"""
Registration schema: the declared set of keys a participant may submit.

The schema lives in a JSON file outside the code (REGISTRATION_SCHEMA_PATH)
so organizers can add or change questions without a deploy. The file is
re-read whenever its modification time changes.

File shape:
    {
      "title": "...",
      "description": "...",
      "fields": [
        {"key": "gender", "label": "Gender", "type": "select",
         "required": true, "options": ["Male", "Female"]},
        ...
      ]
    }

Field types:
- text:   single string
- select: one of `options` (matched case-insensitively, stored as declared)
- tags:   list of strings; a comma-separated string is accepted too
"""
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional
import json
import logging
import threading

from django.conf import settings
from rest_framework import serializers

logger = logging.getLogger("hackreg.participants")

FIELD_TEXT = "text"
FIELD_SELECT = "select"
FIELD_TAGS = "tags"
FIELD_TYPES = (FIELD_TEXT, FIELD_SELECT, FIELD_TAGS)

MAX_TEXT_LENGTH = 2000


class SchemaError(Exception):
    """The schema file itself is malformed."""


@dataclass(frozen=True)
class SchemaField:
    key: str
    label: str
    type: str = FIELD_TEXT
    required: bool = False
    options: tuple = ()
    placeholder: Optional[str] = None

    def clean(self, value):
        """
        Returns the normalised value, or raises ValueError with a user-facing message.
        """
        if self.type == FIELD_TAGS:
            if value is None:
                value = []
            if isinstance(value, str):
                value = value.split(",")
            if not isinstance(value, (list, tuple)):
                raise ValueError("Must be a list of values.")
            cleaned = []
            for item in value:
                if not isinstance(item, (str, int, float)):
                    raise ValueError("Must be a list of values.")
                item = str(item).strip()
                if item and item not in cleaned:
                    cleaned.append(item)
            if self.required and not cleaned:
                raise ValueError("This field is required.")
            return cleaned

        if value is None:
            value = ""
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise ValueError("Must be a single value.")
        value = str(value).strip()

        if not value:
            if self.required:
                raise ValueError("This field is required.")
            return ""

        if len(value) > MAX_TEXT_LENGTH:
            raise ValueError(f"Must be at most {MAX_TEXT_LENGTH} characters.")

        if self.type == FIELD_SELECT:
            for option in self.options:
                if option.lower() == value.lower():
                    return option
            raise ValueError(f"Must be one of: {', '.join(self.options)}.")

        return value

    def as_dict(self):
        data = {
            "key": self.key,
            "label": self.label,
            "type": self.type,
            "required": self.required,
        }
        if self.options:
            data["options"] = list(self.options)
        if self.placeholder:
            data["placeholder"] = self.placeholder
        return data


@dataclass(frozen=True)
class RegistrationSchema:
    title: str
    description: str = ""
    fields: tuple = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict) or not isinstance(data.get("fields"), list):
            raise SchemaError("Schema must be an object with a 'fields' list")

        parsed = []
        seen = set()
        for raw in data["fields"]:
            key = raw.get("key") if isinstance(raw, dict) else None
            if not key or not isinstance(key, str):
                raise SchemaError(f"Field without a key: {raw!r}")
            if key in seen:
                raise SchemaError(f"Duplicate field key: {key}")
            field_type = raw.get("type", FIELD_TEXT)
            if field_type not in FIELD_TYPES:
                raise SchemaError(f"Unknown type '{field_type}' for field '{key}'")
            options = tuple(raw.get("options") or ())
            if field_type == FIELD_SELECT and not options:
                raise SchemaError(f"Select field '{key}' has no options")
            seen.add(key)
            parsed.append(SchemaField(
                key=key,
                label=raw.get("label") or key,
                type=field_type,
                required=bool(raw.get("required", False)),
                options=options,
                placeholder=raw.get("placeholder"),
            ))

        return cls(
            title=data.get("title") or "Registration",
            description=data.get("description") or "",
            fields=tuple(parsed),
        )

    @property
    def keys(self):
        return [f.key for f in self.fields]

    def validate(self, values):
        """
        Validate submitted registration values.

        Unknown keys are rejected. Returns the cleaned mapping; raises a DRF
        ValidationError keyed by field on failure.
        """
        if not isinstance(values, dict):
            raise serializers.ValidationError({"fields": ["Invalid payload"]})

        errors = {}
        unknown = sorted(set(values) - set(self.keys))
        for key in unknown:
            errors[key] = ["Unknown registration field."]

        cleaned = {}
        for schema_field in self.fields:
            try:
                cleaned[schema_field.key] = schema_field.clean(values.get(schema_field.key))
            except ValueError as e:
                errors[schema_field.key] = [str(e)]

        if errors:
            raise serializers.ValidationError(errors)

        return cleaned

    def as_dict(self):
        return {
            "title": self.title,
            "description": self.description,
            "fields": [f.as_dict() for f in self.fields],
        }


class SchemaLoader:
    """
    Loads the schema file and reloads it when the file changes on disk.

    If a reload fails the last good schema keeps being served.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._mtime = None
        self._schema = None

    def get(self) -> RegistrationSchema:
        try:
            mtime = self.path.stat().st_mtime
        except OSError as e:
            if self._schema is not None:
                logger.warning(f"Registration schema unreadable, serving cached copy: {e}")
                return self._schema
            raise SchemaError(f"Registration schema not found at {self.path}") from e

        with self._lock:
            if self._schema is None or mtime != self._mtime:
                self._reload(mtime)
            return self._schema

    def _reload(self, mtime):
        try:
            with self.path.open(encoding="utf-8") as fh:
                schema = RegistrationSchema.from_dict(json.load(fh))
        except (OSError, ValueError, SchemaError) as e:
            if self._schema is None:
                raise SchemaError(f"Invalid registration schema at {self.path}: {e}") from e
            logger.error(f"Registration schema reload failed, keeping previous version: {e}")
            return

        self._schema = schema
        self._mtime = mtime
        logger.info(f"Loaded registration schema from {self.path} ({len(schema.fields)} fields)")


@lru_cache(maxsize=None)
def get_schema_loader(path: str) -> SchemaLoader:
    return SchemaLoader(path)


def get_registration_schema() -> RegistrationSchema:
    return get_schema_loader(str(settings.REGISTRATION_SCHEMA_PATH)).get()
