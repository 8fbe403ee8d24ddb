import json
import os
import tempfile
from pathlib import Path

from django.test import SimpleTestCase
from rest_framework import serializers

from participants.schema import RegistrationSchema, SchemaError, SchemaLoader


SCHEMA = {
    "title": "Registration",
    "fields": [
        {"key": "name", "label": "Name", "type": "text", "required": True},
        {"key": "gender", "label": "Gender", "type": "select", "required": True, "options": ["Male", "Female"]},
        {"key": "skills", "label": "Skills", "type": "tags"},
        {"key": "bio", "label": "Bio"},
    ],
}


class RegistrationSchemaTests(SimpleTestCase):
    def setUp(self):
        self.schema = RegistrationSchema.from_dict(SCHEMA)

    def test_validate_normalises_values(self):
        cleaned = self.schema.validate({
            "name": "  Amy  ",
            "gender": "female",
            "skills": "Python, SQL, ,Python",
        })
        self.assertEqual(cleaned, {"name": "Amy", "gender": "Female", "skills": ["Python", "SQL"], "bio": ""})

    def test_unknown_keys_rejected(self):
        with self.assertRaises(serializers.ValidationError) as ctx:
            self.schema.validate({"name": "Amy", "gender": "Female", "shoe_size": "7"})
        self.assertIn("shoe_size", ctx.exception.detail)

    def test_required_and_options(self):
        with self.assertRaises(serializers.ValidationError) as ctx:
            self.schema.validate({"gender": "Robot"})
        self.assertIn("name", ctx.exception.detail)
        self.assertIn("gender", ctx.exception.detail)

    def test_tags_must_be_list(self):
        with self.assertRaises(serializers.ValidationError):
            self.schema.validate({"name": "Amy", "gender": "Female", "skills": {"a": 1}})

    def test_malformed_schema(self):
        with self.assertRaises(SchemaError):
            RegistrationSchema.from_dict({"fields": [{"key": "x", "type": "dropdown"}]})
        with self.assertRaises(SchemaError):
            RegistrationSchema.from_dict({"fields": [{"key": "x", "type": "select"}]})
        with self.assertRaises(SchemaError):
            RegistrationSchema.from_dict({"fields": [{"key": "x"}, {"key": "x"}]})

    def test_as_dict(self):
        data = self.schema.as_dict()
        self.assertEqual([f["key"] for f in data["fields"]], ["name", "gender", "skills", "bio"])
        self.assertEqual(data["fields"][1]["options"], ["Male", "Female"])


class SchemaLoaderTests(SimpleTestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.path = Path(tmp.name) / "schema.json"
        self.write(SCHEMA, mtime=1_000_000)

    def write(self, data, mtime):
        self.path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
        os.utime(self.path, (mtime, mtime))

    def test_reloads_when_file_changes(self):
        loader = SchemaLoader(self.path)
        self.assertEqual(len(loader.get().fields), 4)

        changed = dict(SCHEMA, fields=SCHEMA["fields"] + [{"key": "college", "label": "College"}])
        self.write(changed, mtime=1_000_100)

        self.assertIn("college", loader.get().keys)

    def test_keeps_last_good_schema(self):
        loader = SchemaLoader(self.path)
        loader.get()

        self.write("{not json", mtime=1_000_200)
        with self.assertLogs("hackreg.participants", level="ERROR"):
            schema = loader.get()

        self.assertEqual(len(schema.fields), 4)

    def test_missing_file(self):
        with self.assertRaises(SchemaError):
            SchemaLoader(self.path.with_name("nope.json")).get()
