import json
import tempfile
import unittest
from pathlib import Path

from scripts import generate_config_docs


class GenerateConfigDocsTest(unittest.TestCase):
    def test_generates_markdown_from_schema(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            repo_root = Path(tmpdir)
            schema_path = repo_root / generate_config_docs.SCHEMA_RELPATH
            schema_path.parent.mkdir(parents=True)
            schema_path.write_text(
                json.dumps(
                    {
                        "title": "Config Schema",
                        "description": "Config description",
                        "type": "object",
                        "properties": {
                            "alpha": {"type": "integer", "minimum": 1, "description": "A|B"}
                        },
                    }
                ),
                encoding="utf-8",
            )

            out_path = generate_config_docs.generate(repo_root)

            out = out_path.read_text(encoding="utf-8")
            self.assertIn("Generated file. Do not edit directly.", out)
            self.assertIn("# Config Schema", out)
            self.assertIn("| `alpha` | `integer` | minimum: `1` | A\\|B |", out)

    def test_shipped_docs_are_current(self) -> None:
        repo_root = generate_config_docs.REPO_ROOT
        schema = json.loads(
            (repo_root / generate_config_docs.SCHEMA_RELPATH).read_text(encoding="utf-8")
        )
        shipped = (repo_root / generate_config_docs.OUTPUT_RELPATH).read_text(encoding="utf-8")
        self.assertEqual(shipped, generate_config_docs.render(schema))


if __name__ == "__main__":
    unittest.main()
