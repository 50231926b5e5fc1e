import unittest
import tempfile
from pathlib import Path

from core.prompt.builder import PromptBuilder
from utils.errors import FormatterError


class TestPromptBuilder(unittest.TestCase):
    def setUp(self):
        self.diff = "Repository: /work/a\ndiff --git a/x.py b/x.py\n+print('hi')\n"

    def test_default_template_wraps_diff(self):
        prompt = PromptBuilder().build(self.diff)

        self.assertTrue(prompt.startswith("Write an insightful but concise git commit message"))
        self.assertIn(self.diff, prompt)
        self.assertIn("in the language en", prompt)

    def test_language_is_configurable(self):
        prompt = PromptBuilder(language="de").build(self.diff)

        self.assertIn("in the language de", prompt)

    def test_diff_is_not_escaped(self):
        prompt = PromptBuilder().build("+if a < b and c > d: {{ x }}")

        self.assertIn("+if a < b and c > d: {{ x }}", prompt)

    def test_template_not_found(self):
        builder = PromptBuilder(template_name="non_existent_template.j2")

        with self.assertRaises(FormatterError):
            builder.build(self.diff)

    def test_custom_template_dir(self):
        with tempfile.TemporaryDirectory() as template_dir:
            (Path(template_dir) / "custom.j2").write_text("Describe ({{ language }}):\n{{ diff }}", encoding="utf-8")

            builder = PromptBuilder(template_dir=template_dir, template_name="custom.j2", language="fr")

            self.assertEqual(builder.build("+a"), "Describe (fr):\n+a")


if __name__ == "__main__":
    unittest.main()
