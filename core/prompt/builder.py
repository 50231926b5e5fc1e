from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from utils.errors import FormatterError

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class PromptBuilder:
    """Wraps an aggregated diff in the instruction template sent to the LLM."""

    def __init__(
        self,
        template_dir: Optional[str] = None,
        template_name: str = "default.j2",
        language: str = "en",
    ):
        if template_dir is None:
            template_dir = str(DEFAULT_TEMPLATE_DIR)

        self.template_dir = template_dir
        self.template_name = template_name
        self.language = language
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            autoescape=False,
        )

    def build(self, diff: str) -> str:
        try:
            template = self.env.get_template(self.template_name)
            return template.render(diff=diff, language=self.language)
        except TemplateError as e:
            raise FormatterError(f"Failed to render template {self.template_name}: {e}") from e
