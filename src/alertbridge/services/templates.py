"""Jinja2 templates for alert notifications."""
from __future__ import annotations

import glob
from pathlib import Path
from typing import Any, Iterable, Mapping

import structlog
from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    PackageLoader,
    StrictUndefined,
    Template,
    TemplateNotFound,
    TemplateSyntaxError,
)

from alertbridge.utils.exceptions import RenderError

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATE = "default.j2"


class AlertTemplates:
    """
    Render alert groups through a Jinja2 template.

    Operator templates are looked up by file name before the bundled ones,
    so a file named ``default.j2`` replaces the built-in layout. Output is
    HTML-escaped, matching Telegram's HTML parse mode.
    """

    def __init__(
        self,
        sources: Mapping[str, str] | None = None,
        entry: str = DEFAULT_TEMPLATE,
        external_url: str = "",
    ):
        self.entry = entry
        self.external_url = external_url
        self.env = Environment(
            loader=ChoiceLoader(
                [
                    DictLoader(dict(sources or {})),
                    PackageLoader("alertbridge", "templates"),
                ]
            ),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.template = self._compile()

    @classmethod
    def from_paths(
        cls,
        patterns: Iterable[str],
        entry: str = DEFAULT_TEMPLATE,
        external_url: str = "",
    ) -> AlertTemplates:
        """
        Load operator templates from glob patterns.

        Raises:
            ValueError: A pattern matches nothing, a file cannot be read,
                or a template does not compile
        """
        sources: dict[str, str] = {}
        for pattern in patterns:
            matches = sorted(glob.glob(pattern))
            if not matches:
                raise ValueError(f"no templates match {pattern}")
            for match in matches:
                path = Path(match)
                try:
                    sources[path.name] = path.read_text(encoding="utf-8")
                except OSError as exc:
                    raise ValueError(f"unable to read template {match}: {exc}") from exc

        if sources:
            logger.info("templates_loaded", templates=sorted(sources), entry=entry)
        return cls(sources, entry=entry, external_url=external_url)

    def render(self, context: Mapping[str, Any]) -> str:
        """
        Render the entry template.

        Raises:
            RenderError: The template failed, e.g. on an undefined variable
        """
        try:
            return self.template.render(context).strip()
        except Exception as exc:
            # Operator templates can fail with any error from their expressions.
            raise RenderError(f"template {self.entry}: {exc}") from exc

    def _compile(self) -> Template:
        for name in self.env.list_templates():
            try:
                self.env.get_template(name)
            except TemplateSyntaxError as exc:
                raise ValueError(f"invalid template {name}: {exc.message} (line {exc.lineno})") from exc
        try:
            return self.env.get_template(self.entry)
        except TemplateNotFound:
            raise ValueError(f"template {self.entry} not found") from None
