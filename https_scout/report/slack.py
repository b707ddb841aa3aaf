# File: https_scout/report/slack.py
"""https_scout.report.slack: форматирование итогов обхода в сообщение Slack через Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_NAME = "slack.txt.j2"


def slack_escape(text: str) -> str:
    """Экранирует управляющие символы Slack: ``&``, ``<`` и ``>``."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _lines(text: str) -> List[str]:
    return [line for line in text.splitlines() if line.strip()]


def _environment(template_dir: Union[Path, str]) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    env.filters["slack_escape"] = slack_escape
    return env


def format_message(
    results: str,
    errors: str,
    template_dir: Union[Path, str] = TEMPLATE_DIR,
) -> str:
    """Собирает одно сообщение из захваченного вывода результатов и ошибок.

    Args:
        results: весь текст потока результатов.
        errors: весь текст потока ошибок.
        template_dir: директория с шаблоном ``slack.txt.j2``.

    Returns:
        Готовый текст сообщения.
    """
    template = _environment(template_dir).get_template(TEMPLATE_NAME)
    return template.render(links=_lines(results), errors=_lines(errors)).strip() + "\n"
