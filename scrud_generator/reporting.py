"""
Run report persistence.

Reports are saved as YAML when the target path ends in ``.yaml``/``.yml``
and rendered to Markdown through a Jinja2 template otherwise.
"""

import logging
from pathlib import Path

import yaml
from jinja2 import Environment, FileSystemLoader, select_autoescape

from scrud_generator.domain.models import RunReport
from scrud_generator.domain.naming import pluralize


logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / "templates"
REPORT_TEMPLATE = "run_report.md.j2"


def setup_jinja_env() -> Environment:
    """Sets up and returns the Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,  # Remove first newline after a block tag
        lstrip_blocks=True,  # Strip leading whitespace from lines with block tags
    )
    env.filters["pluralize"] = pluralize
    return env


def render_markdown_report(report: RunReport) -> str:
    template = setup_jinja_env().get_template(REPORT_TEMPLATE)
    return template.render(report=report.to_dict())


def save_report(report: RunReport, path) -> Path:
    """Write the run report to ``path`` and return it."""
    output_path = Path(path)
    if output_path.suffix in (".yaml", ".yml"):
        content = yaml.safe_dump(report.to_dict(), sort_keys=False)
    else:
        content = render_markdown_report(report)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(content)
    logger.info(f"Run report written to {output_path}")
    return output_path
