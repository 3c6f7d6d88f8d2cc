"""Prompt templates using Jinja2."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

PROMPTS_DIR = Path(__file__).parent
_env = Environment(
    loader=FileSystemLoader(PROMPTS_DIR),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)


def render_review_context(
    pr_title: str,
    pr_description: str,
    diff: str,
    requirement_file_name: str | None,
) -> str:
    """Render the context file read by the review tool."""
    template = _env.get_template("review_context.jinja2")
    return template.render(
        pr_title=pr_title,
        pr_description=pr_description,
        diff=diff,
        requirement_file_name=requirement_file_name,
    )


def render_direct_review_prompt(
    pr_title: str,
    pr_description: str,
    diff: str,
    use_file_search: bool,
) -> str:
    """Render the prompt for the direct model review."""
    template = _env.get_template("direct_review.jinja2")
    return template.render(
        pr_title=pr_title,
        pr_description=pr_description,
        diff=diff,
        use_file_search=use_file_search,
    )


def render_talk_script_prompt(findings_json: str) -> str:
    """Render the spoken summary prompt."""
    template = _env.get_template("talk_script.jinja2")
    return template.render(findings_json=findings_json)
