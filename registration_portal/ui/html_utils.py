"""Utilities for preparing HTML snippets before rendering in Streamlit."""
from html import escape
from textwrap import dedent


def html_block(template: str) -> str:
    """
    Normalize multi-line HTML so Streamlit doesn't treat it as Markdown code.

    Streamlit's Markdown renderer interprets lines with >=4 leading spaces as
    code blocks, so every line is dedented and left-stripped.
    """
    lines = dedent(template).splitlines()
    return "\n".join(line.lstrip() for line in lines).strip()


def member_counter_html(total: int, label: str = "Registered Students") -> str:
    """Stat card showing the running member total."""
    return html_block(
        f"""
        <div class="stat-card">
            <div class="stat-number" id="totalStudents">{int(total)}</div>
            <div class="stat-label">{escape(label)}</div>
        </div>
        """
    )


def field_error_html(message: str) -> str:
    """Inline red hint shown under an invalid field."""
    return f"<div class='field-error'>{escape(message)}</div>"
