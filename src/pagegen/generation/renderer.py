"""Template renderer: substitute ``{{field}}`` placeholders with sanitized row values."""

from collections.abc import Callable, Mapping

import nh3

HtmlSanitizer = Callable[[str], str]

# Formatting markup accepted inside substituted values, on top of nh3's defaults.
EXTRA_ALLOWED_TAGS = {"figure", "figcaption", "section", "article", "aside", "header", "footer"}
EXTRA_ALLOWED_ATTRIBUTES = {"*": {"class", "id"}, "a": {"target"}}


def sanitize_html(value: str) -> str:
    """Strip scripts, styles and event handlers, keeping common formatting tags."""
    attributes = {tag: set(attrs) for tag, attrs in nh3.ALLOWED_ATTRIBUTES.items()}
    for tag, attrs in EXTRA_ALLOWED_ATTRIBUTES.items():
        attributes.setdefault(tag, set()).update(attrs)
    return nh3.clean(
        value,
        tags=nh3.ALLOWED_TAGS | EXTRA_ALLOWED_TAGS,
        attributes=attributes,
    )


def placeholder(key: str) -> str:
    return "{{" + key + "}}"


def render_template(
    template: str,
    row: Mapping[str, str],
    sanitizer: HtmlSanitizer = sanitize_html,
) -> str:
    """Replace every ``{{key}}`` in *template* with the sanitized value of ``row[key]``.

    Keys are applied in row order using literal string replacement.
    Placeholders without a matching key are left as they are.
    """
    content = template
    for key, value in row.items():
        token = placeholder(key)
        if token in content:
            content = content.replace(token, sanitizer(value))
    return content
