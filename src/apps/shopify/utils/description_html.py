import re

import markdown


MARKDOWN_EXTENSIONS = ["nl2br", "sane_lists", "tables", "fenced_code"]

LIST_ITEM = re.compile(r"^ {0,3}(?:[-*+]|\d+\.)\s+\S")
CODE_FENCE = re.compile(r"^ {0,3}(```|~~~)")

SCRIPT_BLOCK = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
STYLE_BLOCK = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
EVENT_HANDLER = re.compile(r"\s(on\w+)\s*=\s*(\"[^\"]*\"|'[^']*'|[^\s>]+)", re.IGNORECASE)
BLANK_LINES = re.compile(r"\n\s*\n")


def separate_lists(text: str) -> str:
    """Put a blank line between a paragraph and a list that starts right under it.

    `**Key Features:**` followed directly by `- item` lines is a list in GFM,
    but Python-Markdown only starts a list after a blank line.
    """
    lines = []
    in_list = False
    in_fence = False

    for line in text.splitlines():
        if CODE_FENCE.match(line):
            in_fence = not in_fence
        elif not in_fence:
            if LIST_ITEM.match(line):
                if not in_list and lines and lines[-1].strip():
                    lines.append("")
                in_list = True
            elif not line.strip():
                in_list = False
        lines.append(line)

    return "\n".join(lines)


def sanitize_html(html: str) -> str:
    """Strip script/style blocks and inline event handlers."""
    html = SCRIPT_BLOCK.sub("", html)
    html = STYLE_BLOCK.sub("", html)
    html = EVENT_HANDLER.sub("", html)
    return BLANK_LINES.sub("\n", html).strip()


def convert_markdown_to_html(text: str) -> str:
    """Render a listing description as Shopify-compatible HTML."""
    if not text:
        return ""
    html = markdown.markdown(separate_lists(text), extensions=MARKDOWN_EXTENSIONS)
    return sanitize_html(html)
