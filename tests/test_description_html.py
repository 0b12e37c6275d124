from apps.shopify.core.prompts.listing_prompts import EXAMPLE_DESCRIPTION
from apps.shopify.utils.description_html import convert_markdown_to_html, sanitize_html, separate_lists


def test_keeps_ordinary_formatting():
    html = convert_markdown_to_html("## Style\n\n**Key Features:**\n\n- Ruffled collar\n- Sleeveless")

    assert "<h2>Style</h2>" in html
    assert "<strong>Key Features:</strong>" in html
    assert "<li>Ruffled collar</li>" in html
    assert "<ul>" in html


def test_single_newlines_become_breaks():
    html = convert_markdown_to_html("**Shoulder - 38\nBust - 44**")
    assert "<br" in html


def test_strips_script_and_style_blocks():
    markdown_text = "Pretty dress\n\n<script>alert('x')</script>\n\n<style>p { color: red }</style>\n\nEnd"
    html = convert_markdown_to_html(markdown_text)

    assert "script" not in html
    assert "style" not in html
    assert "alert" not in html
    assert "Pretty dress" in html
    assert "End" in html


def test_strips_inline_event_handlers():
    html = sanitize_html('<p onclick="steal()">Hi</p><img src="a.jpg" onerror="x()">')

    assert "onclick" not in html
    assert "onerror" not in html
    assert '<img src="a.jpg">' in html


def test_collapses_blank_lines():
    assert sanitize_html("<p>a</p>\n\n\n<p>b</p>") == "<p>a</p>\n<p>b</p>"


def test_empty_input():
    assert convert_markdown_to_html("") == ""


def test_list_directly_under_a_paragraph():
    html = convert_markdown_to_html("**Key Features:**\n- Ruffled collar\n- Sleeveless")

    assert "<p><strong>Key Features:</strong></p>" in html
    assert "<li>Ruffled collar</li>" in html
    assert "<li>Sleeveless</li>" in html
    assert "- Ruffled" not in html


def test_prompt_example_description_keeps_every_list_item():
    html = convert_markdown_to_html(EXAMPLE_DESCRIPTION)

    assert html.count("<ul>") == 3
    assert html.count("<li>") == 17
    assert "<li>Autumn weddings</li>" in html


def test_numbered_list_under_a_paragraph():
    html = convert_markdown_to_html("Care:\n1. Hand wash\n2. Dry flat")
    assert "<ol>" in html
    assert html.count("<li>") == 2


def test_fenced_code_left_alone():
    assert separate_lists("```\nline\n- not a list\n```") == "```\nline\n- not a list\n```"


def test_strips_unquoted_and_spaced_event_handlers():
    html = sanitize_html('<p onclick=steal()>Hi</p><img src="a.jpg" onerror = "x()">')

    assert "onclick" not in html
    assert "onerror" not in html
    assert html == '<p>Hi</p><img src="a.jpg">'
