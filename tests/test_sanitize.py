from app.utils.sanitize import sanitize_comment, sanitize_html


def test_script_tags_are_removed():
    assert sanitize_html("<script>alert(1)</script>") == ""


def test_event_handlers_are_stripped():
    cleaned = sanitize_html('<a href="https://example.com" onclick="steal()">link</a>')
    assert "onclick" not in cleaned
    assert 'href="https://example.com"' in cleaned


def test_javascript_urls_are_dropped():
    cleaned = sanitize_html('<a href="javascript:alert(1)">x</a>')
    assert "javascript" not in cleaned


def test_plain_text_is_untouched():
    assert sanitize_comment("  Works well for release notes  ") == "Works well for release notes"


def test_empty_input_becomes_none():
    assert sanitize_comment(None) is None
    assert sanitize_comment("") is None
    assert sanitize_comment(" \n\t ") is None


def test_fully_stripped_input_is_escaped_by_default():
    cleaned = sanitize_comment("<script>alert(1)</script>")
    assert cleaned
    assert "<" not in cleaned
    assert "&lt;script&gt;" in cleaned


def test_fully_stripped_input_can_be_dropped():
    assert sanitize_comment("<script>alert(1)</script>", empty_fallback="empty") is None
