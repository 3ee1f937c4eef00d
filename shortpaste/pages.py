"""
HTML pages for creating and viewing pastes.
"""
from datetime import datetime
from html import escape
from typing import Optional

from shortpaste.expiration import DEFAULT_EXPIRATION, Expiration, format_expires_in
from shortpaste.languages import DEFAULT_LANGUAGE, LANGUAGES, get_language
from shortpaste.models import Paste, PasteDraft

_STYLE = """
        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }
        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
            background: #111827;
            color: #f3f4f6;
            min-height: 100vh;
            display: flex;
            flex-direction: column;
        }
        .topbar {
            display: flex;
            align-items: center;
            gap: 12px;
            padding: 10px 16px;
            background: #1f2937;
            border-bottom: 1px solid #374151;
        }
        .topbar .brand {
            font-weight: 700;
            margin-right: auto;
            color: #f3f4f6;
            text-decoration: none;
        }
        .topbar a, .topbar button {
            background: #374151;
            color: #f3f4f6;
            border: none;
            border-radius: 4px;
            padding: 6px 12px;
            font-size: 14px;
            text-decoration: none;
            cursor: pointer;
        }
        .topbar button.primary {
            background: #2563eb;
        }
        .topbar select {
            background: #111827;
            color: #f3f4f6;
            border: 1px solid #374151;
            border-radius: 4px;
            padding: 5px 8px;
        }
        .meta {
            color: #9ca3af;
            font-size: 14px;
        }
        textarea, pre {
            flex: 1;
            width: 100%;
            padding: 16px;
            background: #111827;
            color: #f3f4f6;
            border: none;
            font-family: "Courier New", monospace;
            font-size: 14px;
            line-height: 1.6;
            white-space: pre-wrap;
            word-wrap: break-word;
            overflow: auto;
            resize: none;
        }
        .centered {
            flex: 1;
            display: flex;
            align-items: center;
            justify-content: center;
        }
"""


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)} - Shortpaste</title>
    <style>{_STYLE}</style>
</head>
<body>
{body}
</body>
</html>"""


def _options(choices, selected: str) -> str:
    return "\n".join(
        f'<option value="{escape(value)}"{" selected" if value == selected else ""}>{escape(label)}</option>'
        for value, label in choices
    )


def render_create_page(draft: Optional[PasteDraft] = None) -> str:
    """Editor page; a draft pre-fills it when forking an existing paste."""
    content = draft.content if draft else ""
    language = get_language(draft.language).id if draft else DEFAULT_LANGUAGE.id
    language_options = _options(((lang.id, lang.label) for lang in LANGUAGES), language)
    expiration_options = _options(((exp.value, exp.label) for exp in Expiration), DEFAULT_EXPIRATION.value)

    body = f"""    <div class="topbar">
        <a class="brand" href="/">Shortpaste</a>
        <select id="language">{language_options}</select>
        <select id="expiration">{expiration_options}</select>
        <button class="primary" id="save">Save</button>
    </div>
    <textarea id="content" placeholder="Paste your text here..." spellcheck="false">{escape(content)}</textarea>
    <script>
        document.getElementById("save").addEventListener("click", async (event) => {{
            const content = document.getElementById("content").value;
            if (!content.trim()) return;
            event.target.disabled = true;
            const response = await fetch("/api/pastes", {{
                method: "POST",
                headers: {{"Content-Type": "application/json"}},
                body: JSON.stringify({{
                    content: content,
                    language: document.getElementById("language").value,
                    expiration: document.getElementById("expiration").value,
                }}),
            }});
            if (response.ok) {{
                const paste = await response.json();
                window.location.href = "/" + paste.id;
            }} else {{
                event.target.disabled = false;
                alert("Failed to save paste");
            }}
        }});
    </script>"""
    return _page("New paste", body)


def render_paste_page(paste: Paste, now: Optional[datetime] = None) -> str:
    """Read-only view of a paste with raw, download and fork actions."""
    identifier = escape(paste.identifier)
    body = f"""    <div class="topbar">
        <a class="brand" href="/">Shortpaste</a>
        <span class="meta">{escape(get_language(paste.language).label)}</span>
        <span class="meta">{format_expires_in(paste.expires_at, now)}</span>
        <a href="/{identifier}/raw">Raw</a>
        <a href="/{identifier}/download">Download</a>
        <a href="/?fork={identifier}">Fork</a>
        <a href="/">New</a>
    </div>
    <pre>{escape(paste.content)}</pre>"""
    return _page(f"Paste {paste.identifier}", body)


def render_404_page() -> str:
    """Render a 404 error page."""
    body = """    <div class="topbar">
        <a class="brand" href="/">Shortpaste</a>
        <a href="/">New</a>
    </div>
    <div class="centered">Paste not found</div>"""
    return _page("Not Found", body)
