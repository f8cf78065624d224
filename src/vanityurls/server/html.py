"""HTML generation for metadata and index pages."""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vanityurls.server.dispatch import IndexPage, MetadataPage


def generate_vanity_page(page: MetadataPage) -> str:
    """Generate the page read by ``go get``: go-import and go-source meta tags."""
    docs_link = escape(page.docs_link)
    site = escape(_site_name(page.docs_url))
    return f"""<!DOCTYPE html>
<html>
<head>
<meta http-equiv="Content-Type" content="text/html; charset=utf-8"/>
<meta name="go-import" content="{escape(page.go_import)}">
<meta name="go-source" content="{escape(page.go_source)}">
<meta http-equiv="refresh" content="0; url={docs_link}">
</head>
<body>
Nothing to see here; <a href="{docs_link}">see the package on {site}</a>.
</body>
</html>
"""


def generate_index_page(page: IndexPage) -> str:
    """Generate the root listing of every mount."""
    lines = [
        "<!DOCTYPE html>",
        "<html>",
        f"<h1>{escape(page.host)}</h1>",
        "<ul>",
    ]
    for handler in page.handlers:
        href = escape(f"{page.docs_url}/{handler}")
        lines.append(f'<li><a href="{href}">{escape(handler)}</a></li>')
    lines.append("</ul>")

    if page.rules:
        lines.append("<ul>")
        for match, repo in page.rules:
            lines.append(f"<li>{escape(match)} is served from {escape(repo)}</li>")
        lines.append("</ul>")

    lines.append("</html>")
    return "\n".join(lines) + "\n"


def _site_name(docs_url: str) -> str:
    return docs_url.split("://", 1)[-1]
