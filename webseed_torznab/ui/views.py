# webseed_torznab/ui/views.py

from html import escape

from ..config import ServerConfig
from ..utils import format_bytes

_ENDPOINTS = [
    ("GET /api/torrents", "List all torrents in JSON format", "?q=search_term"),
    ("GET /api/torrents/{info_hash}", "Show a single torrent in JSON format", None),
    ("POST /api/refresh", "Refresh torrent list", None),
    (
        "GET /api/torznab",
        "Torznab API endpoint",
        "?t=search&q=search_term or ?t=caps",
    ),
    ("GET /torrent/{filename}", "Download torrent file", None),
    ("GET /health", "Health check", None),
]


def render_index_page(config: ServerConfig, torrent_count: int, total_size: int) -> str:
    """Builds the HTML documentation page served at the root URL."""
    base_url = escape(config.base_url)
    title = escape(config.title)

    endpoint_items = []
    for route, summary, params in _ENDPOINTS:
        line = f"<li><strong>{escape(route)}</strong> - {escape(summary)}"
        if params:
            line += f"<br><em>Query parameters: {escape(params)}</em>"
        endpoint_items.append(line + "</li>")
    endpoints_html = "\n        ".join(endpoint_items)

    examples = "\n".join(
        [
            "# Get all torrents as JSON",
            f"curl {base_url}/api/torrents",
            "",
            "# Search torrents",
            f'curl "{base_url}/api/torrents?q=avengers"',
            "",
            "# Torznab capabilities",
            f'curl "{base_url}/api/torznab?t=caps"',
            "",
            "# Torznab search",
            f'curl "{base_url}/api/torznab?t=search&amp;q=cube"',
            "",
            "# Refresh torrent list",
            f"curl -X POST {base_url}/api/refresh",
        ]
    )

    return f"""<!DOCTYPE html>
<html>
<head>
    <title>{title} API</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 40px; }}
        code {{ background-color: #f4f4f4; padding: 2px 4px; border-radius: 3px; }}
        pre {{ background-color: #f4f4f4; padding: 10px; border-radius: 5px; overflow-x: auto; }}
    </style>
</head>
<body>
    <h1>{title} API</h1>
    <p>A Torznab API for local torrent files with web seed URLs.</p>

    <h2>Endpoints</h2>
    <ul>
        {endpoints_html}
    </ul>

    <h2>Examples</h2>
    <pre>
{examples}
    </pre>

    <p>Currently serving <strong>{torrent_count}</strong> torrent files ({escape(format_bytes(total_size))}).</p>
</body>
</html>
"""
