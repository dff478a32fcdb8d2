"""
Minimal HTML pages served by the bridge's HTTP surface
"""

from html import escape
from typing import List, Optional

from ..core.session import SessionRecord

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


def landing_page(sessions: List[SessionRecord], current_session_id: Optional[str],
                 notice: Optional[str] = None) -> str:
    """PIN entry form plus the list of sessions running on this host"""
    parts = ["<h1>Remote Bridge</h1>"]

    if notice:
        parts.append(f'<p class="error">{escape(notice)}</p>')

    parts.append(
        '<form action="/app" method="get">'
        '<input name="pin" type="tel" inputmode="numeric" autocomplete="off" autofocus>'
        '<button type="submit">Connect</button>'
        '</form>'
    )

    if sessions:
        items = []
        for record in sessions:
            badge = " (current)" if record.id == current_session_id else ""
            items.append(
                f'<li data-port="{record.port}">{escape(record.label)} '
                f'- port {record.port}{badge}</li>'
            )
        parts.append(f'<h2>Active Sessions</h2><ul class="sessions">{"".join(items)}</ul>')

    return _PAGE.format(title="Remote Bridge", body="\n".join(parts))


def app_page(label: str) -> str:
    """Shell for the authenticated application view"""
    body = (
        f'<h1>{escape(label)}</h1>'
        '<div id="app" data-socket-path="/socket.io"></div>'
    )
    return _PAGE.format(title=f"{escape(label)} - Remote Bridge", body=body)
