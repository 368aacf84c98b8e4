"""
HTML pages shown in the user's browser at the end of the provider redirect.
The desktop app learns the outcome by polling, so these only tell the user what to do next.
"""
import html

_STYLE = """
    body { font-family: system-ui, sans-serif; text-align: center; padding: 50px; background: #f4f4f8; }
    .container { background: white; padding: 40px; border-radius: 12px; max-width: 420px; margin: 0 auto; }
    h1 { color: #333; font-size: 1.4rem; }
    p { color: #666; }
    code { color: #a33; }"""

_PROVIDER_LABELS = {"google": "Google", "notion": "Notion"}


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{html.escape(title)}</title>
  <style>{_STYLE}
  </style>
</head>
<body>
  <div class="container">
{body}
  </div>
</body>
</html>"""


def provider_label(provider: str) -> str:
    return _PROVIDER_LABELS.get(provider, provider.capitalize())


def success_page(provider: str) -> str:
    label = html.escape(provider_label(provider))
    return _page(
        f"{provider_label(provider)} account linked",
        f"""    <h1>{label} account linked</h1>
    <p>You can close this tab and return to the Synk app.</p>""",
    )


def error_page(title: str, message: str, error: str | None = None) -> str:
    """Error page; error is the machine-readable code, shown for support requests."""
    code_line = f"\n    <p>Error code: <code>{html.escape(error)}</code></p>" if error else ""
    return _page(
        title,
        f"""    <h1>{html.escape(title)}</h1>
    <p>{html.escape(message)}</p>{code_line}
    <p>Close this tab and try connecting again from the Synk app.</p>""",
    )
