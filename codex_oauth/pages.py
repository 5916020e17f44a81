"""Static HTML pages served by the local callback listener"""

import html

_STYLE = """
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; background: #0f172a; color: #f8fafc; display: flex; align-items: center; justify-content: center; height: 100vh; margin: 0; }
        .card { background: #1e293b; padding: 3rem; border-radius: 1rem; text-align: center; max-width: 400px; border: 1px solid #334155; }
        h1 { margin: 0 0 1rem; font-weight: 700; }
        h1.ok { color: #10b981; }
        h1.failed { color: #ef4444; }
        p { color: #94a3b8; line-height: 1.6; }
        .error { background: rgba(239, 68, 68, 0.1); padding: 1rem; border-radius: 0.5rem; color: #fca5a5; margin-top: 1rem; font-family: monospace; }
"""

SUCCESS_HTML = f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Authentication Successful</title>
    <style>{_STYLE}</style>
</head>
<body>
    <div class="card">
        <h1 class="ok">Authentication Successful!</h1>
        <p>You can close this window and return to the account manager.</p>
    </div>
    <script>setTimeout(function() {{ window.close(); }}, 3000);</script>
</body>
</html>
"""

WAITING_HTML = """<!DOCTYPE html>
<html>
<body>
    <p>Waiting for authorization code...</p>
</body>
</html>
"""


def error_html(message: str) -> str:
    """Failure page; ``message`` comes from the query string and is escaped"""
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Authentication Failed</title>
    <style>{_STYLE}</style>
</head>
<body>
    <div class="card">
        <h1 class="failed">Authentication Failed</h1>
        <p>Authentication could not be completed.</p>
        <div class="error">{html.escape(message)}</div>
        <p>Please close this window and try again.</p>
    </div>
</body>
</html>
"""
