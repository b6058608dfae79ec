from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter()

@router.get("/", response_class=HTMLResponse)
def home():
    return HTMLResponse("""
<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>Source Inspector</title>
  <meta name="viewport" content="width=device-width,initial-scale=1" />
  <style>
    body { font-family: Arial, sans-serif; margin: 0; }
    .bar { padding: 12px; display: flex; gap: 8px; align-items: center; border-bottom: 1px solid #ddd; }
    input { flex: 1; padding: 10px; font-size: 14px; }
    button { padding: 10px 14px; }
    .meta { padding: 6px 12px; font-size: 12px; color: #444; border-bottom: 1px solid #eee; }
    pre { margin: 0; padding: 12px; white-space: pre-wrap; word-break: break-all; font-size: 12px; }
    .err { color: #b00020; }
  </style>
</head>
<body>
  <div class="bar">
    <input id="url" placeholder="https://example.com/" />
    <button id="go">View source</button>
  </div>
  <div class="meta" id="meta">Enter a URL and click the button.</div>
  <pre id="source"></pre>

  <script>
    const meta = document.getElementById('meta');
    const source = document.getElementById('source');
    const input = document.getElementById('url');
    const btn = document.getElementById('go');

    async function run() {
      const url = input.value.trim();
      if (!url) return;

      meta.textContent = 'Loading...';
      source.textContent = '';

      const res = await fetch('/fetch-url', {
        method: 'POST',
        headers: {'Content-Type': 'application/json'},
        body: JSON.stringify({ url })
      });

      const data = await res.json();
      if (!res.ok) {
        meta.innerHTML = '<span class="err"></span>';
        meta.firstChild.textContent = res.status + ': ' + (data.error || 'Error');
        return;
      }

      const remaining = res.headers.get('X-RateLimit-Remaining');
      meta.textContent = data.size + ' bytes, ' + (data.cached ? 'cached' : 'fresh') +
        (remaining !== null ? ', ' + remaining + ' requests left this minute' : '');
      source.textContent = data.html;
    }

    btn.addEventListener('click', run);
    input.addEventListener('keydown', (e) => { if (e.key === 'Enter') run(); });
  </script>
</body>
</html>
    """)
