"""
Dashboard Router - browser pages for AI Studio.

The pages are thin HTML shells: all data comes from the JSON API, called
from the browser with the bearer token kept in localStorage under
"aistudio_token". Nothing here touches the database.

Pages:
======
- /dashboard/ai/chat, /dashboard/ai/insights, /dashboard/ai/test
- /dashboard/settings/ai              (Google AI Studio connection, OAuth landing page)
- /dashboard/calls, /dashboard/calls/faqs, /dashboard/calls/{id}
- /dashboard/logos
- /dashboard/websites, /dashboard/websites/{id}/preview
"""

import html
import uuid

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

NAV_LINKS = (
    ("/dashboard/ai/chat", "Chat"),
    ("/dashboard/ai/insights", "Insights"),
    ("/dashboard/calls", "Calls"),
    ("/dashboard/logos", "Logos"),
    ("/dashboard/websites", "Websites"),
    ("/dashboard/ai/test", "Provider test"),
    ("/dashboard/settings/ai", "AI settings"),
)

# Shared by every page: token handling and a fetch wrapper that surfaces
# the API's {error, message, hint} body.
COMMON_SCRIPT = """
const TOKEN_KEY = 'aistudio_token';
function token() { return localStorage.getItem(TOKEN_KEY) || ''; }
async function api(path, options = {}) {
  const headers = Object.assign({'Authorization': 'Bearer ' + token()}, options.headers || {});
  if (options.body && !(options.body instanceof FormData)) headers['Content-Type'] = 'application/json';
  const res = await fetch(path, Object.assign({}, options, {headers}));
  const data = res.status === 204 ? null : await res.json().catch(() => null);
  if (!res.ok) {
    const err = (data && (data.error || data.detail)) || res.statusText;
    const hint = data && data.hint ? ' (' + data.hint + ')' : '';
    throw new Error(err + (data && data.message ? ': ' + data.message : '') + hint);
  }
  return data;
}
function show(id, value) {
  document.getElementById(id).textContent =
    typeof value === 'string' ? value : JSON.stringify(value, null, 2);
}
function fail(id) { return (e) => show(id, 'Error: ' + e.message); }
document.getElementById('token-form').addEventListener('submit', (ev) => {
  ev.preventDefault();
  localStorage.setItem(TOKEN_KEY, document.getElementById('token-input').value.trim());
  location.reload();
});
"""


def render_page(title: str, body: str, script: str = "", data_id: str = "") -> HTMLResponse:
    nav = " | ".join(f'<a href="{href}">{label}</a>' for href, label in NAV_LINKS)
    return HTMLResponse(content=f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>AI Studio - {html.escape(title)}</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
               margin: 0; background: #f6f7f9; color: #1f2328; }}
        header {{ background: #1f2a44; color: #fff; padding: 12px 24px; }}
        header a {{ color: #cfe0ff; text-decoration: none; }}
        main {{ max-width: 960px; margin: 24px auto; padding: 0 24px; }}
        pre {{ background: #fff; border: 1px solid #d0d7de; padding: 12px; white-space: pre-wrap; }}
        input, textarea, select {{ width: 100%; padding: 8px; margin: 4px 0 12px; box-sizing: border-box; }}
        button {{ padding: 8px 16px; }}
        table {{ width: 100%; border-collapse: collapse; background: #fff; }}
        td, th {{ border: 1px solid #d0d7de; padding: 6px 8px; text-align: left; }}
        .token {{ font-size: 12px; margin-top: 8px; }}
        .token input {{ width: 360px; display: inline-block; margin: 0; }}
        .grid img {{ width: 200px; margin: 8px; border: 1px solid #d0d7de; }}
    </style>
</head>
<body data-id="{html.escape(data_id)}">
    <header>
        <strong>AI Studio</strong> &nbsp; {nav}
        <form id="token-form" class="token">
            Access token: <input id="token-input" type="password" placeholder="Bearer token from /auth/login">
            <button type="submit">Save</button>
        </form>
    </header>
    <main>
        <h1>{html.escape(title)}</h1>
        {body}
    </main>
    <script>{COMMON_SCRIPT}{script}</script>
</body>
</html>""")


# ---------------------------------------------------------------------------
# AI
# ---------------------------------------------------------------------------


@router.get("/ai/chat", response_class=HTMLResponse)
def chat_page():
    body = """
        <label>Module
            <select id="module">
                <option>general</option><option>crm</option><option>accounting</option>
                <option>inventory</option><option>marketing</option><option>hr</option>
            </select>
        </label>
        <form id="chat-form">
            <textarea id="message" rows="3" placeholder="Ask about your business..."></textarea>
            <button type="submit">Send</button>
        </form>
        <pre id="answer"></pre>
    """
    script = """
document.getElementById('chat-form').addEventListener('submit', (ev) => {
  ev.preventDefault();
  show('answer', 'Thinking...');
  api('/api/ai/chat', {method: 'POST', body: JSON.stringify({
    message: document.getElementById('message').value,
    context: {module: document.getElementById('module').value},
  })}).then((data) => {
    let text = data.message + '\\n\\n[' + data.service + (data.cached ? ', cached' : '') + ']';
    if (data.suggestedQuestions) text += '\\n\\nTry asking:\\n- ' + data.suggestedQuestions.join('\\n- ');
    show('answer', text);
  }).catch(fail('answer'));
});
"""
    return render_page("AI Chat", body, script)


@router.get("/ai/insights", response_class=HTMLResponse)
def insights_page():
    body = '<button id="refresh">Generate insights</button><pre id="insights"></pre>'
    script = """
function load() {
  show('insights', 'Analyzing your business...');
  api('/api/ai/insights').then((data) => show('insights', data)).catch(fail('insights'));
}
document.getElementById('refresh').addEventListener('click', load);
load();
"""
    return render_page("Business Insights", body, script)


@router.get("/ai/test", response_class=HTMLResponse)
def provider_test_page():
    body = """
        <button id="run">Test chat providers</button>
        <button id="ollama">Check Ollama health</button>
        <pre id="results"></pre>
    """
    script = """
document.getElementById('run').addEventListener('click', () => {
  show('results', 'Testing...');
  api('/api/ai/test').then((data) => show('results', data)).catch(fail('results'));
});
document.getElementById('ollama').addEventListener('click', () => {
  show('results', 'Checking Ollama...');
  api('/api/ai/ollama/health').then((data) => show('results', data)).catch(fail('results'));
});
"""
    return render_page("AI Provider Test", body, script)


@router.get("/settings/ai", response_class=HTMLResponse)
def ai_settings_page():
    body = """
        <pre id="status"></pre>
        <h2>Google AI Studio API key</h2>
        <input id="api-key" type="password" placeholder="AIza...">
        <button id="test-key">Test key</button>
        <button id="save-key">Save key</button>
        <button id="disconnect">Disconnect</button>
        <h2>Or connect with Google</h2>
        <button id="connect">Connect Google account</button>
        <pre id="result"></pre>
    """
    script = """
const params = new URLSearchParams(location.search);
if (params.get('success')) show('result', 'Connected: ' + params.get('success'));
if (params.get('error')) show('result', 'Connection failed: ' + params.get('error'));
function load() { api('/api/ai/integrations').then((d) => show('status', d)).catch(fail('status')); }
function keyBody() { return JSON.stringify({apiKey: document.getElementById('api-key').value}); }
document.getElementById('test-key').addEventListener('click', () => {
  api('/api/ai/integrations/google-ai-studio/test', {method: 'POST', body: keyBody()})
    .then((d) => show('result', d)).catch(fail('result'));
});
document.getElementById('save-key').addEventListener('click', () => {
  api('/api/ai/integrations/google-ai-studio', {method: 'PUT', body: keyBody()})
    .then(() => { show('result', 'Saved'); load(); }).catch(fail('result'));
});
document.getElementById('disconnect').addEventListener('click', () => {
  api('/api/ai/integrations/google-ai-studio', {method: 'DELETE'})
    .then(() => { show('result', 'Disconnected'); load(); }).catch(fail('result'));
});
document.getElementById('connect').addEventListener('click', () => {
  api('/api/ai/google-ai-studio/authorize').then((d) => { location.href = d.authUrl; }).catch(fail('result'));
});
load();
"""
    return render_page("AI Integrations", body, script)


# ---------------------------------------------------------------------------
# CALLS
# ---------------------------------------------------------------------------


@router.get("/calls", response_class=HTMLResponse)
def calls_page():
    body = """
        <select id="status">
            <option value="">All statuses</option><option>RINGING</option><option>ANSWERED</option>
            <option>COMPLETED</option><option>BUSY</option><option>NO_ANSWER</option><option>FAILED</option>
        </select>
        <table><thead><tr><th>Phone</th><th>Direction</th><th>Status</th><th>Started</th>
            <th>Recordings</th><th>Transcripts</th></tr></thead><tbody id="calls"></tbody></table>
        <pre id="error"></pre>
        <p><a href="/dashboard/calls/faqs">Manage FAQs</a></p>
    """
    script = """
function load() {
  const status = document.getElementById('status').value;
  api('/api/calls' + (status ? '?status=' + status : '')).then((data) => {
    const rows = document.getElementById('calls');
    rows.innerHTML = '';
    data.calls.forEach((c) => {
      const tr = document.createElement('tr');
      [c.phoneNumber, c.direction, c.status, c.startedAt, c.recordingCount, c.transcriptCount]
        .forEach((v) => { const td = document.createElement('td'); td.textContent = v; tr.appendChild(td); });
      tr.addEventListener('click', () => { location.href = '/dashboard/calls/' + c.id; });
      rows.appendChild(tr);
    });
  }).catch(fail('error'));
}
document.getElementById('status').addEventListener('change', load);
load();
"""
    return render_page("AI Calls", body, script)


@router.get("/calls/faqs", response_class=HTMLResponse)
def faqs_page():
    body = """
        <form id="faq-form">
            <input id="question" placeholder="Question">
            <textarea id="answer" rows="2" placeholder="Answer"></textarea>
            <input id="category" placeholder="Category (optional)">
            <button type="submit">Add FAQ</button>
        </form>
        <pre id="faqs"></pre>
    """
    script = """
function load() { api('/api/calls/faqs').then((d) => show('faqs', d.faqs)).catch(fail('faqs')); }
document.getElementById('faq-form').addEventListener('submit', (ev) => {
  ev.preventDefault();
  const category = document.getElementById('category').value;
  api('/api/calls/faqs', {method: 'POST', body: JSON.stringify({
    question: document.getElementById('question').value,
    answer: document.getElementById('answer').value,
    category: category || null,
  })}).then(load).catch(fail('faqs'));
});
load();
"""
    return render_page("Call FAQs", body, script)


@router.get("/calls/{call_id}", response_class=HTMLResponse)
def call_detail_page(call_id: uuid.UUID):
    script = """
const id = document.body.dataset.id;
api('/api/calls/' + id).then((d) => show('call', d)).catch(fail('call'));
"""
    return render_page("Call Details", '<pre id="call">Loading...</pre>', script, data_id=str(call_id))


# ---------------------------------------------------------------------------
# LOGOS
# ---------------------------------------------------------------------------


@router.get("/logos", response_class=HTMLResponse)
def logos_page():
    body = """
        <form id="logo-form">
            <input id="business-name" placeholder="Business name">
            <input id="industry" placeholder="Industry (optional)">
            <select id="style">
                <option>modern</option><option>traditional</option><option>playful</option>
                <option>elegant</option><option>minimal</option><option>bold</option>
            </select>
            <button type="submit">Generate logo</button>
        </form>
        <pre id="status"></pre>
        <div id="logos"></div>
    """
    script = """
function render(logos) {
  const root = document.getElementById('logos');
  root.innerHTML = '';
  logos.forEach((logo) => {
    const section = document.createElement('section');
    const h = document.createElement('h3');
    h.textContent = logo.businessName + ' (' + logo.status + ', ' + logo.variationCount + ' variations)';
    section.appendChild(h);
    const grid = document.createElement('div');
    grid.className = 'grid';
    logo.variations.forEach((v) => {
      const img = document.createElement('img');
      img.src = v.imageUrl;
      img.title = v.iconStyle + (v.isSelected ? ' (selected)' : '');
      if (v.isSelected) img.style.borderColor = '#2da44e';
      img.addEventListener('click', () => {
        api('/api/logos/' + logo.id + '/variations/' + v.id + '/select', {method: 'PUT'}).then(load);
      });
      grid.appendChild(img);
    });
    section.appendChild(grid);
    root.appendChild(section);
  });
}
function load() { api('/api/logos').then((d) => render(d.logos)).catch(fail('status')); }
document.getElementById('logo-form').addEventListener('submit', (ev) => {
  ev.preventDefault();
  show('status', 'Generating...');
  api('/api/logos', {method: 'POST', body: JSON.stringify({
    businessName: document.getElementById('business-name').value,
    industry: document.getElementById('industry').value || null,
    style: document.getElementById('style').value,
  })}).then(() => { show('status', 'Done'); load(); }).catch(fail('status'));
});
load();
"""
    return render_page("Logo Generator", body, script)


# ---------------------------------------------------------------------------
# WEBSITES
# ---------------------------------------------------------------------------


@router.get("/websites", response_class=HTMLResponse)
def websites_page():
    body = """
        <form id="site-form">
            <input id="name" placeholder="Website name">
            <input id="subdomain" placeholder="Subdomain (optional)">
            <button type="submit">Create website</button>
        </form>
        <pre id="status"></pre>
        <ul id="sites"></ul>
    """
    script = """
function load() {
  api('/api/websites').then((d) => {
    const list = document.getElementById('sites');
    list.innerHTML = '';
    d.websites.forEach((w) => {
      const li = document.createElement('li');
      const a = document.createElement('a');
      a.href = '/dashboard/websites/' + w.id + '/preview';
      a.textContent = w.name + ' [' + w.status + '] ' + w.pages.length + ' pages';
      li.appendChild(a);
      list.appendChild(li);
    });
  }).catch(fail('status'));
}
document.getElementById('site-form').addEventListener('submit', (ev) => {
  ev.preventDefault();
  api('/api/websites', {method: 'POST', body: JSON.stringify({
    name: document.getElementById('name').value,
    subdomain: document.getElementById('subdomain').value || null,
  })}).then(load).catch(fail('status'));
});
load();
"""
    return render_page("Websites", body, script)


@router.get("/websites/{website_id}/preview", response_class=HTMLResponse)
def website_preview_page(website_id: uuid.UUID):
    body = '<div id="preview">Loading...</div><pre id="error"></pre>'
    script = """
const id = document.body.dataset.id;
api('/api/websites/' + id).then((w) => {
  const root = document.getElementById('preview');
  root.innerHTML = '';
  const h = document.createElement('h2');
  h.textContent = w.metaTitle || w.name;
  root.appendChild(h);
  w.pages.forEach((p) => {
    const section = document.createElement('section');
    const title = document.createElement('h3');
    title.textContent = p.title + ' (' + p.path + ')' + (p.isPublished ? '' : ' - draft');
    const content = document.createElement('pre');
    content.textContent = JSON.stringify(p.content, null, 2);
    section.appendChild(title);
    section.appendChild(content);
    root.appendChild(section);
  });
}).catch(fail('error'));
"""
    return render_page("Website Preview", body, script, data_id=str(website_id))
