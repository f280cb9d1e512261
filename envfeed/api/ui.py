from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["ui"])

HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>Environmental Snapshot Viewer</title>
  <style>
    :root{
      --bg: #f5f5f5;
      --bar: #ebebeb;
      --panel: #ffffff;
      --ink: #111111;
      --muted: rgba(17,17,17,0.55);
      --accent: #2f6fed;
      --radius: 12px;
    }
    *{ box-sizing: border-box; }
    body{
      margin: 0;
      font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif;
      background: var(--bg);
      color: var(--ink);
    }
    header{
      position: sticky; top: 0;
      display:flex; align-items:center; justify-content: space-between; gap: 12px;
      padding: 12px 16px;
      background: var(--bar);
      border-bottom: 1px solid rgba(0,0,0,0.06);
    }
    header b{ font-size: 15px; }
    #status{ font-size: 12px; color: var(--muted); margin-top: 2px; }
    button{
      border: 1px solid rgba(0,0,0,0.15); background: var(--panel);
      border-radius: 10px; padding: 8px 12px; font-size: 13px; cursor: pointer;
    }
    button:hover{ border-color: var(--accent); }
    .grid{
      display:grid; gap: 10px; padding: 16px;
      grid-template-columns: repeat(auto-fill, minmax(110px, 1fr));
    }
    .cell{
      background: var(--panel); border-radius: var(--radius);
      border: 1px solid rgba(0,0,0,0.06);
      padding: 8px; cursor: pointer; text-align: center;
    }
    .cell.sel{ border-color: var(--accent); }
    .cell small{ display:block; color: var(--muted); font-size: 11px; }
    .modal{
      position: fixed; inset: 0; display:none;
      background: rgba(0,0,0,0.35);
      align-items: center; justify-content: center;
    }
    .modal.open{ display:flex; }
    .card{
      background: var(--panel); border-radius: var(--radius);
      width: min(420px, 92vw); padding: 18px;
    }
    .card p{ white-space: pre-wrap; }
    .empty{ padding: 24px; color: var(--muted); }
  </style>
</head>
<body>
<header>
  <div>
    <b>Environmental Snapshot Viewer</b>
    <div id="status">Not loaded yet.</div>
  </div>
  <div>
    <button id="btnRefresh">Refresh</button>
    <button id="btnBurst">Check for new entry</button>
  </div>
</header>
<div id="grid" class="grid"></div>
<div id="modal" class="modal"><div class="card" id="card"></div></div>

<script>
const LATEST_FIRST = __LATEST_FIRST__;
let items = [];
let selectedId = null;

function esc(s){
  return String(s ?? '').replace(/[&<>"']/g, c => ({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#39;'}[c]));
}

async function safeJson(url, opts){
  try{
    const r = await fetch(url, opts);
    if(!r.ok) throw new Error('HTTP ' + r.status);
    return await r.json();
  }catch(e){
    return null;
  }
}

// temperature -> hue (cold blue, warm red)
function tempColor(t){
  const x = Math.max(-10, Math.min(30, t ?? 0));
  const hue = 220 - ((x + 10) / 40) * 220;
  return `hsl(${hue}, 70%, 55%)`;
}

function glyph(d){
  const r = 6 + Math.min(100, d.sound_loudness ?? 0) * 0.22;
  const ring = 10 + Math.min(100, d.humidity_pct ?? 0) * 0.2;
  return `<svg width="70" height="70" viewBox="-35 -35 70 70">
    <circle r="${ring}" fill="none" stroke="#111" stroke-opacity="0.35"/>
    <circle r="${r}" fill="${tempColor(d.temp_c)}"/>
  </svg>`;
}

function render(){
  const grid = document.getElementById('grid');
  if(!items.length){
    grid.innerHTML = '<div class="empty">No valid events yet (or feed not reachable).</div>';
    return;
  }
  const list = LATEST_FIRST ? items.slice().reverse() : items;
  grid.innerHTML = list.map(d => `
    <div class="cell ${d.event_id === selectedId ? 'sel' : ''}" data-id="${d.event_id}">
      ${glyph(d)}
      <small>#${esc(d.event_id)} • ${d.note_word_count} words</small>
    </div>`).join('');
}

function openModal(d){
  document.getElementById('card').innerHTML = `
    <b>Event #${esc(d.event_id)}</b>
    <div style="color:var(--muted);font-size:12px">${esc(d.created_at)}</div>
    <p>${d.note ? esc(d.note) : '<i>(no note)</i>'}</p>
    <div>${esc(d.temp_c)} °C • ${esc(d.humidity_pct)} % • loudness ${esc(d.sound_loudness)}</div>`;
  document.getElementById('modal').classList.add('open');
}

async function load(){
  const ev = await safeJson('/api/events');
  const st = await safeJson('/api/status');
  const sel = await safeJson('/api/selection');
  if(ev) items = ev.items;
  if(st) document.getElementById('status').textContent = st.message;
  if(sel && sel.event) selectedId = sel.event.event_id;
  render();
}

document.getElementById('grid').addEventListener('click', async (e) => {
  const cell = e.target.closest('.cell');
  if(!cell) return;
  const id = Number(cell.dataset.id);
  const idx = items.findIndex(d => d.event_id === id);
  if(idx < 0) return;
  await safeJson('/api/selection', {
    method: 'PUT', headers: {'Content-Type': 'application/json'},
    body: JSON.stringify({index: idx}),
  });
  selectedId = id;
  render();
  openModal(items[idx]);
});
document.getElementById('modal').addEventListener('click', () => {
  document.getElementById('modal').classList.remove('open');
});
document.getElementById('btnRefresh').addEventListener('click', async () => {
  await safeJson('/api/refresh', {method: 'POST'});
  await load();
});
document.getElementById('btnBurst').addEventListener('click', async () => {
  await safeJson('/api/burst', {method: 'POST'});
  await load();
});

load();
setInterval(load, 1500);
</script>
</body>
</html>"""


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def ui_index(request: Request):
    settings = getattr(request.app.state, "settings", None)
    latest_first = settings.show_latest_first if settings is not None else True
    return HTML.replace("__LATEST_FIRST__", "true" if latest_first else "false")
