from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from expander.api.routes.sessions import API_PREFIX
from expander.canvas.types import ASPECT_RATIOS, DEFAULT_SCALE, MAX_SCALE, MIN_SCALE, SCALE_STEP
from expander.config import settings


router = APIRouter(tags=["ui"])


def _aspect_options_html() -> str:
    return "\n".join(
        f'            <option value="{ar.value}">{ar.label}</option>' for ar in ASPECT_RATIOS
    )


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def expander_ui() -> HTMLResponse:
    html = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>__TITLE__</title>
  <style>
    :root { --bg: #030712; --card: #111827; --text: #f3f4f6; --muted: #9ca3af; --line: #374151; --btn: #4f46e5; --btnText: #ffffff; --err: #f87171; }
    body { margin: 0; font-family: "Segoe UI", sans-serif; color: var(--text); background: var(--bg); }
    .wrap { max-width: 1120px; margin: 32px auto; padding: 0 16px; }
    header { display: flex; justify-content: space-between; align-items: center; border-bottom: 1px solid #1f2937; padding-bottom: 18px; margin-bottom: 22px; }
    h1 { margin: 0; font-size: 30px; } h1 span { color: #818cf8; }
    h2 { font-size: 17px; margin: 0 0 10px; }
    .card { background: var(--card); border: 1px solid #1f2937; border-radius: 16px; padding: 20px; }
    .grid { display: grid; grid-template-columns: 1fr 2fr; gap: 24px; }
    .muted { color: var(--muted); font-size: 13px; }
    .hidden { display: none; }
    .drop { position: relative; border: 2px dashed var(--line); border-radius: 12px; padding: 48px; text-align: center; }
    .drop input { position: absolute; inset: 0; opacity: 0; cursor: pointer; }
    textarea, select { width: 100%; box-sizing: border-box; background: #1f2937; color: var(--text); border: 1px solid var(--line); border-radius: 10px; padding: 10px; font-size: 14px; }
    textarea { resize: none; }
    .align { display: grid; grid-template-columns: repeat(3, 22px); gap: 4px; }
    .align button { width: 22px; height: 22px; padding: 0; margin: 0; border-radius: 3px; border: 1px solid #4b5563; background: #1f2937; cursor: pointer; }
    .align button.active { background: #6366f1; border-color: #818cf8; }
    .row { display: flex; gap: 20px; margin-top: 14px; }
    .row > div { flex: 1; }
    button.primary, button.secondary { border: 0; border-radius: 10px; padding: 12px 14px; font-size: 15px; font-weight: 700; cursor: pointer; }
    button.primary { width: 100%; margin-top: 18px; background: var(--btn); color: var(--btnText); }
    button.secondary { background: #1f2937; color: var(--text); border: 1px solid var(--line); }
    button:disabled { background: #374151; color: #6b7280; cursor: not-allowed; }
    .result { min-height: 380px; display: flex; align-items: center; justify-content: center; background: #0b1120; border: 1px solid var(--line); border-radius: 12px; overflow: hidden; }
    .result img { max-width: 100%; max-height: 600px; }
    .error { color: var(--err); font-weight: 700; }
  </style>
</head>
<body>
  <div class="wrap">
    <header>
      <div>
        <h1>AI <span>Image Expander</span></h1>
        <div class="muted">Upload, resize, and let AI fill the rest.</div>
      </div>
      <button id="resetBtn" class="secondary hidden" type="button">New Image</button>
    </header>

    <div class="card">
      <div id="idleView" class="drop">
        <h2>Upload an image to start</h2>
        <div class="muted">JPG, PNG, WebP supported</div>
        <input id="file" type="file" accept="image/jpeg,image/png,image/webp" />
      </div>

      <div id="errorView" class="hidden" style="text-align:center">
        <h2>An Error Occurred</h2>
        <p id="errorText" class="error"></p>
        <button id="startOverBtn" class="secondary" type="button">Start Over</button>
      </div>

      <div id="workView" class="grid hidden">
        <div>
          <h2>1. Source &amp; Prompt</h2>
          <textarea id="description" rows="5" placeholder="AI is generating a description..."></textarea>
          <div id="describing" class="muted hidden">Analyzing image...</div>

          <h2 style="margin-top:18px">2. Composition</h2>
          <label class="muted" for="aspect">Aspect Ratio</label>
          <select id="aspect">
__ASPECT_OPTIONS__
          </select>
          <div class="row">
            <div style="flex:0">
              <div class="muted">Position</div>
              <div id="alignGrid" class="align"></div>
            </div>
            <div>
              <div class="muted">Scale <span id="scaleLabel"></span></div>
              <input id="scale" type="range" min="__MIN_SCALE__" max="__MAX_SCALE__" step="__SCALE_STEP__" value="__DEFAULT_SCALE__" style="width:100%" />
              <div class="muted">Adjust size to create more space for expansion.</div>
            </div>
          </div>
          <button id="expandBtn" class="primary" type="button" disabled>Expand Image</button>
        </div>

        <div>
          <h2>3. Result <a id="downloadLink" class="hidden" style="float:right;color:#a5b4fc">Download</a></h2>
          <div class="result"><img id="resultImg" alt="Result" /></div>
          <div id="plan" class="muted"></div>
        </div>
      </div>
    </div>
  </div>

  <script>
    const API = "__API_PREFIX__";
    let session = null;

    const $ = (id) => document.getElementById(id);
    const show = (el, visible) => el.classList.toggle("hidden", !visible);

    async function call(path, options = {}) {
      const res = await fetch(`${API}${path}`, options);
      const data = await res.json();
      if (!res.ok) throw new Error(data.detail ? JSON.stringify(data.detail) : `HTTP ${res.status}`);
      return data;
    }

    const json = (method, body) => ({
      method,
      headers: { "Content-Type": "application/json" },
      body: JSON.stringify(body),
    });

    function renderAlignGrid() {
      const grid = $("alignGrid");
      grid.innerHTML = "";
      for (let row = 0; row < 3; row++) {
        for (let col = 0; col < 3; col++) {
          const b = document.createElement("button");
          b.type = "button";
          b.className = session.alignment.row === row && session.alignment.col === col ? "active" : "";
          b.addEventListener("click", () => updateComposition({ alignment: { row, col } }));
          grid.appendChild(b);
        }
      }
    }

    async function refreshPlan() {
      if (!session.source) { $("plan").textContent = ""; return; }
      const p = await call(`/sessions/${session.id}/plan`);
      const pl = p.placement;
      $("plan").textContent = `Canvas ${p.canvas_width}x${p.canvas_height}, image at (${pl.x.toFixed(0)}, ${pl.y.toFixed(0)}) size ${pl.width.toFixed(0)}x${pl.height.toFixed(0)}`;
    }

    function render() {
      const state = session.state;
      show($("idleView"), state === "idle");
      show($("errorView"), state === "error");
      show($("workView"), state !== "idle" && state !== "error");
      show($("resetBtn"), state !== "idle");
      $("errorText").textContent = session.error_message || "";

      const desc = $("description");
      if (document.activeElement !== desc) desc.value = session.description;
      desc.disabled = state === "describing";
      show($("describing"), state === "describing");

      $("aspect").value = session.aspect_ratio;
      $("scale").value = session.scale;
      $("scaleLabel").textContent = `${Math.round(session.scale * 100)}%`;
      renderAlignGrid();

      $("expandBtn").disabled = !session.can_generate;
      $("expandBtn").textContent = state === "generating" ? "Expanding..." : "Expand Image";

      const img = $("resultImg");
      if (session.result) {
        img.src = `${session.result.result_url}?t=${Date.now()}`;
        $("downloadLink").href = session.result.download_url;
        show($("downloadLink"), true);
      } else {
        img.removeAttribute("src");
        if (session.source) img.src = session.source.preview_url;
        show($("downloadLink"), false);
      }
    }

    async function apply(promise) {
      try {
        session = await promise;
        render();
        await refreshPlan();
      } catch (err) {
        alert(String(err));
      }
    }

    function updateComposition(body) {
      return apply(call(`/sessions/${session.id}/composition`, json("PUT", body)));
    }

    $("file").addEventListener("change", async (e) => {
      const file = e.target.files[0];
      if (!file) return;
      const form = new FormData();
      form.append("file", file);
      session = { ...session, state: "describing", description: "" };
      render();
      await apply(call(`/sessions/${session.id}/image`, { method: "POST", body: form }));
      e.target.value = "";
    });

    $("description").addEventListener("change", (e) =>
      apply(call(`/sessions/${session.id}/description`, json("PUT", { description: e.target.value }))));
    $("description").addEventListener("input", (e) => {
      $("expandBtn").disabled = !e.target.value.trim() || ["describing", "generating"].includes(session.state);
    });
    $("aspect").addEventListener("change", (e) => updateComposition({ aspect_ratio: e.target.value }));
    $("scale").addEventListener("change", (e) => updateComposition({ scale: parseFloat(e.target.value) }));
    $("scale").addEventListener("input", (e) => {
      $("scaleLabel").textContent = `${Math.round(parseFloat(e.target.value) * 100)}%`;
    });

    $("expandBtn").addEventListener("click", async () => {
      await apply(call(`/sessions/${session.id}/description`, json("PUT", { description: $("description").value })));
      if (!session.can_generate) return;
      session = { ...session, state: "generating", can_generate: false };
      render();
      await apply(call(`/sessions/${session.id}/expand`, { method: "POST" }));
    });

    const reset = () => apply(call(`/sessions/${session.id}/reset`, { method: "POST" }));
    $("resetBtn").addEventListener("click", reset);
    $("startOverBtn").addEventListener("click", reset);

    apply(call("/sessions", { method: "POST" }));
  </script>
</body>
</html>
"""
    html = html.replace("__TITLE__", settings.app_name)
    html = html.replace("__API_PREFIX__", API_PREFIX)
    html = html.replace("__ASPECT_OPTIONS__", _aspect_options_html())
    html = html.replace("__MIN_SCALE__", str(MIN_SCALE))
    html = html.replace("__MAX_SCALE__", str(MAX_SCALE))
    html = html.replace("__SCALE_STEP__", str(SCALE_STEP))
    html = html.replace("__DEFAULT_SCALE__", str(DEFAULT_SCALE))
    return HTMLResponse(content=html)
