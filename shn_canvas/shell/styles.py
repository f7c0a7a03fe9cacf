"""Fixed stylesheet injected into every rendered shell."""

SHELL_STYLESHEET = """
:root {
  --bg-primary: #0a0a12;
  --bg-secondary: #12121e;
  --bg-card: #1a1a2e;
  --accent: #ffd700;
  --accent-dim: #b8860b;
  --text: #e8e8e8;
  --text-dim: #888;
  --success: #4ecca3;
  --error: #ff6b6b;
  --info: #7b68ee;
  --border: #2a2a4a;
}
* { box-sizing: border-box; margin: 0; padding: 0; }
body {
  font-family: 'Noto Serif KR', 'Gowun Batang', serif;
  background: var(--bg-primary);
  color: var(--text);
  min-height: 100vh;
  line-height: 1.8;
}
.shn-lite-canvas, .canvas-content { max-width: 900px; margin: 0 auto; padding: 40px 20px; }
.header { text-align: center; margin-bottom: 30px; }
.header .main-title { font-size: 1.8rem; color: var(--accent); margin-bottom: 10px; }
.header .subtitle { color: var(--text-dim); font-size: 0.9rem; }
.content-section { margin-bottom: 20px; }
.content-section.type-paragraph p { text-indent: 1em; margin-bottom: 1em; }
.content-section.type-blockquote blockquote {
  border-left: 3px solid var(--accent);
  padding-left: 15px;
  color: var(--text-dim);
  font-style: italic;
}
.content-section.type-heading-h2 h2 {
  color: var(--accent);
  border-bottom: 1px solid var(--border);
  padding-bottom: 10px;
  margin-bottom: 20px;
}
.content-section.type-ordered-list ol { list-style: none; padding: 0; }
.content-section.type-ordered-list li {
  padding: 12px 15px;
  background: var(--bg-card);
  border-radius: 8px;
  margin-bottom: 8px;
  cursor: pointer;
  border: 1px solid var(--border);
  transition: all 0.2s;
}
.content-section.type-ordered-list li:hover { border-color: var(--accent); background: #252540; }
.type-status-dashboard {
  background: var(--bg-secondary);
  border-radius: 8px;
  padding: 20px;
  border: 1px solid var(--border);
}
.dashboard-section { margin-bottom: 15px; }
.dashboard-section-title {
  font-size: 0.85rem;
  color: var(--accent);
  margin-bottom: 8px;
  display: flex;
  align-items: center;
  gap: 8px;
}
.dashboard-items { display: flex; flex-wrap: wrap; gap: 10px; }
.dashboard-item { background: var(--bg-card); padding: 8px 12px; border-radius: 6px; font-size: 0.85rem; }
.dashboard-item .key { color: var(--text-dim); }
.dashboard-item .value { color: var(--text); margin-left: 5px; }
[data-component="image-placeholder"] {
  background: var(--bg-card);
  border: 2px dashed var(--border);
  border-radius: 8px;
  padding: 40px;
  text-align: center;
  color: var(--text-dim);
}
[data-component="image-placeholder"]::before { content: "🖼️ " attr(data-prompt); }
[data-component="visualization-placeholder"] {
  background: var(--bg-card);
  border: 2px dashed var(--info);
  border-radius: 8px;
  padding: 40px;
  text-align: center;
  color: var(--text-dim);
}
[data-component="visualization-placeholder"]::before { content: "📊 " attr(data-prompt); }
[data-component="interactive-map"] { background: var(--bg-card); border-radius: 8px; padding: 20px; text-align: center; }
[data-component="interactive-map"]::before { content: "🗺️ " attr(data-location); color: var(--accent); }
strong { color: var(--accent); }
a { color: var(--info); }
"""

DEFAULT_HOST_PAGE = """<!DOCTYPE html>
<html lang="ko">
<head><meta charset="utf-8"><title></title></head>
<body><div id="initial-loader">Loading...</div></body>
</html>
"""
