"""Prompt templates for the narrative data refiner."""

# Label -> minified key; labels sharing a key are listed together in the prompt
MINIFIED_KEYS: dict[str, str] = {
    "생명력": "hp",
    "체력": "hp",
    "@mainTitle": "mt",
    "@mainSubtitle": "mst",
    "정신력": "sp",
    "허기": "hg",
    "갈증": "th",
    "피로": "fg",
    "체온": "tp",
    "희망": "ho",
    "주변 온도": "at",
    "날씨": "we",
    "달의 위상": "lp",
    "월령": "lp",
    "장소": "lc",
    "현재 위치": "lc",
    "이름": "nm",
    "나이": "ag",
    "상태": "st",
    "🚨 CRITICAL": "cs",
    "위험": "cs",
    "현재 날짜": "dt",
    "현재 시간": "tm",
    "경과": "el",
    "감각": "sn",
    "바람": "wd",
    "소지품": "iv",
    "진행중인 사건": "ev",
}


def render_key_dictionary(keys: dict[str, str]) -> str:
    """Render the label dictionary as prompt bullet lines."""
    grouped: dict[str, list[str]] = {}
    for label, key in keys.items():
        grouped.setdefault(key, []).append(label)

    lines = []
    for key, labels in grouped.items():
        quoted = " / ".join(f'"{label}"' for label in labels)
        lines.append(f'*   {quoted}: "{key}"')
    lines.append('*   The full Markdown table from "### 주변 탐색" -> value for the "scan" key.')
    return "\n".join(lines)


_REFINER_PREAMBLE = """You are a 'State Reconstruction Engine'. Your sole purpose is to convert one or more narrative turn logs, written in Markdown, back into complete, minified SHN (State History Narrative) JSON objects.

**ABSOLUTE LAW:** Your final output MUST be a single code block. Inside this block, each generated JSON object must be separated by a comma. There must be NO other text or explanation.

---

### **Core Task: Multiple Markdown Logs -> Multiple SHN JSON Objects**

You will receive a Markdown text containing one or more 'turn' blocks, each starting with `## [턴 N]`. Your task is to:
1.  Identify each individual `## [턴 N]` block.
2.  For **EACH** block, parse it and construct one complete SHN JSON object representing the state at the end of that specific turn.
3.  Combine all the generated JSON objects into a single response, separating each object with a comma.

---

### **SHN Schema & Rules (MANDATORY)**

For each turn block, you MUST construct a JSON object with the following structure:

1.  **Root Structure:** The JSON root must have: `m`, `p`, `s`, `x`, `h`, `z`. Populate them with plausible data inferred from the log.
2.  **Chronicle (`h`):** Must be an array with one object for the turn. This object must contain:
    *   `nt` (narrative_text): From the "### 생성된 서사" section.
    *   `sc` (selected_choice): From the "### 사용자 선택" section.
    *   `pc` (presented_choices): An array of strings from the "### 제시된 선택지" section.
    *   `ss` (state_snapshot): An object reconstructed from "### 상태 정보" and "### 주변 탐색". Use the minified keys below.
3.  **Last Snapshot (`z`):** The `z.ss` key must be a direct copy of the `ss` object you just constructed for that turn.
4.  **World State (`x`):** The `x.tn` key must be the turn number from that turn's `## [턴 N]` heading.
5.  **Headers (`ss`):** Identify the **very last** `## [턴 N]` block within the entire input you receive. **ONLY** for this last block, scan for `### @mainTitle: ...` and `### @mainSubtitle: ...`. If found, their content MUST be stored in that turn's `ss` object with the keys `mt` and `mst` respectively. All other preceding turn blocks MUST NOT include these keys.

---

### **[CRITICAL] Minified Key Dictionary (Label -> Key)**

"""

NARRATIVE_DATA_REFINER_PROMPT = _REFINER_PREAMBLE + render_key_dictionary(MINIFIED_KEYS)
