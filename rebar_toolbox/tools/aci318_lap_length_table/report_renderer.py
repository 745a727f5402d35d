from __future__ import annotations

import html
from typing import Any, Dict, List

from .calc_trace import CalcTrace


def _h(s: Any) -> str:
    return html.escape("" if s is None else str(s))


def _cell(v: Any) -> str:
    # splice lengths the code does not permit are reported as "NP"
    if v is None:
        return "<td class='na'>NP</td>"
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return f"<td>{_h(v)}</td>"


def _length_table(rows: List[Dict[str, Any]], length_units: str, area_units: str) -> str:
    parts = []
    parts.append("<table class='lap'><thead>")
    parts.append(
        "<tr><th rowspan='3'>Bar</th><th rowspan='3'>d<sub>b</sub></th><th rowspan='3'>A<sub>b</sub></th>"
        "<th colspan='4'>Tension, top bars</th><th colspan='4'>Tension, other bars</th>"
        "<th colspan='2'>Compression</th><th>Hook</th></tr>"
    )
    parts.append(
        "<tr><th colspan='2'>ℓd</th><th colspan='2'>ℓst</th><th colspan='2'>ℓd</th><th colspan='2'>ℓst</th>"
        "<th rowspan='2'>ℓdc</th><th rowspan='2'>ℓsc</th><th rowspan='2'>ℓdh</th></tr>"
    )
    parts.append("<tr>" + "<th>Cover met</th><th>Other</th>" * 4 + "</tr>")
    parts.append("</thead><tbody>")
    for r in rows:
        top, other = r["tension_top"], r["tension_other"]
        cells = [
            r["db"], r["area"],
            top["ldt"]["meets_cover"], top["ldt"]["does_not_meet_cover"],
            top["lbt"]["meets_cover"], top["lbt"]["does_not_meet_cover"],
            other["ld"]["meets_cover"], other["ld"]["does_not_meet_cover"],
            other["lb"]["meets_cover"], other["lb"]["does_not_meet_cover"],
            r["compression"]["ldc"], r["compression"]["lbc"],
            r["tension_hook"]["ldh"],
        ]
        parts.append(f"<tr><th>{_h(r['bar_size'])}</th>" + "".join(_cell(c) for c in cells) + "</tr>")
    parts.append("</tbody></table>")
    parts.append(
        f"<div class='small'>Lengths in {_h(length_units)}, areas in {_h(area_units)}. "
        "NP = lap splice not permitted for this bar size (ACI 318-14 25.5.1.1).</div>"
    )
    return "".join(parts)


def render_report_html(trace: CalcTrace, results: Dict[str, Any]) -> str:
    meta = trace.meta
    title = "Rebar Development & Lap Splice Lengths"
    css = r"""
    :root{
      --fg:#111;
      --muted:#555;
      --border:#cfcfcf;
      --bg:#fff;
      --box:#f6f6f6;
      --warn:#8a5a00;
      --mono: ui-monospace, SFMono-Regular, Menlo, Consolas, "Liberation Mono", monospace;
      --sans: system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif;
    }
    html,body{background:var(--bg); color:var(--fg); font-family:var(--sans); margin:0; padding:0;}
    .page{max-width:1100px; margin:24px auto; padding:0 18px 36px;}
    h1{font-size:20px; margin:0 0 6px;}
    .meta{color:var(--muted); font-size:12px; margin:0 0 18px;}
    h2{font-size:16px; margin:22px 0 10px; border-bottom:1px solid var(--border); padding-bottom:6px;}
    table{border-collapse:collapse; width:100%; font-size:12px;}
    th,td{border:1px solid var(--border); padding:6px 8px; vertical-align:top;}
    th{background:#f1f1f1; text-align:left;}
    table.lap td{text-align:right;}
    table.lap td.na{color:var(--muted); text-align:center;}
    .box{border:1px solid var(--border); background:var(--box); padding:10px 12px; margin:10px 0;}
    .eq{font-family:var(--mono); font-size:12px; white-space:pre-wrap; word-break:break-word;}
    .small{font-size:12px; color:var(--muted);}
    .step{page-break-inside:avoid; margin:0 0 16px;}
    .step-id{font-family:var(--mono); color:var(--muted);}
    .result{font-weight:600;}
    .tag{display:inline-block; font-size:11px; padding:2px 8px; border-radius:10px; border:1px solid rgba(138,90,0,.35); color:var(--warn); background:#fff;}
    ul{margin:6px 0 0 18px; padding:0;}
    @media print{
      .page{max-width:none; margin:0; padding:0 10mm;}
    }
    """
    parts = []
    parts.append("<!doctype html><html><head><meta charset='utf-8'/>")
    parts.append(f"<title>{_h(title)}</title>")
    parts.append("<style>" + css + "</style></head><body>")
    parts.append("<div class='page'>")
    parts.append(f"<h1>{_h(title)}</h1>")
    parts.append(
        "<div class='meta'>"
        f"Tool: {_h(meta.tool_id)} v{_h(meta.tool_version)} | Timestamp: {_h(meta.timestamp)} | "
        f"Units: {_h(meta.units_system)} | Code basis: {_h(meta.code_basis)} (edition {_h(meta.code_edition)}) | Input hash: {_h(meta.input_hash)}"
        "</div>"
    )

    # Summary
    parts.append("<h2>Summary</h2>")
    parts.append("<div class='box'>")
    parts.append("<pre class='eq'>" + _h(results.get("summary_text", "")) + "</pre>")
    if trace.summary.warnings:
        parts.append("<div class='small'>Warnings</div><ul>")
        for w in trace.summary.warnings:
            parts.append(f"<li class='small'><span class='tag'>WARN</span> {_h(w)}</li>")
        parts.append("</ul>")
    parts.append("</div>")

    # Table
    parts.append("<h2>Development and Splice Lengths</h2>")
    units = results.get("units", {})
    parts.append(_length_table(results.get("rows", []), units.get("length", ""), units.get("area", "")))

    # Inputs
    parts.append("<h2>Inputs</h2>")
    parts.append("<table><thead><tr><th>ID</th><th>Value</th><th>Units</th><th>Source</th><th>Notes</th></tr></thead><tbody>")
    for inp in trace.inputs:
        parts.append(
            "<tr>"
            f"<td>{_h(inp.id)}</td>"
            f"<td>{_h(inp.value)}</td>"
            f"<td>{_h(inp.units)}</td>"
            f"<td>{_h(inp.source)}</td>"
            f"<td>{_h(inp.notes or '')}</td>"
            "</tr>"
        )
    parts.append("</tbody></table>")

    # Assumptions
    parts.append("<h2>Assumptions &amp; Limitations</h2>")
    parts.append("<ul>")
    for a in trace.assumptions:
        parts.append(f"<li>{_h(a.id)}: {_h(a.text)}</li>")
    parts.append("</ul>")

    # Steps
    parts.append("<h2>Modification Factors</h2>")
    for st in trace.steps:
        parts.append("<div class='step'>")
        parts.append(f"<div><span class='step-id'>{_h(st.id)}</span> <strong>{_h(st.section)}</strong>: {_h(st.title)}</div>")
        parts.append("<div class='box'>")
        parts.append(
            f"<div class='result'>{_h(st.output_symbol)} = {_h(st.value)} {_h(st.units)}</div>"
            f"<div class='small'>{_h(st.output_description)}</div>"
        )
        parts.append(f"<pre class='eq'>{_h(st.equation)}\n{_h(st.substitution)}</pre>")
        parts.append("<div class='small'>References</div><ul>")
        for r in st.references:
            parts.append(f"<li class='small'>{_h(r.type)}: {_h(r.ref)}</li>")
        parts.append("</ul>")
        if st.warnings:
            parts.append("<ul>")
            for w in st.warnings:
                parts.append(f"<li class='small'><span class='tag'>WARN</span> {_h(w)}</li>")
            parts.append("</ul>")
        parts.append("</div></div>")

    parts.append("<div class='meta'>")
    parts.append(f"Generated by {_h(meta.tool_id)} v{_h(meta.tool_version)} | Input hash: {_h(meta.input_hash)}")
    parts.append("</div>")

    parts.append("</div></body></html>")
    return "".join(parts)
