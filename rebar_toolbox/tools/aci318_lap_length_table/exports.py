from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .calc_trace import CalcTrace
from .report_renderer import render_report_html
from .table import TABLE_COLUMNS, flatten_row, table_to_dataframe


def _autosize(ws):
    for col in range(1, ws.max_column + 1):
        max_len = 0
        for row in range(1, min(ws.max_row, 200) + 1):  # cap scanning
            v = ws.cell(row=row, column=col).value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[get_column_letter(col)].width = min(max(10, max_len + 2), 70)


def _write_json(path: Path, obj: Any) -> None:
    path.write_text(json.dumps(obj, indent=2, ensure_ascii=False), encoding="utf-8")


def _write_workbook(trace: CalcTrace, results: Dict[str, Any], path: Path) -> Workbook:
    wb = Workbook()

    ws_t = wb.active
    ws_t.title = "Lap Lengths"
    ws_t.append([label for _, label in TABLE_COLUMNS])
    for cell in ws_t[1]:
        cell.font = Font(bold=True)
    for row in results.get("rows", []):
        flat = flatten_row(row)
        ws_t.append([flat.get(key) for key, _ in TABLE_COLUMNS])
    ws_t.freeze_panes = "B2"
    _autosize(ws_t)

    ws_in = wb.create_sheet("Inputs")
    ws_in.append(["id", "value", "units", "source", "notes"])
    for i in trace.inputs:
        ws_in.append([i.id, i.value, i.units, i.source, i.notes or ""])
    _autosize(ws_in)

    ws_a = wb.create_sheet("Assumptions")
    ws_a.append(["id", "text"])
    for a in trace.assumptions:
        ws_a.append([a.id, a.text])
    _autosize(ws_a)

    ws_c = wb.create_sheet("Calcs")
    ws_c.append(["id", "section", "title", "reference", "equation", "substitution", "result", "units"])
    for st in trace.steps:
        refs = "; ".join(f"{r.type}:{r.ref}" for r in st.references)
        ws_c.append([
            st.id,
            st.section,
            st.title,
            refs,
            st.equation,
            st.substitution,
            st.value,
            st.units,
        ])
    _autosize(ws_c)

    wb.save(path)
    return wb


def export_all(trace: CalcTrace, results: Dict[str, Any], run_dir: Path) -> Dict[str, Path]:
    """Write the calc package for one run. Returns output name -> path."""
    run_dir.mkdir(parents=True, exist_ok=True)

    meta = trace.meta
    vtag = f"v{meta.tool_version}_{meta.input_hash[:12]}"
    out: Dict[str, Path] = {}

    # HTML report (authoritative) plus a hash-tagged copy for the audit trail
    report_html = render_report_html(trace, results)
    out["report"] = run_dir / "report.html"
    out["report"].write_text(report_html, encoding="utf-8")
    (run_dir / f"report_{vtag}.html").write_text(report_html, encoding="utf-8")

    out["calc_trace"] = run_dir / "calc_trace.json"
    _write_json(out["calc_trace"], trace.to_json_dict())

    out["results"] = run_dir / "results.json"
    _write_json(out["results"], results)

    out["xlsx"] = run_dir / "results.xlsx"
    wb = _write_workbook(trace, results, out["xlsx"])
    wb.save(run_dir / f"results_{vtag}.xlsx")

    out["csv"] = run_dir / "lap_length_table.csv"
    table_to_dataframe(results.get("rows", []), labels=True).to_csv(out["csv"], index=False)

    return out
