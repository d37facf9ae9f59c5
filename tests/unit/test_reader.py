from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest
from docx import Document

from gensetdesk.importer.reader import (
    UnsupportedSourceError,
    read_equipment_file,
    read_rows,
    split_line,
    split_pasted_text,
)


def _make_excel(tmp_path: Path, name: str, sheets: dict[str, list[list[object]]]) -> Path:
    p = tmp_path / name
    with pd.ExcelWriter(p, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet, header=False, index=False)
    return p


def test_split_pasted_text_tabs_commas_and_blank_lines():
    text = (
        "Supermercado Ruta 12\tMisiones\tJardin America\r\n"
        "\n"
        "Aserradero El Pino, Virasoro\n"
        "   \n"
        "Taller Don Pepe\n"
    )
    rows = split_pasted_text(text)
    assert rows == [
        ["Supermercado Ruta 12", "Misiones", "Jardin America"],
        ["Aserradero El Pino", "Virasoro"],
        ["Taller Don Pepe"],
    ]


def test_split_line_semicolons_and_quotes():
    assert split_line("Finca del Sur;Corrientes;Goya") == ["Finca del Sur", "Corrientes", "Goya"]
    assert split_line('"Acme, S.A.",Misiones,Posadas') == ["Acme, S.A.", "Misiones", "Posadas"]


def test_split_line_tab_wins_over_comma():
    assert split_line("Acme, S.A.\tMisiones") == ["Acme, S.A.", "Misiones"]


def test_split_pasted_text_empty():
    assert split_pasted_text("") == []


def test_read_rows_txt(tmp_path: Path):
    p = tmp_path / "list.txt"
    p.write_text("Hotel Iguazu\tMisiones\tPuerto Iguazu\nYPF Obera\n", encoding="utf-8")
    assert read_rows(p) == [["Hotel Iguazu", "Misiones", "Puerto Iguazu"], ["YPF Obera"]]


def test_read_rows_csv_ragged(tmp_path: Path):
    p = tmp_path / "clients.csv"
    p.write_text(
        'Acme S.A.,Misiones,Posadas,"Av. 1, local 3",+549\n'
        "Finca del Sur,Goya\n"
        ",,\n"
        "Taller Don Pepe\n",
        encoding="utf-8",
    )
    assert read_rows(p) == [
        ["Acme S.A.", "Misiones", "Posadas", "Av. 1, local 3", "+549"],
        ["Finca del Sur", "Goya"],
        ["Taller Don Pepe"],
    ]


def test_read_rows_csv_semicolon(tmp_path: Path):
    p = tmp_path / "clientes.csv"
    p.write_text("Nombre;Provincia;Ciudad\nMolino Santa Ana;Misiones;Apostoles\n", encoding="utf-8")
    assert read_rows(p) == [["Nombre", "Provincia", "Ciudad"], ["Molino Santa Ana", "Misiones", "Apostoles"]]


def test_read_rows_csv_quoted_cell_spans_lines(tmp_path: Path):
    p = tmp_path / "clients.csv"
    p.write_bytes(
        b'Acme S.A.,Misiones,Posadas,"Ruta 12 km 5\r\nGalpon 2",+549\r\n'
        b"YPF Obera,Misiones,Obera\r\n"
    )
    assert read_rows(p) == [
        ["Acme S.A.", "Misiones", "Posadas", "Ruta 12 km 5\r\nGalpon 2", "+549"],
        ["YPF Obera", "Misiones", "Obera"],
    ]


def test_split_line_decodes_quotes_once():
    assert split_line('"""ACME""",Posadas') == ['"ACME"', "Posadas"]
    assert split_line('"Taller ""El Pino"""\tObera') == ['Taller "El Pino"', "Obera"]


def test_read_rows_excel_all_sheets(tmp_path: Path):
    p = _make_excel(
        tmp_path,
        "clients.xlsx",
        {
            "Misiones": [["Hotel Iguazu", "Misiones", "Puerto Iguazu", None, 3757421000], [None, None, None, None, None]],
            "Corrientes": [["Arrocera Litoral", "Mercedes"]],
        },
    )
    rows = read_rows(p)
    assert rows[0] == ["Hotel Iguazu", "Misiones", "Puerto Iguazu", "", "3757421000"]
    assert rows[1] == ["Arrocera Litoral", "Mercedes"]
    assert len(rows) == 2


def test_read_rows_docx_tables_then_paragraphs(tmp_path: Path):
    doc = Document()
    table = doc.add_table(rows=2, cols=3)
    for r, values in enumerate([["Cliente", "Provincia", "Ciudad"], ["Clinica Norte", "Misiones", "Obera"]]):
        for c, v in enumerate(values):
            table.cell(r, c).text = v
    doc.add_paragraph("Taller Don Pepe")
    doc.add_paragraph("")
    doc.add_paragraph("Finca del Sur\tGoya")
    p = tmp_path / "lista.docx"
    doc.save(str(p))

    assert read_rows(p) == [
        ["Cliente", "Provincia", "Ciudad"],
        ["Clinica Norte", "Misiones", "Obera"],
        ["Taller Don Pepe"],
        ["Finca del Sur", "Goya"],
    ]


def test_read_rows_unsupported_and_missing(tmp_path: Path):
    p = tmp_path / "scan.pdf"
    p.write_bytes(b"%PDF")
    with pytest.raises(UnsupportedSourceError):
        read_rows(p)
    with pytest.raises(FileNotFoundError):
        read_rows(tmp_path / "nope.csv")


def test_read_equipment_file_csv(tmp_path: Path):
    p = tmp_path / "equipment.csv"
    p.write_text(
        "id,client_id,model,type,next_service_date,client_name,client_city,serial_number\n"
        "1,10,GE-100,Generator,2026-03-01,Hotel Iguazu,Puerto Iguazu,SN1\n"
        "2,11,ATS-40,Transfer switch,,Molino Santa Ana,Apostoles,SN2\n",
        encoding="utf-8",
    )
    equipment = read_equipment_file(p)
    assert [e.model for e in equipment] == ["GE-100", "ATS-40"]
    assert equipment[0].next_service_date == "2026-03-01"
    assert equipment[1].next_service_date is None
    assert equipment[0].client_city == "Puerto Iguazu"
