"""Unit tests for the PDF directory loader."""

from __future__ import annotations

from pathlib import Path

from pypdf import PdfWriter

from case_search.ingestion.loader import load_documents


def _write_blank_pdf(path: Path, pages: int = 1) -> None:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as fh:
        writer.write(fh)


def test_missing_directory_returns_empty(tmp_path: Path) -> None:
    assert load_documents(tmp_path / "does-not-exist") == []


def test_unsupported_files_are_ignored(tmp_path: Path) -> None:
    (tmp_path / "notes.txt").write_text("not a case")
    (tmp_path / "db.json").write_text('{"documents": []}')
    assert load_documents(tmp_path) == []


def test_loads_pdf_pages_recursively(tmp_path: Path) -> None:
    _write_blank_pdf(tmp_path / "case1.pdf", pages=2)
    _write_blank_pdf(tmp_path / "nested" / "case2.pdf", pages=1)
    (tmp_path / "readme.md").write_text("# ignored")

    docs = load_documents(tmp_path)

    assert len(docs) == 3
    sources = [Path(d.metadata["source"]).name for d in docs]
    assert sources == ["case1.pdf", "case1.pdf", "case2.pdf"]
    assert [d.metadata["page"] for d in docs[:2]] == [0, 1]
