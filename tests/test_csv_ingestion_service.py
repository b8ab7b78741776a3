"""
tests/test_csv_ingestion_service.py

Pytest unit tests for CSV text parsing and upload handling.

Coverage
--------
- Header splitting and quote stripping
- Quote-aware data line splitting
- Short / long rows, blank lines, CRLF
- Column type inference from the first non-empty value
- Upload size limit and decode failures
"""

from __future__ import annotations

import io
import logging

import pytest
from fastapi import UploadFile

from app.domain.sales_table import ColumnType
from app.services.csv_ingestion_service import (
    CSVDecodeError,
    CSVIngestionService,
    CSVUploadTooLargeError,
    build_table,
    split_data_line,
    split_header_line,
)


@pytest.fixture()
def svc() -> CSVIngestionService:
    return CSVIngestionService(encoding="utf-8-sig", max_upload_bytes=1024)


def _upload(payload: bytes, filename: str = "vendas.csv") -> UploadFile:
    return UploadFile(file=io.BytesIO(payload), filename=filename)


class TestSplitting:
    def test_header_quotes_and_whitespace_removed(self) -> None:
        assert split_header_line(' "Data Venda" , Produto ,"Valor"') == ["Data Venda", "Produto", "Valor"]

    def test_header_line_splits_on_every_comma(self) -> None:
        assert split_header_line('"a,b",c') == ["a", "b", "c"]

    def test_quoted_comma_is_not_a_separator(self) -> None:
        assert split_data_line('x,"Promo, Black Friday",y') == ["x", '"Promo, Black Friday"', "y"]

    def test_fields_are_trimmed(self) -> None:
        assert split_data_line(" a , b ,c ") == ["a", "b", "c"]


class TestBuildTable:
    def test_basic_table(self) -> None:
        table = build_table('Data,Produto,Valor\n01/01/2024,Curso,"R$ 100,00"\n02/01/2024,Ebook,50')
        assert table is not None
        assert table.headers == ("Data", "Produto", "Valor")
        assert len(table) == 2
        assert table.rows[0]["Valor"] == pytest.approx(100.0)
        assert table.rows[1]["Valor"] == pytest.approx(50.0)
        assert table.rows[0]["Produto"] == "Curso"

    def test_types_inferred(self) -> None:
        table = build_table("Produto,Valor\nCurso,10\nEbook,20")
        assert table is not None
        assert table.types["Valor"] == ColumnType.NUMERIC
        assert table.types["Produto"] == ColumnType.TEXTUAL
        assert table.numeric_columns == ("Valor",)

    def test_type_comes_from_first_non_empty_value(self) -> None:
        table = build_table("A,B\n,abc\n5,7\nx,8")
        assert table is not None
        assert table.types["A"] == ColumnType.NUMERIC
        assert table.types["B"] == ColumnType.TEXTUAL

    def test_all_empty_column_is_textual(self) -> None:
        table = build_table("A,B\n,1\n,2")
        assert table is not None
        assert table.types["A"] == ColumnType.TEXTUAL

    def test_short_rows_padded_and_extra_fields_dropped(self) -> None:
        table = build_table("A,B,C\n1\n1,2,3,4")
        assert table is not None
        assert dict(table.rows[0].values) == {"A": 1.0, "B": "", "C": ""}
        assert dict(table.rows[1].values) == {"A": 1.0, "B": 2.0, "C": 3.0}

    def test_blank_lines_and_crlf(self) -> None:
        table = build_table("A,B\r\n1,2\r\n\r\n   \r\n3,4\r\n")
        assert table is not None
        assert len(table) == 2
        assert [row.row_id for row in table.rows] == [0, 1]

    def test_header_only(self) -> None:
        table = build_table("A,B\n")
        assert table is not None
        assert table.headers == ("A", "B")
        assert len(table) == 0

    @pytest.mark.parametrize("text", ["", "\n\n", "   \r\n  "])
    def test_blank_text_yields_none(self, text: str) -> None:
        assert build_table(text) is None

    def test_quoted_field_with_comma_keeps_columns_aligned(self) -> None:
        table = build_table('campanha,valor\n"Promo, Black Friday",10')
        assert table is not None
        assert table.rows[0]["campanha"] == "Promo, Black Friday"
        assert table.rows[0]["valor"] == 10.0


class TestIngestText:
    def test_summary_matches_table(self, svc: CSVIngestionService) -> None:
        result = svc.ingest_text("A,B\n1,x\n2,y", source="test")
        assert result is not None
        table, summary = result
        assert summary.source == "test"
        assert summary.rows_loaded == 2
        assert summary.headers == table.headers
        assert summary.types == {"A": ColumnType.NUMERIC, "B": ColumnType.TEXTUAL}

    def test_empty_text_is_none(self, svc: CSVIngestionService) -> None:
        assert svc.ingest_text("", source="test") is None

    def test_logs_structured_event(self, svc: CSVIngestionService, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="app.services.csv_ingestion_service"):
            svc.ingest_text("A\n1", source="test")
        assert any('"event": "csv_ingested"' in record.getMessage() for record in caplog.records)


class TestIngestUpload:
    def test_reads_utf8_with_bom(self, svc: CSVIngestionService) -> None:
        result = svc.ingest_upload(_upload("\ufeffProduto,Valor\nCafé,10".encode("utf-8")))
        assert result is not None
        table, summary = result
        assert table.headers == ("Produto", "Valor")
        assert table.rows[0]["Produto"] == "Café"
        assert summary.source == "vendas.csv"

    def test_too_large(self) -> None:
        svc = CSVIngestionService(encoding="utf-8", max_upload_bytes=10)
        with pytest.raises(CSVUploadTooLargeError):
            svc.ingest_upload(_upload(b"A,B\n" + b"1,2\n" * 10))

    def test_undecodable_bytes(self, svc: CSVIngestionService) -> None:
        with pytest.raises(CSVDecodeError, match="utf-8-sig"):
            svc.ingest_upload(_upload(b"A,B\n\xff\xfe\xfa,1"))
