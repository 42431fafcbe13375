"""
Test unitari per gate (routing).
"""
import pytest

from ingest.errors import UnsupportedFileType
from ingest.gate import detect_file_kind


class TestGateRouting:
    """Test per routing file."""

    @pytest.mark.parametrize("file_name", ["test.csv", "TEST.CSV", "report.2025.Csv"])
    def test_route_csv(self, file_name):
        assert detect_file_kind(file_name) == "csv"

    @pytest.mark.parametrize("file_name", ["test.xlsx", "test.XLS", "Inventory Oct.xlsx"])
    def test_route_spreadsheet(self, file_name):
        assert detect_file_kind(file_name) == "spreadsheet"

    @pytest.mark.parametrize("file_name", ["test.pdf", "test.docx", "test", "", "csv"])
    def test_route_unsupported(self, file_name):
        with pytest.raises(UnsupportedFileType, match="Unsupported file type"):
            detect_file_kind(file_name)

    def test_explicit_kind(self):
        assert detect_file_kind("upload", "spreadsheet") == "spreadsheet"

    def test_explicit_unknown_kind(self):
        with pytest.raises(UnsupportedFileType):
            detect_file_kind("test.csv", "pdf")
