"""
Tassonomia errori della pipeline di ingest.

Tutti gli errori sono terminali per l'upload corrente: nessun retry interno.
`status_code` indica come il layer HTTP deve rispondere (400 = input
correggibile dal chiamante, 500 = errore infrastruttura/parse interno).
"""
from typing import Optional


class IngestError(Exception):
    """Errore base della pipeline di ingest."""

    status_code: int = 400
    default_message: str = "Upload failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingRequiredField(IngestError):
    default_message = "No file uploaded"


class UnsupportedFileType(IngestError):
    default_message = "Unsupported file type"


class EmptyFile(IngestError):
    default_message = "No data rows found"


class HeaderNotFound(IngestError):
    default_message = "Could not locate header row (expected Product / Qty / Sales)"


class NoValidRecords(IngestError):
    default_message = (
        "No valid sales records found. "
        "Check that Product / Qty / Sales columns have numeric data."
    )


class StoreWriteFailure(IngestError):
    status_code = 500
    default_message = "Store write failed"


class UnexpectedFailure(IngestError):
    status_code = 500
    default_message = "Unknown upload error"
