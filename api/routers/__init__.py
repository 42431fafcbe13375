"""
Routers per API ops-dashboard-ingest.

Moduli:
- uploads: Router per upload report (POST /upload-inventory, POST /upload-sales)
"""
from . import uploads

__all__ = ["uploads"]
