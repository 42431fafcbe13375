"""
Core functionality per ops-dashboard-ingest.

Questo modulo contiene:
- Configurazione (config.py)
- Database e DataStore (database.py)
- Logging (logger.py)
"""
