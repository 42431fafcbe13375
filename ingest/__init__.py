"""
Ingest pipeline per report inventario e vendite.

Questo modulo contiene la pipeline deterministica per l'elaborazione di file:
- Gate: tipo file da estensione (CSV / Excel)
- Decode: CSV o Excel in RawGrid
- Header: riga fissa (inventario) o ricerca euristica (vendite)
- Mapping colonne e costruzione record
"""
