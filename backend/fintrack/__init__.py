"""Application layer around the analytics engine.

Holds settings, category/budget configuration, the fetched-series cache
and the services that pull snapshots from the ledger store and the market
data source before handing them to fincore.
"""
