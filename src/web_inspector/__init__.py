"""
web_inspector

This package inventories the web services deployed on a host.

We keep modules small and well separated:
core contains shared data structures, errors and logging
db contains the document database client
inventory contains service item sources
probe contains the directory check and the version script runner
reconcile, store and report form the pipeline
runner and cli wire it together
"""
