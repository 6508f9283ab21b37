"""Domain services: ledger, catalog, jobs, payments, messages and accounts."""
