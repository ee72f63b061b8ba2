"""Core engine: checksums, filesystem coordination, store, ledger, client."""
