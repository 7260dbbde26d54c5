"""Credential core: session manager, refresh-token ledger, user directory."""
