"""Storefront: catalog filtering and a client-side order ledger."""
