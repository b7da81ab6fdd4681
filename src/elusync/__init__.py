"""Reconciliation and incremental synchronisation of French public officials."""
