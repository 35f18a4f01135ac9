"""Reservation services: validation, store, persistence, audit log, accounts and the manager facade."""
