"""Duty timekeeping package.

Organized by feature modules (workers, ledger, payroll, audit, ...) with a
thin Flask controller layer over services and a JSON roster store.
"""
