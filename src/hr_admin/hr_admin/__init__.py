"""HR administration backend.

Organized by feature modules (leaves, balances, employees, ...) with a thin
Flask controller layer over service/repository layers.
"""
