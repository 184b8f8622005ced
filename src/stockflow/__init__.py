"""Stockflow: order fulfillment core.

Keeps the stock ledger consistent with order lifecycle transitions under
concurrent access. Users, products, stock records and orders live in one
Protean domain so that a state transition and its stock movements commit in
a single unit of work.
"""
