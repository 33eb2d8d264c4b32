"""Store module for e-commerce functionality.

Provides the product catalog, per-user shopping cart, and the
checkout workflow that turns cart lines into paid orders.
"""
