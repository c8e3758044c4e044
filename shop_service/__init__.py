"""Cream shop backend: product catalog, order placement and admin auth."""
