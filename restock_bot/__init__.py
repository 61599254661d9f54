"""Refurbished restock report job."""
