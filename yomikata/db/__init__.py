"""Relational storage for Yomikata."""
