"""
Enrichment modules for hoptrace
"""

from .ptr_resolver import PTRResolver

__all__ = ['PTRResolver']
