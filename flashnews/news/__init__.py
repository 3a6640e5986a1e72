"""
News Module
===========

Read-through article cache in front of an external news provider:
- Pooled, repository-based access to articles, categories and locations
- Provider client and mapping into the local data model
- Refresh cycle with URL de-duplication and trending classification
- Background view counting
"""
