"""
Agent Registry.

Registration and discovery service for networked agents, backed by
Elasticsearch, with a fetch-through cache for the agents' own cards.
"""

__version__ = "1.0.0"
