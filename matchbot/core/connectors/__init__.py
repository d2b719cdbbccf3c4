"""
Connectors - clients for external services.

- ScoreClient: remote compatibility score service (httpx)
"""

from .score_client import ScoreClient, ScoreService

__all__ = ['ScoreClient', 'ScoreService']
