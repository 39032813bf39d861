"""
Endpoint extraction pipeline.
Pulls endpoints, URLs, secrets, domains, emails and parameters out of JS text.
"""

from .runner import EndpointRunner

__all__ = ["EndpointRunner"]
