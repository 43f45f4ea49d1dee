"""
Token Orchestrator - leased, revocable access keys over HTTP
"""

__version__ = "1.0.0"
