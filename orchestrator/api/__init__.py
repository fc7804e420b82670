"""
HTTP API for Orchestration Core
"""
