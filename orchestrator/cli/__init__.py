"""
Command line interface for Orchestration Core
"""
