"""
Utility helpers for Orchestration Core
"""
