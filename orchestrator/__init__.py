"""
Orchestration Core
Node-graph execution engine with recurring scheduler triggers
"""
__version__ = "0.1.0"
