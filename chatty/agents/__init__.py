"""
Agents package - pipeline collaborators and the orchestrator
"""
