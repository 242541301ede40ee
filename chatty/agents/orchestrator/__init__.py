"""
Orchestrator - chat pipeline workflow and flow tracking
"""

from chatty.agents.orchestrator.agent import OrchestratorAgent
from chatty.agents.orchestrator.flow import FlowStep, FlowTracker

__all__ = ["OrchestratorAgent", "FlowStep", "FlowTracker"]
