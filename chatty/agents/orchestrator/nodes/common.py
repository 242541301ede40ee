"""
Helpers shared by pipeline nodes
"""

from chatty.agents.orchestrator.state import PipelineState


async def publish_events(state: PipelineState) -> None:
    """Forward the tracker's unpublished step snapshots to the streaming callback, if any."""
    events = state["tracker"].take_events()
    emit = state.get("emit")
    if emit is None:
        return
    for event in events:
        await emit("step", event)
