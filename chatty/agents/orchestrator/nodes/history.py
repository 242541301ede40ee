"""
History node - loads previous messages of the conversation
"""

from loguru import logger

from chatty.agents.orchestrator.context import PipelineContext
from chatty.agents.orchestrator.nodes.common import publish_events
from chatty.agents.orchestrator.state import PipelineState
from chatty.config.constants import FLOW_STEPS


async def load_history_node(state: PipelineState, ctx: PipelineContext) -> PipelineState:
    tracker = state["tracker"]
    conversation_id = state["conversation_id"]

    step = tracker.start_step(
        **FLOW_STEPS["backend"],
        data={"conversationId": conversation_id, "messageLength": len(state["message"])}
    )
    await publish_events(state)

    history = await ctx.conversation_store.get(conversation_id)
    logger.debug(f"Loaded {len(history)} messages for {conversation_id}")

    tracker.complete_step(step, {"conversationHistoryLength": len(history)})
    await publish_events(state)
    return {"history": history}
