"""
Persist node - appends the exchange to the conversation
"""

from chatty.agents.orchestrator.context import PipelineContext
from chatty.agents.orchestrator.nodes.common import publish_events
from chatty.agents.orchestrator.state import PipelineState
from chatty.config.constants import FLOW_STEPS, SENDERS
from chatty.utils.clock import utc_now_iso


async def persist_exchange_node(state: PipelineState, ctx: PipelineContext) -> PipelineState:
    tracker = state["tracker"]
    conversation_id = state["conversation_id"]
    generation = state["generation"]

    step = tracker.start_step(**FLOW_STEPS["response"], data={"conversationId": conversation_id})
    await publish_events(state)

    messages = [
        *state.get("history", []),
        {"sender": SENDERS.USER, "text": state["message"], "timestamp": state["received_at"]},
        {"sender": SENDERS.BOT, "text": generation.response, "timestamp": utc_now_iso()},
    ]
    await ctx.conversation_store.set(conversation_id, messages)

    tracker.complete_step(step, {"conversationStored": True, "totalMessages": len(messages)})
    await publish_events(state)
    return {"persisted": True}
