"""
Generate node - calls the LLM with the assembled context
"""

from chatty.agents.orchestrator.context import PipelineContext
from chatty.agents.orchestrator.nodes.common import publish_events
from chatty.agents.orchestrator.state import PipelineState
from chatty.config.constants import FLOW_STEPS


async def generate_response_node(state: PipelineState, ctx: PipelineContext) -> PipelineState:
    tracker = state["tracker"]
    rag_context = state.get("rag_context")
    web_context = state.get("web_context")
    history = state.get("history", [])
    attachments = state.get("attachments") or []

    step = tracker.start_step(**FLOW_STEPS["ai"], data={
        "model": ctx.generator.model,
        "historyLength": len(history),
        "ragContextUsed": rag_context is not None,
        "webContextUsed": web_context is not None,
        "attachmentCount": len(attachments),
    })
    await publish_events(state)

    result = await ctx.generator.generate(
        state["message"],
        history,
        rag_context=rag_context,
        web_context=web_context,
        attachments=attachments,
    )

    if result.ok:
        tracker.complete_step(step, {
            "model": result.model,
            "tokens": result.tokens,
            "responseLength": len(result.response),
        })
    else:
        # The fallback reply is still returned and stored
        tracker.error_step(step, result.error or result.failure.value, {
            "failure": result.failure.value,
            "model": result.model,
        })
    await publish_events(state)
    return {"generation": result}
