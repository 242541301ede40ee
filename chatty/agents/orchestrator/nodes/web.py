"""
Web node - live web search for time-sensitive questions
"""

from loguru import logger

from chatty.agents.orchestrator.context import PipelineContext
from chatty.agents.orchestrator.nodes.common import publish_events
from chatty.agents.orchestrator.state import PipelineState
from chatty.config.constants import FLOW_STEPS


async def search_web_node(state: PipelineState, ctx: PipelineContext) -> PipelineState:
    tracker = state["tracker"]
    message = state["message"]

    step = tracker.start_step(**FLOW_STEPS["web_search"], data={"query": message[:100]})
    await publish_events(state)

    if not ctx.web_search.enabled:
        tracker.skip_step(step, "Web search disabled")
        await publish_events(state)
        return {"web_context": None}

    if not ctx.web_search.should_search(message):
        tracker.skip_step(step, "Web search not needed for this query")
        await publish_events(state)
        return {"web_context": None}

    try:
        web_context = await ctx.web_search.get_contextual_web_search(message)
    except Exception as e:
        logger.error(f"Web search processing failed: {e}")
        tracker.error_step(step, e)
        await publish_events(state)
        return {"web_context": None}

    if web_context is None:
        tracker.skip_step(step, "No web results found")
    else:
        results = web_context.get("results", [])
        logger.info(f"🌐 Web context added from {len(results)} results")
        tracker.complete_step(step, {
            "resultsFound": len(results),
            "sources": [result["url"] for result in results],
        })
    await publish_events(state)
    return {"web_context": web_context}
