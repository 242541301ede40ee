"""
Knowledge node - consults the RAG backend for prompt context
"""

from loguru import logger

from chatty.agents.orchestrator.context import PipelineContext
from chatty.agents.orchestrator.nodes.common import publish_events
from chatty.agents.orchestrator.state import PipelineState
from chatty.config.constants import FLOW_STEPS


async def retrieve_knowledge_node(state: PipelineState, ctx: PipelineContext) -> PipelineState:
    """
    Fetch knowledge-base context for the message.

    Unavailable backend or no hits skip the step; an unexpected failure marks
    it as error. Either way the pipeline continues without RAG context.
    """
    tracker = state["tracker"]
    message = state["message"]

    step = tracker.start_step(**FLOW_STEPS["rag"], data={"query": message[:100]})
    await publish_events(state)

    try:
        if not await ctx.retriever.is_available():
            tracker.skip_step(step, "RAG service not available")
            await publish_events(state)
            return {"rag_context": None}

        rag_context = await ctx.retriever.get_contextual_search(message, ctx.rag_max_results)
    except Exception as e:
        logger.error(f"RAG processing failed: {e}")
        tracker.error_step(step, e)
        await publish_events(state)
        return {"rag_context": None}

    if rag_context is None:
        tracker.skip_step(step, "No relevant documents found")
    else:
        sources = rag_context.get("sources", [])
        logger.info(f"📚 RAG context added from {len(sources)} sources")
        tracker.complete_step(step, {
            "sourcesFound": len(sources),
            "sources": [source["source"] for source in sources],
        })
    await publish_events(state)
    return {"rag_context": rag_context}
