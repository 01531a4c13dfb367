from .common_imports import (
    dedent,
    get_logger,
    parse_payload,
    sections,
    GenerationSettings,
    ModelClient,
)

from notegen.models.article_schemas import ResearchFindings, ResearchSource, WebResearchResult
from notegen.tools.tavily_websearch import SearchResponse, TavilySearchClient

logger = get_logger(__name__)

SNIPPET_CHARS = 200
RAW_SUMMARY_CHARS = 3000

SYSTEM_INSTRUCTION = "You structure web research for a writer. Respond in JSON."


def build_research_query(settings: GenerationSettings) -> str:
    return f"{settings.keyword} {settings.category} latest information case studies"


def format_sources_context(search: SearchResponse) -> str:
    return "\n\n".join(
        f"[{i}] {hit.title}\nURL: {hit.url}\nContent: {hit.content}"
        for i, hit in enumerate(search.results, 1)
    )


OUTPUT_FORMAT = dedent("""
    ## Output format (JSON)
    {
      "keyFindings": [
        "Finding 1: a concrete fact or number (e.g. the market is worth $X billion)",
        "Finding 2: ...",
        "Finding 3: ..."
      ],
      "competitorSummary": "What the top-ranking articles have in common (around 200 characters)"
    }

    Rules:
    - keyFindings must contain 5-10 items
    - every finding names a specific fact, figure or example
    - no vague wording; state exactly what the search found
""")


def research_instructions(settings: GenerationSettings, search: SearchResponse, sources_context: str) -> str:
    return sections(
        f"Analyze the web search results below and extract the key points needed to write an article about \"{settings.keyword}\".",
        "## AI summary from the search engine\n" + (search.answer or "(none)"),
        "## Search results\n" + (sources_context or "(no results)"),
        OUTPUT_FORMAT,
    )


def parse_research_findings(payload: dict) -> ResearchFindings:
    return parse_payload(ResearchFindings, payload)


async def run_web_research(
    client: ModelClient,
    search_client: TavilySearchClient,
    settings: GenerationSettings,
) -> WebResearchResult:
    """Search the web for the keyword and distill the results into findings."""
    client.ensure_configured()
    search = await search_client.search(build_research_query(settings))

    sources_context = format_sources_context(search)
    payload = await client.complete(
        SYSTEM_INSTRUCTION,
        research_instructions(settings, search, sources_context),
        structured=True,
        name="Research Agent",
    )
    findings = parse_research_findings(payload)
    logger.info("Research distilled %d findings from %d sources", len(findings.key_findings), len(search.results))

    return WebResearchResult(
        key_findings=findings.key_findings,
        sources=[
            ResearchSource(title=hit.title, url=hit.url, snippet=hit.content[:SNIPPET_CHARS])
            for hit in search.results
        ],
        competitor_summary=findings.competitor_summary,
        raw_summary=search.answer or sources_context[:RAW_SUMMARY_CHARS],
    )
