from __future__ import annotations

import asyncio
from typing import Optional

from notegen.agents.diagram_agent import run_diagram_generation
from notegen.agents.fact_check_agent import run_fact_check
from notegen.agents.model_client import ModelClient
from notegen.agents.research_agent import run_web_research
from notegen.agents.seo_agent import run_seo_analysis
from notegen.agents.social_post_agent import run_x_post_generation
from notegen.agents.structure_agent import run_article_structure
from notegen.agents.writing_agent import run_article_body
from notegen.core.config import Config
from notegen.core.console_config import console
from notegen.core.errors import ConfigurationError, NoteGenError
from notegen.core.logging_config import get_logger, setup_logging
from notegen.core.printer import Printer
from notegen.core.progress import PrinterProgressListener, ProgressChannel, StepCallback
from notegen.models.article_schemas import GenerationResult, WebResearchResult
from notegen.models.workflow_schemas import GenerationSettings, PipelineStep
from notegen.services import WorkflowDataManager, WorkflowDisplayManager
from notegen.tools.tavily_websearch import TavilySearchClient

logger = get_logger(__name__)

PIPELINE_STEPS: list[PipelineStep] = [
    PipelineStep("Research", "Keyword research and search intent", "Researching the keyword on the web..."),
    PipelineStep("SEO analysis", "Search intent, related keywords, competitors", "Analyzing search intent and SEO..."),
    PipelineStep("Structure", "Title, outline, FAQ, meta description", "Building the article outline..."),
    PipelineStep("Writing", "Natural, human-sounding article prose", "Writing the article..."),
    PipelineStep("Fact check", "Automatic verification of factual claims", "Checking the facts..."),
    PipelineStep("Diagrams", "Mermaid diagrams for the article", "Generating Mermaid diagrams..."),
    PipelineStep("X posts", "Promotional posts for X", "Drafting X posts..."),
    PipelineStep("Output", "Integrating all results", "Integrating all results..."),
]


class ArticleCreationWorkflow:
    """
    Orchestrates the generation flow: research, SEO, structure, writing, fact check, diagrams and X posts.

    Steps run strictly in order. Each step reports `(index, "running", message)` before it starts and
    `(index, "done", "")` when it finishes. The first error aborts the run and propagates unchanged;
    nothing is returned for a failed run and no later step runs.

    Args:
        config: Application config. Used to build default collaborators.
        model_client: Model client shared by every step.
        search_client: Web-search collaborator for the research step.
        use_research: Run the research step. When False, step 0 is a short pause and no step receives research.
        pause_seconds: Length of the pauses that pace the steps with no external call.
    """

    def __init__(
        self,
        config: Config,
        model_client: Optional[ModelClient] = None,
        search_client: Optional[TavilySearchClient] = None,
        use_research: bool = True,
        pause_seconds: Optional[float] = None,
    ) -> None:
        self.config = config
        self.model_client = model_client or ModelClient(config)
        self.use_research = use_research
        self.search_client = search_client or (TavilySearchClient(config) if use_research else None)
        self.pause_seconds = config.STEP_PAUSE_SECONDS if pause_seconds is None else pause_seconds

    async def run(self, settings: GenerationSettings, on_step: StepCallback) -> GenerationResult:
        logger.info("Starting pipeline for keyword [bold]%s[/bold] (research=%s)", settings.keyword, self.use_research)

        # Step 0: Research
        on_step(0, "running", PIPELINE_STEPS[0].running_message)
        self.model_client.ensure_configured()
        research = await self._research(settings)
        on_step(0, "done", "")

        # Step 1: SEO analysis
        on_step(1, "running", PIPELINE_STEPS[1].running_message)
        seo_analysis = await run_seo_analysis(self.model_client, settings, research)
        on_step(1, "done", "")

        # Step 2: Structure
        on_step(2, "running", PIPELINE_STEPS[2].running_message)
        structure = await run_article_structure(self.model_client, settings, seo_analysis, research)
        on_step(2, "done", "")

        # Step 3: Writing
        on_step(3, "running", PIPELINE_STEPS[3].running_message)
        article = await run_article_body(self.model_client, settings, structure, research)
        on_step(3, "done", "")

        # Step 4: Fact check
        on_step(4, "running", PIPELINE_STEPS[4].running_message)
        fact_check = await run_fact_check(self.model_client, article)
        on_step(4, "done", "")

        # Step 5: Diagrams
        on_step(5, "running", PIPELINE_STEPS[5].running_message)
        diagrams = await run_diagram_generation(self.model_client, settings, article)
        on_step(5, "done", "")

        # Step 6: X posts
        on_step(6, "running", PIPELINE_STEPS[6].running_message)
        x_posts = await run_x_post_generation(self.model_client, settings, structure)
        on_step(6, "done", "")

        # Step 7: Output integration
        on_step(7, "running", PIPELINE_STEPS[7].running_message)
        await asyncio.sleep(self.pause_seconds)
        result = GenerationResult(
            research=research,
            seo_analysis=seo_analysis,
            structure=structure,
            article=article,
            diagrams=diagrams,
            fact_check=fact_check,
            x_posts=x_posts,
        )
        on_step(7, "done", "")

        logger.info("Pipeline finished: %s", structure.title)
        return result

    async def _research(self, settings: GenerationSettings) -> Optional[WebResearchResult]:
        if not self.use_research:
            await asyncio.sleep(self.pause_seconds)
            return None
        return await run_web_research(self.model_client, self.search_client, settings)


async def run_full_pipeline(
    settings: GenerationSettings,
    on_step: StepCallback,
    *,
    config: Optional[Config] = None,
    model_client: Optional[ModelClient] = None,
    search_client: Optional[TavilySearchClient] = None,
    use_research: bool = True,
) -> GenerationResult:
    """Run the whole pipeline once. See `ArticleCreationWorkflow.run`."""
    workflow = ArticleCreationWorkflow(
        config or Config.from_env(),
        model_client=model_client,
        search_client=search_client,
        use_research=use_research,
    )
    return await workflow.run(settings, on_step)


def _choose(prompt: str, choices: tuple[str, ...], default: str) -> str:
    """Prompt until the answer is one of `choices`; an empty answer picks the default."""
    while True:
        answer = input(f"{prompt} ({'/'.join(choices)}) [{default}]: ").strip().lower()
        if not answer:
            return default
        if answer in choices:
            return answer
        print(f"Please enter one of: {', '.join(choices)}")


async def _run_interactive(config: Config, settings: GenerationSettings, use_research: bool) -> None:
    printer = Printer(console)
    display = WorkflowDisplayManager(printer, settings.keyword)
    channel = ProgressChannel()
    channel.subscribe(PrinterProgressListener(printer, [step.name for step in PIPELINE_STEPS]))

    try:
        display.display_workflow_start(use_research)
        try:
            result = await run_full_pipeline(settings, channel, config=config, use_research=use_research)
        except ConfigurationError as e:
            display.display_workflow_failed(str(e), "Set OPENAI_API_KEY in .env.local or .env and try again.")
            raise
        except NoteGenError as e:
            display.display_workflow_failed(str(e))
            raise

        history_item = WorkflowDataManager(config.DATA_DIR).add_history_item(settings, result)
        display.display_workflow_complete(history_item.id)
    finally:
        printer.end()

    display.print_result(result)


def main() -> None:
    config = Config.from_env()
    setup_logging(config.LOGGING_LEVEL)
    logger.info("Model settings: %s", config.get_model_config())
    try:
        settings = GenerationSettings(
            keyword=input("Enter the keyword: "),
            tone=_choose("Tone", ("friendly", "polite", "professional"), "friendly"),
            reader_level=_choose("Reader level", ("beginner", "intermediate", "advanced"), "beginner"),
            category=_choose(
                "Category", ("business", "technology", "lifestyle", "education", "entertainment"), "business"
            ),
            word_count=int(input("Enter the target word count [5000]: ") or 5000),
        )
    except (ValueError, NoteGenError) as e:
        console.print(f"[red]Invalid settings:[/red] {e}")
        raise SystemExit(2)
    use_research = _choose("Use web research", ("y", "n"), "y" if config.has_tavily_key else "n") == "y"

    try:
        asyncio.run(_run_interactive(config, settings, use_research))
    except NoteGenError:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
