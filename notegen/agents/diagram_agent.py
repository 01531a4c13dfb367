from typing import List

from .common_imports import (
    dedent,
    parse_payload,
    sections,
    GenerationSettings,
    ModelClient,
)

from notegen.models.article_schemas import ArticleBody, Diagram, DiagramSet

ARTICLE_EXCERPT_CHARS = 1000

SYSTEM_INSTRUCTION = "You are a data visualization specialist who produces Mermaid diagrams. Respond in JSON."

OUTPUT_FORMAT = dedent("""
    Respond in this JSON format:
    {
      "diagrams": [
        {
          "id": "diagram-1",
          "title": "Diagram title (e.g. Process flow)",
          "type": "What kind of diagram this is (e.g. Flowchart showing the steps)",
          "description": "What this diagram explains",
          "mermaidCode": "Mermaid code (flowchart TD, graph LR, ...). Node labels MUST be in double quotes. Include style definitions.",
          "insertAfterParagraph": 8
        },
        {
          "id": "diagram-2",
          "title": "Diagram title",
          "type": "Diagram type",
          "description": "What this diagram explains",
          "mermaidCode": "Mermaid code",
          "insertAfterParagraph": 15
        }
      ]
    }

    Important: always quote node labels in mermaidCode, e.g. A["Step 1"].
    Return exactly 2 diagrams under the top-level "diagrams" key.
""")


def diagram_instructions(settings: GenerationSettings, article: ArticleBody) -> str:
    task = "\n".join([
        "You are a data visualization specialist. Analyze the article below and produce 2 Mermaid diagrams that help readers understand it.",
        "",
        f"Article title: {article.title}",
        f"Keyword: {settings.keyword}",
    ])
    return sections(
        task,
        f"Article excerpt (first {ARTICLE_EXCERPT_CHARS} characters):\n" + article.content_markdown[:ARTICLE_EXCERPT_CHARS],
        OUTPUT_FORMAT,
    )


def parse_diagrams(payload: dict) -> List[Diagram]:
    return parse_payload(DiagramSet, payload).diagrams


async def run_diagram_generation(
    client: ModelClient,
    settings: GenerationSettings,
    article: ArticleBody,
) -> List[Diagram]:
    payload = await client.complete(
        SYSTEM_INSTRUCTION,
        diagram_instructions(settings, article),
        structured=True,
        name="Diagram Agent",
    )
    return parse_diagrams(payload)
