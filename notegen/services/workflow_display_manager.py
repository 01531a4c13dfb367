from __future__ import annotations

from notegen.core.printer import Printer
from notegen.models.article_schemas import (
    ArticleBody,
    ArticleStructure,
    Diagram,
    FactCheckResult,
    GenerationResult,
    SeoAnalysis,
    WebResearchResult,
    XPostSuggestions,
)

ACCURACY_ICONS = {"accurate": "✅", "inaccurate": "❌", "partial": "⚠️", "unverified": "❔"}


class WorkflowDisplayManager:
    """
    Handles all display and status printing for the generation workflow.
    """

    def __init__(self, printer: Printer, keyword: str):
        self.printer = printer
        self.keyword = keyword

    def display_workflow_start(self, use_research: bool) -> None:
        """Display workflow initialization status"""
        self.printer.update_item("workflow_start", "🚀 Starting article generation", is_done=True, hide_checkmark=True)
        self.printer.update_item("keyword", f"🔑 Keyword: {self.keyword}", is_done=True, hide_checkmark=True)
        research_label = "on" if use_research else "off"
        self.printer.update_item("research_mode", f"🌐 Web research: {research_label}", is_done=True, hide_checkmark=True)

    def display_workflow_failed(self, message: str, hint: str = "") -> None:
        self.printer.update_item("workflow_failed", f"❌ Generation failed: {message}", is_done=True, hide_checkmark=True)
        if hint:
            self.printer.update_item("workflow_hint", f"💡 {hint}", is_done=True, hide_checkmark=True)

    def display_workflow_complete(self, history_id: str | None = None) -> None:
        """Display workflow completion status"""
        self.printer.update_item("workflow_complete", "🏁 Article generation completed", is_done=True)
        if history_id:
            self.printer.update_item("history", f"💾 Saved to history as {history_id}", is_done=True, hide_checkmark=True)

    def print_result(self, result: GenerationResult) -> None:
        if result.research:
            self.print_research_summary(result.research)
        self.print_seo_summary(result.seo_analysis)
        self.print_structure(result.structure)
        self.print_article_summary(result.article)
        self.print_fact_check(result.fact_check)
        self.print_diagrams(result.diagrams)
        self.print_x_posts(result.x_posts)

    def print_research_summary(self, research: WebResearchResult) -> None:
        print("\n" + "=" * 60)
        print("🔍 RESEARCH SUMMARY")
        print("=" * 60)
        for i, finding in enumerate(research.key_findings, 1):
            print(f"  {i}. {finding}")
        print(f"\n📊 Sources: {len(research.sources)}")
        for source in research.sources[:3]:
            print(f"     - {source.title} ({source.url})")
        if len(research.sources) > 3:
            print(f"     ... and {len(research.sources) - 3} more sources")
        print("=" * 60 + "\n")

    def print_seo_summary(self, seo: SeoAnalysis) -> None:
        print("\n" + "=" * 60)
        print("📊 SEO ANALYSIS")
        print("=" * 60)
        print(f"🎯 Search intent: {seo.search_intent}")
        print(f"🔍 Related keywords: {', '.join(seo.related_keywords)}")
        print(f"🏁 Competitors: {seo.competitor_insights}")
        print("=" * 60 + "\n")

    def print_structure(self, structure: ArticleStructure) -> None:
        print("\n" + "=" * 60)
        print("📋 ARTICLE STRUCTURE")
        print("=" * 60)
        print(f"📰 Title: {structure.title}")
        print(f"📝 Meta description: {structure.meta_description}")
        print(f"\n📑 Outline ({len(structure.headings)} headings):")
        for heading in structure.headings:
            indent = "  " if heading.level == 2 else "      "
            print(f"{indent}{heading.text}")
        print("\n❓ FAQ:")
        for item in structure.faq:
            print(f"  Q: {item.question}")
        print("=" * 60 + "\n")

    def print_article_summary(self, article: ArticleBody) -> None:
        word_count = len(article.content_markdown.split())
        print("\n" + "=" * 60)
        print("✍️ ARTICLE")
        print("=" * 60)
        print(f"📰 {article.title}")
        print(f"👤 {article.author} · {article.date} · {article.reading_time}")
        print(f"📊 Length: {word_count} words")
        preview = article.content_markdown[:200].replace("\n", " ")
        print(f"📝 Preview: {preview}{'...' if len(article.content_markdown) > 200 else ''}")
        print("=" * 60 + "\n")

    def print_fact_check(self, fact_check: FactCheckResult) -> None:
        print("\n" + "=" * 60)
        print("✅ FACT CHECK")
        print("=" * 60)
        print(
            f"📊 {fact_check.total_checked} checked: {fact_check.verified} verified, "
            f"{fact_check.inaccurate} inaccurate, {fact_check.unverified} unverified "
            f"(confidence: {fact_check.overall_confidence})"
        )
        for item in fact_check.items:
            print(f"  {ACCURACY_ICONS[item.accuracy]} {item.claim}")
            if item.suggestion:
                print(f"     💡 {item.suggestion}")
        print("=" * 60 + "\n")

    def print_diagrams(self, diagrams: list[Diagram]) -> None:
        print("\n" + "=" * 60)
        print("📈 DIAGRAMS")
        print("=" * 60)
        for diagram in diagrams:
            print(f"  {diagram.title} ({diagram.type}), after paragraph {diagram.insert_after_paragraph}")
        print("=" * 60 + "\n")

    def print_x_posts(self, x_posts: XPostSuggestions) -> None:
        print("\n" + "=" * 60)
        print("📣 X POSTS")
        print("=" * 60)
        print(f"🕒 Recommended: {x_posts.recommended_time} ({x_posts.recommended_reason})")
        for post in x_posts.short_posts:
            print(f"  [{post.target}] {post.content} ({post.char_count}/{post.max_chars})")
        print(f"\n🧵 Thread: {x_posts.thread.total_tweets} posts, {x_posts.thread.total_chars} characters")
        print("=" * 60 + "\n")
