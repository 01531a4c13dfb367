import markdown

from notegen.models.article_schemas import ArticleBody
from notegen.models.storage_schemas import Template


def _to_html(text: str) -> str:
    return markdown.markdown(text).replace("\n", "")


def apply_template(article: ArticleBody, template: Template) -> ArticleBody:
    """
    Return a copy of `article` with the template header prepended and footer appended.

    The Markdown rendering receives the template text as-is; the HTML rendering receives
    it converted from Markdown. The original article is left untouched.
    """
    content_markdown = article.content_markdown
    content = article.content

    if template.header:
        content_markdown = f"{template.header}\n\n{content_markdown}"
        content = _to_html(template.header) + content
    if template.footer:
        content_markdown = f"{content_markdown}\n\n{template.footer}"
        content = content + _to_html(template.footer)

    return article.model_copy(update={"content": content, "content_markdown": content_markdown})
