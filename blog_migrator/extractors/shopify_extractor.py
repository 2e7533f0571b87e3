from typing import Any, Dict, Iterable, List, Optional, Tuple

from blog_migrator.migrators.shopify_client import (
    ShopifyStore,
    get_article,
    get_article_metafields,
    list_articles_paged,
)
from blog_migrator.utils.text import matches_pattern


def filter_articles(articles: Iterable[Dict[str, Any]], *, only_ids: Optional[Iterable[Any]] = None, pattern: Optional[str] = None) -> List[Dict[str, Any]]:
    """Keep the articles selected by id and by title pattern.

    Args:
        articles: Article summaries as listed by the source store.
        only_ids: Ids to keep; compared as strings. Empty keeps everything.
        pattern: ``*`` wildcard matched case-insensitively against the title.

    Returns:
        list: The selected articles, in listing order.
    """
    wanted = {str(i).strip() for i in (only_ids or []) if str(i).strip()}
    selected = []
    for article in articles:
        if wanted and str(article.get("id")) not in wanted:
            continue
        if not matches_pattern(article.get("title"), pattern):
            continue
        selected.append(article)
    return selected


def extract_articles(store: ShopifyStore, blog_id: int, *, only_ids: Optional[Iterable[Any]] = None, pattern: Optional[str] = None) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """List all articles of the source blog and select the ones to migrate.

    Returns:
        tuple: ``(all_articles, selected_articles)``.
    """
    articles = list_articles_paged(store, blog_id)
    return articles, filter_articles(articles, only_ids=only_ids, pattern=pattern)


def load_full_article(store: ShopifyStore, blog_id: int, article_id: Any) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """Fetch the complete article body and its metafields."""
    article = get_article(store, blog_id, article_id)
    metafields = get_article_metafields(store, article_id)
    return article, metafields
