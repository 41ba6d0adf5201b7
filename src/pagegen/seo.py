"""Head metadata for generated documents.

External SEO fields win when present; otherwise the ``meta_title`` and
``meta_description`` stored from the CSV are used.
"""

import html
import uuid
from dataclasses import dataclass

from pagegen.common.config import settings
from pagegen.common.models import META_DESCRIPTION_KEY, META_TITLE_KEY
from pagegen.stores.base import BaseDocumentStore


@dataclass
class HeadMeta:
    title: str | None = None
    description: str | None = None


async def resolve_head_meta(
    store: BaseDocumentStore,
    document_id: uuid.UUID,
    title_key: str | None = None,
    description_key: str | None = None,
) -> HeadMeta:
    meta = await store.get_all_meta(document_id)
    title = meta.get(title_key or settings.seo_title_meta_key) or meta.get(META_TITLE_KEY)
    description = meta.get(description_key or settings.seo_description_meta_key) or meta.get(META_DESCRIPTION_KEY)
    return HeadMeta(title=title or None, description=description or None)


def render_head_tags(meta: HeadMeta) -> str:
    parts = []
    if meta.title:
        parts.append(f"<title>{html.escape(meta.title, quote=False)}</title>\n")
    if meta.description:
        parts.append(f'<meta name="description" content="{html.escape(meta.description)}">\n')
    return "".join(parts)
