"""Tests for head metadata resolution."""

from pagegen.common.models import META_DESCRIPTION_KEY, META_TITLE_KEY
from pagegen.seo import HeadMeta, render_head_tags, resolve_head_meta


class TestResolveHeadMeta:
    async def test_uses_csv_meta(self, memory_store):
        doc = memory_store.insert("Acme", **{META_TITLE_KEY: "Buy Acme", META_DESCRIPTION_KEY: "Widgets"})
        meta = await resolve_head_meta(memory_store, doc.id)
        assert meta == HeadMeta(title="Buy Acme", description="Widgets")

    async def test_external_fields_take_precedence(self, memory_store):
        doc = memory_store.insert(
            "Acme",
            **{
                META_TITLE_KEY: "Buy Acme",
                META_DESCRIPTION_KEY: "Widgets",
                "rank_math_title": "SEO Title",
            },
        )
        meta = await resolve_head_meta(memory_store, doc.id)
        assert meta.title == "SEO Title"
        assert meta.description == "Widgets"

    async def test_custom_external_keys(self, memory_store):
        doc = memory_store.insert("Acme", **{"seo_desc": "Custom", META_DESCRIPTION_KEY: "Widgets"})
        meta = await resolve_head_meta(memory_store, doc.id, description_key="seo_desc")
        assert meta.description == "Custom"

    async def test_empty_external_value_falls_back(self, memory_store):
        doc = memory_store.insert("Acme", **{"rank_math_title": "", META_TITLE_KEY: "Buy Acme"})
        meta = await resolve_head_meta(memory_store, doc.id)
        assert meta.title == "Buy Acme"

    async def test_no_meta(self, memory_store):
        doc = memory_store.insert("Acme")
        assert await resolve_head_meta(memory_store, doc.id) == HeadMeta()


class TestRenderHeadTags:
    def test_renders_both_tags(self):
        html = render_head_tags(HeadMeta(title="Acme", description="Widgets"))
        assert html == '<title>Acme</title>\n<meta name="description" content="Widgets">\n'

    def test_escapes_values(self):
        html = render_head_tags(HeadMeta(title="A & B", description='Say "hi" <now>'))
        assert "<title>A &amp; B</title>" in html
        assert 'content="Say &quot;hi&quot; &lt;now&gt;"' in html

    def test_omits_missing_values(self):
        assert render_head_tags(HeadMeta(description="Widgets")) == '<meta name="description" content="Widgets">\n'
        assert render_head_tags(HeadMeta()) == ""
