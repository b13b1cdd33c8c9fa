"""
Tests for the Capability Matrix
"""

from dataclasses import fields


class TestCapabilityMatrix:
    """Tests for collecting and rendering provider capabilities."""

    def test_columns_cover_every_capability(self):
        from llmbridge.adapters.base import Capabilities
        from llmbridge.capabilities import COLUMNS

        assert [name for name, _ in COLUMNS] == [f.name for f in fields(Capabilities)]

    def test_rows_per_provider(self):
        from llmbridge.capabilities import capability_matrix

        rows = capability_matrix()
        assert [row.provider for row in rows] == ["azure", "anthropic", "ollama"]

    def test_azure_row_merges_all_adapters(self):
        from llmbridge.capabilities import capability_matrix

        azure = capability_matrix()[0]
        assert azure.title == "Azure OpenAI"
        for column in ("completion", "streaming", "async_", "embeddings", "image_generation"):
            assert azure.supports(column)
        assert not azure.supports("reranking")

    def test_no_provider_supports_reranking(self):
        from llmbridge.capabilities import capability_matrix

        assert not any(row.supports("reranking") for row in capability_matrix())

    def test_custom_adapter_list(self):
        from llmbridge.adapters.base import Capabilities, LanguageModel
        from llmbridge.capabilities import capability_matrix

        class RerankOnly(LanguageModel):
            provider = "acme"
            capabilities = Capabilities(reranking=True)

            def generate(self, prompt):
                raise NotImplementedError

        rows = capability_matrix([RerankOnly])
        assert len(rows) == 1
        assert rows[0].title == "acme"
        assert rows[0].supports("reranking")

    def test_render_markdown(self):
        from llmbridge.capabilities import capability_matrix, render_markdown

        markdown = render_markdown(capability_matrix())
        lines = markdown.splitlines()

        assert lines[0] == (
            "| Provider | Completion | Streaming | Async | Embeddings "
            "| Image Generation | Reranking |"
        )
        assert lines[1] == "|---|---|---|---|---|---|---|"
        assert lines[2] == "| Azure OpenAI | ✅ | ✅ | ✅ | ✅ | ✅ |  |"
        assert lines[3] == "| Anthropic | ✅ | ✅ |  |  |  |  |"
        assert lines[4] == "| Ollama | ✅ | ✅ |  |  |  |  |"
        assert markdown.endswith("\n")

    def test_render_page_keeps_heading_and_intro(self):
        from llmbridge.capabilities import capability_matrix, render_markdown, render_page

        rows = capability_matrix()
        page = render_page(rows)

        assert page.startswith("# Provider capabilities\n")
        assert "llmbridge capabilities -o docs/capabilities.md" in page
        assert page.endswith(render_markdown(rows))
