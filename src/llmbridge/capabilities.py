"""
Capability Matrix

Collects the capabilities each adapter declares and renders the
provider support table published in the documentation.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from llmbridge.adapters import ADAPTERS
from llmbridge.adapters.base import Adapter, Capabilities

# (Capabilities field, column title)
COLUMNS = (
    ("completion", "Completion"),
    ("streaming", "Streaming"),
    ("async_", "Async"),
    ("embeddings", "Embeddings"),
    ("image_generation", "Image Generation"),
    ("reranking", "Reranking"),
)

PROVIDER_TITLES = {
    "azure": "Azure OpenAI",
    "anthropic": "Anthropic",
    "ollama": "Ollama",
}


@dataclass(frozen=True)
class CapabilityRow:
    """One provider's line in the matrix."""
    provider: str
    capabilities: Capabilities

    @property
    def title(self) -> str:
        return PROVIDER_TITLES.get(self.provider, self.provider)

    def supports(self, column: str) -> bool:
        return getattr(self.capabilities, column)


def capability_matrix(
    adapters: Optional[Iterable[type[Adapter]]] = None,
) -> list[CapabilityRow]:
    """
    Build one row per provider, merging the capabilities of its adapters.

    Args:
        adapters: Adapter classes to include. Defaults to every adapter.

    Returns:
        Rows in the order providers first appear.
    """
    merged: dict[str, Capabilities] = {}
    for adapter in adapters if adapters is not None else ADAPTERS:
        current = merged.get(adapter.provider, Capabilities())
        merged[adapter.provider] = current | adapter.capabilities
    return [CapabilityRow(provider, caps) for provider, caps in merged.items()]


def render_markdown(rows: list[CapabilityRow]) -> str:
    """Render the matrix as a markdown table."""
    header = ["Provider"] + [title for _, title in COLUMNS]
    lines = [
        "| " + " | ".join(header) + " |",
        "|" + "|".join("---" for _ in header) + "|",
    ]
    for row in rows:
        cells = [row.title] + ["✅" if row.supports(name) else "" for name, _ in COLUMNS]
        lines.append("| " + " | ".join(cells) + " |")
    return "\n".join(lines) + "\n"


PAGE_INTRO = """\
# Provider capabilities

Which features each provider adapter supports. This page is generated from
the `capabilities` attribute of every adapter class:

```bash
llmbridge capabilities -o docs/capabilities.md
```
"""


def render_page(rows: list[CapabilityRow]) -> str:
    """Render the full documentation page: heading, intro and table."""
    return PAGE_INTRO + "\n" + render_markdown(rows)
