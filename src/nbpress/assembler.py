"""Assembly of notebook cells into a document body."""

from typing import Optional

from nbpress.models import AssembledDocument, AssetFile, NotebookCell, RenderContext
from nbpress.rendering import OutputRenderer, fenced_block

PARAGRAPH_BREAK = "\n\n"


class DocumentAssembler:
    """Concatenate rendered cells, strictly in cell then output order.

    Markdown cells pass through verbatim, code cells become a fenced block
    followed by their rendered outputs. Every fragment ends with a blank line.
    """

    def __init__(self, renderer: Optional[OutputRenderer] = None):
        """Initialize the assembler.

        Args:
            renderer: Renderer used for code cell outputs
        """
        self.renderer = renderer or OutputRenderer()

    def assemble(
        self, cells: list[NotebookCell], slug: str, language: str = "python"
    ) -> AssembledDocument:
        """Render cells into one document body.

        Args:
            cells: Cells to render, in order
            slug: Notebook slug (namespaces the assets)
            language: Label for code fences

        Returns:
            AssembledDocument: Body text and the assets it references
        """
        fragments: list[str] = []
        assets: list[AssetFile] = []

        for cell in cells:
            if cell.cell_type == "markdown":
                if cell.source.strip():
                    fragments.append(cell.source)

            elif cell.cell_type == "code":
                if cell.source.strip():
                    fragments.append(fenced_block(cell.source, language))

                for output_index, output in enumerate(cell.outputs):
                    context = RenderContext(
                        slug=slug, cell_index=cell.index, output_index=output_index
                    )
                    rendered = self.renderer.render(output, context)
                    if rendered is None or not rendered.markup:
                        continue
                    fragments.append(rendered.markup)
                    assets.extend(rendered.assets)

        body = "".join(fragment + PARAGRAPH_BREAK for fragment in fragments)
        return AssembledDocument(body=body, assets=assets)
