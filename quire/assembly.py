"""Page data assembly for Quire.

Page data is prioritized in the following order, from lowest to highest:
  - Global data files
  - File-level attributes attached by an upstream loader
  - Page front matter (deep-merged over the two above)
  - Page constants:
    - ``page``: basename of the page
    - ``layout``: derived layout of the page
    - ``root``: path prefix to the pages root from this page
    - ``locale``: locale assigned to the page
    - ``_page_error``: error attached to the page, if any
  - Helper functions
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .config import folder_path
from .helpers import HelperProvisioner
from .layouts import LayoutResolver
from .protocols import TemplateEngine
from .utils import deep_merge, path_prefix, shallow_override

if TYPE_CHECKING:
    from .content import Page
    from .data import SiteSnapshot
    from .errors import PageRenderError

ERROR_KEY = "_page_error"


class PageDataAssembler:
    """Builds the data object handed to the engine for each page.

    Attributes:
        engine: Active templating engine.
        options: Site options.
        layout_resolver: Resolver for page layouts.
    """

    def __init__(
        self,
        engine: TemplateEngine,
        options: Mapping[str, Any],
        layout_resolver: LayoutResolver | None = None,
    ):
        self.engine = engine
        self.options = options
        self.pages_dir = folder_path(options, "pages")
        self.layout_resolver = layout_resolver or LayoutResolver(options)

    @staticmethod
    def assemble(
        page: Page,
        global_data: Mapping[str, Any],
        front_matter: Mapping[str, Any],
        constants: Mapping[str, Any],
        helpers: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Merge every data source for one page.

        Only the front matter step is a deep merge; every later step is a
        flat top-level override.
        """
        data = shallow_override(global_data, page.attributes)
        data = deep_merge(data, front_matter)
        return shallow_override(data, constants, helpers)

    def constants(
        self, page: Page, error: PageRenderError | None = None
    ) -> dict[str, Any]:
        """Compute the page constants, leaving out the ones that do not apply."""
        constants: dict[str, Any] = {
            "page": page.name,
            "root": path_prefix(page.path, self.pages_dir),
            "locale": page.locale,
        }
        layout = self.layout_resolver.resolve(page, page.front_matter, self.engine)
        if layout is not None:
            constants["layout"] = layout
        if error is not None:
            constants[ERROR_KEY] = error
        return constants

    def page_data(
        self,
        page: Page,
        snapshot: SiteSnapshot,
        error: PageRenderError | None = None,
    ) -> dict[str, Any]:
        """Assemble the template data for a page from a setup snapshot.

        Args:
            page: Page about to be rendered.
            snapshot: Snapshot of the current build pass.
            error: Error to attach to the page, if any.

        Returns:
            Page template data.
        """
        helpers = HelperProvisioner(
            self.engine, snapshot.locales, bool(self.options.get("builtins", True))
        ).get_helpers(page)
        return self.assemble(
            page,
            snapshot.data,
            page.front_matter,
            self.constants(page, error),
            helpers,
        )
