"""NiceGUI pages for Merknad.

Import this module to register all page routes with NiceGUI.
"""

from merknad.pages import comment_editor

__all__ = ["comment_editor"]

# Touch modules to prevent linter from removing "unused" imports.
# These imports register @ui.page decorators as a side effect.
_PAGES = (comment_editor,)
