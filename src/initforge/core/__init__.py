"""
Core generation logic for initforge.

Writers, the merge engine, the template assembler and the run
orchestrator. Only the dependency-free building blocks are re-exported
here; import writers and the orchestrator from their modules.
"""

from initforge.core.merge import (
    deep_merge,
    get_merger,
    merge_ignore,
    merge_json,
    merge_markdown,
)
from initforge.core.output_router import OutputRouter, OutputRoutes
from initforge.core.template_engine import (
    TemplateLoader,
    TemplateNotFoundError,
    render_template,
)

__all__ = [
    # Merge engine
    "deep_merge",
    "get_merger",
    "merge_ignore",
    "merge_json",
    "merge_markdown",
    # Routing
    "OutputRouter",
    "OutputRoutes",
    # Templates
    "TemplateLoader",
    "TemplateNotFoundError",
    "render_template",
]
