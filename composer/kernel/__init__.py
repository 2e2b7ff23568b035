"""
Composer Kernel: the pure engine.

Four components:
  linker      : (configs, datas) → LinkedRecord list
  resolver    : LinkedRecord → ResolvedNode tree  (recursive, depth-bounded)
  dispatcher  : ResolvedNode → RenderInstruction  (total, with fallbacks)
  preview     : (PreviewState, PreviewAction) → PreviewState  (editor list)

No IO anywhere in here. Fetching, caching and sync live in composer.services.
"""

from composer.kernel.dispatcher import Dispatcher, dispatch
from composer.kernel.linker import link, link_with_report
from composer.kernel.preview import PreviewList, items_from_node
from composer.kernel.resolver import normalize_block, resolve, resolve_with_report

__all__ = [
    "link",
    "link_with_report",
    "resolve",
    "resolve_with_report",
    "normalize_block",
    "Dispatcher",
    "dispatch",
    "PreviewList",
    "items_from_node",
]
