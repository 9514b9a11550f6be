import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sbdecode.entries import parse_entries
from sbdecode.enums import Layer
from sbdecode.errors import Diagnostic, collect_diagnostics, document_context
from sbdecode.model import Entry, Storyboard, StoryboardObject
from sbdecode.objects import decode_object

logger = logging.getLogger(__name__)

BASE_DOCUMENT = "base"
OVERLAY_DOCUMENT = "overlay"


@dataclass(frozen=True)
class LoadResult:
    """Decoded storyboard (``None`` when nothing decoded) and its diagnostics."""

    storyboard: Optional[Storyboard]
    diagnostics: List[Diagnostic] = field(default_factory=list)


class StoryboardLoader:
    def __init__(self, *, strict: bool = False) -> None:
        """Create a loader.

        Args:
            strict: Raise :class:`~sbdecode.errors.StoryboardValidationError` on
                the first diagnostic instead of skipping the offending unit.
        """
        self.strict = strict

    def load(self, base: Optional[str], overlay: Optional[str] = None) -> LoadResult:
        """Decode the base document and optional overlay into a storyboard."""
        with collect_diagnostics(strict=self.strict) as diagnostics:
            with document_context(BASE_DOCUMENT):
                base_entries, variables = parse_entries(base or "", allow_variables=True)
                logger.debug("Loaded %d entries from %s", len(base_entries), BASE_DOCUMENT)
                objects = self._decode_entries(base_entries)

            if overlay:
                with document_context(OVERLAY_DOCUMENT):
                    overlay_entries, _ = parse_entries(overlay, variables=variables)
                    logger.debug(
                        "Loaded %d entries from %s",
                        len(overlay_entries),
                        OVERLAY_DOCUMENT,
                    )
                    objects.extend(self._decode_entries(overlay_entries))

        return LoadResult(storyboard=_assemble(objects), diagnostics=list(diagnostics))

    def _decode_entries(self, entries: List[Entry]) -> List[StoryboardObject]:
        objects: List[StoryboardObject] = []
        for entry in entries:
            decoded = decode_object(entry)
            if decoded is not None:
                objects.append(decoded)
        return objects


def _assemble(objects: List[StoryboardObject]) -> Optional[Storyboard]:
    if not objects:
        return None

    buckets: Dict[Layer, List[StoryboardObject]] = {layer: [] for layer in Layer}
    for obj in objects:
        buckets[obj.layer].append(obj)
    return Storyboard(
        background=buckets[Layer.BACKGROUND],
        fail=buckets[Layer.FAIL],
        passing=buckets[Layer.PASS],
        foreground=buckets[Layer.FOREGROUND],
        overlay=buckets[Layer.OVERLAY],
    )


def load_storyboard(
    base: Optional[str],
    overlay: Optional[str] = None,
    *,
    strict: bool = False,
) -> Optional[Storyboard]:
    """Decode storyboard sources, returning ``None`` when no object decodes."""
    return StoryboardLoader(strict=strict).load(base, overlay).storyboard
