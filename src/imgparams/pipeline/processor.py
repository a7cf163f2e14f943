"""Parameter processor: the resolution core.

Runs the selected dialect parsers, then takes the flat instance list
through four stages:

1. **Group** instances by canonical name.
2. **Merge** each group down to its highest-precedence instance.
3. **Validate** survivors against the registry (default or drop, never raise).
4. **Special cases**, in this order:

   a. vendor width/height aliases become canonical width/height
   b. human-authored width/height get the explicit-dimension flag
   c. a size code becomes a width unless an explicit width exists
   d. a path width beats any size-code width and removes the size code
   e. a condition directive merges its then-clause when it holds
   f. an aspect ratio without an explicit ctx turns ctx on
   g. overlay fragments collapse into ordered overlay descriptors
"""

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, Optional

from pydantic import BaseModel

from imgparams.contracts import assert_merged
from imgparams.parameters.coercion import split_top_level
from imgparams.parameters.registry import PARAMETER_REGISTRY, SIZE_CODES, ParameterDefinition
from imgparams.parsers import Dialect
from imgparams.pipeline.conditions import DimensionResolver, evaluate_condition, parse_condition
from imgparams.pipeline.overlays import collapse_fragments
from imgparams.pipeline.selector import ParserSelector
from imgparams.schemas.records import (
    ImageRequest,
    OverlayFragment,
    ParameterInstance,
    ProcessingContext,
    Source,
)

if TYPE_CHECKING:
    from imgparams.schemas import InternalConfig

__all__ = ['ParameterProcessor', 'precedence', 'SOURCE_RANK']

logger = logging.getLogger(__name__)

# Tie-break between equal priorities: most specific source wins
SOURCE_RANK = MappingProxyType({
    Source.DERIVED: 4,
    Source.PATH: 3,
    Source.LEGACY: 2,
    Source.STANDARD: 1,
    Source.COMPACT: 0,
})

HUMAN_SOURCES = frozenset({Source.STANDARD, Source.COMPACT, Source.PATH})

DIMENSION_FLAGS = MappingProxyType({"width": "explicit_width", "height": "explicit_height"})

VENDOR_DIMENSIONS = MappingProxyType({"imwidth": "width", "imheight": "height"})

Working = dict[str, ParameterInstance]


def precedence(instance: ParameterInstance) -> tuple[int, int, int]:
    """Sort key of the merge rule: priority, then source rank, then first occurrence."""
    return instance.priority, SOURCE_RANK[Source(instance.source)], -instance.occurrence


def _plain(value):
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    return value


class ParameterProcessor:
    """Resolves parsed parameter instances into one instance per name.

    Parameters
    ----------
    config : InternalConfig
        Resolved runtime configuration.

    Examples
    --------
    >>> processor = ParameterProcessor(config)
    >>> working = processor.process(ImageRequest.from_url("/a.jpg?w=800&f=s"), ProcessingContext())
    >>> working["width"].value
    800
    """

    def __init__(self, config: "InternalConfig"):
        self.config = config
        self.boost = config.priorities.derived_boost
        self.default_overlay_offset = config.legacy.default_overlay_offset
        self.selector = ParserSelector(config)
        logger.debug(
            "ParameterProcessor initialized: derived_boost=%d, overlay_offset=%s",
            self.boost, self.default_overlay_offset,
        )

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def process(
        self,
        request: ImageRequest,
        context: ProcessingContext,
        diagnostics: Optional[dict] = None,
    ) -> Working:
        """Select and run parsers for ``request``, then resolve the result."""
        diagnostics = {} if diagnostics is None else diagnostics
        parsers = self.selector.select(request)
        diagnostics["dialects"] = [parser.dialect.value for parser in parsers]

        instances: list[ParameterInstance] = []
        for parser in parsers:
            instances.extend(parser.parse(request, context, diagnostics))

        diagnostics["raw"] = [
            {"name": inst.name, "value": _plain(inst.value), "source": Source(inst.source).value}
            for inst in instances
        ]
        return self.resolve(instances, context, diagnostics)

    def resolve(
        self,
        instances: Iterable[ParameterInstance],
        context: ProcessingContext,
        diagnostics: Optional[dict] = None,
    ) -> Working:
        """Group, merge, validate and apply special cases to parsed instances."""
        diagnostics = {} if diagnostics is None else diagnostics
        ordered = [
            instance.model_copy(update={"occurrence": index})
            for index, instance in enumerate(instances)
        ]

        groups = self.group(ordered)
        path_width = self._path_width(groups.get("width", []))

        working = self.merge(groups)
        assert_merged(working)

        working = self.validate(working)
        working = self.apply_special_cases(working, path_width, context, diagnostics)
        assert_merged(working)

        logger.debug("Resolved parameters: %s", ", ".join(working))
        return working

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    @staticmethod
    def group(instances: Iterable[ParameterInstance]) -> dict[str, list[ParameterInstance]]:
        groups: dict[str, list[ParameterInstance]] = {}
        for instance in instances:
            groups.setdefault(instance.name, []).append(instance)
        return groups

    @staticmethod
    def merge(groups: dict[str, list[ParameterInstance]]) -> Working:
        merged = {}
        for name, bucket in groups.items():
            winner = max(bucket, key=precedence)
            if len(bucket) > 1:
                logger.debug(
                    "Merged %d %s instances: kept %r from %s (priority %d)",
                    len(bucket), name, winner.value, Source(winner.source).value, winner.priority,
                )
            merged[name] = winner
        return merged

    def validate(self, working: Working) -> Working:
        validated = {}
        for name, instance in working.items():
            definition = PARAMETER_REGISTRY.get(name)
            if definition is None:
                logger.debug("Dropping unregistered parameter %s", name)
                continue
            checked = self._validated(definition, instance)
            if checked is not None:
                validated[name] = checked
        return validated

    def apply_special_cases(
        self,
        working: Working,
        path_width: Optional[ParameterInstance],
        context: ProcessingContext,
        diagnostics: dict,
    ) -> Working:
        working = dict(working)
        self._remap_vendor_dimensions(working)
        self._flag_explicit_dimensions(working)
        self._resolve_size_code(working)
        self._apply_path_width(working, path_width)
        self._apply_condition(working, context, diagnostics)
        self._default_context_crop(working)
        self._collapse_overlays(working)
        return working

    # -------------------------------------------------------------------------
    # Special cases
    # -------------------------------------------------------------------------

    def _remap_vendor_dimensions(self, working: Working) -> None:
        for alias, canonical in VENDOR_DIMENSIONS.items():
            instance = working.pop(alias, None)
            if instance is None:
                continue
            if self._install(working, self._derive(instance, canonical, alias)):
                logger.debug("Remapped %s=%r to %s", alias, instance.value, canonical)

    @staticmethod
    def _flag_explicit_dimensions(working: Working) -> None:
        for name, flag in DIMENSION_FLAGS.items():
            instance = working.get(name)
            if instance is not None and instance.source in HUMAN_SOURCES and not getattr(instance, flag):
                working[name] = instance.model_copy(update={flag: True})

    def _resolve_size_code(self, working: Working) -> None:
        size_code = working.get("size_code")
        if size_code is None:
            return

        width = working.get("width")
        if width is not None and width.explicit_width:
            logger.debug(
                "Size code %s ignored: explicit width %r present", size_code.value, width.value
            )
            return

        derived = ParameterInstance(
            name="width",
            value=SIZE_CODES[size_code.value],
            source=Source.DERIVED,
            priority=size_code.priority + self.boost,
            explicit_width=True,
            origin=size_code.source,
            derived_from="size_code",
            occurrence=size_code.occurrence,
        )
        if self._install(working, derived):
            logger.debug("Size code %s resolved to width %d", size_code.value, derived.value)

    @staticmethod
    def _apply_path_width(working: Working, path_width: Optional[ParameterInstance]) -> None:
        if path_width is None:
            return
        current = working.get("width")
        if current is None or current.derived_from == "size_code" or current.source == Source.PATH:
            working["width"] = path_width
        if working["width"].source == Source.PATH and working.pop("size_code", None) is not None:
            logger.debug("Path width %r replaces size code", path_width.value)

    def _apply_condition(self, working: Working, context: ProcessingContext, diagnostics: dict) -> None:
        condition = working.pop("condition", None)
        if condition is None:
            return

        report = {"condition": condition.value, "matched": False}
        diagnostics.setdefault("conditions", []).append(report)

        directive = parse_condition(condition.value)
        if directive is None:
            logger.debug("Ignoring malformed condition %r", condition.value)
            return
        if not evaluate_condition(directive, DimensionResolver(context).get()):
            return
        report["matched"] = True

        for instance in self._parse_then_clause(directive.then_clause, context, diagnostics):
            if instance.name == "condition":
                logger.debug("Ignoring nested condition %r", instance.value)
                continue
            definition = PARAMETER_REGISTRY.get(instance.name)
            checked = None if definition is None else self._validated(definition, instance)
            if checked is None:
                continue
            name = VENDOR_DIMENSIONS.get(checked.name, checked.name)
            boosted = self._derive(checked, name, "condition", base=condition)
            if self._install(working, boosted):
                logger.debug("Condition applied %s=%r", name, boosted.value)

    @staticmethod
    def _default_context_crop(working: Working) -> None:
        aspect = working.get("aspect")
        if aspect is None or "ctx" in working:
            return
        working["ctx"] = aspect.model_copy(update={
            "name": "ctx",
            "value": True,
            "source": Source.DERIVED,
            "origin": aspect.source,
            "derived_from": "aspect",
        })
        logger.debug("Aspect %s enables ctx", aspect.value)

    def _collapse_overlays(self, working: Working) -> None:
        overlays = working.get("overlays")
        if overlays is None:
            return
        fragments = [item for item in overlays.value if isinstance(item, OverlayFragment)]
        descriptors = collapse_fragments(fragments, self.default_overlay_offset)
        if descriptors:
            working["overlays"] = overlays.model_copy(update={"value": descriptors})
        else:
            working.pop("overlays")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _derive(
        self,
        instance: ParameterInstance,
        name: str,
        derived_from: str,
        base: Optional[ParameterInstance] = None,
    ) -> ParameterInstance:
        """Copy ``instance`` as a boosted derived instance named ``name``."""
        base = instance if base is None else base
        update = {
            "name": name,
            "priority": base.priority + self.boost,
            "source": Source.DERIVED,
            "origin": instance.source,
            "derived_from": derived_from,
            "occurrence": base.occurrence,
        }
        if derived_from in VENDOR_DIMENSIONS or (
            derived_from == "condition" and instance.name in VENDOR_DIMENSIONS
        ):
            update[DIMENSION_FLAGS[name]] = True
        return instance.model_copy(update=update)

    @staticmethod
    def _install(working: Working, candidate: ParameterInstance) -> bool:
        current = working.get(candidate.name)
        if current is None or precedence(candidate) > precedence(current):
            working[candidate.name] = candidate
            return True
        return False

    @staticmethod
    def _validated(
        definition: ParameterDefinition,
        instance: ParameterInstance,
    ) -> Optional[ParameterInstance]:
        if definition.is_valid(instance.value):
            return instance
        if definition.default_value is not None:
            logger.debug(
                "Invalid %s=%r, using default %r",
                instance.name, instance.value, definition.default_value,
            )
            return instance.model_copy(update={"value": definition.default_value})
        logger.debug("Dropping invalid %s=%r", instance.name, instance.value)
        return None

    def _path_width(self, bucket: list[ParameterInstance]) -> Optional[ParameterInstance]:
        candidates = [instance for instance in bucket if instance.source == Source.PATH]
        if not candidates:
            return None
        checked = self._validated(PARAMETER_REGISTRY["width"], max(candidates, key=precedence))
        if checked is None:
            return None
        return checked.model_copy(update={"explicit_width": True})

    def _parse_then_clause(
        self,
        clause: str,
        context: ProcessingContext,
        diagnostics: dict,
    ) -> list[ParameterInstance]:
        legacy = self.selector.get(Dialect.LEGACY)
        if legacy.is_vendor_clause(clause):
            return legacy.parse_clause(clause, context, diagnostics)

        pairs = []
        for chunk in split_top_level(clause):
            key, sep, value = chunk.partition("=")
            if sep:
                pairs.append((key.strip(), value.strip()))
        return self.selector.get(Dialect.STANDARD).parse_pairs(pairs)
