"""Request-level facade over the resolution pipeline."""

import logging
from typing import TYPE_CHECKING, Optional, Union

from imgparams.parsers import Dialect
from imgparams.pipeline.formatter import format_options
from imgparams.pipeline.processor import ParameterProcessor
from imgparams.schemas.records import ImageRequest, ProcessingContext, ResolutionResult

if TYPE_CHECKING:
    from imgparams.schemas import InternalConfig

__all__ = ['ParameterHandler']

logger = logging.getLogger(__name__)


class ParameterHandler:
    """Resolves a request URL into canonical options plus diagnostics.

    The handler is stateless between calls and may be shared; each call
    builds its own request-scoped records.

    Parameters
    ----------
    config : InternalConfig
        Resolved runtime configuration. ``config.features.advanced`` is the
        default advanced-features flag when no context is supplied.

    Examples
    --------
    >>> handler = ParameterHandler(resolve_config(ParamConfig()))
    >>> handler.resolve("/img.jpg?im.resize=width:800,height:600,mode:fit").options
    {'width': 800, 'height': 600, 'fit': 'contain'}
    """

    def __init__(self, config: "InternalConfig"):
        self.config = config
        self.processor = ParameterProcessor(config)
        logger.info(
            "ParameterHandler initialized: advanced_features=%s, derivatives=%s",
            config.features.advanced, ",".join(config.path.derivatives),
        )

    def default_context(self) -> ProcessingContext:
        return ProcessingContext(advanced_features=self.config.features.advanced)

    def resolve(
        self,
        request: Union[str, ImageRequest],
        context: Optional[ProcessingContext] = None,
    ) -> ResolutionResult:
        """Resolve one request.

        Parameters
        ----------
        request : str or ImageRequest
            URL (absolute, or ``path?query``) or a prepared request.
        context : ProcessingContext, optional
            Advanced-features flag and dimensions for this request.

        Returns
        -------
        ResolutionResult
            ``options`` holds the canonical option map, ``diagnostics`` the
            matched dialects, raw and translated parameters, skipped
            directives, condition outcomes, size code, derivative and the
            image path with option segments removed.
        """
        if isinstance(request, str):
            request = ImageRequest.from_url(request)
        if context is None:
            context = self.default_context()

        diagnostics: dict = {"skipped": [], "conditions": []}
        working = self.processor.process(request, context, diagnostics)
        options = format_options(working)

        path_parser = self.processor.selector.get(Dialect.PATH)
        size_code = working.get("size_code")
        derivative = working.get("derivative")
        diagnostics.update(
            translated=dict(options),
            size_code=None if size_code is None else size_code.value,
            derivative=None if derivative is None else derivative.value,
            image_path=path_parser.strip_option_segments(request.path),
        )

        logger.debug(
            "Resolved %s via %s: %d option(s)",
            request.path, ",".join(diagnostics["dialects"]), len(options),
        )
        return ResolutionResult(options=options, diagnostics=diagnostics)
