"""Token measure for sizing protocol chunks by token budget.

``approximate`` divides character count by a fixed ratio and needs nothing
installed. ``tiktoken`` encodes with the model's encoding (``tiktoken`` extra),
falling back to a named encoding for models tiktoken does not know.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from protocol_assist.core.config import TokenizerConfig
from protocol_assist.exceptions import TokenizerError

log = logging.getLogger(__name__)

# Encoders are expensive to build; shared across counters per (model, fallback)
_encoders: dict[tuple[str, str], Any] = {}


def _load_encoder(model: str, fallback_encoding: str) -> Any:
    key = (model, fallback_encoding)
    if key not in _encoders:
        try:
            import tiktoken
        except ImportError as e:
            raise TokenizerError(
                "Token chunking with method 'tiktoken' needs the tiktoken package: "
                "pip install protocol-assist[tiktoken]"
            ) from e
        try:
            _encoders[key] = tiktoken.encoding_for_model(model)
        except KeyError:
            log.debug("No tiktoken encoding for %s, using %s", model, fallback_encoding)
            _encoders[key] = tiktoken.get_encoding(fallback_encoding)
    return _encoders[key]


class TokenCounter:
    """Callable text measure handed to :class:`~protocol_assist.pipeline.chunker.ProtocolChunker`."""

    def __init__(
        self,
        method: Literal["approximate", "tiktoken"] = "approximate",
        model: str = "gpt-4o",
        char_to_token_ratio: int = 4,
        fallback_encoding: str = "cl100k_base",
    ) -> None:
        if char_to_token_ratio < 1:
            raise TokenizerError(f"char_to_token_ratio must be at least 1, got {char_to_token_ratio}")
        self.method = method
        self.model = model
        self._ratio = char_to_token_ratio
        self._fallback_encoding = fallback_encoding
        # Resolve the encoder up front so a missing extra fails at service setup
        self._encoder = _load_encoder(model, fallback_encoding) if method == "tiktoken" else None

    @classmethod
    def from_config(cls, config: TokenizerConfig) -> TokenCounter:
        return cls(
            method=config.method,
            model=config.model,
            char_to_token_ratio=config.char_to_token_ratio,
            fallback_encoding=config.fallback_encoding,
        )

    def count(self, text: str, model: Optional[str] = None) -> int:
        """Return the number of tokens in *text*; 0 for empty text.

        *model* overrides the counter's model for a single tiktoken count.
        """
        if not text:
            return 0
        if self._encoder is None:
            return max(1, len(text) // self._ratio)
        encoder = self._encoder
        if model and model != self.model:
            encoder = _load_encoder(model, self._fallback_encoding)
        return len(encoder.encode(text))

    def __call__(self, text: str) -> int:
        """Measure a chunk candidate; the chunker compares this against ``chunk_size``."""
        return self.count(text)
