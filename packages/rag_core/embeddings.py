from __future__ import annotations

import logging
from typing import List

import numpy as np
import torch
from FlagEmbedding import BGEM3FlagModel

from .errors import EmbeddingUnavailable

_log = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "BAAI/bge-m3"
_model: BGEM3FlagModel | None = None
_model_name: str | None = None


def _get_device() -> str:
    """Return device string, prefer GPU when available."""
    if torch.cuda.is_available():
        return "cuda"
    return "cpu"


def get_model(model_name: str = DEFAULT_MODEL_NAME) -> BGEM3FlagModel:
    """Lazily load the BGE-M3 embedding model, reloading if another name is requested."""
    global _model, _model_name
    if _model is not None and _model_name == model_name:
        return _model

    device = _get_device()
    use_fp16 = device == "cuda"

    _log.info("Loading BGEM3FlagModel '%s' on device=%s (fp16=%s)", model_name, device, use_fp16)
    try:
        _model = BGEM3FlagModel(
            model_name,
            use_fp16=use_fp16,
            device=device,
        )
    except (OSError, RuntimeError, ValueError) as exc:
        raise EmbeddingUnavailable(f"Could not load embedding model {model_name}: {exc}") from exc
    _model_name = model_name
    return _model


def embed_dense(
    texts: List[str],
    batch_size: int = 16,
    max_length: int = 8192,
    model_name: str = DEFAULT_MODEL_NAME,
) -> np.ndarray:
    """
    Compute dense embeddings for a list of texts using BGE-M3.

    Returns an array of shape (len(texts), dim); row i belongs to texts[i].
    """
    if not texts:
        return np.zeros((0, 0), dtype=np.float32)

    model = get_model(model_name)
    _log.debug("Encoding %d texts with BGE-M3 (batch_size=%d, max_length=%d)", len(texts), batch_size, max_length)

    try:
        outputs = model.encode(
            texts,
            batch_size=batch_size,
            max_length=max_length,
            return_dense=True,
            return_sparse=False,
            return_colbert_vecs=False,
        )
    except (RuntimeError, ValueError) as exc:
        raise EmbeddingUnavailable(f"Embedding failed: {exc}", text_preview=texts[0][:80]) from exc

    return np.asarray(outputs["dense_vecs"], dtype=np.float32)


def embed_text(text: str, model_name: str = DEFAULT_MODEL_NAME) -> List[float]:
    """Embed a single text; the `embed(text) -> vector` capability used by ingestion and queries."""
    dense = embed_dense([text], batch_size=1, model_name=model_name)
    return dense[0].tolist()


__all__ = ["DEFAULT_MODEL_NAME", "embed_dense", "embed_text", "get_model"]
