"""Raw record normalization: alias resolution, coercion, canonical Deal."""

from dealboard.normalizing.aliases import FIELD_ALIASES, resolve
from dealboard.normalizing.normalizer import normalize, normalize_many, try_normalize

__all__ = ["FIELD_ALIASES", "normalize", "normalize_many", "resolve", "try_normalize"]
