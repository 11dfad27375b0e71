"""
Vector Similarity

Numeric primitives for comparing embedding vectors: cosine similarity,
normalization, Euclidean distance and dot product.
"""

from typing import Sequence, Tuple, Union

import numpy as np

from .exceptions import DimensionMismatchError, InvalidArgumentError

Vector = Union[Sequence[float], np.ndarray]


def _as_array(vector: Vector) -> np.ndarray:
    if vector is None:
        raise InvalidArgumentError("Vector must not be None")

    array = np.asarray(vector, dtype=np.float64)
    if array.ndim != 1:
        raise InvalidArgumentError(f"Expected a 1-D vector, got shape {array.shape}")
    if array.size == 0:
        raise InvalidArgumentError("Vectors must not be empty (empty vector)")
    return array


def _as_pair(vector1: Vector, vector2: Vector) -> Tuple[np.ndarray, np.ndarray]:
    a = _as_array(vector1)
    b = _as_array(vector2)
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatchError(a.shape[0], b.shape[0])
    return a, b


def cosine_similarity(vector1: Vector, vector2: Vector) -> float:
    """
    Compute cosine similarity between two vectors.

    Args:
        vector1: First vector
        vector2: Second vector

    Returns:
        Similarity from -1.0 (opposite) to 1.0 (same direction).
        0.0 if either vector has zero magnitude.

    Raises:
        DimensionMismatchError: If the vectors differ in length
        InvalidArgumentError: If either vector is empty
    """
    a, b = _as_pair(vector1, vector2)

    magnitude1 = float(np.linalg.norm(a))
    magnitude2 = float(np.linalg.norm(b))

    if magnitude1 == 0.0 or magnitude2 == 0.0:
        return 0.0

    similarity = float(np.dot(a, b)) / (magnitude1 * magnitude2)

    # Rounding can push identical vectors slightly past 1.0
    return max(-1.0, min(1.0, similarity))


def normalize(vector: Vector) -> np.ndarray:
    """
    Scale a vector to unit length.

    A zero vector is returned as a new all-zero vector.

    Args:
        vector: Vector to normalize

    Returns:
        New array with magnitude 1.0 (or all zeros)
    """
    a = _as_array(vector)

    magnitude = float(np.linalg.norm(a))
    if magnitude == 0.0:
        return np.zeros_like(a)

    return a / magnitude


def euclidean_distance(vector1: Vector, vector2: Vector) -> float:
    """Euclidean distance between two vectors (lower is more similar)"""
    a, b = _as_pair(vector1, vector2)
    return float(np.linalg.norm(a - b))


def dot_product(vector1: Vector, vector2: Vector) -> float:
    """Dot product of two vectors"""
    a, b = _as_pair(vector1, vector2)
    return float(np.dot(a, b))
