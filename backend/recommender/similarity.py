from __future__ import annotations

from typing import Hashable, Mapping, Set
import math


def cosine_similarity(vec_a: Mapping[Hashable, float], vec_b: Mapping[Hashable, float]) -> float:
    """
    dot(A, B) / (|A| * |B|) over the union of keys.
    0.0 for empty input or a zero-norm vector.
    """
    keys = set(vec_a) | set(vec_b)
    if not keys:
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for k in keys:
        a = float(vec_a.get(k, 0.0))
        b = float(vec_b.get(k, 0.0))
        dot += a * b
        norm_a += a * a
        norm_b += b * b

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    sim = dot / (math.sqrt(norm_a) * math.sqrt(norm_b))
    # float noise can push identical vectors a hair past 1
    return max(-1.0, min(sim, 1.0))


def jaccard_similarity(set_a: Set[Hashable], set_b: Set[Hashable]) -> float:
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def pearson_correlation(vec_a: Mapping[Hashable, float], vec_b: Mapping[Hashable, float]) -> float:
    """
    Pearson r over the keys present in both vectors.
    0.0 when there is no overlap or either side has zero variance on it.
    """
    common = [k for k in vec_a if k in vec_b]
    if not common:
        return 0.0

    xs = [float(vec_a[k]) for k in common]
    ys = [float(vec_b[k]) for k in common]
    # constant input; the mean of e.g. [0.1] * 3 is not exactly 0.1
    if len(set(xs)) == 1 or len(set(ys)) == 1:
        return 0.0

    mean_x = sum(xs) / len(xs)
    mean_y = sum(ys) / len(ys)

    num = 0.0
    ss_x = 0.0
    ss_y = 0.0
    for x, y in zip(xs, ys):
        dx = x - mean_x
        dy = y - mean_y
        num += dx * dy
        ss_x += dx * dx
        ss_y += dy * dy

    denom = math.sqrt(ss_x * ss_y)
    if denom == 0.0:
        return 0.0

    return max(-1.0, min(num / denom, 1.0))
