from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from functools import cached_property
from types import MappingProxyType
from typing import Callable, Hashable, Iterable, Mapping

from tag_tfidf.dao import ItemTagDAO
from tag_tfidf.sparse import MutableSparseVector, SparseVector


class VocabularyMismatch(LookupError):
    """
    An item carries a tag that is missing from the tag id map.
    """

    def __init__(self, item: Hashable, tag: str):
        super().__init__(f"item {item!r} has tag {tag!r} which is not in the tag vocabulary")
        self.item = item
        self.tag = tag


@dataclass(frozen=True, eq=False)
class TFIDFModel:
    tag_ids: Mapping[str, int]
    item_vectors: Mapping[Hashable, SparseVector]  # item -> unit-ish TF-IDF vector

    @property
    def item_ids(self) -> frozenset:
        return frozenset(self.item_vectors.keys())

    @property
    def vocabulary_size(self) -> int:
        return len(self.tag_ids)

    def __len__(self) -> int:
        return len(self.item_vectors)

    def tag_id(self, tag: str) -> int | None:
        return self.tag_ids.get(tag)

    def item_vector(self, item: Hashable) -> SparseVector | None:
        return self.item_vectors.get(item)

    @cached_property
    def _tags_by_id(self) -> dict[int, str]:
        return {tid: tag for tag, tid in self.tag_ids.items()}

    def tag_weights(self, item: Hashable) -> dict[str, float] | None:
        """
        The item's vector keyed by tag string instead of tag id.
        """
        vec = self.item_vectors.get(item)
        if vec is None:
            return None
        return {self._tags_by_id[tid]: w for tid, w in vec.items()}


def build_tag_id_map(vocabulary: Iterable[str]) -> dict[str, int]:
    tag_ids: dict[str, int] = {}
    for tag in vocabulary:
        if tag not in tag_ids:
            tag_ids[tag] = len(tag_ids) + 1
    return tag_ids


def accumulate_frequencies(
    item_ids: Iterable[Hashable],
    get_item_tags: Callable[[Hashable], Iterable[str]],
    tag_ids: Mapping[str, int],
) -> tuple[dict[Hashable, MutableSparseVector], MutableSparseVector]:
    """
    Single pass over the items. Returns (item -> raw term-frequency vector,
    document-frequency vector over every tag id).

    Term frequency counts every application of a tag to an item; document
    frequency counts each item at most once per tag.
    """
    doc_freq = MutableSparseVector.create(tag_ids.values())
    doc_freq.fill(0.0)

    item_vectors: dict[Hashable, MutableSparseVector] = {}
    work = MutableSparseVector.create(tag_ids.values())
    # repeated ids would count towards df twice
    for item in dict.fromkeys(item_ids):
        work.clear()
        for tag in get_item_tags(item):
            tid = tag_ids.get(tag)
            if tid is None:
                raise VocabularyMismatch(item, tag)
            if work.contains(tid):
                work.add(tid, 1.0)
            else:
                work.set(tid, 1.0)
                doc_freq.add(tid, 1.0)
        item_vectors[item] = work.shrink_domain()

    return item_vectors, doc_freq


def inverse_document_frequency(doc_freq: MutableSparseVector | Mapping[int, float], n_items: int) -> SparseVector:
    """
    idf(t) = ln(n_items / df(t)). Tags with df == 0 have no idf and are left out.
    """
    idf: dict[int, float] = {}
    for tid, df in doc_freq.items():
        if df <= 0:
            continue
        if n_items <= 0:
            raise ValueError(f"n_items must be positive, got {n_items}")
        idf[tid] = math.log(n_items / df)
    return SparseVector(idf)


def apply_idf(tf_vector: MutableSparseVector, idf: Mapping[int, float]) -> SparseVector:
    """
    Weights each raw term frequency by its idf and divides by the norm of the
    raw term-frequency vector (not of the weighted one), so the result is unit
    length only up to the idf weighting.
    """
    length = tf_vector.norm()
    out = MutableSparseVector.create(tf_vector.keys())
    # an empty vector never reaches the division
    for tid, tf in tf_vector.items():
        out.set(tid, (tf * idf[tid]) / length)
    return out.freeze()


class TFIDFModelBuilder:
    def __init__(self, dao: ItemTagDAO, verbose: bool = False):
        self._dao = dao
        self._verbose = verbose

    def _log(self, msg: str) -> None:
        if self._verbose:
            print(msg, file=sys.stderr)

    def build(self) -> TFIDFModel:
        tag_ids = build_tag_id_map(self._dao.get_tag_vocabulary())
        self._log(f"Tag vocabulary: {len(tag_ids)} tags")

        items = self._dao.get_item_ids()
        item_tf, doc_freq = accumulate_frequencies(items, self._dao.get_item_tags, tag_ids)
        untagged = sum(1 for v in item_tf.values() if len(v) == 0)
        self._log(f"Accumulated term frequencies for {len(items)} items ({untagged} without tags)")

        idf = inverse_document_frequency(doc_freq, len(items))
        item_vectors = {item: apply_idf(tf, idf) for item, tf in item_tf.items()}

        return TFIDFModel(
            tag_ids=MappingProxyType(tag_ids),
            item_vectors=MappingProxyType(item_vectors),
        )
