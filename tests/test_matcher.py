import numpy as np
import pytest

from image_similarity import matcher
from image_similarity.config import Configuration
from image_similarity.loader import ImageRecord
from image_similarity.report import LABEL_IDENTICAL, LABEL_SIMILAR
from image_similarity.store import InMemorySource


def _source(*arrays):
    records = [
        ImageRecord(path=f"img{i}.png", shape=arr.shape, pixels=arr)
        for i, arr in enumerate(arrays)
    ]
    return InMemorySource(records)


def _scan(source, config):
    lines = []
    summary = matcher.ScanSummary()
    found = list(matcher.iter_matches(source, config, console=lines.append, summary=summary))
    return found, summary, lines


def test_identical_images_are_reported_identical():
    a = np.array([[1, 2], [3, 4]], dtype=np.uint8)
    found, summary, lines = _scan(_source(a, a.copy()), Configuration())
    assert found == [matcher.MatchRecord(1.0, "img0.png", "img1.png", LABEL_IDENTICAL)]
    assert summary.pairs == 1


def test_values_within_precision_count_as_matching():
    a = np.zeros((1, 1), dtype=np.uint8)
    b = np.full((1, 1), 5, dtype=np.uint8)
    assert matcher.pixel_similarity(a, b, precision=5) == 1.0
    assert matcher.pixel_similarity(a, b, precision=4) == 0.0


@pytest.mark.parametrize("dtype", [np.uint8, np.uint16, np.float32], ids=["uint8", "uint16", "float32"])
def test_similarity_is_symmetric(dtype):
    rng = np.random.default_rng(42)
    a = (rng.random((16, 16, 3)) * 200).astype(dtype)
    b = (rng.random((16, 16, 3)) * 200).astype(dtype)
    for precision in (0, 3, 50):
        s_ab = matcher.pixel_similarity(a, b, precision)
        s_ba = matcher.pixel_similarity(b, a, precision)
        assert s_ab == s_ba
        assert 0.0 <= s_ab <= 1.0


def test_unsigned_difference_does_not_wrap():
    a = np.array([[0, 250]], dtype=np.uint8)
    b = np.array([[10, 240]], dtype=np.uint8)
    assert matcher.pixel_similarity(a, b, precision=9) == 0.0
    assert matcher.pixel_similarity(a, b, precision=10) == 1.0


def test_exact_fast_path_is_gated_on_precision_one():
    cfg = Configuration(similarity_threshold=1, pixel_precision=1)
    assert cfg.exact_fast_path
    assert not Configuration().exact_fast_path

    a = np.zeros((2, 2), dtype=np.uint8)
    b = np.ones((2, 2), dtype=np.uint8)
    # the difference of 1 would be within precision, the fast path still says no
    found, summary, _ = _scan(_source(a, b), cfg)
    assert found == []
    assert summary.compared == 1

    found, _, _ = _scan(_source(a, a.copy()), cfg)
    assert [m.label for m in found] == [LABEL_IDENTICAL]


def test_threshold_boundary_is_inclusive():
    a = np.zeros((2, 2), dtype=np.uint8)
    b = np.array([[0, 0], [0, 9]], dtype=np.uint8)
    found, _, _ = _scan(_source(a, b), Configuration(similarity_threshold=0.75))
    assert found == [matcher.MatchRecord(0.75, "img0.png", "img1.png", LABEL_SIMILAR)]

    found, _, _ = _scan(_source(a, b), Configuration(similarity_threshold=0.7500001))
    assert found == []


def test_dimension_mismatch_is_tallied_per_anchor():
    small = np.full((4, 4), 3, dtype=np.uint8)
    big = np.full((8, 8), 3, dtype=np.uint8)
    found, summary, lines = _scan(_source(small, small.copy(), big), Configuration())

    assert [(m.path_a, m.path_b) for m in found] == [("img0.png", "img1.png")]
    assert summary.mismatched == 2
    assert summary.compared == 1
    assert summary.pairs == 3
    assert lines.count("DIMENSION MISMATCH FOUND") == 2
    assert lines.count("DIMENSION MISMATCH: 1 IMAGES") == 2


def test_channel_count_is_part_of_the_shape():
    gray = np.zeros((4, 4), dtype=np.uint8)
    rgb = np.zeros((4, 4, 3), dtype=np.uint8)
    found, summary, _ = _scan(_source(gray, rgb), Configuration(similarity_threshold=0))
    assert found == []
    assert summary.mismatched == 1


def test_no_mismatch_line_when_shapes_agree():
    a = np.zeros((2, 2), dtype=np.uint8)
    _, _, lines = _scan(_source(a, a, a), Configuration())
    assert not any("DIMENSION MISMATCH" in line for line in lines)
    assert lines == [
        "[1/3] COMPARING IMAGES: img0.png",
        "[2/3] COMPARING IMAGES: img1.png",
    ]


@pytest.mark.parametrize("n", [0, 1, 2, 5, 9])
def test_pair_count_is_n_choose_two(n):
    arrays = [np.full((2, 2), i % 3, dtype=np.uint8) for i in range(n)]
    _, summary, _ = _scan(_source(*arrays), Configuration(similarity_threshold=0))
    assert summary.pairs == n * (n - 1) // 2


def test_pixel_similarity_rejects_shape_mismatch():
    with pytest.raises(ValueError):
        matcher.pixel_similarity(np.zeros((2, 2)), np.zeros((3, 3)))
