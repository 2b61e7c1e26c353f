import random

import pytest
import torch

from corpus_utils import TextCorpus
from data_utils import CharacterIterator, NoMoreDataError, Vocabulary, encode_batch


def make_iterator(segments, mini_batch_size=2, seed=42, vocab="ab\n"):
    return CharacterIterator(TextCorpus(segments), Vocabulary(vocab), mini_batch_size,
                             random.Random(seed))


def test_single_segment_encoding():
    it = make_iterator(["ab\n"], mini_batch_size=1)
    batch = it.next_batch(1)

    assert batch.features.shape == (1, 3, 2)
    assert batch.labels.shape == (1, 3, 2)
    assert batch.features_mask.shape == (1, 2)
    assert batch.features[0, 0, 0] == 1  # a
    assert batch.labels[0, 1, 0] == 1    # b
    assert batch.features[0, 1, 1] == 1  # b
    assert batch.labels[0, 2, 1] == 1    # \n
    assert batch.features.sum() == 2
    assert batch.labels.sum() == 2
    assert batch.features_mask.tolist() == [[1.0, 1.0]]
    assert batch.labels_mask.tolist() == [[1.0, 1.0]]


def test_padding_is_masked():
    batch = encode_batch(["ab\n", "ba", "a"], Vocabulary("ab\n"))

    assert batch.features.shape == (3, 3, 2)
    assert batch.features_mask.tolist() == [[1, 1], [1, 0], [0, 0]]
    assert torch.equal(batch.features_mask, batch.labels_mask)
    # Exactly one channel set where the mask is on, none elsewhere
    assert torch.equal(batch.features.sum(dim=1), batch.features_mask)
    assert torch.equal(batch.labels.sum(dim=1), batch.labels_mask)


def test_masks_match_one_hot_channels_on_random_text():
    rng = random.Random(3)
    segments = ["".join(rng.choice("ab\n") for _ in range(rng.randint(1, 30)))
                for _ in range(20)]
    it = make_iterator(segments, mini_batch_size=8)
    for batch in it:
        assert torch.equal(batch.features_mask, batch.labels_mask)
        assert torch.equal(batch.features.sum(dim=1), batch.features_mask)
        assert torch.equal(batch.labels.sum(dim=1), batch.labels_mask)


def test_invalid_characters_are_removed():
    it = make_iterator(["axxb\n"], mini_batch_size=1)
    batch = it.next_batch()
    assert batch.features.shape == (1, 3, 2)
    assert batch.features[0, :, 0].argmax() == 0
    assert batch.labels[0, :, 0].argmax() == 1


def test_empty_segments_are_dropped_but_consumed():
    it = make_iterator(["xyz", "ab", "zz"], mini_batch_size=3)
    batch = it.next_batch()
    assert batch.num_examples == 1
    assert it.cursor == 3
    assert not it.has_next()


def test_all_empty_batch_has_zero_rows():
    it = make_iterator(["xyz", "q"], mini_batch_size=2)
    batch = it.next_batch()
    assert batch.is_empty
    assert batch.features.shape == (0, 3, 0)
    assert batch.labels_mask.shape == (0, 0)


def test_exhaustion_and_reset():
    it = make_iterator(["ab", "ba", "aa", "bb", "a\n"], mini_batch_size=2)
    sizes = []
    while it.has_next():
        sizes.append(it.next_batch().num_examples)
    assert sizes == [2, 2, 1]
    with pytest.raises(NoMoreDataError):
        it.next_batch()

    it.reset()
    assert it.cursor == 0
    assert sum(batch.num_examples for batch in it) == it.total_examples()


def test_full_pass_visits_each_segment_once():
    segments = ["a" * n + "\n" for n in range(1, 12)]
    it = make_iterator(segments, mini_batch_size=4)
    for _ in range(2):
        lengths = []
        for batch in it:
            lengths.extend(int(n) + 1 for n in batch.features_mask.sum(dim=1))
        assert sorted(lengths) == sorted(len(s) for s in segments)
        it.reset()


def test_shuffle_is_reproducible_with_seed():
    segments = ["a" * n + "\n" for n in range(1, 20)]

    def first_batch_lengths(seed):
        it = make_iterator(segments, mini_batch_size=5, seed=seed)
        return it.next_batch().features_mask.sum(dim=1).tolist()

    assert first_batch_lengths(5) == first_batch_lengths(5)


def test_requested_size_overrides_default():
    it = make_iterator(["ab"] * 5, mini_batch_size=2)
    assert it.next_batch(4).num_examples == 4
    assert it.cursor == 4


def test_sizes_and_validation():
    it = make_iterator(["ab"], mini_batch_size=3)
    assert it.input_size() == 3
    assert it.output_size() == 3
    assert it.batch_size == 3
    assert it.total_examples() == 1
    with pytest.raises(ValueError):
        make_iterator(["ab"], mini_batch_size=0)


def test_verbose_reports_filtering(capsys):
    it = CharacterIterator(TextCorpus(["axb\n"]), Vocabulary("ab\n"), 1, random.Random(0),
                           verbose=True)
    it.next_batch()
    out = capsys.readouterr().out
    assert "3 valid characters of 4 total characters (1 removed)" in out


def test_quiet_by_default(capsys):
    make_iterator(["axb\n"], mini_batch_size=1).next_batch()
    assert capsys.readouterr().out == ""
