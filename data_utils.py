#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data Processing Utilities for the Character LSTM
Handles vocabularies and vectorization of text segments into one-hot minibatches
"""

import bisect
from typing import NamedTuple

import torch


class UnknownCharacterError(LookupError):
    """Raised when a character is not part of the vocabulary"""


class NoMoreDataError(Exception):
    """Raised when a batch is requested from an exhausted iterator"""


def minimal_character_set():
    """A minimal character set, with a-z, A-Z, 0-9 and common punctuation etc"""
    letters = "".join(chr(c) for c in range(ord('a'), ord('z') + 1))
    capitals = letters.upper()
    digits = "".join(str(d) for d in range(10))
    return letters + capitals + digits + "!&()?-'\",.:; \n\t"


def default_character_set():
    """As per minimal_character_set(), but with a few extra characters"""
    return minimal_character_set() + "@#$%^*{}[]/+_\\|<>"


class Vocabulary:
    """
    Fixed alphabet of characters with a dense index mapping

    The order of the given characters defines the index of each character.

    Args:
        characters: Iterable of unique characters
    """

    def __init__(self, characters):
        chars = "".join(characters)
        if not chars:
            raise ValueError("Vocabulary must contain at least one character")
        if len(set(chars)) != len(chars):
            raise ValueError(f"Duplicate characters in vocabulary: {chars!r}")
        self._chars = self._order(chars)
        self._char_to_idx = {char: idx for idx, char in enumerate(self._chars)}

    @staticmethod
    def _order(chars):
        return chars

    @classmethod
    def minimal(cls):
        return cls(minimal_character_set())

    @classmethod
    def default(cls):
        return cls(default_character_set())

    @property
    def characters(self):
        return self._chars

    def size(self):
        return len(self._chars)

    def __len__(self):
        return len(self._chars)

    def __contains__(self, char):
        return char in self._char_to_idx

    def __eq__(self, other):
        return type(self) is type(other) and self._chars == other._chars

    def __hash__(self):
        return hash((type(self), self._chars))

    def __repr__(self):
        return f"{type(self).__name__}({self._chars!r})"

    def index_of(self, char):
        try:
            return self._char_to_idx[char]
        except KeyError:
            raise UnknownCharacterError(f"Character not in vocabulary: {char!r}") from None

    def char_at(self, idx):
        if not 0 <= idx < len(self._chars):
            raise IndexError(f"Index {idx} out of range for vocabulary of size {len(self._chars)}")
        return self._chars[idx]

    def random_character(self, rng):
        """Uniformly select one character using the caller's random source"""
        return self._chars[rng.randrange(len(self._chars))]

    def filter(self, text):
        """Delete every character of text that is not in the vocabulary"""
        return "".join(char for char in text if char in self._char_to_idx)

    def encode(self, text):
        """Convert text to a list of indices"""
        return [self.index_of(char) for char in text]

    def decode(self, indices):
        """Convert indices back to text"""
        return "".join(self.char_at(int(idx)) for idx in indices)


class SortedVocabulary(Vocabulary):
    """Vocabulary whose characters are sorted and looked up by binary search"""

    @staticmethod
    def _order(chars):
        return "".join(sorted(chars))

    def __contains__(self, char):
        if not isinstance(char, str):
            return False
        idx = bisect.bisect_left(self._chars, char)
        return idx < len(self._chars) and self._chars[idx] == char

    def index_of(self, char):
        if char not in self:
            raise UnknownCharacterError(f"Character not in vocabulary: {char!r}")
        return bisect.bisect_left(self._chars, char)

    def filter(self, text):
        return "".join(char for char in text if char in self)


class CharacterBatch(NamedTuple):
    """
    One minibatch of one-hot encoded segments

    features, labels: [batch_size, vocab_size, time_steps]
    features_mask, labels_mask: [batch_size, time_steps]
    """
    features: torch.Tensor
    labels: torch.Tensor
    features_mask: torch.Tensor
    labels_mask: torch.Tensor

    @property
    def num_examples(self):
        return self.features.size(0)

    @property
    def is_empty(self):
        return self.num_examples == 0

    def to(self, device):
        return CharacterBatch(*(t.to(device) for t in self))


def encode_batch(segments, vocabulary):
    """
    Encode filtered segments into feature/label/mask tensors

    The label at each time step is the one-hot encoding of the next character.
    Positions past the end of a segment stay zero and are masked out.

    Args:
        segments: List of non-empty strings made only of vocabulary characters
        vocabulary: Vocabulary used for the one-hot channels

    Returns:
        CharacterBatch
    """
    batch_size = len(segments)
    vocab_size = len(vocabulary)
    max_length = max((len(s) for s in segments), default=0)
    # The last character of a segment has nothing to predict
    time_steps = max(max_length - 1, 0)

    features = torch.zeros(batch_size, vocab_size, time_steps)
    labels = torch.zeros(batch_size, vocab_size, time_steps)
    features_mask = torch.zeros(batch_size, time_steps)
    labels_mask = torch.zeros(batch_size, time_steps)

    for i, text in enumerate(segments):
        if len(text) < 2:
            continue
        idx = torch.tensor(vocabulary.encode(text), dtype=torch.long)
        steps = torch.arange(len(text) - 1)
        features[i, idx[:-1], steps] = 1.0
        labels[i, idx[1:], steps] = 1.0
        features_mask[i, :len(text) - 1] = 1.0
        labels_mask[i, :len(text) - 1] = 1.0

    return CharacterBatch(features, labels, features_mask, labels_mask)


class CharacterIterator:
    """
    Minibatch iterator over a corpus of text segments

    Each segment is one training example. Segments are shuffled on every reset,
    filtered down to the vocabulary, and encoded into one-hot tensors where the
    label at each step is the next character.

    Args:
        corpus: Sequence of raw text segments (supports len() and indexing)
        vocabulary: Vocabulary; characters outside it are removed
        mini_batch_size: Number of segments per minibatch
        rng: random.Random instance, for repeatability
        verbose: Print per-segment filtering statistics
    """

    def __init__(self, corpus, vocabulary, mini_batch_size, rng, verbose=False):
        if mini_batch_size <= 0:
            raise ValueError("Invalid mini_batch_size (must be >0)")
        self.corpus = corpus
        self.vocabulary = vocabulary
        self.mini_batch_size = mini_batch_size
        self.rng = rng
        self.verbose = verbose
        self._order = list(range(len(corpus)))
        self._cursor = 0
        self.reset()

    def reset(self):
        """Reshuffle the segments and start a new pass"""
        self.rng.shuffle(self._order)
        self._cursor = 0

    def has_next(self):
        return self._cursor < self.total_examples()

    def next_batch(self, num=None):
        """
        Consume up to num segments and encode them

        Segments that are empty after filtering are skipped but still consumed,
        so the batch can hold fewer than num examples, or none at all.

        Raises:
            NoMoreDataError: If the iterator is exhausted
        """
        if not self.has_next():
            raise NoMoreDataError("No more segments; call reset() to start a new pass")
        if num is None:
            num = self.mini_batch_size

        batch = []
        end = min(self._cursor + num, self.total_examples())
        while self._cursor < end:
            text = self.corpus[self._order[self._cursor]]
            self._cursor += 1
            valid = self.vocabulary.filter(text)
            if self.verbose:
                print(f"Loaded and converted segment: {len(valid)} valid characters of "
                      f"{len(text)} total characters ({len(text) - len(valid)} removed)")
            if valid:
                batch.append(valid)

        return encode_batch(batch, self.vocabulary)

    def __iter__(self):
        return self

    def __next__(self):
        if not self.has_next():
            raise StopIteration
        return self.next_batch()

    def total_examples(self):
        return len(self._order)

    def input_size(self):
        return len(self.vocabulary)

    def output_size(self):
        return len(self.vocabulary)

    @property
    def batch_size(self):
        return self.mini_batch_size

    @property
    def cursor(self):
        return self._cursor
