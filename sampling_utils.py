#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sampling Utilities for the Character LSTM
Generates text from a recurrent model one character at a time
"""

import torch

MAX_SAMPLING_ATTEMPTS = 10
LINE_TERMINATOR = "\n"


class InvalidDistributionError(ValueError):
    """Raised when no class could be sampled from a distribution"""


def sample_from_distribution(distribution, rng):
    """
    Sample a class index from a probability distribution

    Args:
        distribution: Probabilities over classes (sequence or 1-D tensor), summing to 1.0
        rng: random.Random instance

    Returns:
        int: Sampled class index
    """
    if isinstance(distribution, torch.Tensor):
        distribution = distribution.tolist()

    d = 0.0
    total = 0.0
    for _ in range(MAX_SAMPLING_ATTEMPTS):
        d = rng.random()
        total = 0.0
        for idx, p in enumerate(distribution):
            total += p
            if d <= total:
                return idx
        # The sum may be slightly below 1 due to rounding error, so try again
    raise InvalidDistributionError(f"Distribution is invalid? d={d}, sum={total}")


def one_hot_sequence(text, vocabulary, num_samples):
    """Encode text as [num_samples, vocab_size, len(text)], identical for every sample"""
    inputs = torch.zeros(num_samples, len(vocabulary), len(text))
    for t, char in enumerate(text):
        inputs[:, vocabulary.index_of(char), t] = 1.0
    return inputs


def sample_characters_from_network(initialization, model, vocabulary, rng, num_samples,
                                   max_length=None):
    """
    Generate samples from the network given an optional initialization

    The initialization primes the RNN with a sequence to extend and is shared by
    all samples. Each sample grows until it ends with a newline; samples are
    generated in parallel.

    Args:
        initialization: Priming string, or None to prime with a random character
        model: Recurrent model exposing clear_state() and time_step()
        vocabulary: Vocabulary mapping between characters and indices
        rng: random.Random instance
        num_samples: Number of samples to generate
        max_length: Optional cap on generated characters per sample

    Returns:
        list: Generated strings, without the initialization
    """
    if not initialization:
        initialization = vocabulary.random_character(rng)

    buffers = [initialization for _ in range(num_samples)]

    model.clear_state()
    output = model.time_step(one_hot_sequence(initialization, vocabulary, num_samples))
    # Distribution of the last time step
    output = output[:, :, -1]

    while True:
        next_input = torch.zeros(num_samples, len(vocabulary))
        appended = False
        for s in range(num_samples):
            if buffers[s].endswith(LINE_TERMINATOR):
                continue
            if max_length is not None and len(buffers[s]) - len(initialization) >= max_length:
                continue
            idx = sample_from_distribution(output[s], rng)
            next_input[s, idx] = 1.0
            buffers[s] += vocabulary.char_at(idx)
            appended = True

        if not appended:
            break
        output = model.time_step(next_input)

    return [buf[len(initialization):] for buf in buffers]
