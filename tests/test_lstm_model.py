import random

import torch

from data_utils import Vocabulary
from models import CharLSTMModel
from sampling_utils import sample_characters_from_network


def test_forward_shapes():
    torch.manual_seed(0)
    model = CharLSTMModel(vocab_size=5, hidden_size=8, num_layers=2)
    logits, (h, c) = model(torch.zeros(3, 5, 7))
    assert logits.shape == (3, 7, 5)
    assert h.shape == (2, 3, 8)
    assert c.shape == (2, 3, 8)


def test_time_step_matches_full_forward():
    torch.manual_seed(0)
    model = CharLSTMModel(vocab_size=4, hidden_size=6).eval()
    inputs = torch.eye(4)[torch.tensor([[0, 1, 2], [3, 3, 1]])].transpose(1, 2)  # [2, 4, 3]

    model.clear_state()
    full = model.time_step(inputs)
    assert full.shape == (2, 4, 3)
    assert torch.allclose(full.sum(dim=1), torch.ones(2, 3), atol=1e-5)

    model.clear_state()
    model.time_step(inputs[:, :, :2])
    last = model.time_step(inputs[:, :, 2])
    assert last.shape == (2, 4)
    assert torch.allclose(last, full[:, :, 2], atol=1e-5)


def test_clear_state_resets_recurrence():
    torch.manual_seed(0)
    model = CharLSTMModel(vocab_size=3, hidden_size=4).eval()
    step = torch.tensor([[1.0, 0.0, 0.0]])
    model.clear_state()
    first = model.time_step(step)
    model.time_step(step)
    model.clear_state()
    assert torch.allclose(model.time_step(step), first)


def test_sampling_from_untrained_model():
    torch.manual_seed(0)
    vocab = Vocabulary("ab\n")
    model = CharLSTMModel(vocab_size=len(vocab), hidden_size=8).eval()
    samples = sample_characters_from_network("a", model, vocab, random.Random(0), 4,
                                             max_length=50)
    assert len(samples) == 4
    for sample in samples:
        assert set(sample) <= set("ab\n")
        assert len(sample) <= 50
        assert "\n" not in sample[:-1]
