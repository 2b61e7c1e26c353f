#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Character LSTM Text Generation
Generates text from a trained checkpoint, one line per sample
"""

import random

import torch
from utils import load_ckpt, vocabulary_from_ckpt
from models import CharLSTMModel
from sampling_utils import sample_characters_from_network
from training_utils import format_samples

# =============================================================================
# GENERATION CONFIGURATION - Configure your text generation here
# =============================================================================

CHECKPOINT_PATH = "reports_dance/best_dance_lstm.pt"  # Path to trained model checkpoint
PROMPT = "^"                                          # Starting prompt (empty for random start)
NUM_SAMPLES = 10                                      # Number of samples to generate
MAX_LENGTH = 500                                      # Cap on characters per sample
SEED = 12345

# =============================================================================

def build_from_ckpt(ckpt):
    """Rebuild model and vocabulary from a saved checkpoint"""
    vocabulary = vocabulary_from_ckpt(ckpt)
    saved = ckpt["args"]
    model = CharLSTMModel(
        vocab_size=len(vocabulary),
        hidden_size=saved["hidden_size"],
        num_layers=saved["num_layers"]
    )
    model.load_state_dict(ckpt["state_dict"])
    return model, vocabulary

def main():
    """Main text generation function"""
    print("Character LSTM Text Generator")
    print("=" * 50)

    print(f"Loading model from {CHECKPOINT_PATH}...")
    ckpt = load_ckpt(CHECKPOINT_PATH, map_location="cpu")
    device = "cuda" if torch.cuda.is_available() else "cpu"
    print(f"Using device: {device}")

    model, vocabulary = build_from_ckpt(ckpt)
    model.to(device).eval()
    print(f"Loaded model with {len(vocabulary)} vocabulary size")

    prompt_text = PROMPT if PROMPT else "[Random start]"
    print(f"Starting prompt: '{prompt_text}'")
    print(f"Generating {NUM_SAMPLES} samples")
    print()

    rng = random.Random(SEED)
    samples = sample_characters_from_network(PROMPT or None, model, vocabulary, rng,
                                             NUM_SAMPLES, max_length=MAX_LENGTH)
    print(format_samples(samples))

if __name__ == "__main__":
    main()
