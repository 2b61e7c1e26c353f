#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
import random

import torch.optim as optim

# Import our custom modules
from config import *
from corpus_utils import get_dance_iterator, get_shakespeare_iterator
from models import CharLSTMModel
from training_utils import train_model
from utils import set_seed, get_device, plot_curves


def get_iterator(rng):
    """Download the configured corpus and return its minibatch iterator"""
    if CORPUS == "dance":
        return get_dance_iterator(MINI_BATCH_SIZE, rng, DANCE_URL, DANCE_FILE,
                                  encoding=TEXT_ENCODING)
    elif CORPUS == "shakespeare":
        return get_shakespeare_iterator(MINI_BATCH_SIZE, SEQUENCE_LENGTH, rng,
                                        SHAKESPEARE_URL, SHAKESPEARE_FOLDER,
                                        encoding=TEXT_ENCODING)
    else:
        raise ValueError(f"Unknown corpus: {CORPUS}. Must be 'dance' or 'shakespeare'.")


def main():
    """Main function - train the character LSTM and sample from it as it learns"""
    print("=" * 80)
    print("Character-level LSTM")
    print("=" * 80)
    print("Configuration:")
    print(f"  Corpus: {CORPUS}")
    print(f"  LSTM Layer Size: {LSTM_LAYER_SIZE}")
    print(f"  Mini Batch Size: {MINI_BATCH_SIZE}")
    print(f"  TBPTT Length: {TBPTT_LENGTH}")
    print(f"  Epochs: {EPOCHS}")
    print(f"  Learning Rate: {LEARNING_RATE}")

    # Set seed for reproducibility
    set_seed(SEED)
    rng = random.Random(SEED)
    device = get_device()
    print(f"  Device: {device}")

    os.makedirs(OUTPUT_DIR, exist_ok=True)

    print("\n" + "=" * 60)
    print("DATA LOADING")
    print("=" * 60)

    iterator = get_iterator(rng)
    vocabulary = iterator.vocabulary
    print(f"Examples: {iterator.total_examples():,}")
    print(f"Vocabulary size: {len(vocabulary)} characters")

    model = CharLSTMModel(
        vocab_size=iterator.input_size(),
        hidden_size=LSTM_LAYER_SIZE,
        num_layers=NUM_LAYERS,
        dropout=DROPOUT
    ).to(device)
    optimizer = optim.RMSprop(model.parameters(), lr=LEARNING_RATE, alpha=RMS_DECAY,
                              weight_decay=L2)

    minibatch_losses, epoch_losses, training_time = train_model(
        model, iterator, vocabulary, rng, device, optimizer,
        model_name=f"{CORPUS}_lstm",
        epochs=EPOCHS,
        tbptt_length=TBPTT_LENGTH,
        gradient_clip=GRADIENT_CLIP,
        sample_every=SAMPLE_EVERY,
        num_samples=NUM_SAMPLES,
        initialization=GENERATION_INITIALIZATION,
        sample_max_length=SAMPLE_MAX_LENGTH,
        output_dir=OUTPUT_DIR
    )

    png_path = os.path.join(OUTPUT_DIR, f"loss_{CORPUS}_lstm.png")
    plot_curves(minibatch_losses, epoch_losses, png_path,
                f"{CORPUS} - lstm_size={LSTM_LAYER_SIZE}, batch_size={MINI_BATCH_SIZE}")
    print(f"Loss curves saved to {png_path}")

    print("\n\nExample complete")


if __name__ == "__main__":
    main()
