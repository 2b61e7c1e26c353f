#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Training Utilities for the Character LSTM
Handles masked loss, truncated backpropagation through time and periodic sampling
"""

import torch
import torch.nn.functional as F
from tqdm import tqdm
import os
import time

from sampling_utils import sample_characters_from_network
from utils import save_ckpt


def masked_cross_entropy(logits, labels, labels_mask):
    """
    Mean cross-entropy over unmasked time steps

    Args:
        logits: Model output [batch_size, seq_len, vocab_size]
        labels: One-hot targets [batch_size, vocab_size, seq_len]
        labels_mask: 1 for real time steps, 0 for padding [batch_size, seq_len]

    Returns:
        Scalar loss tensor
    """
    targets = labels.argmax(dim=1)  # [batch_size, seq_len]
    losses = F.cross_entropy(logits.transpose(1, 2), targets, reduction="none")
    return (losses * labels_mask).sum() / labels_mask.sum().clamp(min=1.0)


def fit_batch(model, batch, optimizer, tbptt_length=100, gradient_clip=1.0, device="cpu"):
    """
    Fit one minibatch with truncated backpropagation through time

    The sequence is split into chunks of tbptt_length steps; parameters are
    updated after each chunk and the hidden state is carried over detached.

    Returns:
        float: Mean loss over the fitted chunks, or None if nothing was fitted
    """
    if batch.is_empty:
        return None

    model.train()
    features, labels, _, labels_mask = batch.to(device)
    hidden = None
    chunk_losses = []

    for start in range(0, features.size(2), tbptt_length):
        end = start + tbptt_length
        mask = labels_mask[:, start:end]
        if mask.sum() == 0:
            break  # only padding left

        optimizer.zero_grad()
        logits, hidden = model(features[:, :, start:end], hidden)
        loss = masked_cross_entropy(logits, labels[:, :, start:end], mask)
        loss.backward()
        if gradient_clip:
            torch.nn.utils.clip_grad_norm_(model.parameters(), gradient_clip)
        optimizer.step()

        hidden = tuple(h.detach() for h in hidden)
        chunk_losses.append(loss.item())

    if not chunk_losses:
        return None
    return sum(chunk_losses) / len(chunk_losses)


def print_parameter_counts(model):
    """Print the number of parameters in each layer and in the whole network"""
    total_params = 0
    for i, (name, layer) in enumerate(model.named_children()):
        n_params = sum(p.numel() for p in layer.parameters())
        print(f"Number of parameters in layer {i} ({name}): {n_params:,}")
        total_params += n_params
    print(f"Total number of network parameters: {total_params:,}")
    return total_params


def format_samples(samples):
    return "\n".join(f"----- Sample {j} -----\n{sample}\n" for j, sample in enumerate(samples))


def train_model(model, iterator, vocabulary, rng, device, optimizer, model_name="char_lstm",
                epochs=20, tbptt_length=100, gradient_clip=1.0, sample_every=4,
                num_samples=3, initialization=None, sample_max_length=None,
                output_dir="reports"):
    """
    Train the model on every minibatch of the iterator for several epochs

    Every sample_every minibatches, samples are generated from the network and
    printed. The iterator is reset after each epoch.

    Args:
        model: CharLSTMModel to train
        iterator: CharacterIterator supplying minibatches
        vocabulary: Vocabulary used for sampling
        rng: random.Random instance used for sampling
        device: PyTorch device
        optimizer: Optimizer over the model parameters
        model_name: Name for saving files
        epochs: Number of training epochs
        tbptt_length: Truncated BPTT length
        gradient_clip: Gradient clipping value
        sample_every: Generate samples every N minibatches
        num_samples: Number of samples to generate
        initialization: Priming string for sampling (None for a random character)
        sample_max_length: Optional cap on sampled characters
        output_dir: Directory to save checkpoints

    Returns:
        tuple: (minibatch_losses, epoch_losses, training_time)
    """
    print("\n" + "=" * 60)
    print(f"TRAINING {model_name.upper()}")
    print("=" * 60)

    training_start_time = time.time()
    print_parameter_counts(model)
    print(f"Device: {device}")
    print()

    minibatch_losses = []
    epoch_losses = []
    best_loss = float('inf')
    minibatch_number = 0

    for epoch in range(epochs):
        epoch_start = len(minibatch_losses)
        progress_bar = tqdm(iterator, desc=f"Epoch {epoch+1}/{epochs}",
                            total=-(-iterator.total_examples() // iterator.batch_size))

        for batch in progress_bar:
            minibatch_number += 1
            # None when every segment of the batch filtered to empty
            loss = fit_batch(model, batch, optimizer, tbptt_length, gradient_clip, device)
            if loss is not None:
                minibatch_losses.append(loss)
                progress_bar.set_postfix(loss=f"{loss:.4f}")

            if minibatch_number % sample_every == 0:
                model.eval()
                tqdm.write("-" * 20)
                tqdm.write(f"Completed {minibatch_number} minibatches of size {iterator.batch_size}")
                tqdm.write(f"Sampling characters from network given initialization "
                           f"\"{initialization or ''}\"")
                samples = sample_characters_from_network(
                    initialization, model, vocabulary, rng, num_samples,
                    max_length=sample_max_length)
                tqdm.write(format_samples(samples))

        iterator.reset()  # Reset iterator for another epoch

        epoch_batch_losses = minibatch_losses[epoch_start:]
        if not epoch_batch_losses:
            continue
        avg_loss = sum(epoch_batch_losses) / len(epoch_batch_losses)
        epoch_losses.append(avg_loss)
        print(f"Epoch {epoch+1}/{epochs} | Train Loss: {avg_loss:.4f}")

        if avg_loss < best_loss:
            best_loss = avg_loss
            ckpt = os.path.join(output_dir, f"best_{model_name}.pt")
            save_ckpt(ckpt, model, vocabulary, {
                "hidden_size": model.hidden_size,
                "num_layers": model.num_layers,
                "epoch": epoch + 1,
                "loss": best_loss,
            })
            print(f"  → New best model saved! (Loss: {best_loss:.4f})")

    training_time = time.time() - training_start_time
    print(f"Training completed in {training_time:.2f} seconds ({training_time/60:.2f} minutes)")

    return minibatch_losses, epoch_losses, training_time
