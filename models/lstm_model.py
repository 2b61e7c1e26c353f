#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LSTM Language Model
Character-level stacked LSTM classifier over one-hot inputs
"""

import torch
import torch.nn as nn
import torch.nn.functional as F


class CharLSTMModel(nn.Module):
    """
    Stacked LSTM with a softmax output layer over the vocabulary

    Inputs are one-hot tensors laid out as [batch_size, vocab_size, time_steps],
    matching the batches produced by CharacterIterator.

    Args:
        vocab_size: Size of the vocabulary (input and output width)
        hidden_size: Units in each LSTM layer
        num_layers: Number of LSTM layers
        dropout: Dropout probability between LSTM layers
    """
    def __init__(self, vocab_size, hidden_size=200, num_layers=2, dropout=0.0):
        super().__init__()

        # LSTM layers with dropout between them
        self.lstm = nn.LSTM(vocab_size, hidden_size, num_layers,
                            batch_first=True,
                            dropout=dropout if num_layers > 1 else 0.0)

        # Final linear layer to vocabulary
        self.fc = nn.Linear(hidden_size, vocab_size)

        # Store dimensions for reference
        self.vocab_size = vocab_size
        self.hidden_size = hidden_size
        self.num_layers = num_layers

        # Recurrent state kept between time_step() calls
        self.rnn_state = None

        self._init_weights()

    def _init_weights(self):
        """Xavier initialization for weight matrices, zero biases"""
        for name, param in self.named_parameters():
            if "weight" in name:
                nn.init.xavier_uniform_(param)
            else:
                nn.init.zeros_(param)

    def forward(self, features, hidden=None):
        """
        Forward pass through the LSTM model

        Args:
            features: One-hot inputs [batch_size, vocab_size, seq_len]
            hidden: Previous hidden state (optional)

        Returns:
            logits: Predictions over vocabulary [batch_size, seq_len, vocab_size]
            hidden: Updated hidden state
        """
        x = features.transpose(1, 2)  # [batch_size, seq_len, vocab_size]
        y, hidden = self.lstm(x, hidden)
        logits = self.fc(y)
        return logits, hidden

    def clear_state(self):
        """Forget the recurrent state before an independent run"""
        self.rnn_state = None

    def time_step(self, inputs):
        """
        Advance the stored recurrent state through the given inputs

        Args:
            inputs: [batch_size, vocab_size, seq_len] or a single step [batch_size, vocab_size]

        Returns:
            Softmax probabilities (on CPU) in the same layout as inputs
        """
        single_step = inputs.dim() == 2
        if single_step:
            inputs = inputs.unsqueeze(-1)

        device = next(self.parameters()).device
        with torch.no_grad():
            logits, self.rnn_state = self(inputs.to(device), self.rnn_state)
            probs = F.softmax(logits, dim=-1).transpose(1, 2).cpu()

        return probs.squeeze(-1) if single_step else probs
