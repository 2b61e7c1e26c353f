#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings
All hyperparameters and experiment configurations
"""

# =============================================================================
# CORE CONFIGURATION
# =============================================================================

SEED = 12345

# Corpus Selection
CORPUS = "dance"  # "dance" or "shakespeare"

# Output directory based on corpus
OUTPUT_DIR = f"reports_{CORPUS}"

# Corpus Sources
SHAKESPEARE_URL = "https://s3.amazonaws.com/dl4j-distribution/pg100.txt"
SHAKESPEARE_FOLDER = "char-rnn-shakespeare"
DANCE_URL = "https://www.ibiblio.org/contradance/index/by_title.html"
DANCE_FILE = "char-rnn-ibiblio.html"
TEXT_ENCODING = "utf-8"

# Data Configuration
MINI_BATCH_SIZE = 32
SEQUENCE_LENGTH = 1000  # Characters per Shakespeare segment file

# Model Architecture
LSTM_LAYER_SIZE = 200
NUM_LAYERS = 2
DROPOUT = 0.0

# Training Configuration
EPOCHS = 20
LEARNING_RATE = 1e-3
RMS_DECAY = 0.95
L2 = 0.001
TBPTT_LENGTH = 100  # Truncated BPTT forward/backward length
GRADIENT_CLIP = 1.0

# Sampling Configuration
SAMPLE_EVERY = 4  # Generate samples every N minibatches
NUM_SAMPLES = 3
SAMPLE_MAX_LENGTH = 500
# Used to 'prime' the LSTM; None picks a random character.
# Dance titles all start with '^'.
GENERATION_INITIALIZATION = "^" if CORPUS == "dance" else None

# =============================================================================
# OPTIMIZATION SETTINGS
# =============================================================================

# PyTorch optimization settings
import torch
torch.set_num_threads(4)
torch.set_num_interop_threads(1)
