import os, random
import numpy as np
import torch
import matplotlib
matplotlib.use("Agg")  # headless plots
import matplotlib.pyplot as plt

from data_utils import SortedVocabulary, Vocabulary

# ---------------- Reproducibility ----------------
def set_seed(seed: int = 12345):
    random.seed(seed); np.random.seed(seed); torch.manual_seed(seed)
    torch.cuda.manual_seed_all(seed)
    torch.backends.cudnn.deterministic = True
    torch.backends.cudnn.benchmark = False

def get_device() -> torch.device:
    return torch.device("cuda" if torch.cuda.is_available() else "cpu")

# ---------------- Logging / Plots ----------------
def plot_curves(minibatch_losses, epoch_losses, out_png: str, title: str):
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(10, 4))
    ax1.plot(minibatch_losses)
    ax1.set_xlabel("minibatch"); ax1.set_ylabel("masked cross-entropy")
    ax2.plot(range(1, len(epoch_losses) + 1), epoch_losses, marker="o")
    ax2.set_xlabel("epoch"); ax2.set_ylabel("mean cross-entropy")
    fig.suptitle(title)
    os.makedirs(os.path.dirname(out_png) or ".", exist_ok=True)
    fig.tight_layout(); fig.savefig(out_png, dpi=150); plt.close(fig)

# ---------------- Checkpoints ----------------
def save_ckpt(path, model, vocabulary, args_dict):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    torch.save({
        "state_dict": model.state_dict(),
        "characters": vocabulary.characters,
        "sorted_vocabulary": isinstance(vocabulary, SortedVocabulary),
        "args": args_dict,
    }, path)

def load_ckpt(path, map_location="cpu"):
    return torch.load(path, map_location=map_location)

def vocabulary_from_ckpt(ckpt):
    cls = SortedVocabulary if ckpt["sorted_vocabulary"] else Vocabulary
    return cls(ckpt["characters"])
