#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Corpus Sources for the Character LSTM
Supplies ordered text segments from memory, a folder of files or the dance title index
"""

import os
import tempfile
import urllib.request
from html.parser import HTMLParser

from data_utils import CharacterIterator, SortedVocabulary, Vocabulary


class TextCorpus:
    """In-memory list of text segments"""

    def __init__(self, segments):
        self.segments = list(segments)

    def __len__(self):
        return len(self.segments)

    def __getitem__(self, idx):
        return self.segments[idx]


def normalize_lines(text):
    """Collapse line endings to '\\n' and terminate the text with one"""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if not text.endswith("\n"):
        text += "\n"
    return text


class FolderCorpus:
    """
    One segment per file in a folder

    Files are read lazily, in file name order.

    Args:
        folder: Folder containing text files
        encoding: Text encoding of the files
    """

    def __init__(self, folder, encoding="utf-8"):
        if not os.path.isdir(folder):
            raise FileNotFoundError(f"Could not access folder (does not exist): {folder}")
        self.folder = folder
        self.encoding = encoding
        self.files = sorted(
            os.path.join(folder, name) for name in os.listdir(folder)
            if os.path.isfile(os.path.join(folder, name))
        )

    def __len__(self):
        return len(self.files)

    def __getitem__(self, idx):
        with open(self.files[idx], "r", encoding=self.encoding, newline="") as f:
            return normalize_lines(f.read())


class DanceTitleParser(HTMLParser):
    """Collect the text node that follows each <a name=...> anchor"""

    def __init__(self):
        super().__init__()
        self.siblings = []
        self._anchor_depth = 0
        self._awaiting_sibling = False

    def handle_starttag(self, tag, attrs):
        self._awaiting_sibling = False
        if tag == "a":
            if self._anchor_depth or any(name == "name" for name, _ in attrs):
                self._anchor_depth += 1

    def handle_startendtag(self, tag, attrs):
        self._awaiting_sibling = False

    def handle_endtag(self, tag):
        self._awaiting_sibling = False
        if tag == "a" and self._anchor_depth:
            self._anchor_depth -= 1
            if self._anchor_depth == 0:
                self._awaiting_sibling = True

    def handle_data(self, data):
        if self._awaiting_sibling:
            self.siblings.append(data)
        self._awaiting_sibling = False


def extract_dance_titles(html):
    """
    Extract dance titles from the ibiblio index

    The title is the second line of the text following each named anchor.

    Returns:
        list: Segments of the form '^' + title + '\\n'
    """
    parser = DanceTitleParser()
    parser.feed(html)
    parser.close()

    titles = []
    for sibling in parser.siblings:
        lines = sibling.split("\n")
        if len(lines) > 1 and lines[1]:
            titles.append("^" + lines[1] + "\n")
    return titles


class DanceTitleCorpus(TextCorpus):
    """
    Dance titles scraped from an HTML index file

    Args:
        path: HTML file
        encoding: Text encoding of the file
    """

    def __init__(self, path, encoding="utf-8"):
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Could not access file (does not exist): {path}")
        with open(path, "r", encoding=encoding) as f:
            super().__init__(extract_dance_titles(f.read()))
        self.path = path
        print(f"Loaded {len(self)} dance titles from {path}")


def download_shakespeare(url, folder, sequence_length, encoding="utf-8"):
    """
    Download the Complete Works of Shakespeare and cut it into segment files

    Each file holds sequence_length consecutive characters. An existing
    folder is reused as is.

    Returns:
        str: Folder containing the segment files
    """
    if os.path.exists(folder):
        print(f"Using existing text files in {os.path.abspath(folder)}")
        return folder

    fd, tmp_path = tempfile.mkstemp(prefix="Shakespeare", suffix=".txt")
    os.close(fd)
    try:
        print(f"Downloading {url}...")
        urllib.request.urlretrieve(url, tmp_path)
        print(f"File downloaded to {tmp_path}")
        with open(tmp_path, "r", encoding=encoding) as f:
            text = f.read()
    finally:
        os.remove(tmp_path)

    os.makedirs(folder)
    n_segments = len(text) // sequence_length
    for n in range(n_segments):
        start = n * sequence_length
        with open(os.path.join(folder, str(n)), "w", encoding=encoding, newline="") as f:
            f.write(text[start:start + sequence_length])
    print(f"Wrote {n_segments} segments of {sequence_length} characters to {folder}")
    return folder


def download_dance_index(url, path):
    """Download the dance title index unless it is already present"""
    if os.path.exists(path):
        print(f"Using existing text in {path}")
        return path
    print(f"Downloading {url}...")
    urllib.request.urlretrieve(url, path)
    print(f"File downloaded to {path}")
    return path


def get_shakespeare_iterator(mini_batch_size, sequence_length, rng, url, folder_name,
                             encoding="utf-8"):
    """
    Download the Shakespeare training data to the temp directory and return an
    iterator over its segments using the minimal character set
    """
    folder = os.path.join(tempfile.gettempdir(), folder_name)
    download_shakespeare(url, folder, sequence_length, encoding=encoding)
    corpus = FolderCorpus(folder, encoding=encoding)
    return CharacterIterator(corpus, Vocabulary.minimal(), mini_batch_size, rng, verbose=True)


def get_dance_iterator(mini_batch_size, rng, url, file_name, encoding="utf-8"):
    """
    Download the American Country Dance index to the temp directory and return
    an iterator over its titles using the sorted default character set
    """
    path = os.path.join(tempfile.gettempdir(), file_name)
    download_dance_index(url, path)
    corpus = DanceTitleCorpus(path, encoding=encoding)
    return CharacterIterator(corpus, SortedVocabulary.default(), mini_batch_size, rng)
