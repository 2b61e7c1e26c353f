"""
Models package for the Character LSTM
"""

from .lstm_model import CharLSTMModel

__all__ = ['CharLSTMModel']
