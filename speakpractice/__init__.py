"""Spoken question practice: narrate prompts, capture spoken answers, evaluate them."""

__version__ = "0.1.0"
