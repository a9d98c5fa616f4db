"""Summarization stage."""

from .summarizer import DISCLAIMER, FALLBACK_SUMMARY, Summarizer, SummaryTooShortError

__all__ = ["DISCLAIMER", "FALLBACK_SUMMARY", "Summarizer", "SummaryTooShortError"]
